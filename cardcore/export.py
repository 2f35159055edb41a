"""
Snapshot export: rasterize a renderable surface into a downloadable artifact.

A surface is any object exposing ``rasterize(scale) -> PIL.Image.Image``;
:class:`cardcore.render.CardSurface` is the one this package ships. The
exporter allows a single export in flight at a time and rejects, rather than
queues, any request that arrives while one is running.
"""

from __future__ import annotations

import asyncio
import base64
import io
import math
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

from PIL import Image

from cardcore.pdf_export import image_to_pdf

SETTLE_DELAY_SECONDS = 0.1
FILENAME_PREFIX = "redcard"
DENSITY_CHOICES = (2, 3)
IMAGE_FORMATS = ("png", "pdf")
MIME_TYPES = {"png": "image/png", "pdf": "application/pdf"}


class ExportError(Exception):
    """Base class for snapshot export failures."""


class ExportBusy(ExportError):
    """Another export is still in flight."""


class RasterizationFailed(ExportError):
    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


@dataclass
class ExportRequest:
    surface: Any
    density_factor: float
    image_format: str = "png"


@dataclass
class Snapshot:
    filename: str
    data: bytes
    image_format: str
    size: Tuple[int, int]

    @property
    def mime_type(self) -> str:
        return MIME_TYPES[self.image_format]

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class DirectorySaver:
    """Save collaborator that writes each snapshot into ``output_dir``."""

    def __init__(self, output_dir: Path, debug: bool = False) -> None:
        self.output_dir = Path(output_dir)
        self.debug = debug

    def __call__(self, snapshot: Snapshot) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        target = self.output_dir / snapshot.filename
        target.write_bytes(snapshot.data)
        if self.debug:
            print(f"[DEBUG] Saved {target}")
        return target


def build_filename(timestamp_ms: int, image_format: str = "png") -> str:
    return f"{FILENAME_PREFIX}-{timestamp_ms}.{image_format}"


def validate_density(density_factor: float) -> float:
    if isinstance(density_factor, bool):
        raise ValueError(f"Density factor must be a number, got {density_factor!r}")
    try:
        value = float(density_factor)
    except (TypeError, ValueError):
        raise ValueError(
            f"Density factor must be a number, got {density_factor!r}"
        ) from None
    if not math.isfinite(value) or value <= 0:
        raise ValueError(
            f"Density factor must be a finite positive number, got {density_factor!r}"
        )
    return value


def _validate_format(image_format: str) -> str:
    normalized = image_format.strip().lower()
    if normalized not in IMAGE_FORMATS:
        raise ValueError(
            f"Unsupported image format '{image_format}'. "
            f"Use one of {', '.join(IMAGE_FORMATS)}."
        )
    return normalized


def _check_raster(result: object) -> Image.Image:
    if not isinstance(result, Image.Image):
        raise RasterizationFailed(
            f"Rasterization returned {type(result).__name__}, expected an image."
        )
    if result.width <= 0 or result.height <= 0:
        raise RasterizationFailed("Rasterization returned an empty image.")
    return result


def encode_png(image: Image.Image) -> bytes:
    if image.mode not in ("RGBA", "RGB", "LA", "L"):
        image = image.convert("RGBA")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class SnapshotExporter:
    def __init__(
        self,
        save: Optional[Callable[[Snapshot], object]] = None,
        settle_delay: float = SETTLE_DELAY_SECONDS,
        clock: Callable[[], float] = time.time,
        debug: bool = False,
    ) -> None:
        self.save = save
        self.settle_delay = settle_delay
        self.clock = clock
        self.debug = debug
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def submit(self, request: ExportRequest) -> Snapshot:
        return await self.export(
            request.surface, request.density_factor, request.image_format
        )

    async def export(
        self,
        surface: Any,
        density_factor: float,
        image_format: str = "png",
    ) -> Snapshot:
        """Rasterize ``surface`` at ``density_factor`` and hand it to ``save``.

        Raises :class:`ExportBusy` without side effects when another export
        has not finished yet, and :class:`RasterizationFailed` when the
        surface cannot be captured or encoded. The in-flight flag is cleared
        on every exit path.
        """
        density = validate_density(density_factor)
        fmt = _validate_format(image_format)
        if self._in_flight:
            raise ExportBusy("An export is already in progress.")

        self._in_flight = True
        try:
            # Let pending visual state settle before capturing.
            await asyncio.sleep(self.settle_delay)
            if self.debug:
                print(f"[DEBUG] Rasterizing surface at density {density}")
            try:
                result = await asyncio.to_thread(surface.rasterize, density)
            except Exception as exc:  # noqa: BLE001
                raise RasterizationFailed(
                    f"Rasterization failed: {exc}", cause=exc
                ) from exc
            image = _check_raster(result)

            try:
                if fmt == "pdf":
                    native_size = (
                        max(1, round(image.width / density)),
                        max(1, round(image.height / density)),
                    )
                    data = image_to_pdf(image, native_size)
                else:
                    data = encode_png(image)
            except (OSError, ValueError) as exc:
                raise RasterizationFailed(
                    f"Could not encode snapshot as {fmt}: {exc}", cause=exc
                ) from exc

            snapshot = Snapshot(
                filename=build_filename(int(self.clock() * 1000), fmt),
                data=data,
                image_format=fmt,
                size=image.size,
            )
            if self.debug:
                print(
                    f"[DEBUG] Encoded {snapshot.filename} "
                    f"({snapshot.size[0]}x{snapshot.size[1]}px, {len(data)} bytes)"
                )
            if self.save is not None:
                self.save(snapshot)
            return snapshot
        finally:
            self._in_flight = False
