"""
Locate a CJK-capable font for card rendering.

Resolution order is an explicit ``--font`` path, then the bundled LXGW WenKai
Lite font (downloaded once and checksum-verified), then installed Source Han
or Noto CJK faces. The result is a :class:`FontFace` that opens the chosen
file at whatever pixel sizes a rasterization needs.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import requests
from PIL import ImageFont

DEFAULT_FONT_FILENAME = "LXGWWenKaiLite-Bold.ttf"
DEFAULT_FONT_URL = (
    "https://github.com/lxgw/LxgwWenKai-Lite/releases/download/v1.330/"
    f"{DEFAULT_FONT_FILENAME}"
)
DEFAULT_FONT_SHA256 = (
    "25a4d0e009f330481a299f0c09cd63ef1a3ab284e142236f6d3f4cd7ff7a37d3"
)
PROBE_SIZE = 12
SYSTEM_FONT_DIRS = (
    Path("/System/Library/Fonts"),
    Path("/Library/Fonts"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
)
SYSTEM_FONT_PATTERNS = (
    "SourceHanSans*.otf",
    "SourceHanSans*.ttc",
    "NotoSansCJK*.otf",
    "NotoSansCJK*.ttc",
    "NotoSansSC*.otf",
    "PingFang*.ttc",
    "msyh*.ttc",
)


class FontFace:
    """A resolved font file, opened lazily at each requested size."""

    def __init__(self, path: Path, index: int = 0) -> None:
        self.path = path
        self.index = index
        self._sizes: Dict[int, ImageFont.FreeTypeFont] = {}

    def at(self, size: int) -> ImageFont.FreeTypeFont:
        if size not in self._sizes:
            self._sizes[size] = ImageFont.truetype(str(self.path), size, index=self.index)
        return self._sizes[size]


def _resources_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "resources" / "fonts"


def ensure_default_font(debug: bool = False) -> Optional[Path]:
    """Return the bundled default font, downloading it on first use.

    Returns ``None`` when the download fails or does not match the pinned
    checksum; nothing is written in that case.
    """
    target = _resources_dir() / DEFAULT_FONT_FILENAME
    if target.exists():
        return target
    if debug:
        print(f"[DEBUG] Downloading default font to {target}")
    try:
        response = requests.get(DEFAULT_FONT_URL, timeout=60)
        response.raise_for_status()
        if hashlib.sha256(response.content).hexdigest() != DEFAULT_FONT_SHA256:
            raise RuntimeError("checksum mismatch, download may be incomplete")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(response.content)
    except (requests.RequestException, RuntimeError, OSError) as exc:
        if debug:
            print(f"[DEBUG] Failed to fetch default font: {exc}")
        return None
    return target


def _system_fonts() -> Iterator[Path]:
    directories: List[Path] = []
    windir = os.environ.get("WINDIR")
    if windir:
        directories.append(Path(windir) / "Fonts")
    directories.extend(SYSTEM_FONT_DIRS)

    seen = set()
    for directory in directories:
        if not directory.exists():
            continue
        for pattern in SYSTEM_FONT_PATTERNS:
            for path in sorted(directory.rglob(pattern)):
                if path not in seen:
                    seen.add(path)
                    yield path


def _candidates(explicit: Optional[Path], debug: bool) -> Iterator[Path]:
    if explicit:
        yield explicit.resolve()
        return
    default_font = ensure_default_font(debug=debug)
    if default_font:
        yield default_font
    yield from _system_fonts()


def find_font(
    font_path: Optional[Path] = None,
    font_index: int = 0,
    debug: bool = False,
) -> FontFace:
    for candidate in _candidates(font_path, debug):
        try:
            ImageFont.truetype(str(candidate), PROBE_SIZE, index=font_index)
        except OSError:
            if debug:
                print(f"[DEBUG] Could not load font {candidate}")
            continue
        if debug:
            print(f"[DEBUG] Using font {candidate}")
        return FontFace(candidate, font_index)

    raise RuntimeError(
        "No usable CJK font found. Pass --font with a TrueType/OpenType file "
        "or allow the default LXGW WenKai Lite font to be downloaded."
    )
