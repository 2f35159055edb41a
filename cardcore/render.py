"""
Paint a parsed :class:`~cardcore.document.Document` as a 3:4 card.

:class:`CardSurface` is the renderable surface handed to the snapshot
exporter. It owns no state beyond the document, the theme and the font
settings; every call to :meth:`CardSurface.rasterize` paints the card from
scratch at the requested density.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageChops, ImageDraw, ImageFont

from cardcore import fonts
from cardcore.document import Document
from cardcore.inline import StyledSpan, tokenize
from cardcore.themes import RGBA, Theme, parse_color

NATIVE_SIZE = (360, 480)
PADDING = 20
CORNER_RADIUS = 24
BADGE_SIZE = 32
BULLET_SIZE = 16
SECTION_GAP = 12
ITEM_GAP = 10
AUTHOR_PLACEHOLDER = "@你的小红书ID"
FOOTER_SLOGAN = "✨ 收藏 · 点赞"

Run = Tuple[str, bool]


class SurfaceDetachedError(RuntimeError):
    """Raised when a detached surface is asked to paint itself."""


def _measure_text_width(
    draw: ImageDraw.ImageDraw,
    text: str,
    font: ImageFont.ImageFont,
) -> float:
    if hasattr(draw, "textlength"):
        return draw.textlength(text, font=font)
    bbox = draw.textbbox((0, 0), text, font=font)
    return bbox[2] - bbox[0]


def _font_line_height(font: ImageFont.ImageFont, spacing_multiplier: float) -> int:
    try:
        ascent, descent = font.getmetrics()
        base_line_height = ascent + descent
    except AttributeError:
        dummy_image = Image.new("RGB", (1, 1))
        dummy_draw = ImageDraw.Draw(dummy_image)
        sample_bbox = dummy_draw.textbbox((0, 0), "示例Text", font=font)
        base_line_height = sample_bbox[3] - sample_bbox[1]
    return max(1, int(base_line_height * spacing_multiplier))


def wrap_spans(
    draw: ImageDraw.ImageDraw,
    spans: Sequence[StyledSpan],
    font: ImageFont.ImageFont,
    max_width: float,
) -> List[List[Run]]:
    """Break styled spans into lines no wider than ``max_width``.

    Wrapping happens per character so CJK text, which has no spaces, still
    breaks cleanly. Adjacent characters with the same emphasis are merged
    back into a single run.
    """
    lines: List[List[Run]] = [[]]
    width = 0.0
    for span in spans:
        for ch in span.text:
            ch_width = _measure_text_width(draw, ch, font)
            if width + ch_width > max_width and lines[-1]:
                lines.append([])
                width = 0.0
            current = lines[-1]
            if current and current[-1][1] == span.emphasized:
                current[-1] = (current[-1][0] + ch, span.emphasized)
            else:
                current.append((ch, span.emphasized))
            width += ch_width
    return [line for line in lines if line]


def _diagonal_mask(size: Tuple[int, int]) -> Image.Image:
    """A top-left to bottom-right 0..255 ramp."""
    vertical = Image.linear_gradient("L")
    horizontal = vertical.transpose(Image.ROTATE_90)
    diagonal = ImageChops.add(vertical, horizontal, scale=2.0)
    return diagonal.resize(size, Image.BICUBIC)


def _gradient(size: Tuple[int, int], stops: Sequence[RGBA]) -> Image.Image:
    mask = _diagonal_mask(size)
    result = Image.new("RGBA", size, stops[0])
    if len(stops) == 2:
        return Image.composite(Image.new("RGBA", size, stops[1]), result, mask)
    first_half = mask.point(lambda v: min(255, v * 2))
    second_half = mask.point(lambda v: max(0, v * 2 - 255))
    result = Image.composite(Image.new("RGBA", size, stops[1]), result, first_half)
    return Image.composite(Image.new("RGBA", size, stops[2]), result, second_half)


def _rounded_mask(size: Tuple[int, int], radius: int) -> Image.Image:
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle(
        (0, 0, size[0] - 1, size[1] - 1), radius=radius, fill=255
    )
    return mask


def _ellipse_mask(size: Tuple[int, int]) -> Image.Image:
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).ellipse((0, 0, size[0] - 1, size[1] - 1), fill=255)
    return mask


class CardSurface:
    def __init__(
        self,
        document: Document,
        theme: Theme,
        font_path: Optional[Path] = None,
        font_index: int = 0,
        debug: bool = False,
    ) -> None:
        self.document = document
        self.theme = theme
        self.font_path = font_path
        self.font_index = font_index
        self.debug = debug
        self._attached = True
        self._face: Optional[fonts.FontFace] = None

    @property
    def attached(self) -> bool:
        return self._attached

    def detach(self) -> None:
        self._attached = False

    def _font(self, size: int) -> ImageFont.ImageFont:
        if self._face is None:
            self._face = fonts.find_font(self.font_path, self.font_index, debug=self.debug)
        return self._face.at(size)

    def rasterize(self, scale: float) -> Image.Image:
        """Paint the card at ``scale`` times its native size.

        Pixels outside the rounded card stay fully transparent.
        """
        if not self._attached:
            raise SurfaceDetachedError("Card surface is detached; nothing to rasterize.")
        if not (math.isfinite(scale) and scale > 0):
            raise ValueError(f"Scale must be a finite positive number, got {scale!r}")

        width = max(1, round(NATIVE_SIZE[0] * scale))
        height = max(1, round(NATIVE_SIZE[1] * scale))
        if self.debug:
            print(f"[DEBUG] Rasterizing card at {scale}x -> {width}x{height}px")
        return _CardPainter(self, scale, (width, height)).paint()


class _CardPainter:
    """Single-use painter holding the per-rasterization geometry."""

    def __init__(self, surface: CardSurface, scale: float, size: Tuple[int, int]) -> None:
        self.surface = surface
        self.document = surface.document
        self.theme = surface.theme
        self.scale = scale
        self.size = size
        self.text_color = parse_color(self.theme.text)
        self.subtext_color = parse_color(self.theme.subtext)
        self.accent = tuple(parse_color(color) for color in self.theme.accent)
        self.canvas = self._background()
        self.draw = ImageDraw.Draw(self.canvas, "RGBA")

    def s(self, value: float) -> int:
        return max(1, round(value * self.scale))

    def font(self, native_size: int) -> ImageFont.ImageFont:
        return self.surface._font(self.s(native_size))  # noqa: SLF001

    def _background(self) -> Image.Image:
        stops = [parse_color(color) for color in self.theme.background]
        card = _gradient(self.size, stops)
        mask = _rounded_mask(self.size, self.s(CORNER_RADIUS))
        card.putalpha(ImageChops.multiply(card.getchannel("A"), mask))

        sheen_alpha = ImageChops.invert(_diagonal_mask(self.size)).point(
            lambda v: v * 51 // 255
        )
        sheen = Image.new("RGBA", self.size, (255, 255, 255, 0))
        sheen.putalpha(ImageChops.multiply(sheen_alpha, mask))
        return Image.alpha_composite(card, sheen)

    def paint(self) -> Image.Image:
        width = self.size[0]
        pad = self.s(PADDING)
        content_width = width - pad * 2

        y = self._paint_header(pad, content_width)
        if self.document.subtitle is not None:
            y = self._paint_block(
                tokenize(self.document.subtitle),
                pad,
                y,
                content_width,
                self.font(14),
                1.4,
                self.subtext_color,
            )
            y += self.s(SECTION_GAP)

        footer_top = self._paint_footer(pad, content_width)
        items_bottom = footer_top - self.s(16)
        if self.document.quote is not None:
            items_bottom = self._paint_quote(pad, content_width, items_bottom) - self.s(16)
        self._paint_items(pad, y, content_width, items_bottom)
        return self.canvas

    def _draw_runs(
        self,
        runs: Sequence[Run],
        x: float,
        y: float,
        font: ImageFont.ImageFont,
        color: RGBA,
    ) -> None:
        for text, emphasized in runs:
            fill = self.accent[0] if emphasized else color
            stroke = 0
            if emphasized and isinstance(font, ImageFont.FreeTypeFont):
                stroke = max(1, round(self.scale * 0.4))
            self.draw.text(
                (x, y), text, font=font, fill=fill, stroke_width=stroke, stroke_fill=fill
            )
            x += _measure_text_width(self.draw, text, font)

    def _paint_block(
        self,
        spans: Sequence[StyledSpan],
        x: int,
        y: int,
        max_width: int,
        font: ImageFont.ImageFont,
        spacing: float,
        color: RGBA,
        bottom: Optional[int] = None,
    ) -> int:
        line_height = _font_line_height(font, spacing)
        for line in wrap_spans(self.draw, spans, font, max_width):
            if bottom is not None and y + line_height > bottom:
                break
            self._draw_runs(line, x, y, font, color)
            y += line_height
        return y

    def _paste_accent(self, box: Tuple[int, int, int, int], mask: Image.Image) -> None:
        size = (box[2] - box[0], box[3] - box[1])
        self.canvas.paste(_gradient(size, self.accent), box[:2], mask)

    def _paint_header(self, pad: int, content_width: int) -> int:
        badge = self.s(BADGE_SIZE)
        self._paste_accent(
            (pad, pad, pad + badge, pad + badge),
            _rounded_mask((badge, badge), self.s(8)),
        )
        self._draw_sparkle(pad + badge / 2, pad + badge / 2, self.s(8))

        bottom = pad + badge
        if self.document.title is not None:
            font = self.font(18)
            line_height = _font_line_height(font, 1.4)
            text_x = pad + badge + self.s(8)
            lines = wrap_spans(
                self.draw, tokenize(self.document.title), font, content_width - badge - self.s(8)
            )
            y = pad + (badge - line_height) // 2 if len(lines) == 1 else pad
            for line in lines:
                self._draw_runs(line, text_x, y, font, self.text_color)
                y += line_height
            bottom = max(bottom, y)
        return bottom + self.s(SECTION_GAP)

    def _draw_sparkle(self, cx: float, cy: float, radius: int) -> None:
        inner = radius * 0.3
        points = [
            (cx, cy - radius),
            (cx + inner, cy - inner),
            (cx + radius, cy),
            (cx + inner, cy + inner),
            (cx, cy + radius),
            (cx - inner, cy + inner),
            (cx - radius, cy),
            (cx - inner, cy - inner),
        ]
        self.draw.polygon(points, fill=(255, 255, 255, 255))

    def _paint_items(self, pad: int, top: int, content_width: int, bottom: int) -> None:
        bullet = self.s(BULLET_SIZE)
        text_x = pad + bullet + self.s(10)
        text_width = content_width - bullet - self.s(10)
        font = self.font(14)
        line_height = _font_line_height(font, 1.625)

        y = top
        for index, item in enumerate(self.document.items):
            if y + line_height > bottom:
                if self.surface.debug:
                    hidden = len(self.document.items) - index
                    print(f"[DEBUG] Clipped {hidden} item(s) that do not fit the card")
                break
            bullet_y = y + max(0, (line_height - bullet) // 2)
            self._paste_accent(
                (pad, bullet_y, pad + bullet, bullet_y + bullet),
                _ellipse_mask((bullet, bullet)),
            )
            self._draw_check(pad, bullet_y, bullet)
            y = self._paint_block(
                tokenize(item), text_x, y, text_width, font, 1.625, self.text_color, bottom
            )
            y += self.s(ITEM_GAP)

    def _draw_check(self, x: int, y: int, size: int) -> None:
        points = [
            (x + size * 0.28, y + size * 0.52),
            (x + size * 0.44, y + size * 0.68),
            (x + size * 0.72, y + size * 0.36),
        ]
        self.draw.line(points, fill=(255, 255, 255, 255), width=max(1, self.s(1.5)))

    def _paint_quote(self, pad: int, content_width: int, bottom: int) -> int:
        inset = self.s(12)
        icon = self.s(16)
        font = self.font(14)
        line_height = _font_line_height(font, 1.4)
        text_width = content_width - inset * 2 - icon - self.s(8)
        lines = wrap_spans(self.draw, tokenize(self.document.quote), font, text_width)

        box_height = inset * 2 + max(1, len(lines)) * line_height
        top = bottom - box_height
        fill = (255, 255, 255, 26) if self.theme.dark else (255, 255, 255, 102)
        self.draw.rounded_rectangle(
            (pad, top, pad + content_width, bottom), radius=self.s(12), fill=fill
        )
        self.draw.text(
            (pad + inset, top + inset), "“", font=self.font(20), fill=self.subtext_color
        )
        y = top + inset
        for line in lines:
            self._draw_runs(line, pad + inset + icon + self.s(8), y, font, self.subtext_color)
            y += line_height
        return top

    def _paint_footer(self, pad: int, content_width: int) -> int:
        height = self.size[1]
        font = self.font(12)
        line_height = _font_line_height(font, 1.4)
        text_y = height - pad - line_height
        top = text_y - self.s(12)

        self.draw.line(
            (pad, top, pad + content_width, top),
            fill=(229, 231, 235, 128),
            width=self.s(1),
        )
        self._draw_user_icon(pad, text_y + (line_height - self.s(14)) // 2, self.s(14))

        author = self.document.author or AUTHOR_PLACEHOLDER
        author_runs = wrap_spans(self.draw, tokenize(author), font, content_width)
        if author_runs:
            self._draw_runs(author_runs[0], pad + self.s(20), text_y, font, self.subtext_color)

        slogan_width = _measure_text_width(self.draw, FOOTER_SLOGAN, font)
        self.draw.text(
            (pad + content_width - slogan_width, text_y),
            FOOTER_SLOGAN,
            font=font,
            fill=self.subtext_color,
        )
        return top

    def _draw_user_icon(self, x: int, y: int, size: int) -> None:
        head = size * 0.4
        width = max(1, self.s(1.2))
        self.draw.ellipse(
            (x + (size - head) / 2, y, x + (size + head) / 2, y + head),
            outline=self.subtext_color,
            width=width,
        )
        self.draw.arc(
            (x + size * 0.1, y + size * 0.5, x + size * 0.9, y + size * 1.3),
            start=180,
            end=360,
            fill=self.subtext_color,
            width=width,
        )
