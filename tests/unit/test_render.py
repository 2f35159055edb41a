import pytest
from PIL import Image, ImageDraw, ImageFont

from cardcore import fonts
from cardcore.document import Document, parse
from cardcore.inline import tokenize
from cardcore.render import NATIVE_SIZE, CardSurface, SurfaceDetachedError, wrap_spans
from cardcore.themes import THEMES, get_theme

SAMPLE = "# Title **bold**\n## Sub\n- one\n- **two**\n> quote\n@author"


@pytest.mark.usefixtures("builtin_font")
class TestCardSurface:
    @pytest.mark.parametrize("scale", [1, 2, 3])
    def test_output_size_follows_scale(self, scale: int) -> None:
        image = CardSurface(parse(SAMPLE), get_theme("gray")).rasterize(scale)

        assert image.size == (NATIVE_SIZE[0] * scale, NATIVE_SIZE[1] * scale)
        assert image.mode == "RGBA"

    def test_corners_are_transparent(self) -> None:
        """Outside the rounded card nothing is painted."""
        image = CardSurface(parse(SAMPLE), get_theme("gray")).rasterize(2)

        assert image.getpixel((0, 0))[3] == 0
        assert image.getpixel((image.width - 1, image.height - 1))[3] == 0

    def test_opaque_theme_fills_card(self) -> None:
        image = CardSurface(parse(SAMPLE), get_theme("gray")).rasterize(2)

        assert image.getpixel((image.width // 2, image.height - 2))[3] == 255

    def test_glass_theme_is_translucent(self) -> None:
        image = CardSurface(parse(SAMPLE), get_theme("glass")).rasterize(2)

        assert image.getpixel((image.width // 2, image.height - 2))[3] < 255

    @pytest.mark.parametrize("key", sorted(THEMES))
    def test_every_theme_renders(self, key: str) -> None:
        image = CardSurface(parse(SAMPLE), THEMES[key]).rasterize(1)

        assert image.size == NATIVE_SIZE

    def test_empty_document_renders(self) -> None:
        image = CardSurface(Document(), get_theme("minimal")).rasterize(1)

        assert image.size == NATIVE_SIZE

    def test_many_items_are_clipped(self) -> None:
        text = "\n".join(f"- item number {i}" for i in range(200))

        image = CardSurface(parse(text), get_theme("pink")).rasterize(1)

        assert image.size == NATIVE_SIZE

    def test_detached_surface_raises(self) -> None:
        surface = CardSurface(parse(SAMPLE), get_theme("gray"))
        surface.detach()

        assert not surface.attached
        with pytest.raises(SurfaceDetachedError):
            surface.rasterize(2)

    def test_invalid_scale(self) -> None:
        with pytest.raises(ValueError):
            CardSurface(parse(SAMPLE), get_theme("gray")).rasterize(0)


class TestWrapSpans:
    def test_wraps_by_character_and_keeps_emphasis(self) -> None:
        font = ImageFont.load_default(size=10)
        draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))
        spans = tokenize("ab**cd**ef" * 5)
        char_width = draw.textlength("a", font=font)

        lines = wrap_spans(draw, spans, font, char_width * 4.5)

        assert all(line for line in lines)
        joined = "".join(text for line in lines for text, _ in line)
        assert joined == "abcdef" * 5
        assert any(emphasized for line in lines for _, emphasized in line)

    def test_empty_spans(self) -> None:
        draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))

        assert wrap_spans(draw, [], ImageFont.load_default(size=10), 100) == []


class TestFontResolution:
    def test_font_is_resolved_once_per_surface(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Every size and scale reuses the face found on first use."""
        calls = []

        class Face:
            def at(self, size: int) -> ImageFont.FreeTypeFont:
                return ImageFont.load_default(size=size)

        def find_font(font_path=None, font_index=0, debug=False):
            calls.append((font_path, font_index))
            return Face()

        monkeypatch.setattr(fonts, "find_font", find_font)
        surface = CardSurface(parse(SAMPLE), get_theme("gray"), font_index=1)

        surface.rasterize(1)
        surface.rasterize(2)

        assert calls == [(None, 1)]
