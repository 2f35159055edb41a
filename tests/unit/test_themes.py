import pytest

from cardcore.themes import DEFAULT_THEME, THEMES, get_theme, parse_color


class TestParseColor:
    def test_long_hex(self) -> None:
        assert parse_color("#1a2b3c") == (0x1A, 0x2B, 0x3C, 255)

    def test_short_hex(self) -> None:
        assert parse_color("#fff") == (255, 255, 255, 255)

    def test_hex_with_alpha(self) -> None:
        assert parse_color("#ffffff66") == (255, 255, 255, 0x66)

    def test_alias(self) -> None:
        assert parse_color("Warm-Yellow") == (0xF6, 0xE7, 0xC1, 255)

    @pytest.mark.parametrize("value", ["red", "#12", "#gggggg", "123456"])
    def test_rejects_unknown(self, value: str) -> None:
        with pytest.raises(ValueError, match="Unsupported color value"):
            parse_color(value)


class TestThemes:
    def test_default_theme_exists(self) -> None:
        assert get_theme(DEFAULT_THEME).key == DEFAULT_THEME

    def test_lookup_is_case_insensitive(self) -> None:
        assert get_theme(" Glass ").glass

    def test_unknown_theme(self) -> None:
        with pytest.raises(ValueError, match="Unknown theme"):
            get_theme("neon")

    @pytest.mark.parametrize("key", sorted(THEMES))
    def test_all_theme_colors_parse(self, key: str) -> None:
        theme = THEMES[key]

        for color in (*theme.background, *theme.accent, theme.text, theme.subtext):
            assert len(parse_color(color)) == 4
