import pytest
from PIL import ImageFont

from cardcore import fonts


class BuiltinFace:
    def at(self, size: int) -> ImageFont.FreeTypeFont:
        return ImageFont.load_default(size=size)


@pytest.fixture
def builtin_font(monkeypatch: pytest.MonkeyPatch) -> None:
    """Render with Pillow's bundled font instead of downloading one."""
    monkeypatch.setattr(fonts, "find_font", lambda *args, **kwargs: BuiltinFace())
