from pathlib import Path

import pytest
import requests

from cardcore import fonts


class FakeResponse:
    def __init__(self, content: bytes) -> None:
        self.content = content

    def raise_for_status(self) -> None:
        return None


class TestDefaultFont:
    def test_existing_font_is_reused(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        target = tmp_path / fonts.DEFAULT_FONT_FILENAME
        target.write_bytes(b"font")
        monkeypatch.setattr(fonts, "_resources_dir", lambda: tmp_path)
        monkeypatch.setattr(fonts.requests, "get", pytest.fail)

        assert fonts.ensure_default_font() == target

    def test_checksum_mismatch_returns_none(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(fonts, "_resources_dir", lambda: tmp_path)
        monkeypatch.setattr(
            fonts.requests, "get", lambda url, timeout: FakeResponse(b"corrupt")
        )

        assert fonts.ensure_default_font() is None
        assert not (tmp_path / fonts.DEFAULT_FONT_FILENAME).exists()

    def test_network_error_returns_none(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def boom(url, timeout):
            raise requests.ConnectionError("offline")

        monkeypatch.setattr(fonts, "_resources_dir", lambda: tmp_path)
        monkeypatch.setattr(fonts.requests, "get", boom)

        assert fonts.ensure_default_font() is None


class TestFindFont:
    def test_unloadable_explicit_font_raises(self, tmp_path: Path) -> None:
        bogus = tmp_path / "bogus.ttf"
        bogus.write_bytes(b"not a font")

        with pytest.raises(RuntimeError, match="No usable CJK font"):
            fonts.find_font(bogus)

    def test_no_candidates_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(fonts, "ensure_default_font", lambda debug=False: None)
        monkeypatch.setattr(fonts, "_system_fonts", lambda: iter(()))

        with pytest.raises(RuntimeError, match="No usable CJK font"):
            fonts.find_font()

    def test_unloadable_candidates_are_skipped(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        broken = tmp_path / "broken.ttf"
        broken.write_bytes(b"junk")
        monkeypatch.setattr(fonts, "ensure_default_font", lambda debug=False: broken)
        monkeypatch.setattr(fonts, "_system_fonts", lambda: iter(()))

        with pytest.raises(RuntimeError):
            fonts.find_font()
