"""Card themes and color parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Tuple

COLOR_ALIASES = {
    "white": "#ffffff",
    "black": "#000000",
    "transparent": "#00000000",
    "warmyellow": "#f6e7c1",
    "warm": "#f6e7c1",
    "warmyellowlight": "#f2d79b",
    "warmgold": "#f3c97a",
    "softyellow": "#f7e6b5",
    "softgold": "#f5d59a",
}

RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True)
class Theme:
    key: str
    name: str
    background: Tuple[str, str, str]
    accent: Tuple[str, str]
    text: str
    subtext: str
    glass: bool = False
    dark: bool = False


THEMES: Dict[str, Theme] = {
    "gray": Theme(
        key="gray",
        name="高级灰",
        background=("#f3f4f6", "#e5e7eb", "#d1d5db"),
        accent=("#4b5563", "#1f2937"),
        text="#1f2937",
        subtext="#4b5563",
    ),
    "blue": Theme(
        key="blue",
        name="多巴胺蓝",
        background=("#dbeafe", "#cffafe", "#bfdbfe"),
        accent=("#3b82f6", "#06b6d4"),
        text="#1e3a8a",
        subtext="#1d4ed8",
    ),
    "pink": Theme(
        key="pink",
        name="多巴胺粉",
        background=("#fce7f3", "#ffe4e6", "#fbcfe8"),
        accent=("#ec4899", "#f43f5e"),
        text="#831843",
        subtext="#be185d",
    ),
    "glass": Theme(
        key="glass",
        name="磨砂玻璃",
        background=("#ffffffcc", "#ffffff99", "#ffffff66"),
        accent=("#8b5cf6", "#a855f7"),
        text="#1f2937",
        subtext="#4b5563",
        glass=True,
    ),
    "minimal": Theme(
        key="minimal",
        name="极简白",
        background=("#ffffff", "#fcfcfd", "#f9fafb"),
        accent=("#1f2937", "#000000"),
        text="#111827",
        subtext="#6b7280",
    ),
    "paper": Theme(
        key="paper",
        name="暖纸",
        background=("warm-yellow", "soft-yellow", "warm-yellow-light"),
        accent=("#d97706", "#b45309"),
        text="#44340f",
        subtext="#7c5e1c",
    ),
    "dark": Theme(
        key="dark",
        name="暗夜黑",
        background=("#1f2937", "#111827", "#030712"),
        accent=("#f472b6", "#a855f7"),
        text="#f9fafb",
        subtext="#d1d5db",
        dark=True,
    ),
}
DEFAULT_THEME = "gray"


def get_theme(key: str) -> Theme:
    normalized = key.strip().lower()
    if normalized in THEMES:
        return THEMES[normalized]
    raise ValueError(
        f"Unknown theme '{key}'. Use one of {', '.join(sorted(THEMES))}."
    )


def parse_color(color_value: str) -> RGBA:
    normalized_key = re.sub(r"[^a-z0-9]+", "", color_value.lower())
    if normalized_key in COLOR_ALIASES:
        color_value = COLOR_ALIASES[normalized_key]

    if not color_value.startswith("#") or len(color_value) not in (4, 7, 9):
        raise ValueError(f"Unsupported color value: {color_value}")
    try:
        if len(color_value) == 4:
            r = int(color_value[1] * 2, 16)
            g = int(color_value[2] * 2, 16)
            b = int(color_value[3] * 2, 16)
            a = 255
        else:
            r = int(color_value[1:3], 16)
            g = int(color_value[3:5], 16)
            b = int(color_value[5:7], 16)
            a = int(color_value[7:9], 16) if len(color_value) == 9 else 255
    except ValueError:
        raise ValueError(f"Unsupported color value: {color_value}") from None
    return (r, g, b, a)
