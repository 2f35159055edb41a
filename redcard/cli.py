from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from cardcore import export, themes
from cardcore.document import parse
from cardcore.render import CardSurface

DEFAULT_CONTENT = """# 产品设计知识

## 5个核心原则

- 用户体验至上
- 简洁即是美
- 一致性设计
- 反馈及时响应
- 包容性思维

> 好的设计让产品更出色 ✨

@产品设计师小明"""


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="redcard",
        description="Render lightweight markup as a styled card and export it as an image.",
    )
    parser.add_argument(
        "--mode",
        choices=("card", "parse"),
        default="card",
        help="card: export a card image (default); parse: print the parsed document as JSON.",
    )
    parser.add_argument(
        "--input",
        type=str,
        default="-",
        help="Path to the markup file, or '-' to read from stdin (default: -).",
    )
    parser.add_argument(
        "--theme",
        choices=sorted(themes.THEMES),
        default=themes.DEFAULT_THEME,
        help=f"Card theme (default: {themes.DEFAULT_THEME}).",
    )
    parser.add_argument(
        "--scale",
        type=float,
        choices=export.DENSITY_CHOICES,
        default=export.DENSITY_CHOICES[0],
        help=f"Pixel density of the exported image (default: {export.DENSITY_CHOICES[0]}).",
    )
    parser.add_argument(
        "--format",
        dest="image_format",
        choices=export.IMAGE_FORMATS,
        default="png",
        help="Artifact format (default: png).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output_cards"),
        help="Directory where exported cards will be written (default: output_cards).",
    )
    parser.add_argument(
        "--font",
        type=Path,
        help="Path to a TrueType/OpenType font file to use when rendering text.",
    )
    parser.add_argument(
        "--font-index",
        type=int,
        default=0,
        help="Font face index when loading from TTC collections (default: 0).",
    )
    parser.add_argument(
        "--settle-delay",
        type=float,
        default=export.SETTLE_DELAY_SECONDS,
        help=(
            "Seconds to wait before capturing the card "
            f"(default: {export.SETTLE_DELAY_SECONDS})."
        ),
    )
    parser.add_argument(
        "--no-placeholder",
        action="store_true",
        help="Render blank input as-is instead of substituting the sample content.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging.",
    )
    return parser.parse_args(argv)


def read_markup(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Markup file not found: {path}")
    return path.read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        text = read_markup(args.input)
    except FileNotFoundError as exc:
        raise SystemExit(str(exc)) from None
    if not text.strip() and not args.no_placeholder:
        if args.debug:
            print("[DEBUG] Input is blank, using the sample content.")
        text = DEFAULT_CONTENT

    document = parse(text, debug=args.debug)
    if args.mode == "parse":
        print(json.dumps(document.to_dict(), ensure_ascii=False, indent=2))
        return 0

    surface = CardSurface(
        document,
        themes.get_theme(args.theme),
        font_path=args.font,
        font_index=args.font_index,
        debug=args.debug,
    )
    exporter = export.SnapshotExporter(
        save=export.DirectorySaver(args.output_dir, debug=args.debug),
        settle_delay=args.settle_delay,
        debug=args.debug,
    )
    try:
        snapshot = asyncio.run(exporter.export(surface, args.scale, args.image_format))
    except (export.ExportError, OSError) as exc:
        print(f"Export failed: {exc}", file=sys.stderr)
        return 1

    output_path = args.output_dir / snapshot.filename
    print(f"Exported {output_path.resolve()}")
    return 0
