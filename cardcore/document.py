"""
Turn lightweight card markup into a structured :class:`Document`.

The markup is line oriented. Each non-blank line is classified by its leading
token: headings fill the title and subtitle, bullet and numbered entries are
collected as items, and blockquote and ``@mention`` lines provide the quote
and author. Lines that match nothing are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Document:
    title: Optional[str] = None
    subtitle: Optional[str] = None
    items: Tuple[str, ...] = field(default_factory=tuple)
    quote: Optional[str] = None
    author: Optional[str] = None

    def is_empty(self) -> bool:
        return (
            self.title is None
            and self.subtitle is None
            and not self.items
            and self.quote is None
            and self.author is None
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "title": self.title,
            "subtitle": self.subtitle,
            "items": list(self.items),
            "quote": self.quote,
            "author": self.author,
        }


@dataclass
class _Fields:
    title: Optional[str] = None
    subtitle: Optional[str] = None
    items: List[str] = field(default_factory=list)
    quote: Optional[str] = None
    author: Optional[str] = None


def _apply_heading(fields: _Fields, content: str) -> None:
    if fields.title is None:
        fields.title = content
    elif fields.subtitle is None:
        fields.subtitle = content
    # A third heading has no slot and is dropped.


def _apply_item(fields: _Fields, content: str) -> None:
    fields.items.append(content)


def _apply_quote(fields: _Fields, content: str) -> None:
    fields.quote = content


def _apply_author(fields: _Fields, content: str) -> None:
    fields.author = content


# Evaluated top to bottom; the first rule whose pattern matches owns the line.
# Group 1 of each pattern is the content kept for the document.
LINE_RULES: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("heading", re.compile(r"^#+\s*(.*)$")),
    ("bullet", re.compile(r"^[-*] (.*)$")),
    ("ordinal", re.compile(r"^[0-9]+\. (.*)$")),
    ("quote", re.compile(r"^> (.*)$")),
    ("mention", re.compile(r"^(@.*)$")),
)

_ACTIONS: Dict[str, Callable[[_Fields, str], None]] = {
    "heading": _apply_heading,
    "bullet": _apply_item,
    "ordinal": _apply_item,
    "quote": _apply_quote,
    "mention": _apply_author,
}


def classify_line(line: str) -> Optional[Tuple[str, str]]:
    """Return ``(kind, content)`` for a trimmed line, or ``None`` if no rule matches."""
    for kind, pattern in LINE_RULES:
        match = pattern.match(line)
        if match:
            return kind, match.group(1)
    return None


def parse(text: str, debug: bool = False) -> Document:
    fields = _Fields()

    for raw_line in text.strip().split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        classified = classify_line(line)
        if classified is None:
            if debug:
                print(f"[DEBUG] Ignoring unclassified line: {line!r}")
            continue
        kind, content = classified
        _ACTIONS[kind](fields, content)

    return Document(
        title=fields.title,
        subtitle=fields.subtitle,
        items=tuple(fields.items),
        quote=fields.quote,
        author=fields.author,
    )
