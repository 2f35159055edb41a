from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

EMPHASIS_MARKER = "**"
EMPHASIS_PATTERN = re.compile(r"\*\*([^*]+)\*\*")


@dataclass(frozen=True)
class StyledSpan:
    text: str
    emphasized: bool = False

    @property
    def markup(self) -> str:
        """The span as it appeared in the source text."""
        if self.emphasized:
            return f"{EMPHASIS_MARKER}{self.text}{EMPHASIS_MARKER}"
        return self.text


def tokenize(text: Optional[str]) -> List[StyledSpan]:
    """Split ``text`` into ordered literal and ``**emphasized**`` runs.

    Delimiters that do not form a complete pair around non-empty,
    marker-free content are kept as literal text.
    """
    if not text:
        return []

    spans: List[StyledSpan] = []
    last_index = 0
    for match in EMPHASIS_PATTERN.finditer(text):
        start, end = match.span()
        if start > last_index:
            spans.append(StyledSpan(text[last_index:start]))
        spans.append(StyledSpan(match.group(1), emphasized=True))
        last_index = end
    if last_index < len(text):
        spans.append(StyledSpan(text[last_index:]))
    return spans


def plain_text(text: Optional[str]) -> str:
    return "".join(span.text for span in tokenize(text))
