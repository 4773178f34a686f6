"""Plain text formatter with all markup removed.

WHY: Search indexing, word counts, and quick review want the words of a
page body without any tags. This is the simplest output format.

HOW: Joins every literal run in document order via
core.serialize.text_content(); tags contribute only their content.

RULES:
- Bracket text that did not parse as markup is kept (it is text)
- Output suffix: ".txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import List

from bbmarkup.core.ir import Token
from bbmarkup.core.serialize import text_content
from bbmarkup.formatters.base import BaseFormatter, FormatterOutput


class PlainTextFormatter(BaseFormatter):
    """Formatter that strips tags and keeps their text."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, tokens: List[Token]) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=".txt",
                content=text_content(tokens),
                media_type="text/plain",
            )
        ]
