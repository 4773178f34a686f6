"""Normalized markup formatter.

WHY: Re-emitting parsed markup gives a canonical form of a page body:
attribute quoting is made consistent and the output is guaranteed to
parse back to the same tree. Useful for diffing and for checking what
the parser understood.

HOW: Delegates to core.serialize.reconstruct().

RULES:
- Output suffix: "-normalized.bb"
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import List

from bbmarkup.core.ir import Token
from bbmarkup.core.serialize import reconstruct
from bbmarkup.formatters.base import BaseFormatter, FormatterOutput


class MarkupFormatter(BaseFormatter):
    """Formatter that re-serializes the tree as canonical markup."""

    @property
    def name(self) -> str:
        return "Normalized Markup"

    def format(self, tokens: List[Token]) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix="-normalized.bb",
                content=reconstruct(tokens),
                media_type="text/plain",
            )
        ]
