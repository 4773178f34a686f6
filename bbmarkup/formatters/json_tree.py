"""JSON token tree formatter.

WHY: Non-Python consumers (a JavaScript viewer, jq pipelines, the HTTP
API's clients) need the parsed tree in a language-neutral form, spans
included, so they can map tokens back onto the original text.

HOW: Wraps core.ir.tokens_to_dicts() in a versioned envelope and dumps
it with the standard json module.

RULES:
- Output conforms to token_tree_format_spec.json
- Envelope: {"version": 1, "tokens": [...]}
- Spans are [start, end] lists; caller-built literals have span null
- Non-ASCII text is written as-is (ensure_ascii=False)
- Output suffix: "-tree.json"
- Media type: "application/json"
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from bbmarkup.core.ir import Token, tokens_to_dicts
from bbmarkup.formatters.base import BaseFormatter, FormatterOutput

FORMAT_VERSION = 1


def build_tree_document(tokens: List[Token]) -> Dict[str, Any]:
    """The JSON-ready envelope for a token list."""
    return {
        "version": FORMAT_VERSION,
        "tokens": tokens_to_dicts(tokens, include_spans=True),
    }


class JSONTreeFormatter(BaseFormatter):
    """Formatter that dumps the token tree as JSON."""

    @property
    def name(self) -> str:
        return "JSON Token Tree"

    def format(self, tokens: List[Token]) -> List[FormatterOutput]:
        content = json.dumps(build_tree_document(tokens), ensure_ascii=False, indent=2)
        return [
            FormatterOutput(
                suffix="-tree.json",
                content=content + "\n",
                media_type="application/json",
            )
        ]
