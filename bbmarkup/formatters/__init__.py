"""Output formatter registry, a pluggable format hub.

WHY: The CLI and the HTTP API need a single lookup to find the right
formatter by name. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["html"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and API requests)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from bbmarkup.formatters.html import HTMLFormatter
from bbmarkup.formatters.json_tree import JSONTreeFormatter
from bbmarkup.formatters.markup import MarkupFormatter
from bbmarkup.formatters.plain_text import PlainTextFormatter

if TYPE_CHECKING:
    from bbmarkup.formatters.base import BaseFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "markup": MarkupFormatter,
    "json_tree": JSONTreeFormatter,
    "html": HTMLFormatter,
    "plain_text": PlainTextFormatter,
}
