"""Abstract base formatter and output container.

WHY: Every output format consumes the same token tree but produces
different file content. This base class enforces a consistent interface
so the CLI and the HTTP API can work with any formatter generically.

HOW: BaseFormatter is an ABC with two requirements: a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list so a formatter may emit several files
- ``suffix`` is appended to the source stem, e.g. ``"-tree.json"``
- Formatters never mutate the tokens they are given
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from bbmarkup.core.ir import Token


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-tree.json"`` → ``"page12-tree.json"``.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"text/html"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'HTML'."""

    @abstractmethod
    def format(self, tokens: List[Token]) -> List[FormatterOutput]:
        """Convert a parsed token list into one or more output files."""
