"""Token tree dataclasses for parsed bracket markup.

WHY: The parser turns raw page text into a tree that downstream code can
inspect and edit (rewrite an image URL, strip tags, render HTML) before
turning it back into markup. A small, well-typed token union keeps the
parser, the serializer, and every formatter talking about the same thing.

HOW: Three dataclasses form the tree:
  Span:    half-open [start, end) character range into the source
  Literal: an immutable run of text with no markup structure
  Tag:     a named element with optional arg, properties, and content
Token is the union of Literal and Tag; is_tag() discriminates.

RULES:
- Spans are provenance only; they never take part in equality, so two
  trees compare equal when name, arg, properties, and content match
- Tag.name keeps the case it was written with
- Tag.properties keeps insertion order; later duplicate keys win
- UNRESOLVED (-1) marks a span end that is not known yet; no Tag handed
  back from a parse carries it
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

UNRESOLVED = -1
"""Sentinel for a span end that has not been matched yet."""


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` character offsets into the source string."""

    start: int
    end: int

    @property
    def is_resolved(self) -> bool:
        return self.start != UNRESOLVED and self.end != UNRESOLVED

    def as_list(self) -> List[int]:
        return [self.start, self.end]


@dataclass(frozen=True)
class Literal:
    """A raw text run with no markup structure.

    Attributes:
        text: The text, verbatim from the source (or supplied by a caller
              that edits the tree).
        span: Where the text came from, or None for caller-built literals.
    """

    text: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)


@dataclass
class Tag:
    """A structured markup element: ``[name=arg key=value]content[/name]``.

    WHY: Callers need the parsed pieces of an element (name, arg,
    properties) plus its nested content, and the source offsets for
    provenance and for degrading unmatched tags back to text.

    HOW: Created by the tree builder when an opening bracket parses,
    filled with content while it sits on the open-tag stack, and given
    its end offsets when the matching close is found.

    RULES:
    - outer_span covers the opening bracket through the closing bracket
    - inner_span covers only the content between them
    - outer_span.start <= inner_span.start <= inner_span.end <= outer_span.end
    - content is the only field callers are expected to replace
    """

    name: str
    arg: Optional[str] = None
    properties: Dict[str, str] = field(default_factory=dict)
    content: List[Token] = field(default_factory=list)
    outer_span: Span = field(default=Span(UNRESOLVED, UNRESOLVED), compare=False, repr=False)
    inner_span: Span = field(default=Span(UNRESOLVED, UNRESOLVED), compare=False, repr=False)


Token = Union[Literal, Tag]


def is_tag(token: Token) -> bool:
    """True when ``token`` is a Tag rather than a Literal."""
    return isinstance(token, Tag)


def _shallow_dict(token: Token, include_spans: bool) -> Dict[str, Any]:
    """One token as a dict, with an empty ``content`` list for tags."""
    if isinstance(token, Tag):
        data: Dict[str, Any] = {
            "type": "tag",
            "name": token.name,
            "arg": token.arg,
            "properties": dict(token.properties),
            "content": [],
        }
        if include_spans:
            data["outer_span"] = token.outer_span.as_list()
            data["inner_span"] = token.inner_span.as_list()
        return data

    data = {"type": "literal", "text": token.text}
    if include_spans:
        data["span"] = token.span.as_list() if token.span is not None else None
    return data


def token_to_dict(token: Token, include_spans: bool = True) -> Dict[str, Any]:
    """Convert a token (and everything nested in it) into plain JSON-compatible data.

    WHY: The JSON formatter, the HTTP API, and tests that compare trees
    without spans all want the same dict shape.

    HOW: Builds each dict shallowly, then fills ``content`` lists from an
    explicit work-list so nesting depth is not bounded by the call stack.

    RULES:
    - Literal -> {"type": "literal", "text": ...}
    - Tag -> {"type": "tag", "name", "arg", "properties", "content"}
    - With include_spans, spans are [start, end] lists, or null for
      literals built by a caller
    """
    root = _shallow_dict(token, include_spans)
    pending = [(token, root)]
    while pending:
        current, data = pending.pop()
        if not isinstance(current, Tag):
            continue
        for child in current.content:
            child_data = _shallow_dict(child, include_spans)
            data["content"].append(child_data)
            pending.append((child, child_data))
    return root


def tokens_to_dicts(tokens: List[Token], include_spans: bool = True) -> List[Dict[str, Any]]:
    """Convert a token list with :func:`token_to_dict`."""
    return [token_to_dict(t, include_spans) for t in tokens]
