"""Stack-based tag matching and token tree construction.

WHY: Page bodies mix real markup with stray brackets, unclosed tags, and
tags closed in the wrong order. Callers need a tree they can trust for
the parts that are well formed and readable text for everything else,
without ever having to catch an exception.

HOW: parse_all() bracketizes the source, then walks the bracket groups
depth-first while keeping a stack of open tags (seeded with a synthetic
root). Text between structural brackets is sliced straight from the
source as it is flushed. Closing brackets match the nearest open tag
with the same name; tags still open at the end are unwound back into
literal text.

RULES:
- Close names match case-insensitively; Tag.name keeps its written case
- A close for an outer tag discards the unclosed tags above it, content
  included
- An opening met while max_depth tags are open stays literal text
- A close with no matching open tag, and a bracket that is not an
  opening, stay literal text and their children are still scanned
- Unwinding splices the opening bracket's source text and the tag's
  content into its parent
- Never raises for any input string; MarkupInvariantError means a bug
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import AbstractSet, List, Optional

from bbmarkup.core.bracketizer import DEFAULT_MAX_DEPTH, TAG_OPEN, Group, Primitive, Walker, bracketize
from bbmarkup.core.ir import Literal, Span, Tag, Token, UNRESOLVED, is_tag
from bbmarkup.core.opening import OpeningGrammar

logger = logging.getLogger(__name__)

ROOT_NAME = "topLevel"


class MarkupInvariantError(AssertionError):
    """Raised when the matcher breaks its own span/stack invariants.

    WHY: Malformed markup is never an error, so the only way to get here
    is a bug in the matching algorithm. Carrying on would hand callers a
    tree whose spans and content no longer agree.

    RULES:
    - Never raised for bad input, only for internal inconsistencies
    """


def append_token(content: List[Token], token: Token) -> None:
    """Append to a content list, merging adjacent literal runs."""
    if isinstance(token, Literal) and content and isinstance(content[-1], Literal):
        previous = content[-1]
        span = None
        if previous.span is not None and token.span is not None and previous.span.end == token.span.start:
            span = Span(previous.span.start, token.span.end)
        content[-1] = Literal(previous.text + token.text, span)
    elif isinstance(token, Literal) and not token.text:
        return
    else:
        content.append(token)


def _closing_name(group: Group) -> Optional[str]:
    """The tag name of a ``[/name]`` bracket, or None if it is not one."""
    if group.family != TAG_OPEN or len(group.children) != 1:
        return None
    only = group.children[0]
    if isinstance(only, Primitive) and only.kind == "text" and only.text.startswith("/"):
        return only.text[1:]
    return None


class _TreeBuilder:
    """One parse: the open-tag stack, the text cursor, and the source."""

    def __init__(
        self,
        source: str,
        allowed_names: Optional[AbstractSet[str]],
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.source = source
        self.max_depth = max_depth
        self.grammar = OpeningGrammar(allowed_names)
        self.root = Tag(name=ROOT_NAME, outer_span=Span(0, len(source)), inner_span=Span(0, len(source)))
        self.stack: List[Tag] = [self.root]
        self.cursor = 0

    @property
    def top(self) -> Tag:
        return self.stack[-1]

    def pop(self) -> Tag:
        if len(self.stack) <= 1:
            raise MarkupInvariantError("attempted to pop the synthetic root tag")
        return self.stack.pop()

    def flush(self, upto: int) -> None:
        """Move pending source text up to ``upto`` into the current top tag."""
        if upto > self.cursor:
            append_token(self.top.content, Literal(self.source[self.cursor:upto], Span(self.cursor, upto)))
            self.cursor = upto

    def find_open(self, name: str) -> Optional[int]:
        wanted = name.lower()
        for index in range(len(self.stack) - 1, 0, -1):
            if self.stack[index].name.lower() == wanted:
                return index
        return None

    def close(self, group: Group, depth: int) -> None:
        self.flush(group.start)
        while len(self.stack) - 1 > depth:
            discarded = self.pop()
            logger.debug(
                "Discarding unclosed [%s] at %d, closed over by [/%s]",
                discarded.name, discarded.outer_span.start, self.stack[depth].name,
            )
        tag = self.pop()
        tag.inner_span = replace(tag.inner_span, end=group.start)
        tag.outer_span = replace(tag.outer_span, end=group.end)
        append_token(self.top.content, tag)
        self.cursor = group.end

    def open(self, group: Group) -> bool:
        opening = self.grammar.parse(group)
        if opening is None:
            return False
        if len(self.stack) - 1 >= self.max_depth:
            logger.debug(
                "Keeping [%s] at %d as text, %d tags already open",
                opening.name, group.start, self.max_depth,
            )
            return False
        self.flush(group.start)
        self.stack.append(Tag(
            name=opening.name,
            arg=opening.arg,
            properties=opening.properties,
            outer_span=Span(opening.outer_span.start, UNRESOLVED),
            inner_span=Span(opening.outer_span.end, UNRESOLVED),
        ))
        self.cursor = group.end
        return True

    def unwind(self) -> None:
        while len(self.stack) > 1:
            tag = self.pop()
            logger.debug("Unwinding unclosed [%s] at %d into text", tag.name, tag.outer_span.start)
            opening = tag.outer_span.start, tag.inner_span.start
            append_token(self.top.content, Literal(self.source[opening[0]:opening[1]], Span(*opening)))
            for token in tag.content:
                append_token(self.top.content, token)

    def build(self) -> List[Token]:
        walker = Walker(bracketize(self.source, self.max_depth))
        for node in walker:
            if not isinstance(node, Group) or node.family != TAG_OPEN:
                continue
            name = _closing_name(node)
            if name is not None:
                depth = self.find_open(name)
                if depth is not None:
                    self.close(node, depth)
                    walker.skip_children()
                continue
            if self.open(node):
                walker.skip_children()

        self.flush(len(self.source))
        self.unwind()
        _check_resolved(self.root.content)
        return self.root.content


def _check_resolved(tokens: List[Token]) -> None:
    pending = list(tokens)
    while pending:
        token = pending.pop()
        if not is_tag(token):
            continue
        if not (token.outer_span.is_resolved and token.inner_span.is_resolved):
            raise MarkupInvariantError("tag [{}] left with an unresolved span".format(token.name))
        pending.extend(token.content)


def parse_all(
    source: str,
    allowed_names: Optional[AbstractSet[str]] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[Token]:
    """Parse markup text into an ordered list of tokens.

    WHY: This is the single entry point collaborators use to turn a page
    body into a tree they can inspect or edit.

    HOW: Runs the bracketizer, the opening-tag grammar, and the stack
    matcher in one pass (see module docstring).

    RULES:
    - Total: any string yields a token list, never an exception
    - With allowed_names, only those names (any case) become tags and all
      other bracket syntax stays literal text
    - Text with no brackets comes back as a single Literal

    Args:
        source: Raw markup text.
        allowed_names: Optional allow-list of tag names.
        max_depth: Nesting bound for bracket groups and for open tags;
                   deeper brackets and tags stay text.

    Returns:
        The content of the synthetic top-level tag.
    """
    return _TreeBuilder(source, allowed_names, max_depth).build()
