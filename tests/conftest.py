"""Shared test fixtures for the bbmarkup test suite.

WHY: Several test modules need the same realistic page bodies, text
that mixes real markup with the stray and prose brackets found in
archived story pages. Centralizing them here keeps every module testing
against the same inputs.

HOW: Pytest fixtures return raw page strings. Helpers check the span
invariants that every parsed tree must satisfy.

RULES:
- Fixtures return fresh strings; tests never share parsed trees
- assert_span_invariants() is the single definition of the span rules
"""

from typing import List

import pytest

from bbmarkup.core.ir import Literal, Tag, Token, is_tag

PAGE_BODY = (
    "[center][size=14]Chapter 1[/size][/center]\n"
    "She opened the door [sic] and saw [b]nothing[/b].\n"
    "[img=650x450]http://example.com/panels/01.gif[/img]\n"
    "[spoiler open=\"Show Log\" close=\"Hide Log\"]JOHN: hi[/spoiler]\n"
    "Footnote [1] and a stray ] plus an unclosed [i]tail"
)

# Inputs chosen to break naive bracket parsers. parse_all must survive all of them.
HOSTILE_INPUTS: List[str] = [
    "",
    "[",
    "]",
    "[[[",
    "]]][[[",
    "[]",
    "[/]",
    "[=]",
    "[ b]x[/b]",
    '[a "',
    '[a="b]c"]',
    "[a=(]",
    "[a={]}",
    "[a=(b]c)]",
    "[b][/B][/b]",
    "[b][i][/b][/i]",
    "[/b][b]",
    "[b=[i]]x[/b]",
    "(((]]]{{{",
    "[" * 500 + "]" * 500,
    "[b]" * 300 + "x",
    "å[ä]ö[/Ä]",
]


def deep_tree(depth: int, name: str = "b", leaf: str = "x") -> List[Token]:
    """A caller-built tree of ``depth`` nested tags around one literal.

    Trees this deep must only be inspected iteratively: dataclass ==,
    repr, and deepcopy all recurse.
    """
    tree: List[Token] = [Literal(leaf)]
    for _ in range(depth):
        tree = [Tag(name, content=tree)]
    return tree


@pytest.fixture
def page_body():
    """A realistic archived page body with markup and prose brackets."""
    return PAGE_BODY


def assert_span_invariants(tokens: List[Token]) -> None:
    """Check span ordering and content partitioning for a parsed tree.

    Every tag must satisfy outer.start <= inner.start <= inner.end <=
    outer.end, and its content must tile its inner span with no gaps or
    overlaps.
    """
    pending = [t for t in tokens if is_tag(t)]
    while pending:
        tag = pending.pop()
        assert isinstance(tag, Tag)
        outer, inner = tag.outer_span, tag.inner_span
        assert outer.start <= inner.start <= inner.end <= outer.end

        position = inner.start
        for child in tag.content:
            span = child.outer_span if is_tag(child) else child.span
            assert span is not None
            assert span.start == position
            position = span.end
            if is_tag(child):
                pending.append(child)
        assert position == inner.end
