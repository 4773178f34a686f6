"""Split raw text into a tree of primitive runs and bracket groups.

WHY: Whether ``[foo bar=baz]`` is a tag or prose can only be decided once
its extent is known, and attribute values may legitimately contain
brackets of their own (``[url=http://x/(a b)]``) or quoted strings. The
tree builder needs those extents fixed up front, without committing to
any tag interpretation yet.

HOW: One left-to-right scan keeps an explicit stack of open groups.
Outside every group only ``[`` is structural. Inside a group, quoted
strings, whitespace runs, and the three bracket families are recognised.
Closers pop back to their partner; anything left open is dissolved back
into plain text. Walker then offers an iterative depth-first traversal
that lets the consumer skip a node's children.

RULES:
- Priority inside a group: quoted run, whitespace run, bracket, text
- A quote with no closing partner is plain text
- ``]`` closes the nearest open ``[`` and dissolves any ``(``/``{``
  opened after it
- ``)``/``}`` never close past the innermost open ``[``
- Unbalanced delimiters are never rejected, they become plain text
- An opener met while max_depth groups are open is plain text
- Adjacent text primitives are merged
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

DEFAULT_MAX_DEPTH = 64
"""Maximum number of simultaneously open bracket groups."""

TAG_OPEN = "["
CLOSER_FOR = {"[": "]", "(": ")", "{": "}"}
_CLOSERS = {"]": "[", ")": "(", "}": "{"}
_QUOTE = '"'


@dataclass
class Primitive:
    """A leaf run of source text.

    Attributes:
        kind: ``"text"``, ``"quoted"`` (including its quotes), or ``"space"``.
        start: Offset of the first character.
        end: Offset one past the last character.
        text: The source text of the run.
    """

    kind: str
    start: int
    end: int
    text: str


@dataclass
class Group:
    """A balanced bracket group; ``start``/``end`` include the delimiters."""

    family: str
    start: int
    end: int = -1
    children: List[Node] = field(default_factory=list)


Node = Union[Primitive, Group]


def _append_text(nodes: List[Node], start: int, end: int, source: str) -> None:
    """Append a text run, merging it into a preceding adjacent text run."""
    if start >= end:
        return
    if nodes:
        last = nodes[-1]
        if isinstance(last, Primitive) and last.kind == "text" and last.end == start:
            last.end = end
            last.text = source[last.start:end]
            return
    nodes.append(Primitive("text", start, end, source[start:end]))


def _append_node(nodes: List[Node], node: Node, source: str) -> None:
    if isinstance(node, Primitive) and node.kind == "text":
        _append_text(nodes, node.start, node.end, source)
    else:
        nodes.append(node)


def _dissolve(group: Group, parent: List[Node], source: str) -> None:
    """Turn an unclosed group back into its opening char plus its children."""
    _append_text(parent, group.start, group.start + 1, source)
    for child in group.children:
        _append_node(parent, child, source)


def bracketize(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Node]:
    """Tokenize ``source`` into primitives and nested bracket groups.

    Args:
        source: Raw markup text.
        max_depth: Maximum number of groups open at once; deeper openers
                   are kept as plain text.

    Returns:
        The top-level node list. Concatenating every node's source range
        in order reproduces ``source`` exactly.
    """
    root: List[Node] = []
    stack: List[Group] = []
    length = len(source)
    pos = 0

    def container() -> List[Node]:
        return stack[-1].children if stack else root

    while pos < length:
        char = source[pos]

        if not stack:
            # Outside every group only "[" matters; jump to the next one.
            nxt = source.find(TAG_OPEN, pos)
            if nxt == -1:
                _append_text(root, pos, length, source)
                break
            _append_text(root, pos, nxt, source)
            pos = nxt
            if max_depth > 0:
                stack.append(Group(TAG_OPEN, pos))
            else:
                _append_text(root, pos, pos + 1, source)
            pos += 1
            continue

        if char == _QUOTE:
            closing = source.find(_QUOTE, pos + 1)
            if closing == -1:
                _append_text(container(), pos, pos + 1, source)
                pos += 1
            else:
                container().append(Primitive("quoted", pos, closing + 1, source[pos:closing + 1]))
                pos = closing + 1
            continue

        if char.isspace():
            end = pos + 1
            while end < length and source[end].isspace():
                end += 1
            container().append(Primitive("space", pos, end, source[pos:end]))
            pos = end
            continue

        if char in CLOSER_FOR:
            if len(stack) >= max_depth:
                _append_text(container(), pos, pos + 1, source)
            else:
                stack.append(Group(char, pos))
            pos += 1
            continue

        if char in _CLOSERS:
            partner = _find_partner(stack, _CLOSERS[char])
            if partner is None:
                _append_text(container(), pos, pos + 1, source)
            else:
                while len(stack) - 1 > partner:
                    inner = stack.pop()
                    _dissolve(inner, stack[-1].children, source)
                group = stack.pop()
                group.end = pos + 1
                container().append(group)
            pos += 1
            continue

        end = pos + 1
        while end < length and not _is_special(source[end]):
            end += 1
        _append_text(container(), pos, end, source)
        pos = end

    while stack:
        group = stack.pop()
        _dissolve(group, container(), source)

    return root


def _is_special(char: str) -> bool:
    return char == _QUOTE or char in CLOSER_FOR or char in _CLOSERS or char.isspace()


def _find_partner(stack: List[Group], family: str) -> Optional[int]:
    """Index of the open group a closer for ``family`` would close, if any."""
    for index in range(len(stack) - 1, -1, -1):
        group = stack[index]
        if group.family == family:
            return index
        if group.family == TAG_OPEN:
            # Value-grouping brackets never close past a tag bracket.
            return None
    return None


class Walker:
    """Iterative depth-first, pre-order traversal over bracketizer output.

    WHY: The tree builder must visit every bracket group in document
    order, but once a group has been consumed as a tag opening its
    children must not be rediscovered as independent structure.

    HOW: Iterating yields nodes one at a time. Calling skip_children()
    right after a node is yielded prevents descending into it. An
    explicit stack replaces recursion so deep inputs cannot exhaust the
    interpreter's call stack.

    RULES:
    - skip_children() applies only to the most recently yielded node
    - Primitives have no children; skipping them is a no-op
    """

    def __init__(self, nodes: List[Node]) -> None:
        self._pending: List[Node] = list(reversed(nodes))
        self._last: Optional[Node] = None
        self._skip = False

    def skip_children(self) -> None:
        self._skip = True

    def __iter__(self) -> Iterator[Node]:
        return self

    def __next__(self) -> Node:
        last = self._last
        if isinstance(last, Group) and not self._skip:
            self._pending.extend(reversed(last.children))
        self._skip = False
        if not self._pending:
            self._last = None
            raise StopIteration
        self._last = self._pending.pop()
        return self._last
