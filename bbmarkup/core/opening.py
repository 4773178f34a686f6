"""Opening-tag grammar: decide whether a bracket group opens a tag.

WHY: Square brackets show up constantly in prose ("[sic]", "[1]",
"[citation needed]"), so a bracket group only becomes a tag opening when
its contents read unambiguously as ``name[=arg] key=value ...``. This
module is the single place where that decision is made.

HOW: try_parse_opening() checks the first child, applies the ambiguity
rule (reject when some nested bracket would itself qualify as an
opening), splits the remaining children into whitespace-separated
words, and reads the name, optional arg, and properties from them.

RULES:
- The first inner element must be a plain text run
- Ambiguity: any descendant ``[`` group that qualifies on its own
  (ignoring the name filter) disqualifies the outer group
- Name must match ^[A-Za-z0-9_-]+$; the allow-list is compared lower-cased
- arg is None when the first word has no "="; property values are ""
  when their word has no "="
- Later duplicate property keys overwrite earlier ones
- A value written as a single double-quoted run is unquoted
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, List, Optional, Tuple

from bbmarkup.core.bracketizer import CLOSER_FOR, TAG_OPEN, Group, Node, Primitive
from bbmarkup.core.ir import Span

TAG_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass
class OpeningTag:
    """The parsed pieces of an opening bracket.

    outer_span covers only the opening bracket; the tree builder extends
    it to the full tag once the close is found.
    """

    name: str
    arg: Optional[str]
    properties: Dict[str, str] = field(default_factory=dict)
    outer_span: Span = Span(0, 0)


def normalize_names(names: Optional[AbstractSet[str]]) -> Optional[frozenset]:
    """Lower-case an allow-list once so lookups can be case-insensitive."""
    if names is None:
        return None
    return frozenset(n.lower() for n in names)


class OpeningGrammar:
    """Opening-tag parser bound to one allow-list and one bracketizer tree.

    The ambiguity analysis of every group is cached, so one instance can
    be asked about every group of a document in linear total time.
    """

    def __init__(self, allowed_names: Optional[AbstractSet[str]] = None) -> None:
        self.allowed = normalize_names(allowed_names)
        self._memo: Dict[int, Tuple[bool, bool]] = {}

    def parse(self, group: Node) -> Optional[OpeningTag]:
        return _parse(group, self.allowed, self._memo)


def try_parse_opening(
    group: Node,
    allowed_names: Optional[AbstractSet[str]] = None,
) -> Optional[OpeningTag]:
    """Parse ``group`` as a tag opening, or return None when it is not one.

    Args:
        group: A node from the bracketizer output.
        allowed_names: Optional allow-list of tag names (any case). Names
                       outside it are not openings.

    Returns:
        An OpeningTag, or None if the group is prose.
    """
    return OpeningGrammar(allowed_names).parse(group)


def _parse(
    group: Node,
    allowed: Optional[frozenset],
    memo: Dict[int, Tuple[bool, bool]],
) -> Optional[OpeningTag]:
    if not _has_opening_shape(group):
        return None
    if _contains_opening(group, memo):
        return None

    words = _split_words(group.children)
    name, arg = _split_assignment(words[0], default=None)
    if not TAG_NAME_RE.match(name):
        return None
    if allowed is not None and name.lower() not in allowed:
        return None

    properties: Dict[str, str] = {}
    for word in words[1:]:
        key, value = _split_assignment(word, default="")
        properties[key] = value

    return OpeningTag(
        name=name,
        arg=arg,
        properties=properties,
        outer_span=Span(group.start, group.end),
    )


def _has_opening_shape(node: Node) -> bool:
    if not isinstance(node, Group) or node.family != TAG_OPEN:
        return False
    if not node.children:
        return False
    first = node.children[0]
    return isinstance(first, Primitive) and first.kind == "text"


def _contains_opening(group: Group, memo: Dict[int, Tuple[bool, bool]]) -> bool:
    """Memoised: does any descendant ``[`` group of ``group`` qualify?"""
    return _analyse(group, memo)[1]


def _analyse(group: Group, memo: Dict[int, Tuple[bool, bool]]) -> Tuple[bool, bool]:
    key = id(group)
    cached = memo.get(key)
    if cached is not None:
        return cached

    contains = False
    for child in group.children:
        if not isinstance(child, Group):
            continue
        child_qualifies, child_contains = _analyse(child, memo)
        if child_contains or (child.family == TAG_OPEN and child_qualifies):
            contains = True
            break

    qualifies = False
    if not contains and _has_opening_shape(group):
        name, _ = _split_assignment(_split_words(group.children)[0], default=None)
        qualifies = bool(TAG_NAME_RE.match(name))

    memo[key] = (qualifies, contains)
    return qualifies, contains


def _split_words(children: List[Node]) -> List[List[Node]]:
    """Split children into words on whitespace runs, dropping empty words."""
    words: List[List[Node]] = []
    current: List[Node] = []
    for child in children:
        if isinstance(child, Primitive) and child.kind == "space":
            if current:
                words.append(current)
                current = []
        else:
            current.append(child)
    if current:
        words.append(current)
    return words


def _node_text(node: Node, source_parts: List[str]) -> None:
    if isinstance(node, Primitive):
        source_parts.append(node.text)
        return
    source_parts.append(node.family)
    for child in node.children:
        _node_text(child, source_parts)
    source_parts.append(CLOSER_FOR[node.family])


def _split_assignment(word: List[Node], default: Optional[str]) -> Tuple[str, Optional[str]]:
    """Split a word on its first "=" into (left, right).

    The right side is unquoted when it is exactly one quoted run.
    """
    parts: List[str] = []
    for node in word:
        _node_text(node, parts)
    text = "".join(parts)

    left, sep, right = text.partition("=")
    if not sep:
        return text, default
    if _is_single_quoted(right):
        right = right[1:-1]
    return left, right


def _is_single_quoted(value: str) -> bool:
    return len(value) >= 2 and value[0] == '"' and value[-1] == '"' and '"' not in value[1:-1]
