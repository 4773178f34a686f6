"""Token tree serialization and flattening.

WHY: Collaborators parse a page body, edit a few tags (typically an image
URL), and need the page body back as markup. Others only want every tag
in one list regardless of nesting. Both operations live here so the
parser stays a pure text-to-tree function.

HOW: reconstruct() walks the tree and emits canonical markup.
flatten_destructive() collects tags pre-order and strips nested tags out
of each tag's content in place; flatten() does the same on a copy and
returns the stripped tree alongside the list.

RULES:
- reconstruct() is purely structural; names and properties are not
  re-validated
- An arg or property value is written as-is when that text parses back
  to the same value, otherwise it is wrapped in double quotes
- Flattened content is a single Literal of the tag's own text children,
  or empty when it had none
- Every traversal uses an explicit stack; tree depth is not limited by
  the interpreter's call stack
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import List, Optional, Tuple

from bbmarkup.core.bracketizer import Group, bracketize
from bbmarkup.core.ir import Literal, Tag, Token, is_tag
from bbmarkup.core.opening import try_parse_opening

# Characters that can change how a value bracketizes.
_SPECIAL_RE = re.compile(r'[\s\[\](){}"]')


def _parses_back(value: str, key: Optional[str]) -> bool:
    """Would ``value`` written verbatim parse back to exactly ``value``?

    The value is tried inside a minimal opening bracket, as the arg when
    ``key`` is None and as that property otherwise.
    """
    if key is None:
        markup = "[x={}]".format(value)
    else:
        markup = "[x {}={}]".format(key, value)
    nodes = bracketize(markup)
    if len(nodes) != 1 or not isinstance(nodes[0], Group) or nodes[0].end != len(markup):
        return False
    opening = try_parse_opening(nodes[0])
    if opening is None:
        return False
    if key is None:
        return opening.arg == value and not opening.properties
    return opening.arg is None and opening.properties == {key: value}


def _format_value(value: str, key: Optional[str] = None) -> str:
    if not _SPECIAL_RE.search(value) or _parses_back(value, key):
        return value
    if '"' not in value:
        return '"{}"'.format(value)
    # No quoting can carry this value; keep the caller's text.
    return value


def _opening_markup(tag: Tag) -> str:
    parts = ["[", tag.name]
    if tag.arg is not None:
        parts.append("=")
        parts.append(_format_value(tag.arg))
    for key, value in tag.properties.items():
        parts.append(" {}={}".format(key, _format_value(value, key)))
    parts.append("]")
    return "".join(parts)


def reconstruct(tokens: List[Token]) -> str:
    """Serialize a token list back into markup text.

    Args:
        tokens: Parsed (and possibly edited) tokens.

    Returns:
        Markup text: literals verbatim, tags as
        ``[name=arg key=value]content[/name]``.
    """
    output: List[str] = []
    # (token, closing) pairs; closing entries emit "[/name]".
    pending: List[Tuple[Token, bool]] = [(t, False) for t in reversed(tokens)]
    while pending:
        token, closing = pending.pop()
        if not is_tag(token):
            output.append(token.text)
        elif closing:
            output.append("[/{}]".format(token.name))
        else:
            output.append(_opening_markup(token))
            pending.append((token, True))
            pending.extend((child, False) for child in reversed(token.content))
    return "".join(output)


def text_content(tokens: List[Token]) -> str:
    """Concatenate all literal text in a tree, dropping every tag's markup."""
    parts: List[str] = []
    pending: List[Token] = list(reversed(tokens))
    while pending:
        token = pending.pop()
        if is_tag(token):
            pending.extend(reversed(token.content))
        else:
            parts.append(token.text)
    return "".join(parts)


def flatten_destructive(tokens: List[Token]) -> List[Tag]:
    """Collect every tag pre-order, stripping nested tags from their parents.

    WHY: Collaborators that only care about tag payloads (image URLs,
    link targets) want one flat list instead of a tree.

    HOW: Pre-order walk; after a tag's children have been queued, its
    content is replaced by the text of its literal children.

    RULES:
    - Mutates the tags in ``tokens``; use flatten() to keep them intact
    - Order is pre-order: a tag comes before the tags nested in it
    """
    flat: List[Tag] = []
    pending: List[Token] = [t for t in reversed(tokens) if is_tag(t)]
    while pending:
        tag = pending.pop()
        flat.append(tag)
        pending.extend(child for child in reversed(tag.content) if is_tag(child))
        text = "".join(child.text for child in tag.content if not is_tag(child))
        tag.content = [Literal(text)] if text else []
    return flat


def copy_tokens(tokens: List[Token]) -> List[Token]:
    """Copy a token tree. Tags and their property dicts are new; literals are shared."""
    copied: List[Token] = []
    pending: List[Tuple[List[Token], List[Token]]] = [(tokens, copied)]
    while pending:
        source, target = pending.pop()
        for token in source:
            if is_tag(token):
                clone = replace(token, properties=dict(token.properties), content=[])
                target.append(clone)
                pending.append((token.content, clone.content))
            else:
                target.append(token)
    return copied


def flatten(tokens: List[Token]) -> Tuple[List[Tag], List[Token]]:
    """Non-mutating flatten: return (flat tag list, stripped copy of the tree).

    The returned tags are the ones inside the returned tree, so editing a
    tag from the list is visible when the tree is reconstructed.
    """
    tree = copy_tokens(tokens)
    return flatten_destructive(tree), tree
