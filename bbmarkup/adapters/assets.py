"""Adapter: find and rewrite asset URLs inside page bodies.

WHY: An archiver downloads every image a page references and then needs
the page body to point at the local copies. Images are written as
``[img]URL[/img]`` or ``[img=WxH]URL[/img]``; the rest of the page may
contain any amount of bracket syntax that must survive untouched.

HOW: Parse with a tag allow-list so only the wanted tags become
structure and everything else stays literal text. Flatten to reach
tags at any depth. extract_tag_urls() reads each tag's content text;
rewrite_tag_urls() replaces it with whatever the callback returns and
reconstructs the page body.

RULES:
- Default names: ("img",)
- The URL of a tag is its content text with markup removed, stripped
- Tags whose URL is empty are skipped
- A callback returning None leaves that tag unchanged
- Input text outside the matched tags is emitted verbatim
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from bbmarkup.core.builder import parse_all
from bbmarkup.core.bracketizer import DEFAULT_MAX_DEPTH
from bbmarkup.core.ir import Literal, is_tag
from bbmarkup.core.serialize import flatten, reconstruct, text_content

DEFAULT_ASSET_TAGS = ("img",)


def extract_tag_urls(
    body: str,
    names: Iterable[str] = DEFAULT_ASSET_TAGS,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[str]:
    """Return the URLs held by the named tags, in document order.

    Args:
        body: Page body markup.
        names: Tag names whose content is a URL.
        max_depth: Bracket nesting bound passed to the parser.

    Returns:
        One URL per non-empty matching tag, duplicates kept.
    """
    tags, _ = flatten(parse_all(body, frozenset(names), max_depth))
    urls = []
    for tag in tags:
        url = text_content(tag.content).strip()
        if url:
            urls.append(url)
    return urls


def rewrite_tag_urls(
    body: str,
    rewrite: Callable[[str], Optional[str]],
    names: Iterable[str] = DEFAULT_ASSET_TAGS,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Replace the URL inside every named tag and return the new body.

    WHY: This is the round trip collaborators need: parse, substitute a
    local reference for each remote URL, reconstruct.

    HOW: The tree is parsed with ``names`` as the allow-list, so the tags
    are the only structure in it. Each tag's content is replaced in the
    tree itself, then the whole tree is reconstructed.

    Args:
        body: Page body markup.
        rewrite: Called with each URL; returns the replacement, or None
                 to keep the tag as it is.
        names: Tag names whose content is a URL.
        max_depth: Bracket nesting bound passed to the parser.

    Returns:
        The page body with rewritten URLs.
    """
    tokens = parse_all(body, frozenset(names), max_depth)
    # Reversed so the callback sees URLs in document order.
    pending = list(reversed(tokens))
    while pending:
        token = pending.pop()
        if not is_tag(token):
            continue
        url = text_content(token.content).strip()
        replacement = rewrite(url) if url else None
        if replacement is not None:
            token.content = [Literal(replacement)]
        else:
            pending.extend(reversed(token.content))
    return reconstruct(tokens)
