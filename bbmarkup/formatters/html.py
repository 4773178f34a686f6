"""HTML formatter for the common tag vocabulary.

WHY: Archived story pages are read in a browser. The markup has to be
rendered the way the original site rendered it: bold/italic/underline,
colored and sized spans, images with optional dimensions, links, and
collapsible spoiler boxes.

HOW: Walks the token tree and maps each tag name to an HTML snippet.
Literal text is passed through (page bodies routinely carry inline HTML
of their own) with newlines turned into <br>. Values that end up inside
HTML attributes are escaped.

RULES:
- b, i, u, s, center → same-named element
- color=ARG → <span style="color: ARG">
- size=ARG → <span style="font-size: ARGpt">
- img: content text is the src; an arg "WxH" adds width/height,
  class="major" and a trailing <br>
- url: href is the arg, or the content text when there is no arg
- spoiler: "open"/"close" properties label the toggle button
  (defaults "Show"/"Hide")
- Any other tag name → same-named element
- Tag names are matched case-insensitively
- Output suffix: ".html"; media type "text/html"
"""

from __future__ import annotations

from html import escape
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from bbmarkup.core.ir import Tag, Token, is_tag
from bbmarkup.core.serialize import text_content
from bbmarkup.formatters.base import BaseFormatter, FormatterOutput

_SIMPLE_ELEMENTS = frozenset({"b", "i", "u", "s", "center"})


def _attr(value: str) -> str:
    return escape(value, quote=True)


def _render_img(tag: Tag, content: str) -> str:
    src = _attr(text_content(tag.content).strip())
    if tag.arg:
        width, _, height = tag.arg.partition("x")
        return '<img src="{}" class="major" width="{}" height="{}"><br>'.format(
            src, _attr(width), _attr(height),
        )
    return '<img src="{}">'.format(src)


def _render_url(tag: Tag, content: str) -> str:
    href = tag.arg if tag.arg is not None else text_content(tag.content).strip()
    return '<a href="{}">{}</a>'.format(_attr(href), content)


def _render_color(tag: Tag, content: str) -> str:
    return '<span style="color: {}">{}</span>'.format(_attr(tag.arg or ""), content)


def _render_size(tag: Tag, content: str) -> str:
    return '<span style="font-size: {}pt">{}</span>'.format(_attr(tag.arg or ""), content)


def _render_spoiler(tag: Tag, content: str) -> str:
    label_open = _attr(tag.properties.get("open", "Show"))
    label_close = _attr(tag.properties.get("close", "Hide"))
    return (
        '<div class="spoiler closed"><div style="text-align: center">'
        '<button data-open="{o}" data-close="{c}">{o}</button></div>'
        "<div>{content}</div></div>"
    ).format(o=label_open, c=label_close, content=content)


_RENDERERS: Dict[str, Callable[[Tag, str], str]] = {
    "img": _render_img,
    "url": _render_url,
    "color": _render_color,
    "size": _render_size,
    "spoiler": _render_spoiler,
}


def _render_tag(tag: Tag, content: str) -> str:
    key = tag.name.lower()
    renderer = _RENDERERS.get(key)
    if renderer is not None:
        return renderer(tag, content)
    if key in _SIMPLE_ELEMENTS:
        return "<{0}>{1}</{0}>".format(key, content)
    return "<{0}>{1}</{0}>".format(tag.name, content)


def tokens_to_html(tokens: List[Token]) -> str:
    """Render a token list as an HTML fragment.

    Each open tag keeps a frame of rendered child parts; when its content
    is exhausted the frame is rendered and appended to its parent's parts.
    """
    root: List[str] = []
    frames: List[Tuple[Optional[Tag], Iterator[Token], List[str]]] = [(None, iter(tokens), root)]
    while frames:
        tag, children, parts = frames[-1]
        token = next(children, None)
        if token is None:
            frames.pop()
            if tag is not None:
                frames[-1][2].append(_render_tag(tag, "".join(parts)))
        elif is_tag(token):
            frames.append((token, iter(token.content), []))
        else:
            parts.append(token.text.replace("\n", "<br>"))
    return "".join(root)


class HTMLFormatter(BaseFormatter):
    """Formatter that renders the tree as an HTML fragment."""

    @property
    def name(self) -> str:
        return "HTML"

    def format(self, tokens: List[Token]) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=".html",
                content=tokens_to_html(tokens),
                media_type="text/html",
            )
        ]
