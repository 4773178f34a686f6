"""bbmarkup: tolerant parser and serializer for bracket markup.

WHY: Forum and story-site page bodies are written in a BBCode-style
dialect (``[b]bold[/b]``, ``[img=640x480]url[/img]``) full of stray
brackets, unclosed tags, and prose that merely looks like markup. Tools
that archive or re-render those pages need a parser that never fails,
a tree they can edit, and a way back to markup text.

HOW: Three-stage pipeline: bracketize the raw text, match tags on a
stack into a token tree (core), then emit output (formatters) or feed an
edited tree back through reconstruct(). Each stage is independently
testable.

RULES:
- parse_all() is total: any string yields a token list
- The token tree is the stable contract between parsing and output
- Adding an output format = one new formatter module, no core changes
"""

from bbmarkup.core.builder import MarkupInvariantError, parse_all
from bbmarkup.core.ir import Literal, Span, Tag, Token, is_tag, token_to_dict, tokens_to_dicts
from bbmarkup.core.serialize import copy_tokens, flatten, flatten_destructive, reconstruct, text_content

__version__ = "0.1.0"

__all__ = [
    "Literal",
    "MarkupInvariantError",
    "Span",
    "Tag",
    "Token",
    "copy_tokens",
    "flatten",
    "flatten_destructive",
    "is_tag",
    "parse_all",
    "reconstruct",
    "text_content",
    "token_to_dict",
    "tokens_to_dicts",
]
