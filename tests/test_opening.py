"""Unit tests for the opening-tag grammar.

WHY: The grammar is what keeps prose brackets ("[sic]", "[citation
needed]") and malformed attributes from turning into tags. A mistake
here either eats page text or misses real markup.

HOW: Tests run try_parse_opening() on the first bracket group of small
inputs and cover:
  - Name, arg, and property splitting
  - Quoted and parenthesized values
  - Rejection of groups that do not start with plain text
  - The name pattern and the case-insensitive allow-list
  - The ambiguity rule, including through value-grouping brackets

RULES:
- Groups come from the real bracketizer, never hand-built
"""

import pytest

from bbmarkup.core.bracketizer import Group, bracketize
from bbmarkup.core.ir import Span
from bbmarkup.core.opening import OpeningGrammar, try_parse_opening


def _first_group(source):
    for node in bracketize(source):
        if isinstance(node, Group):
            return node
    raise AssertionError("no group in {!r}".format(source))


def _parse(source, allowed=None):
    return try_parse_opening(_first_group(source), allowed)


class TestNameAndArg:
    """The first word holds the name and the optional arg."""

    def test_bare_name(self):
        opening = _parse("[b]")
        assert opening.name == "b"
        assert opening.arg is None
        assert opening.properties == {}

    def test_name_with_arg(self):
        opening = _parse("[img=foo.png]")
        assert opening.name == "img"
        assert opening.arg == "foo.png"

    def test_arg_splits_on_first_equals(self):
        opening = _parse("[url=http://x/?a=b]")
        assert opening.arg == "http://x/?a=b"

    def test_empty_arg(self):
        assert _parse("[color=]").arg == ""

    def test_quoted_arg_is_unquoted(self):
        assert _parse('[url="http://a b"]').arg == "http://a b"

    def test_parenthesized_arg_keeps_spaces(self):
        assert _parse("[url=http://x/(a b)]").arg == "http://x/(a b)"

    def test_name_case_preserved(self):
        assert _parse("[CENTER]").name == "CENTER"

    def test_outer_span_is_opening_bracket(self):
        assert _parse("xx[b=1]").outer_span == Span(2, 7)


class TestProperties:
    """Remaining words become key=value properties."""

    def test_properties_in_order(self):
        opening = _parse("[spoiler open=Show close=Hide]")
        assert list(opening.properties.items()) == [("open", "Show"), ("close", "Hide")]

    def test_duplicate_key_last_wins(self):
        assert _parse("[x k=1 k=2]").properties == {"k": "2"}

    def test_key_without_value(self):
        assert _parse("[x flag]").properties == {"flag": ""}

    def test_quoted_value(self):
        opening = _parse('[spoiler open="Show Log" close=Hide]')
        assert opening.properties == {"open": "Show Log", "close": "Hide"}

    def test_extra_whitespace_between_words(self):
        opening = _parse("[x   a=1 \n b=2 ]")
        assert opening.properties == {"a": "1", "b": "2"}


class TestRejection:
    """Groups that cannot be openings."""

    @pytest.mark.parametrize("source", [
        "[]",
        "[ b]",
        '["b"]',
        "[(b)]",
        "[b!]",
        "[b.c]",
        "[/b]",
        "[=x]",
    ])
    def test_not_an_opening(self, source):
        assert _parse(source) is None

    def test_non_bracket_node(self):
        paren = _first_group("[x=(a)]").children[1]
        assert try_parse_opening(paren) is None


class TestAllowList:
    """Allowed names are compared case-insensitively."""

    def test_allowed(self):
        assert _parse("[img]", {"img"}).name == "img"

    def test_excluded(self):
        assert _parse("[b]", {"img"}) is None

    def test_case_insensitive_both_ways(self):
        assert _parse("[IMG=a]", {"img"}).name == "IMG"
        assert _parse("[img]", {"Img"}).name == "img"

    def test_impossible_name_matches_nothing(self):
        assert _parse("[b]", {"not a name!"}) is None


class TestAmbiguity:
    """A bracket whose value looks like an opening is prose."""

    def test_nested_opening_rejects_outer(self):
        assert _parse("[quote=[b]]") is None

    def test_filter_does_not_relax_ambiguity(self):
        assert _parse("[quote=[b]]", {"quote"}) is None

    def test_nested_opening_inside_parens(self):
        assert _parse("[x=([b])]") is None

    def test_nested_non_opening_is_fine(self):
        assert _parse("[x=[!]]").arg == "[!]"

    def test_nested_closing_bracket_is_fine(self):
        assert _parse("[x=[/b]]").arg == "[/b]"

    def test_quoted_brackets_are_not_inspected(self):
        assert _parse('[x="[b]"]').arg == "[b]"

    def test_deep_descendant(self):
        assert _parse("[a=([{[c]}])]") is None

    def test_grammar_reuses_analysis(self):
        grammar = OpeningGrammar()
        outer = _first_group("[quote=[b]]")
        inner = outer.children[1]
        assert grammar.parse(outer) is None
        assert grammar.parse(inner).name == "b"
