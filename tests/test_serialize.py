"""Tests for reconstruct(), text_content(), and the flatten helpers.

WHY: Collaborators edit parsed trees and write them back as markup, so
reconstruct() must emit markup that parses back to the edited tree.
The flatten helpers hand out tags for editing and must be clear about
what they mutate.

HOW: Builds trees by hand or with parse_all(), then checks the emitted
markup, the flat tag order, and which trees were changed.
"""

from bbmarkup.core.builder import parse_all
from bbmarkup.core.ir import Literal, Tag, is_tag
from bbmarkup.core.serialize import copy_tokens, flatten, flatten_destructive, reconstruct, text_content
from tests.conftest import deep_tree


class TestReconstruct:
    """Trees serialize to canonical markup."""

    def test_literals_verbatim(self):
        assert reconstruct([Literal("a [b"), Literal("] c")]) == "a [b] c"

    def test_tag_with_arg_and_properties(self):
        tag = Tag("spoiler", arg="x", properties={"open": "Show", "close": "Hide"},
                  content=[Literal("body")])
        assert reconstruct([tag]) == "[spoiler=x open=Show close=Hide]body[/spoiler]"

    def test_values_with_spaces_are_quoted(self):
        tag = Tag("spoiler", properties={"open": "Show Log"})
        assert reconstruct([tag]) == '[spoiler open="Show Log"][/spoiler]'

    def test_arg_with_bracket_is_quoted(self):
        assert reconstruct([Tag("x", arg="a]b")]) == '[x="a]b"][/x]'

    def test_empty_values(self):
        assert reconstruct([Tag("x", arg="", properties={"flag": ""})]) == "[x= flag=][/x]"

    def test_name_case_kept(self):
        assert reconstruct(parse_all("[B]x[/b]")) == "[B]x[/B]"

    def test_edited_content(self):
        tokens = parse_all("[img]old.gif[/img] after")
        tokens[0].content = [Literal("new.gif")]
        assert reconstruct(tokens) == "[img]new.gif[/img] after"

    def test_quoted_value_parses_back(self):
        tokens = [Tag("url", arg="http://a b/", content=[Literal("t")])]
        assert parse_all(reconstruct(tokens)) == tokens


class TestValueQuoting:
    """Values are written so they parse back unchanged."""

    def test_quoted_run_with_trailing_text_kept_verbatim(self):
        tokens = parse_all('[a k="x y"z]t[/a]')
        assert tokens[0].properties == {"k": '"x y"z'}
        assert reconstruct(tokens) == '[a k="x y"z]t[/a]'

    def test_bracket_groups_kept_verbatim(self):
        tokens = [Tag("url", arg="http://x/(a b)", properties={"note": "[!]"})]
        assert reconstruct(tokens) == "[url=http://x/(a b) note=[!]][/url]"

    def test_value_that_would_open_a_tag_is_quoted(self):
        tokens = [Tag("x", arg="[b]", content=[Literal("t")])]
        assert reconstruct(tokens) == '[x="[b]"]t[/x]'
        assert parse_all(reconstruct(tokens)) == tokens

    def test_value_with_equals_and_space(self):
        tokens = [Tag("x", properties={"k": "a=b c"})]
        assert reconstruct(tokens) == '[x k="a=b c"][/x]'
        assert parse_all(reconstruct(tokens)) == tokens


class TestTextContent:
    """Only literal text survives."""

    def test_strips_tags(self):
        tokens = parse_all("a [b]bold [i]it[/i][/b] c")
        assert text_content(tokens) == "a bold it c"

    def test_keeps_prose_brackets(self):
        assert text_content(parse_all("see [1]")) == "see [1]"


class TestFlattenDestructive:
    """Pre-order flat list, stripped in place."""

    def test_pre_order(self):
        tokens = parse_all("[a]x[b]y[/b]z[/a][c]w[/c]")
        flat = flatten_destructive(tokens)
        assert [t.name for t in flat] == ["a", "b", "c"]

    def test_content_becomes_own_text(self):
        tokens = parse_all("[a]x[b]y[/b]z[/a][c]w[/c]")
        flat = flatten_destructive(tokens)
        assert flat[0].content == [Literal("xz")]
        assert flat[1].content == [Literal("y")]
        assert flat[2].content == [Literal("w")]

    def test_tag_without_text_gets_empty_content(self):
        flat = flatten_destructive(parse_all("[a][b]y[/b][/a]"))
        assert flat[0].content == []

    def test_mutates_input_tree(self):
        tokens = parse_all("[a]x[b]y[/b][/a]")
        flatten_destructive(tokens)
        assert tokens == [Tag("a", content=[Literal("x")])]

    def test_literals_only(self):
        assert flatten_destructive([Literal("text")]) == []


class TestFlatten:
    """The non-mutating variant works on a copy."""

    def test_input_untouched(self):
        tokens = parse_all("[a]x[b]y[/b][/a]")
        flatten(tokens)
        assert tokens == [Tag("a", content=[Literal("x"), Tag("b", content=[Literal("y")])])]

    def test_flat_tags_live_in_returned_tree(self):
        tokens = parse_all("[a]x[b]y[/b][/a]")
        flat, tree = flatten(tokens)
        assert flat[0] is tree[0]
        flat[0].content = [Literal("edited")]
        assert reconstruct(tree) == "[a]edited[/a]"
        assert reconstruct(tokens) == "[a]x[b]y[/b][/a]"


class TestDeepTrees:
    """Traversals do not depend on the interpreter's call stack."""

    def test_flatten_deep_tree(self):
        tokens = deep_tree(3000)
        flat, tree = flatten(tokens)
        assert len(flat) == 3000
        assert flat[0] is tree[0]
        assert flat[0].content == []
        assert flat[-1].content == [Literal("x")]
        assert is_tag(tokens[0].content[0])

    def test_copy_tokens_is_independent(self):
        tokens = parse_all("[a k=1]x[b]y[/b][/a]")
        copied = copy_tokens(tokens)
        assert copied == tokens
        copied[0].properties["k"] = "2"
        copied[0].content[1].content = []
        assert tokens[0].properties == {"k": "1"}
        assert tokens[0].content[1].content == [Literal("y")]
        assert copied[0].outer_span == tokens[0].outer_span

    def test_reconstruct_and_text_content_deep_tree(self):
        tokens = deep_tree(3000)
        assert reconstruct(tokens) == "[b]" * 3000 + "x" + "[/b]" * 3000
        assert text_content(tokens) == "x"
