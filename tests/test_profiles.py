"""Tests for language profiles and the lexical helpers behind them."""

import re

from redactify.lexer import (
    BODY_BUDGET_FLOOR,
    MAX_BRACKET_BODY,
    NameSet,
    SourceText,
    bracket_body,
    extract_binding_names,
    identifiers_in,
    pair_brackets,
    split_top_level,
)
from redactify.profiles import PROFILES, get_profile


def bindings(pattern, reserved=frozenset()):
    names = NameSet()
    extract_binding_names(pattern, names, reserved)
    return tuple(names)


class TestPairBrackets:
    """Tests for the single-pass bracket pairing."""

    def test_nested(self):
        """Test nested brackets of the same kind."""
        pairs = pair_brackets("f(a, g(b), c) + 1")
        assert pairs == {1: 12, 6: 8}

    def test_quotes_are_skipped(self):
        """Test that brackets inside strings do not count."""
        text = 'f(")", \'(\') done'
        assert pair_brackets(text) == {1: 10}

    def test_unbalanced(self):
        """Test that an unbalanced bracket has no pair."""
        assert pair_brackets("f(a, b") == {}
        assert bracket_body("f(a, b", 1) is None

    def test_kinds_nest_independently(self):
        """Test that a stray bracket of another kind does not break a pair."""
        assert pair_brackets("f(a, [b) c")[1] == 7

    def test_quote_ends_at_newline(self):
        """Test that an apostrophe in a comment does not hide later pairs."""
        text = "# don't\nf(x)\n"
        assert pair_brackets(text) == {9: 11}

    def test_escaped_quote(self):
        """Test a backslash-escaped quote inside a string."""
        text = 'f("a\\")", b)'
        assert pair_brackets(text) == {1: 11}

    def test_bracket_body(self):
        """Test the inner text and closing index."""
        assert bracket_body("{a, {b}}", 0) == ("a, {b}", 7)


class TestSourceText:
    """Tests for SourceText."""

    def test_body_and_closing(self):
        """Test body lookups share the pair table."""
        source = SourceText("f(a, b) g(")

        assert source.closing(1) == 6
        assert source.closing(9) == -1
        assert source.body(1) == "a, b"
        assert source.body(9) is None

    def test_oversized_body_is_skipped(self):
        """Test that bodies past the size limit are not parsed."""
        source = SourceText("(" + "x" * (MAX_BRACKET_BODY + 10) + ")")

        assert source.closing(0) != -1
        assert source.body(0) is None

    def test_budget_is_drawn_down(self):
        """Test that parsed bodies consume the budget until it runs out."""
        chunk = "(" + "x" * 3000 + ")"
        source = SourceText(chunk)
        source.budget = 5000

        assert source.body(0) is not None
        assert source.budget == 2000
        assert source.body(0) is None

    def test_budget_scales_with_text(self):
        """Test the budget floor for small texts."""
        assert SourceText("x").budget >= BODY_BUDGET_FLOOR

    def test_bodies(self):
        """Test bodies yields match, inner text and closing index."""
        source = SourceText("def f(a, b): pass\ndef g(: pass")
        found = [(m.group(), body, close) for m, body, close in source.bodies(re.compile(r"def \w\("))]

        assert found == [("def f(", "a, b", 10)]

    def test_line_depth(self):
        """Test which lines sit inside an open bracket."""
        text = "x = f(\n    a=1,\n)\ny = 2\n"
        source = SourceText(text)
        starts = [m.start() for m in re.finditer(r"^", text, re.MULTILINE)]

        assert [source.line_depth(s) for s in starts] == [0, 1, 1, 0, 0]


class TestSplitTopLevel:
    """Tests for split_top_level."""

    def test_nested_commas_are_kept(self):
        """Test commas inside brackets and quotes are not split points."""
        parts = split_top_level('a, {b, c}, [d, e], "f, g"')
        assert parts == ["a", " {b, c}", " [d, e]", ' "f, g"']

    def test_custom_separator(self):
        """Test splitting on `=`."""
        assert split_top_level("x = {a = 1}", "=") == ["x ", " {a = 1}"]


class TestBindingNames:
    """Tests for extract_binding_names."""

    def test_plain_and_defaults(self):
        """Test plain names and default values."""
        assert bindings("a, b = 2, c = fn(d, e)") == ("a", "b", "c")

    def test_rest_and_annotations(self):
        """Test rest binders and type annotations."""
        assert bindings("...rest, id: number, *args, **kwargs") == ("rest", "id", "args", "kwargs")

    def test_object_pattern(self):
        """Test object destructuring keeps keys and targets."""
        assert bindings("{ a, b: renamed, c = 1, ...others }") == ("a", "b", "renamed", "c", "others")

    def test_nested_patterns(self):
        """Test nested object and array patterns."""
        assert bindings("[first, { meta: { total } }, [x, y]]") == ("first", "meta", "total", "x", "y")

    def test_modifiers_and_reserved(self):
        """Test constructor parameter modifiers and reserved words."""
        result = bindings("private readonly service, this", frozenset({"this"}))
        assert result == ("service",)


class TestIdentifiersIn:
    """Tests for identifiers_in."""

    def test_tokens(self):
        """Test identifier-shaped tokens, including `$`."""
        assert identifiers_in("a + $b * c_1 - 2x") == ["a", "$b", "c_1", "x"]


class TestProfiles:
    """Tests for the profile registry."""

    def test_registry_keys(self):
        """Test every shipped profile is registered under its key."""
        assert set(PROFILES) == {
            "javascript", "typescript", "python", "csharp", "php",
            "java", "cpp", "ruby", "shell", "plaintext",
        }

    def test_get_profile_fallback(self):
        """Test case-insensitive lookup and plaintext fallback."""
        assert get_profile("Python").key == "python"
        assert get_profile("cobol").key == "plaintext"
        assert get_profile(None).key == "plaintext"
        assert get_profile("").key == "plaintext"

    def test_declaration_support(self):
        """Test which profiles carry declaration recognizers."""
        assert get_profile("javascript").has_declarations
        assert get_profile("python").has_declarations
        assert get_profile("java").has_declarations
        assert not get_profile("ruby").has_declarations
        assert not get_profile("plaintext").has_declarations

    def test_comment_markers(self):
        """Test the replacement marker per comment syntax."""
        js = get_profile("javascript")
        assert js.comment_marker("lc0") == "// Generic comment"
        assert js.comment_marker("bc0") == "/* Generic comment */"
        assert get_profile("python").comment_marker("lc0") == "# Generic comment"
        assert get_profile("php").comment_marker("lc1") == "# Generic comment"

    def test_literal_scanner_groups(self):
        """Test that strings shadow comment markers inside them."""
        pattern = get_profile("javascript").literal_pattern
        groups = [(m.lastgroup, m.group()) for m in pattern.finditer('a = "//x"; // c\n/* d */')]

        assert groups == [("string", '"//x"'), ("lc0", "// c"), ("bc0", "/* d */")]

    def test_python_triple_quoted_strings(self):
        """Test that a `#` inside a docstring is not a comment."""
        pattern = get_profile("python").literal_pattern
        groups = [m.lastgroup for m in pattern.finditer('"""see #1\n"""\nx = 1  # real')]

        assert groups == ["string", "lc0"]

    def test_shell_shebang_and_expansion(self):
        """Test that `#!` and `${#var}` are not comments in shell."""
        pattern = get_profile("shell").literal_pattern
        source = "#!/bin/sh\necho ${#items} # count\n"
        comments = [m.group() for m in pattern.finditer(source) if m.lastgroup != "string"]

        assert comments == ["# count"]

    def test_php_attributes_are_not_comments(self):
        """Test that `#[Attr]` is kept in PHP."""
        pattern = get_profile("php").literal_pattern
        comments = [m.group() for m in pattern.finditer("#[Route]\n# note\n")]

        assert comments == ["# note"]

    def test_urls_are_not_comments(self):
        """Test that the `//` after a URL scheme does not open a comment."""
        pattern = get_profile("plaintext").literal_pattern
        groups = [(m.lastgroup, m.group()) for m in pattern.finditer("see https://a.io/b // c")]

        assert groups == [("url", "https://a.io/b"), ("lc0", "// c")]
