"""Tests for the redaction pipeline."""

import time

from redactify.config import ChangeKind, RedactionOptions
from redactify.redactor import (
    PLACEHOLDER_STRING,
    PLACEHOLDER_URL,
    Redactor,
    create_redactor,
    is_business_string,
    redact,
)

LOGGER_SOURCE = """class Logger {
  write(message) {
    return message;
  }
}
const logger = new Logger();
logger.write("hi");
"""


def kinds(result):
    return [c.kind for c in result.changes]


class TestRenames:
    """Tests for the class, function and variable passes."""

    def test_whole_token_rename(self):
        """Test that `valid` survives renaming `id`."""
        result = redact("const id = 1;\nconsole.log(valid);")

        assert result.redacted_text == "const variable1 = 1;\nconsole.log(valid);"
        assert len(result.changes) == 1
        change = result.changes[0]
        assert change.kind is ChangeKind.VARIABLE
        assert (change.original, change.replacement, change.count) == ("id", "variable1", 1)

    def test_rename_order_and_ledger(self):
        """Test classes, then functions, then variables."""
        result = redact(LOGGER_SOURCE, language="javascript")

        assert result.redacted_text == (
            "class GenericClass1 {\n"
            "  genericFunction1(variable2) {\n"
            "    return variable2;\n"
            "  }\n"
            "}\n"
            "const variable1 = new GenericClass1();\n"
            'variable1.genericFunction1("hi");\n'
        )
        assert [(c.original, c.replacement, c.count) for c in result.changes] == [
            ("Logger", "GenericClass1", 2),
            ("write", "genericFunction1", 2),
            ("logger", "variable1", 2),
            ("message", "variable2", 2),
        ]
        assert result.summary.classes_redacted == 1
        assert result.summary.functions_redacted == 1
        assert result.summary.variables_redacted == 2
        assert result.summary.total_changes == 4

    def test_generated_name_collision_is_suffixed(self):
        """Test that two identifiers never share a generic name."""
        result = redact("const variable2 = 5;\nconst count = 1;")

        assert result.redacted_text == "const variable1 = 5;\nconst variable2_2 = 1;"

    def test_collision_with_sigil_variable(self):
        """Test that a PHP `$variable1` is not merged with a renamed variable."""
        result = redact("<?php $name = 1; $variable1 = 2;", language="php")

        assert result.redacted_text == "<?php $variable1_2 = 1; $variable2 = 2;"

    def test_python_soft_keywords_are_renamed(self):
        """Test that `match` is renamed like any other variable."""
        result = redact("match = pattern.search(line)\n", language="python")

        assert result.redacted_text == "variable1 = pattern.search(line)\n"

    def test_keyword_arguments_are_kept(self):
        """Test that keyword arguments of a multi-line call keep their names."""
        source = "result = connect(\n    timeout=5,\n)\n"
        result = redact(source, language="python")

        assert result.redacted_text == "variable1 = connect(\n    timeout=5,\n)\n"

    def test_disabled_pass_leaves_names(self):
        """Test that switching off variables keeps their names."""
        result = redact(LOGGER_SOURCE, redact_all_variables=False)

        assert "const logger = new GenericClass1();" in result.redacted_text
        assert "genericFunction1(message)" in result.redacted_text
        assert ChangeKind.VARIABLE not in kinds(result)

    def test_preserved_names_are_kept(self):
        """Test that `__init__` stays while other methods are renamed."""
        source = (
            "class Worker:\n"
            "    def __init__(self):\n"
            "        pass\n"
            "\n"
            "    def run(self):\n"
            "        return 1\n"
        )
        result = redact(source, language="python")

        assert "def __init__(self):" in result.redacted_text
        assert "def genericFunction1(self):" in result.redacted_text
        assert "class GenericClass1:" in result.redacted_text

    def test_all_renames_off_is_identity_for_plain_code(self):
        """Test that with every pass off the text is unchanged."""
        options = RedactionOptions(
            redact_secrets=False,
            redact_all_classes=False,
            redact_all_functions=False,
            redact_all_variables=False,
            redact_comments=False,
            redact_strings=False,
            redact_urls=False,
        )
        result = redact(LOGGER_SOURCE, options)

        assert result.redacted_text == LOGGER_SOURCE
        assert result.changes == ()


class TestSecretsAndLiterals:
    """Tests for the secret, URL, string and comment passes."""

    def test_secret_runs_before_renames(self):
        """Test that the secret record comes first and holds no value."""
        result = redact('const password = "Sup3rSecret!";')

        assert result.redacted_text == 'const variable1 = "REDACTED_PASSWORD";'
        assert kinds(result) == [ChangeKind.SECRET, ChangeKind.VARIABLE]
        assert "Sup3rSecret!" not in str(result.to_dict())

    def test_url_replacement(self):
        """Test that URLs become the placeholder."""
        result = redact('fetch("https://api.acme.io/v1/orders");')

        assert result.redacted_text == f'fetch("{PLACEHOLDER_URL}");'
        assert kinds(result) == [ChangeKind.URL]
        assert result.summary.urls_redacted == 1

    def test_bare_url_is_not_a_comment(self):
        """Test that the `//` of a replaced URL does not start a comment."""
        result = redact("see https://a.com/x now\n", language="plaintext")

        assert result.redacted_text == f"see {PLACEHOLDER_URL} now\n"
        assert kinds(result) == [ChangeKind.URL]

    def test_url_in_code_then_comment(self):
        """Test a real comment next to a bare URL in code."""
        source = "const u = x; // see http://a.io\nconst v = http://b.io/v1\n"
        result = redact(source, redact_all_variables=False)

        assert result.redacted_text == (
            "const u = x; // Generic comment\n"
            f"const v = {PLACEHOLDER_URL}\n"
        )
        assert result.changes[-1].kind is ChangeKind.COMMENT
        assert result.changes[-1].count == 1

    def test_comments_are_replaced(self):
        """Test the line comment marker and the literal-aware scan."""
        result = redact('const u = "http://x.io"; // note', redact_urls=False)

        assert result.redacted_text == 'const variable1 = "http://x.io"; // Generic comment'
        assert kinds(result) == [ChangeKind.VARIABLE, ChangeKind.COMMENT]

    def test_block_comments(self):
        """Test block comments keep their delimiters."""
        result = redact("/* owner: team */\nrun();")

        assert result.redacted_text == "/* Generic comment */\nrun();"
        assert result.changes[-1].kind is ChangeKind.COMMENT
        assert result.changes[-1].count == 1

    def test_python_comment_syntax(self):
        """Test that `//` is an operator in Python, not a comment."""
        result = redact("x = a // b  # halve", language="python")

        assert result.redacted_text == "variable1 = a // b  # Generic comment"

    def test_business_strings(self):
        """Test business strings are replaced without a ledger record."""
        result = redact('const title = "Customer Portal";')

        assert result.redacted_text == f'const variable1 = "{PLACEHOLDER_STRING}";'
        assert ChangeKind.STRING not in kinds(result)

    def test_is_business_string(self):
        """Test the term and length checks."""
        assert is_business_string("ACME Corp")
        assert is_business_string("invoice-42")
        assert not is_business_string("hello world")
        assert not is_business_string("ok")


class TestRedactorApi:
    """Tests for the Redactor class and the module-level helpers."""

    def test_unknown_language_is_plaintext(self):
        """Test that unknown languages only get the language-neutral passes."""
        result = redact("const id = 1;", language="cobol")

        assert result.language == "plaintext"
        assert result.redacted_text == "const id = 1;"

    def test_current_file_selects_language(self):
        """Test that the file extension picks the profile."""
        redactor = create_redactor(current_file="service.py")

        assert redactor.options.language == "python"
        assert redactor.redact("x = 1  # note").redacted_text == "variable1 = 1  # Generic comment"

    def test_dict_options_accept_camel_case(self):
        """Test camelCase option names."""
        redactor = create_redactor({"redactComments": False, "language": "JavaScript"})

        assert redactor.options.redact_comments is False
        assert redactor.options.language == "javascript"

    def test_overrides_win_over_options(self):
        """Test that keyword overrides take precedence."""
        result = redact("// keep", {"redactComments": True}, redact_comments=False)
        assert result.redacted_text == "// keep"

    def test_calls_are_independent(self):
        """Test that ordinals restart on every call."""
        redactor = Redactor()
        first = redactor.redact("const a = 1;")
        second = redactor.redact("const b = 2;")

        assert first.redacted_text == "const variable1 = 1;"
        assert second.redacted_text == "const variable1 = 2;"

    def test_deterministic(self):
        """Test identical input gives identical output."""
        assert redact(LOGGER_SOURCE) == redact(LOGGER_SOURCE)

    def test_unterminated_block_comments_stay_fast(self):
        """Test that many unclosed `/*` markers are scanned in linear time."""
        start = time.perf_counter()
        result = redact("/* " * 35_000)

        assert time.perf_counter() - start < 5.0
        assert result.redacted_text == "/* Generic comment */"

    def test_malformed_input_does_not_raise(self):
        """Test unbalanced brackets and stray quotes."""
        result = redact('function broken(a, {b = [ {\n  "unterminated\nclass {')
        assert isinstance(result.redacted_text, str)

    def test_result_to_dict_shape(self):
        """Test the external result shape."""
        data = redact("const id = 1;").to_dict()

        assert set(data) == {"redactedText", "changes", "summary"}
        assert data["changes"] == [
            {"type": "variable", "count": 1, "original": "id", "replacement": "variable1"}
        ]
        assert data["summary"]["variablesRedacted"] == 1
