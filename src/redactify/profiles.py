"""
Language profiles for redactify.

A profile owns the lexical rules for one language family: reserved words,
ordered declaration recognizers for classes, functions and variables, the
identifier character class used for whole-token matching, and the comment
and string syntax used by the comment and business-string passes.

Recognition is heuristic. The recognizers scan raw text with regular
expressions and a bracket-pair table built once per text; no syntax tree
is built.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from functools import cached_property

from .config import PLAINTEXT
from .lexer import (
    NameSet,
    SourceText,
    extract_binding_names,
    identifiers_in,
    split_top_level,
)

# (source, names, reserved) -> None; adds recognized names to ``names``
Recognizer = Callable[[SourceText, NameSet, frozenset[str]], None]

# String literal shapes
_DQ = r'"(?:[^"\\\r\n]|\\[\s\S])*"'
_SQ = r"'(?:[^'\\\r\n]|\\[\s\S])*'"
_BT = r"`(?:[^`\\]|\\[\s\S])*`"
_PY_TRIPLE = (r'"""[\s\S]*?(?:"""|\Z)', r"'''[\s\S]*?(?:'''|\Z)")
_CS_VERBATIM = r'@"(?:[^"]|"")*"'
# scheme://rest, starting at the beginning of a word
_URL = r"""(?<![\w+.\-])[A-Za-z][\w+.\-]{0,31}://[^\s'"`<>]*"""

_SLASH_COMMENT = ("//", r"//")
_HASH_COMMENT = ("#", r"#")
_C_BLOCK = ("/*", "*/")


@dataclass(frozen=True)
class LanguageProfile:
    """Lexical rules for one source-language family."""

    key: str
    reserved: frozenset[str] = frozenset()
    classes: tuple[Recognizer, ...] = ()
    functions: tuple[Recognizer, ...] = ()
    variables: tuple[Recognizer, ...] = ()
    # Characters that may continue an identifier (for whole-token matching)
    ident_chars: str = r"[A-Za-z0-9_]"
    # (marker sigil, regex for the sigil)
    line_comments: tuple[tuple[str, str], ...] = (_SLASH_COMMENT,)
    block_comments: tuple[tuple[str, str], ...] = (_C_BLOCK,)
    strings: tuple[str, ...] = (_DQ, _SQ, _BT)

    @property
    def has_declarations(self) -> bool:
        return bool(self.classes or self.functions or self.variables)

    @cached_property
    def literal_pattern(self) -> re.Pattern[str]:
        """
        Scanner matching comments and string literals left to right.

        Comment alternatives are named ``lc<i>`` (line) and ``bc<i>`` (block);
        string literals are named ``string`` and absolute URLs ``url``, so a
        ``//`` after a scheme never opens a comment. An unterminated block
        comment runs to the end of the text.
        """
        parts = [
            rf"(?P<bc{i}>{re.escape(open_)}[\s\S]*?(?:{re.escape(close)}|\Z))"
            for i, (open_, close) in enumerate(self.block_comments)
        ]
        parts += [
            rf"(?P<lc{i}>{regex}[^\r\n]*)"
            for i, (_, regex) in enumerate(self.line_comments)
        ]
        parts.append("(?P<string>" + "|".join(self.strings) + ")")
        parts.append(rf"(?P<url>{_URL})")
        return re.compile("|".join(parts))

    @staticmethod
    def is_comment(group: str | None) -> bool:
        return bool(group) and group.startswith(("lc", "bc"))

    def comment_marker(self, group: str) -> str:
        """Replacement text for a comment matched by ``group``."""
        index = int(group[2:])
        if group.startswith("bc"):
            open_, close = self.block_comments[index]
            return f"{open_} Generic comment {close}"
        return f"{self.line_comments[index][0]} Generic comment"


# ---------------------------------------------------------------------------
# Recognizer builders
# ---------------------------------------------------------------------------


def _captures(pattern: str, flags: int = 0) -> Recognizer:
    """Add group 1 of every match."""
    regex = re.compile(pattern, flags)

    def recognize(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
        for match in regex.finditer(source.text):
            name = match.group(1)
            if name and name not in reserved:
                names.add(name)

    return recognize


def _bindings(pattern: str, flags: int = 0) -> Recognizer:
    """Parse group 1 of every match as a binding list."""
    regex = re.compile(pattern, flags)

    def recognize(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
        for match in regex.finditer(source.text):
            extract_binding_names(match.group(1), names, reserved)

    return recognize


def _bracketed(
    pattern: str,
    parse: Callable[[str, NameSet, frozenset[str]], None] = extract_binding_names,
    keep_brackets: bool = False,
) -> Recognizer:
    """Parse the bracketed region opened at the end of every match."""
    regex = re.compile(pattern)

    def recognize(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
        for match, body, close in source.bodies(regex):
            if keep_brackets:
                body = source.text[match.end() - 1:close + 1]
            parse(body, names, reserved)

    return recognize


def _aliased_names(clause: str, names: NameSet, reserved: frozenset[str], take_alias: bool = True) -> None:
    """Names from an import / export list, honouring ``a as b``."""
    for part in split_top_level(clause.strip().strip("()")):
        pieces = part.strip().split()
        if pieces and pieces[0] == "type":
            pieces = pieces[1:]
        if not pieces or pieces[0] == "*":
            continue
        if len(pieces) >= 3 and pieces[1] == "as":
            name = pieces[2] if take_alias else pieces[0]
        else:
            name = pieces[0]
        if re.match(r"^[A-Za-z_$][\w$]*$", name) and name not in reserved:
            names.add(name)


def _import_list(pattern: str, take_alias: bool) -> Recognizer:
    regex = re.compile(pattern)

    def recognize(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
        for match in regex.finditer(source.text):
            _aliased_names(match.group(1), names, reserved, take_alias)

    return recognize


# ---------------------------------------------------------------------------
# ECMAScript / TypeScript (including JSX)
# ---------------------------------------------------------------------------

_JS_IDENT = r"[A-Za-z_$][\w$]*"

JS_RESERVED = frozenset({
    "const", "let", "var", "function", "class", "if", "else", "for", "while",
    "do", "switch", "case", "break", "continue", "return", "try", "catch",
    "finally", "throw", "new", "delete", "typeof", "instanceof", "void",
    "this", "super", "extends", "import", "export", "default", "async",
    "await", "yield", "static", "get", "set", "constructor", "from", "as",
    "of", "in", "with", "debugger", "true", "false", "null", "undefined",
    "arguments", "enum", "implements", "interface", "package", "private",
    "protected", "public", "readonly", "type", "declare", "keyof", "abstract",
})

_JS_METHOD = re.compile(rf"(?<![\w$.])({_JS_IDENT})\s*\(")
_JS_METHOD_TAIL = re.compile(r"\s*(?::[^{};=\n]{0,200})?\{")


def _js_method_shorthand(source: SourceText, reserved: frozenset[str]):
    """Yield (name, open index) for `name(params) {` shaped definitions.

    Control keywords (`if (...) {`) are excluded; `constructor` is kept.
    """
    for match in _JS_METHOD.finditer(source.text):
        name = match.group(1)
        if name in reserved and name != "constructor":
            continue
        open_index = match.end() - 1
        close = source.closing(open_index)
        if close != -1 and _JS_METHOD_TAIL.match(source.text, close + 1):
            yield name, open_index


def _js_method_names(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    for name, _ in _js_method_shorthand(source, reserved):
        if name not in reserved:
            names.add(name)


def _js_method_params(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    for _, open_index in _js_method_shorthand(source, reserved):
        params = source.body(open_index)
        if params is not None:
            extract_binding_names(params, names, reserved)


_JS_CLASSES = (
    _captures(r"\bclass\s+([A-Z][\w$]*)"),
)

_JS_FUNCTIONS = (
    _captures(rf"\bfunction\b\s*\*?\s*({_JS_IDENT})\s*\("),
    _captures(
        rf"\b(?:const|let|var)\s+({_JS_IDENT})\s*=\s*(?:async\s*)?"
        rf"(?:function\b|\([^()]*\)\s*(?::[^=()\n]{{0,200}})?=>|{_JS_IDENT}\s*=>)"
    ),
    _js_method_names,
)

_JS_VARIABLES = (
    # Declarations
    _captures(rf"\b(?:const|let|var)\s+({_JS_IDENT})(?=\s*(?:[=;,:)]|$))", re.MULTILINE),
    # Object and array destructuring
    _bracketed(r"\b(?:const|let|var)\s*\{", keep_brackets=True),
    _bracketed(r"\b(?:const|let|var)\s*\[", keep_brackets=True),
    # Function declaration and expression parameters
    _bracketed(rf"\bfunction\b\s*\*?\s*(?:{_JS_IDENT})?\s*\("),
    # Arrow function parameters
    _bindings(r"\(([^()]*)\)\s*(?::[^=()\n]{0,200})?=>"),
    _captures(rf"(?<![\w$.])({_JS_IDENT})\s*=>"),
    # Method parameters
    _js_method_params,
    # Loop binders
    _captures(rf"\bfor\s*(?:await\s*)?\(\s*(?:const|let|var)\s+({_JS_IDENT})\s+(?:of|in)\b"),
    _bracketed(r"\bfor\s*(?:await\s*)?\(\s*(?:const|let|var)\s*[\[{]", keep_brackets=True),
    # Catch binders
    _captures(rf"\bcatch\s*\(\s*({_JS_IDENT})"),
    # Imports: named (alias wins), default and namespace locals
    _import_list(
        rf"\bimport\s+(?:type\s+)?(?:{_JS_IDENT}\s*,\s*)?\{{([^{{}}]{{0,2000}})\}}\s*from\b",
        take_alias=True,
    ),
    _captures(rf"\bimport\s+(?:type\s+)?({_JS_IDENT})\s*(?:,|\bfrom\b)"),
    _captures(rf"\bimport\s*(?:{_JS_IDENT}\s*,\s*)?\*\s*as\s+({_JS_IDENT})"),
    # Export lists name the local binding
    _import_list(r"\bexport\s*\{([^{}]{0,2000})\}", take_alias=False),
)

JAVASCRIPT = LanguageProfile(
    key="javascript",
    reserved=JS_RESERVED,
    classes=_JS_CLASSES,
    functions=_JS_FUNCTIONS,
    variables=_JS_VARIABLES,
    ident_chars=r"[A-Za-z0-9_$]",
)

TYPESCRIPT = LanguageProfile(
    key="typescript",
    reserved=JS_RESERVED | {"string", "number", "boolean", "any", "unknown", "never", "object"},
    classes=_JS_CLASSES + (_captures(r"\b(?:interface|enum)\s+([A-Z][\w$]*)"),),
    functions=_JS_FUNCTIONS,
    variables=_JS_VARIABLES,
    ident_chars=r"[A-Za-z0-9_$]",
)


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------

_PY_IDENT = r"[A-Za-z_]\w*"

# Hard keywords only; soft keywords (match, case, type) are ordinary names
PY_RESERVED = frozenset({
    "False", "None", "True", "and", "as", "assert", "async", "await",
    "break", "class", "continue", "def", "del", "elif", "else", "except",
    "finally", "for", "from", "global", "if", "import", "in", "is",
    "lambda", "nonlocal", "not", "or", "pass", "raise", "return", "try",
    "while", "with", "yield",
    "self", "cls", "_", "__name__", "__file__", "__all__",
})

_PY_ASSIGNMENT = re.compile(rf"^[ \t]*({_PY_IDENT})[ \t]*(?::[^=\r\n]+)?=(?!=)", re.MULTILINE)
_PY_TUPLE_ASSIGNMENT = re.compile(
    rf"^[ \t]*\(?({_PY_IDENT}(?:[ \t]*,[ \t]*{_PY_IDENT})+)[ \t]*,?\)?[ \t]*=(?!=)",
    re.MULTILINE,
)


def _py_statements(source: SourceText, regex: re.Pattern[str]) -> Iterator[re.Match[str]]:
    """Matches of a line-anchored ``regex`` on lines not nested in brackets.

    A line inside an open call or literal holds keyword arguments or keys,
    not assignments.
    """
    for match in regex.finditer(source.text):
        if not source.line_depth(match.start()):
            yield match


def _py_assignments(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    for match in _py_statements(source, _PY_ASSIGNMENT):
        if match.group(1) not in reserved:
            names.add(match.group(1))


def _py_import_from(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    regex = re.compile(r"^[ \t]*from\s+[\w.]+\s+import\s+(\([^()]{0,4000}\)|[^\r\n#]+)", re.MULTILINE)
    for match in regex.finditer(source.text):
        _aliased_names(match.group(1).replace("\n", " "), names, reserved)


def _py_import_alias(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    regex = re.compile(r"^[ \t]*import\s+([^\r\n#]+)", re.MULTILINE)
    for match in regex.finditer(source.text):
        for alias in re.findall(rf"\bas\s+({_PY_IDENT})", match.group(1)):
            if alias not in reserved:
                names.add(alias)


def _py_with_targets(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    regex = re.compile(r"^[ \t]*(?:async\s+)?with\b([^:\r\n]*):", re.MULTILINE)
    for match in regex.finditer(source.text):
        for name in re.findall(rf"\bas\s+({_PY_IDENT})", match.group(1)):
            if name not in reserved:
                names.add(name)


def _py_for_targets(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    regex = re.compile(r"\bfor[ \t]+([\w \t,()\[\]]{1,200}?)[ \t]+in\b")
    for match in regex.finditer(source.text):
        for name in identifiers_in(match.group(1), _PY_IDENT):
            if name not in reserved:
                names.add(name)


def _py_tuple_assignment(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    for match in _py_statements(source, _PY_TUPLE_ASSIGNMENT):
        for name in identifiers_in(match.group(1), _PY_IDENT):
            if name not in reserved:
                names.add(name)


PYTHON = LanguageProfile(
    key="python",
    reserved=PY_RESERVED,
    classes=(
        _captures(rf"^[ \t]*class\s+({_PY_IDENT})\s*[:(]", re.MULTILINE),
    ),
    functions=(
        _captures(rf"^[ \t]*(?:async\s+)?def\s+({_PY_IDENT})\s*\(", re.MULTILINE),
    ),
    variables=(
        # Statement-level assignments, plain and annotated (not comparisons)
        _py_assignments,
        _py_tuple_assignment,
        # Chained assignments: a = b = 1
        _captures(rf"=[ \t]*({_PY_IDENT})[ \t]*=(?!=)"),
        # Walrus
        _captures(rf"\(\s*({_PY_IDENT})\s*:="),
        # Parameters
        _bracketed(rf"\bdef\s+{_PY_IDENT}\s*\("),
        _bindings(r"\blambda\b([^:\r\n]{0,400}):"),
        # Loop, exception and context binders
        _py_for_targets,
        _captures(rf"\bexcept\b[^:\r\n]{{0,200}}?\bas\s+({_PY_IDENT})"),
        _py_with_targets,
        # Import locals
        _py_import_from,
        _py_import_alias,
    ),
    ident_chars=r"\w",
    line_comments=(_HASH_COMMENT,),
    block_comments=(),
    strings=_PY_TRIPLE + (_DQ, _SQ),
)


# ---------------------------------------------------------------------------
# C#
# ---------------------------------------------------------------------------

CS_RESERVED = frozenset({
    "abstract", "as", "base", "bool", "break", "byte", "case", "catch", "char",
    "checked", "class", "const", "continue", "decimal", "default", "delegate",
    "do", "double", "else", "enum", "event", "explicit", "extern", "false",
    "finally", "fixed", "float", "for", "foreach", "goto", "if", "implicit",
    "in", "int", "interface", "internal", "is", "lock", "long", "namespace",
    "new", "null", "object", "operator", "out", "override", "params", "private",
    "protected", "public", "readonly", "ref", "return", "sbyte", "sealed",
    "short", "sizeof", "stackalloc", "static", "string", "struct", "switch",
    "this", "throw", "true", "try", "typeof", "uint", "ulong", "unchecked",
    "unsafe", "ushort", "using", "virtual", "void", "volatile", "while", "var",
    "get", "set", "add", "remove", "value", "nameof", "async", "await", "when",
    "where", "yield", "record", "init", "dynamic", "partial", "global", "_",
})

_CS_IDENT = r"[A-Za-z_]\w*"
_CS_GENERIC = r"(?:<[\w\s,<>\[\]?.]{0,200}>)?"
_CS_TYPE = (
    r"(?:void|int|string|bool|double|float|decimal|long|short|byte|char|object|dynamic|"
    r"uint|ulong|[A-Z]\w*)" + _CS_GENERIC + r"(?:\[\])?\??"
)
_CS_METHOD = rf"\b{_CS_TYPE}\s+({_CS_IDENT})\s*(?:<[\w\s,]{{0,200}}>)?\s*\("
_CS_CTOR = rf"\b(?:public|private|protected|internal|static)\s+[A-Z]\w*\s*\("


def _cs_parameters(body: str, names: NameSet, reserved: frozenset[str]) -> None:
    """`[Attr] ref Type name = default` -> name."""
    for element in split_top_level(body):
        element = re.sub(r"^\s*\[[^\]]*\]\s*", "", element)
        element = split_top_level(element, "=")[0].strip()
        tokens = identifiers_in(element, _CS_IDENT)
        if len(tokens) >= 2 and tokens[-1] not in reserved:
            names.add(tokens[-1])


def _cs_lambda_parameters(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    regex = re.compile(r"\(([^()]*)\)\s*=>")
    for match in regex.finditer(source.text):
        for element in split_top_level(match.group(1)):
            tokens = identifiers_in(element, _CS_IDENT)
            if tokens and tokens[-1] not in reserved:
                names.add(tokens[-1])


def _cs_deconstruction(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    regex = re.compile(r"\bforeach\s*\(\s*var\s*\(([^()]*)\)")
    for match in regex.finditer(source.text):
        for element in split_top_level(match.group(1)):
            tokens = identifiers_in(element, _CS_IDENT)
            if tokens and tokens[-1] not in reserved:
                names.add(tokens[-1])


CSHARP = LanguageProfile(
    key="csharp",
    reserved=CS_RESERVED,
    classes=(
        _captures(r"\b(?:class|interface|struct|enum|record)\s+([A-Z]\w*)"),
    ),
    functions=(
        _captures(_CS_METHOD),
    ),
    variables=(
        # Locals and fields
        _captures(
            rf"\b(?:var|int|string|bool|double|float|decimal|long|short|byte|char|object|dynamic)"
            rf"(?:\[\])?\??\s+({_CS_IDENT})\s*[=;,]"
        ),
        _captures(rf"\b[A-Z]\w*{_CS_GENERIC}(?:\[\])?\??\s+([a-z_]\w*)\s*(?=[=;])"),
        # Method and constructor parameters
        _bracketed(_CS_METHOD, parse=_cs_parameters),
        _bracketed(_CS_CTOR, parse=_cs_parameters),
        # Loop binders
        _captures(
            rf"\bforeach\s*\(\s*[\w.]+{_CS_GENERIC}(?:\[\])?\??\s+({_CS_IDENT})\s+in\b"
        ),
        _cs_deconstruction,
        _captures(rf"\bfor\s*\(\s*(?:var|int|long)\s+({_CS_IDENT})\s*="),
        # Catch binders
        _captures(rf"\bcatch\s*\(\s*[\w.]+\s+({_CS_IDENT})\s*\)"),
        # Lambda parameters
        _cs_lambda_parameters,
        _captures(rf"(?<![\w.])({_CS_IDENT})\s*=>"),
        # using declarations and out variables
        _captures(rf"\busing\s*\(\s*(?:var|[\w.]+{_CS_GENERIC})\s+({_CS_IDENT})\s*="),
        _captures(rf"\busing\s+var\s+({_CS_IDENT})\s*="),
        _captures(rf"\bout\s+(?:var|[\w.]+)\s+({_CS_IDENT})"),
    ),
    ident_chars=r"\w",
    strings=(_CS_VERBATIM, _DQ, _SQ),
)


# ---------------------------------------------------------------------------
# PHP
# ---------------------------------------------------------------------------

PHP_RESERVED = frozenset({
    "abstract", "and", "array", "as", "break", "callable", "case", "catch",
    "class", "clone", "const", "continue", "declare", "default", "die", "do",
    "echo", "else", "elseif", "empty", "enddeclare", "endfor", "endforeach",
    "endif", "endswitch", "endwhile", "eval", "exit", "extends", "final",
    "finally", "fn", "for", "foreach", "function", "global", "goto", "if",
    "implements", "include", "include_once", "instanceof", "insteadof",
    "interface", "isset", "list", "match", "namespace", "new", "or", "print",
    "private", "protected", "public", "readonly", "require", "require_once",
    "return", "static", "switch", "throw", "trait", "try", "unset", "use",
    "var", "while", "xor", "yield",
    # Superglobals and $this
    "GLOBALS", "_SERVER", "_GET", "_POST", "_FILES", "_COOKIE", "_SESSION",
    "_REQUEST", "_ENV", "this",
})


def _php_functions(source: SourceText, names: NameSet, reserved: frozenset[str]) -> None:
    regex = re.compile(r"\bfunction\s+&?\s*([A-Za-z_]\w*)\s*\(")
    for match in regex.finditer(source.text):
        name = match.group(1)
        # Magic methods (__construct, __get, ...) are left alone
        if not name.startswith("__") and name not in reserved:
            names.add(name)


PHP = LanguageProfile(
    key="php",
    reserved=PHP_RESERVED,
    classes=(
        _captures(r"(?<!::)\b(?:class|interface|trait|enum)\s+([A-Za-z_]\w*)"),
    ),
    functions=(
        _php_functions,
    ),
    variables=(
        # The sigil scan also covers parameters, loop and catch binders
        _captures(r"\$([A-Za-z_]\w*)"),
    ),
    ident_chars=r"\w",
    line_comments=(_SLASH_COMMENT, ("#", r"#(?!\[)")),
    strings=(_DQ, _SQ),
)


# ---------------------------------------------------------------------------
# Class-only and comment-only profiles
# ---------------------------------------------------------------------------

JAVA = LanguageProfile(
    key="java",
    classes=(_captures(r"\b(?:class|interface|enum|record)\s+([A-Z]\w*)"),),
    ident_chars=r"[A-Za-z0-9_$]",
    strings=(_DQ, _SQ),
)

CPP = LanguageProfile(
    key="cpp",
    classes=(_captures(r"\b(?:class|struct)\s+([A-Z]\w*)"),),
    strings=(_DQ, _SQ),
)

RUBY = LanguageProfile(
    key="ruby",
    line_comments=(_HASH_COMMENT,),
    block_comments=(),
    strings=(_DQ, _SQ),
)

SHELL = LanguageProfile(
    key="shell",
    line_comments=(("#", r"(?<![\w$#{])#(?!!)"),),
    block_comments=(),
    strings=(_DQ, _SQ),
)

PLAINTEXT_PROFILE = LanguageProfile(key=PLAINTEXT)


PROFILES: dict[str, LanguageProfile] = {
    profile.key: profile
    for profile in (
        JAVASCRIPT, TYPESCRIPT, PYTHON, CSHARP, PHP, JAVA, CPP, RUBY, SHELL,
        PLAINTEXT_PROFILE,
    )
}


def get_profile(key: str | None) -> LanguageProfile:
    """Look up a profile; unknown keys get the neutral plaintext profile."""
    if not key:
        return PLAINTEXT_PROFILE
    return PROFILES.get(key.lower(), PLAINTEXT_PROFILE)
