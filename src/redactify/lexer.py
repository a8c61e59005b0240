"""
Lexical helpers shared by the language profiles.

Nothing here parses a language. Bracket pairs are resolved once per text in
a single quote-aware pass, and the helpers pull bare identifiers out of
parameter lists and destructuring patterns, which is all the declaration
recognizers need.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

# Longest bracketed body the recognizers will parse
MAX_BRACKET_BODY = 4000

# Nesting depth past which destructuring patterns are not followed
MAX_PATTERN_DEPTH = 8

# Total body characters parsed per text: factor * len(text) + floor
BODY_BUDGET_FACTOR = 4
BODY_BUDGET_FLOOR = 1 << 16

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}
_QUOTES = {"'", '"', "`"}
_BRACKET_TOKENS = re.compile(r"[()\[\]{}'\"`\\\n]")
_LINE_START = re.compile(r"^", re.MULTILINE)

IDENT = r"[A-Za-z_$][\w$]*"
IDENT_RE = re.compile(rf"^{IDENT}$")
_LEADING_IDENT = re.compile(
    rf"^(?:(?:public|private|protected|readonly|override)\s+)*({IDENT})"
)


class NameSet:
    """Insertion-ordered set of identifier names."""

    def __init__(self, names: Iterable[str] = ()):
        self._names: dict[str, None] = {}
        for name in names:
            self.add(name)

    def add(self, name: str) -> None:
        if name not in self._names:
            self._names[name] = None

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)


def pair_brackets(text: str) -> dict[int, int]:
    """
    Map the index of every balanced opening bracket to its closing index.

    Each bracket kind nests independently of the others. Quoted strings are
    skipped; single and double quotes also end at a newline. Unmatched
    brackets are left out.
    """
    pairs: dict[int, int] = {}
    stacks: dict[str, list[int]] = {closer: [] for closer in _CLOSERS}
    quote: str | None = None
    escaped_until = -1

    for match in _BRACKET_TOKENS.finditer(text):
        i = match.start()
        if i < escaped_until:
            continue
        char = match.group()
        if quote:
            if char == "\\":
                escaped_until = i + 2
            elif char == quote or (char == "\n" and quote != "`"):
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char in _OPENERS:
            stacks[_OPENERS[char]].append(i)
        elif char in _CLOSERS and stacks[char]:
            pairs[stacks[char].pop()] = i

    return pairs


def bracket_body(text: str, open_index: int) -> tuple[str, int] | None:
    """Return (inner text, closing index) of the bracket at ``open_index``."""
    close = pair_brackets(text).get(open_index)
    if close is None:
        return None
    return text[open_index + 1:close], close


class SourceText:
    """
    A text under extraction, with its bracket pairs resolved once.

    Every recognizer of one ``extract`` call shares the same instance.
    Parsing a body through ``body`` draws its length from a budget sized to
    the text, so bracket work stays linear however the brackets nest.
    """

    def __init__(self, text: str):
        self.text = text
        self.pairs = pair_brackets(text)
        self.budget = BODY_BUDGET_FACTOR * len(text) + BODY_BUDGET_FLOOR
        self._line_depths: dict[int, int] | None = None

    def closing(self, open_index: int) -> int:
        """Index of the bracket closing ``open_index``, or -1."""
        return self.pairs.get(open_index, -1)

    def body(self, open_index: int) -> str | None:
        """Inner text of the bracket at ``open_index`` if it may be parsed."""
        close = self.pairs.get(open_index)
        if close is None:
            return None
        size = close - open_index - 1
        if size > MAX_BRACKET_BODY or size > self.budget:
            return None
        self.budget -= size
        return self.text[open_index + 1:close]

    def bodies(self, pattern: re.Pattern[str]) -> Iterator[tuple[re.Match[str], str, int]]:
        """
        Yield (match, inner text, closing index) for matches ending at a bracket.

        ``pattern`` must end with the opening bracket. Unbalanced and
        oversized brackets are skipped.
        """
        for match in pattern.finditer(self.text):
            open_index = match.end() - 1
            body = self.body(open_index)
            if body is not None:
                yield match, body, self.pairs[open_index]

    def line_depth(self, line_start: int) -> int:
        """Number of bracket pairs enclosing the line that begins at ``line_start``."""
        if self._line_depths is None:
            self._line_depths = self._count_line_depths()
        return self._line_depths.get(line_start, 0)

    def _count_line_depths(self) -> dict[int, int]:
        events = sorted(
            [(open_ + 1, 1) for open_ in self.pairs]
            + [(close + 1, -1) for close in self.pairs.values()]
        )
        depths: dict[int, int] = {}
        depth = 0
        k = 0
        for match in _LINE_START.finditer(self.text):
            start = match.start()
            while k < len(events) and events[k][0] <= start:
                depth += events[k][1]
                k += 1
            if depth:
                depths[start] = depth
        return depths


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on ``separator`` where it is not nested in brackets or quotes."""
    parts: list[str] = []
    depth = 0
    quote: str | None = None
    start = 0
    i = 0

    while i < len(text):
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char in "([{":
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif char == separator and depth == 0:
            parts.append(text[start:i])
            start = i + 1
        i += 1

    parts.append(text[start:])
    return parts


def _strip_default(element: str) -> str:
    """Drop a top-level `= default` tail (but not `=>`)."""
    parts = split_top_level(element, "=")
    if len(parts) > 1 and not parts[1].startswith(">"):
        return parts[0]
    return element


def extract_binding_names(
    pattern: str,
    names: NameSet,
    reserved: frozenset[str],
    depth: int = 0,
) -> None:
    """
    Collect every bound identifier of a destructuring or parameter list.

    Handles plain names, defaults, rest binders, type annotations and nested
    ``{...}`` / ``[...]`` patterns by recursing into bracketed elements, up
    to ``MAX_PATTERN_DEPTH`` levels. Object keys are collected along with
    their targets.
    """
    if depth > MAX_PATTERN_DEPTH:
        return

    for raw in split_top_level(pattern):
        element = _strip_default(raw).strip()
        while element.startswith(("...", "*")):
            element = element.lstrip(".*").strip()
        if not element:
            continue

        if element[0] in "{[":
            body = bracket_body(element, 0)
            if body is None:
                continue
            inner = body[0]
            if element[0] == "{":
                _extract_object_pattern(inner, names, reserved, depth + 1)
            else:
                extract_binding_names(inner, names, reserved, depth + 1)
            continue

        match = _LEADING_IDENT.match(element)
        if match and match.group(1) not in reserved:
            names.add(match.group(1))


def _extract_object_pattern(body: str, names: NameSet, reserved: frozenset[str], depth: int) -> None:
    for prop in split_top_level(body):
        prop = prop.strip()
        if prop.startswith("..."):
            prop = prop[3:].strip()
        if not prop:
            continue

        key_and_target = split_top_level(_strip_default(prop), ":")
        key = key_and_target[0].strip()
        if IDENT_RE.match(key) and key not in reserved:
            names.add(key)
        if len(key_and_target) > 1:
            extract_binding_names(":".join(key_and_target[1:]), names, reserved, depth)


def identifiers_in(text: str, ident: str = IDENT) -> list[str]:
    """Return all identifier-shaped tokens in ``text``."""
    return re.findall(ident, text)
