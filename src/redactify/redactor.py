"""
Redaction pipeline for redactify.

Scrubs source code before it is shared: secrets first, then declared
class, function and variable names, URLs, business-flavoured string
literals and comments.

Features:
- Ordered secret rule table (keys, tokens, passwords, connection strings)
- Per-language identifier extraction and index-based generic names
- Whole-token renames that never touch substrings of longer identifiers
- Comment and string handling driven by the language profile
- A change ledger describing every substitution, never the secret values

The pass order is fixed. Rename counts are measured on the working text as
left by the previous passes, so a later pass reports what it changed.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from .allocator import NameAllocator
from .config import (
    ChangeKind,
    ChangeRecord,
    RedactionOptions,
    RedactionResult,
    RedactionSummary,
    detect_language,
)
from .extractor import IdentifierSet, extract
from .patterns import SECRET_RULES, SecretRule, scan_secrets
from .profiles import LanguageProfile, get_profile
from .substitution import apply_substitution, tokens_in

# Terms that mark a string literal as business data
BUSINESS_TERMS: tuple[str, ...] = (
    "company", "corp", "inc", "ltd", "llc",
    "customer", "client", "vendor", "supplier",
    "invoice", "payment", "billing", "subscription",
    "order", "purchase", "transaction",
    "product", "service", "catalog",
)

# Shortest literal content the string pass will replace
MIN_STRING_LENGTH = 3

PLACEHOLDER_URL = "https://example.com/api"
PLACEHOLDER_STRING = "generic_value"

URL_PATTERN = re.compile(r"""https?://[^\s'"`<>]+""")


@dataclass
class _WorkingCopy:
    """State threaded through the passes of one call."""

    original: str
    text: str
    profile: LanguageProfile
    allocator: NameAllocator
    identifiers: IdentifierSet | None = None
    changes: list[ChangeRecord] = field(default_factory=list)

    def declared(self) -> IdentifierSet:
        # Always extracted from the untouched input
        if self.identifiers is None:
            self.identifiers = extract(self.original, self.profile)
        return self.identifiers


def _split_literal(literal: str) -> tuple[str, str, str]:
    """Split a string literal into (opening quote, content, closing quote)."""
    for opener in ('"""', "'''"):
        if literal.startswith(opener):
            if len(literal) >= 6 and literal.endswith(opener):
                return opener, literal[3:-3], opener
            # Unterminated at end of text
            return opener, literal[3:], ""
    if literal.startswith('@"'):
        return '@"', literal[2:-1], '"'
    return literal[0], literal[1:-1], literal[-1]


def is_business_string(content: str) -> bool:
    """Check whether literal content looks like business data."""
    if len(content) < MIN_STRING_LENGTH:
        return False
    lowered = content.lower()
    return any(term in lowered for term in BUSINESS_TERMS)


class Redactor:
    """
    Runs the redaction passes over source text.

    Each call is independent: a fresh name allocator and ledger are created
    per ``redact`` call, so one instance may be reused across files.

    Passes (each skipped when its option is off):
    secrets, classes, functions, variables, URLs, business strings, comments.
    """

    def __init__(
        self,
        options: RedactionOptions | None = None,
        rules: tuple[SecretRule, ...] = SECRET_RULES,
        current_file: str | None = None,
    ):
        """
        Initialize the redactor.

        Args:
            options: Pass switches and language (defaults: everything on)
            rules: Secret rule table
            current_file: File name; when given, its extension picks the
                language instead of ``options.language``
        """
        self.options = options or RedactionOptions()
        self.rules = rules
        self.current_file: str | None = None

        self.set_current_file(current_file)

    def set_current_file(self, path: str | None) -> None:
        """Set the current file being processed (and its language)."""
        self.current_file = str(path) if path else None
        if self.current_file:
            self.options = replace(self.options, language=detect_language(self.current_file))

    @property
    def profile(self) -> LanguageProfile:
        return get_profile(self.options.language)

    def _passes(self) -> list[tuple[bool, Callable[[_WorkingCopy], None]]]:
        opts = self.options
        return [
            (opts.redact_secrets, self._redact_secrets),
            (opts.redact_all_classes, self._redact_classes),
            (opts.redact_all_functions, self._redact_functions),
            (opts.redact_all_variables, self._redact_variables),
            (opts.redact_urls, self._redact_urls),
            (opts.redact_strings, self._redact_strings),
            (opts.redact_comments, self._redact_comments),
        ]

    def _redact_secrets(self, work: _WorkingCopy) -> None:
        work.text, changes = scan_secrets(work.text, self.rules)
        work.changes.extend(changes)

    def _rename(self, work: _WorkingCopy, kind: ChangeKind, names: tuple[str, ...]) -> None:
        allocator = work.allocator
        for ordinal, name in enumerate(allocator.candidates(names), start=1):
            generic = allocator.allocate(name, ordinal, kind)
            work.text, count = apply_substitution(
                work.text, name, generic, work.profile.ident_chars
            )
            if count:
                work.changes.append(ChangeRecord(
                    kind=kind, count=count, original=name, replacement=generic,
                ))

    def _redact_classes(self, work: _WorkingCopy) -> None:
        self._rename(work, ChangeKind.CLASS, work.declared().classes)

    def _redact_functions(self, work: _WorkingCopy) -> None:
        self._rename(work, ChangeKind.FUNCTION, work.declared().functions)

    def _redact_variables(self, work: _WorkingCopy) -> None:
        self._rename(work, ChangeKind.VARIABLE, work.declared().variables)

    def _redact_urls(self, work: _WorkingCopy) -> None:
        work.text, count = URL_PATTERN.subn(PLACEHOLDER_URL, work.text)
        if count:
            work.changes.append(ChangeRecord(kind=ChangeKind.URL, count=count))

    def _redact_strings(self, work: _WorkingCopy) -> None:
        # Produces no ledger entry
        def replace_literal(match: re.Match[str]) -> str:
            literal = match.group()
            if match.lastgroup != "string" or len(literal) < 2:
                return literal
            opener, content, closer = _split_literal(literal)
            if not is_business_string(content):
                return literal
            return f"{opener}{PLACEHOLDER_STRING}{closer}"

        work.text = work.profile.literal_pattern.sub(replace_literal, work.text)

    def _redact_comments(self, work: _WorkingCopy) -> None:
        count = 0

        def replace_comment(match: re.Match[str]) -> str:
            nonlocal count
            group = match.lastgroup
            if not work.profile.is_comment(group):
                return match.group()
            count += 1
            return work.profile.comment_marker(group)

        work.text = work.profile.literal_pattern.sub(replace_comment, work.text)
        if count:
            work.changes.append(ChangeRecord(kind=ChangeKind.COMMENT, count=count))

    def redact(self, content: str) -> RedactionResult:
        """
        Redact source text.

        Never raises on malformed input: extraction is heuristic and a text
        the recognizers do not understand simply yields fewer renames.

        Args:
            content: Source text

        Returns:
            RedactionResult with the redacted text, ledger and summary
        """
        profile = self.profile
        work = _WorkingCopy(
            original=content,
            text=content,
            profile=profile,
            allocator=NameAllocator(tokens_in(content, profile.ident_chars)),
        )

        for enabled, run_pass in self._passes():
            if enabled:
                run_pass(work)

        changes = tuple(work.changes)
        return RedactionResult(
            redacted_text=work.text,
            changes=changes,
            summary=RedactionSummary.from_changes(changes),
            language=profile.key,
        )


def create_redactor(
    options: RedactionOptions | dict[str, Any] | None = None,
    current_file: str | None = None,
) -> Redactor:
    """Factory function to create a redactor instance."""
    if isinstance(options, dict):
        options = RedactionOptions.from_dict(options)
    return Redactor(options=options, current_file=current_file)


def redact(
    source_text: str,
    options: RedactionOptions | dict[str, Any] | None = None,
    **overrides: Any,
) -> RedactionResult:
    """
    Redact ``source_text`` with the given options.

    ``options`` may be a RedactionOptions or a dict using the snake_case or
    camelCase option names. Keyword overrides take precedence, e.g.
    ``redact(text, language="python", redact_comments=False)``.
    """
    if isinstance(options, dict):
        options = RedactionOptions.from_dict(options)
    options = options or RedactionOptions()
    if overrides:
        options = RedactionOptions.from_dict({**options.to_dict(), **overrides})
    return Redactor(options=options).redact(source_text)
