"""
Identifier extraction for redactify.

Runs a profile's recognizers over the original text and returns the
declared class, function and variable names in first-seen order.
"""

from __future__ import annotations

from dataclasses import dataclass

from .lexer import NameSet, SourceText
from .profiles import LanguageProfile, get_profile


@dataclass(frozen=True)
class IdentifierSet:
    """
    Declared names grouped by category.

    The three tuples are disjoint: a name recognized in more than one
    category is kept only in the first of classes, functions, variables.
    """

    classes: tuple[str, ...] = ()
    functions: tuple[str, ...] = ()
    variables: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.classes) + len(self.functions) + len(self.variables)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "classes": list(self.classes),
            "functions": list(self.functions),
            "variables": list(self.variables),
        }


def _collect(source: SourceText, profile: LanguageProfile, recognizers, taken: NameSet) -> tuple[str, ...]:
    names = NameSet()
    for recognize in recognizers:
        recognize(source, names, profile.reserved)
    return tuple(name for name in names if name not in taken)


def extract(text: str, language: str | LanguageProfile | None = None) -> IdentifierSet:
    """
    Extract declared identifiers from source text.

    Args:
        text: Original (unredacted) source text
        language: Profile key or profile; unknown keys use plaintext,
            which declares nothing

    Returns:
        IdentifierSet in first-seen order per category
    """
    profile = language if isinstance(language, LanguageProfile) else get_profile(language)
    if not text or not profile.has_declarations:
        return IdentifierSet()

    source = SourceText(text)
    taken = NameSet()
    classes = _collect(source, profile, profile.classes, taken)
    for name in classes:
        taken.add(name)
    functions = _collect(source, profile, profile.functions, taken)
    for name in functions:
        taken.add(name)
    variables = _collect(source, profile, profile.variables, taken)

    return IdentifierSet(classes=classes, functions=functions, variables=variables)
