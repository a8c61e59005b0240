"""Batch redaction of independent files."""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any

from .config import RedactionOptions, RedactionResult, detect_language
from .redactor import Redactor


@dataclass(frozen=True)
class SourceFile:
    """A file to redact: its path (used for language detection) and text."""

    path: str
    content: str


@dataclass(frozen=True)
class RedactedFile:
    """A file with its redaction result attached."""

    path: str
    language: str
    result: RedactionResult

    @property
    def content(self) -> str:
        return self.result.redacted_text

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "language": self.language,
            **self.result.to_dict(),
        }


def _redact_one(source: SourceFile, options: RedactionOptions) -> RedactedFile:
    language = detect_language(source.path)
    redactor = Redactor(options=replace(options, language=language))
    result = redactor.redact(source.content)
    return RedactedFile(path=source.path, language=language, result=result)


def redact_batch(
    files: Iterable[SourceFile | tuple[str, str]],
    options: RedactionOptions | None = None,
    max_workers: int | None = None,
) -> list[RedactedFile]:
    """
    Redact each file with the language detected from its name.

    Files are independent; with ``max_workers`` > 1 they are processed on a
    thread pool. Results are always returned in input order.

    Args:
        files: SourceFile objects or (path, content) pairs
        options: Pass switches; ``language`` is overridden per file
        max_workers: Worker threads (None or 1 for sequential)

    Returns:
        List of RedactedFile in input order
    """
    options = options or RedactionOptions()
    sources = [f if isinstance(f, SourceFile) else SourceFile(*f) for f in files]

    if not max_workers or max_workers <= 1 or len(sources) <= 1:
        return [_redact_one(source, options) for source in sources]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lambda s: _redact_one(s, options), sources))
