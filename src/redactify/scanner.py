"""Archive walker for redactify.

Walks a directory tree or a zip archive, decides per file whether it goes
through the redaction engine, and writes the redacted copy as a directory
tree or a new zip. Skipped files are copied through unchanged.
Uses pathspec with GitWildMatchPattern for the exclude globs.
"""

from __future__ import annotations

import os
import time
import zipfile
from collections.abc import Callable, Generator
from pathlib import Path, PurePosixPath
from typing import NamedTuple

import pathspec
from pathspec.patterns import GitWildMatchPattern

from .batch import SourceFile, redact_batch
from .config import (
    DEFAULT_EXCLUDE_GLOBS,
    DEFAULT_MAX_FILE_BYTES,
    DEFAULT_SKIP_EXTENSIONS,
    BatchStats,
    FileReport,
    RedactionOptions,
    detect_language,
)
from .utils import decode_bytes, encode_text, has_skip_extension, is_binary_bytes, normalize_path

ProgressCallback = Callable[[int, int, str], None]


class ArchiveEntry(NamedTuple):
    """One file of the input: its relative path and raw bytes."""
    path: str
    data: bytes


class _Pending(NamedTuple):
    entry: ArchiveEntry
    text: str
    encoding: str


def is_zip_path(path: Path) -> bool:
    return path.suffix.lower() == ".zip"


def default_output_path(source: Path) -> Path:
    """``app.zip`` -> ``app-redacted.zip``; ``app/`` -> ``app-redacted/``."""
    if is_zip_path(source):
        return source.with_name(f"{source.stem}-redacted.zip")
    return source.with_name(f"{source.name}-redacted")


def default_report_path(output: Path) -> Path:
    """Report file beside the output: ``app-redacted.report.json``."""
    name = output.stem if is_zip_path(output) else output.name
    return output.with_name(f"{name}.report.json")


def _is_unsafe(rel_path: str) -> bool:
    pure = PurePosixPath(rel_path)
    return pure.is_absolute() or ".." in pure.parts


class ArchiveWalker:
    """
    Redacts every eligible file of a directory or zip archive.

    Per file, in order: excluded path, skip extension, size limit, binary
    content. Remaining files are decoded (UTF-8, chardet fallback), run
    through the engine with the language detected from their name, and
    re-encoded in their original encoding.
    """

    def __init__(
        self,
        source: Path,
        options: RedactionOptions | None = None,
        exclude_globs: set[str] | None = None,
        skip_extensions: tuple[str, ...] | set[str] | None = None,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
        max_workers: int | None = None,
    ):
        """
        Initialize the walker.

        Args:
            source: Directory or ``.zip`` archive
            options: Pass switches (language is detected per file)
            exclude_globs: Gitwildmatch patterns to copy through unredacted
            skip_extensions: Suffixes to copy through unredacted
            max_file_bytes: Files larger than this are copied through
            max_workers: Worker threads for the engine (None for sequential)
        """
        self.source = Path(source)
        self.options = options or RedactionOptions()
        self.exclude_globs = exclude_globs if exclude_globs is not None else DEFAULT_EXCLUDE_GLOBS.copy()
        self.skip_extensions = tuple(skip_extensions) if skip_extensions is not None else DEFAULT_SKIP_EXTENSIONS
        self.max_file_bytes = max_file_bytes
        self.max_workers = max_workers

        self._exclude_spec = pathspec.PathSpec.from_lines(
            GitWildMatchPattern,
            list(self.exclude_globs),
        )

        self.stats = BatchStats()

    def _matches_exclude_glob(self, rel_path: str) -> str | None:
        """Return the first exclude glob matching ``rel_path``, or None."""
        rel_path = normalize_path(rel_path)
        if not self._exclude_spec.match_file(rel_path):
            return None
        for pattern in sorted(self.exclude_globs):
            if pathspec.PathSpec.from_lines(GitWildMatchPattern, [pattern]).match_file(rel_path):
                return pattern
        return "exclude_glob"

    def skip_reason(self, entry: ArchiveEntry) -> str | None:
        """Why ``entry`` bypasses the engine, or None if it should be redacted."""
        if _is_unsafe(entry.path):
            return "unsafe_path"
        if self._matches_exclude_glob(entry.path):
            return "excluded_path"
        if has_skip_extension(entry.path, self.skip_extensions):
            return "skip_extension"
        if len(entry.data) > self.max_file_bytes:
            return "too_large"
        if is_binary_bytes(entry.data):
            return "binary"
        return None

    def _walk_files(self) -> Generator[Path, None, None]:
        """
        Walk the source directory and yield file paths.

        Directories are processed in sorted order for deterministic traversal.
        Symbolic links are not followed.
        """
        dirs_to_process = [self.source]

        while dirs_to_process:
            current_dir = dirs_to_process.pop()
            try:
                with os.scandir(current_dir) as entries:
                    entries_list = sorted(entries, key=lambda e: e.name)
            except OSError:
                continue

            dirs_to_add = []
            for entry in entries_list:
                if entry.is_symlink():
                    continue
                if entry.is_dir(follow_symlinks=False):
                    dirs_to_add.append(Path(entry.path))
                elif entry.is_file(follow_symlinks=False):
                    yield Path(entry.path)

            # Reverse so pop() returns them sorted
            dirs_to_process.extend(reversed(dirs_to_add))

    def iter_entries(self) -> Generator[ArchiveEntry | FileReport, None, None]:
        """
        Yield the input files in deterministic order.

        Unreadable directory files are yielded as ``errored`` reports.

        Raises:
            zipfile.BadZipFile: If the source is not a valid zip archive
        """
        if is_zip_path(self.source):
            with zipfile.ZipFile(self.source) as archive:
                for info in sorted(archive.infolist(), key=lambda i: i.filename):
                    if info.is_dir():
                        continue
                    yield ArchiveEntry(normalize_path(info.filename), archive.read(info))
            return

        for file_path in self._walk_files():
            rel_path = normalize_path(str(file_path.relative_to(self.source)))
            try:
                yield ArchiveEntry(rel_path, file_path.read_bytes())
            except OSError as e:
                yield FileReport(
                    path=rel_path,
                    language=detect_language(rel_path),
                    status="errored",
                    reason=f"unreadable: {e.strerror or e}",
                )

    def process(
        self,
        progress_callback: ProgressCallback | None = None,
    ) -> Generator[tuple[str, bytes | None, FileReport], None, None]:
        """
        Redact the input.

        Yields:
            Tuples of (relative path, output bytes, report). Output bytes are
            None only for unreadable files.
        """
        start = time.perf_counter()
        entries = list(self.iter_entries())
        total = len(entries)

        pending: list[_Pending] = []
        outcomes: dict[str, tuple[bytes | None, FileReport]] = {}
        order: list[str] = []

        for item in entries:
            if isinstance(item, FileReport):
                order.append(item.path)
                outcomes[item.path] = (None, item)
                continue

            order.append(item.path)
            language = detect_language(item.path)
            reason = self.skip_reason(item)
            if reason:
                outcomes[item.path] = (
                    item.data,
                    FileReport(path=item.path, language=language, status="skipped", reason=reason),
                )
                continue

            text, encoding = decode_bytes(item.data)
            pending.append(_Pending(item, text, encoding))

        sources = [SourceFile(p.entry.path, p.text) for p in pending]
        for p, redacted in zip(pending, redact_batch(sources, self.options, self.max_workers)):
            outcomes[p.entry.path] = (
                encode_text(redacted.content, p.encoding),
                FileReport(
                    path=redacted.path,
                    language=redacted.language,
                    status="redacted",
                    result=redacted.result,
                ),
            )

        for index, rel_path in enumerate(order, start=1):
            data, report = outcomes[rel_path]
            self.stats.add(report)
            if progress_callback:
                progress_callback(index, total, rel_path)
            yield rel_path, data, report

        self.stats.processing_time_seconds = time.perf_counter() - start

    def redact_to(
        self,
        output: Path,
        progress_callback: ProgressCallback | None = None,
    ) -> BatchStats:
        """
        Write the redacted copy to ``output``.

        A ``.zip`` output path produces an archive, anything else a
        directory tree.

        Returns:
            BatchStats for the run
        """
        output = Path(output)

        if is_zip_path(output):
            output.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(output, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=6) as archive:
                for rel_path, data, _ in self.process(progress_callback):
                    if data is not None and not _is_unsafe(rel_path):
                        archive.writestr(rel_path, data)
            return self.stats

        for rel_path, data, _ in self.process(progress_callback):
            if data is None or _is_unsafe(rel_path):
                continue
            target = output / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        return self.stats


def redact_archive(
    source: Path,
    output: Path | None = None,
    options: RedactionOptions | None = None,
    exclude_globs: set[str] | None = None,
    skip_extensions: tuple[str, ...] | set[str] | None = None,
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
    max_workers: int | None = None,
) -> tuple[Path, BatchStats]:
    """
    Redact a directory or zip archive.

    Args:
        source: Directory or ``.zip`` archive
        output: Output directory or ``.zip`` (default: ``<name>-redacted``
            next to the source, keeping the source's shape)

    Returns:
        Tuple of (output path, BatchStats)
    """
    source = Path(source)
    output = Path(output) if output else default_output_path(source)
    walker = ArchiveWalker(
        source=source,
        options=options,
        exclude_globs=exclude_globs,
        skip_extensions=skip_extensions,
        max_file_bytes=max_file_bytes,
        max_workers=max_workers,
    )
    return output, walker.redact_to(output)
