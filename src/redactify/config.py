"""
Configuration models and defaults for redactify.

Holds the redaction options, the change ledger types, batch statistics
and the extension-to-language table used by the language detector.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

# Current report schema version
REPORT_SCHEMA_VERSION = "1.0.0"

# Profile used when the caller does not name a language
DEFAULT_LANGUAGE = "javascript"

# Profile key for unknown extensions (no declaration heuristics)
PLAINTEXT = "plaintext"


class ChangeKind(str, Enum):
    """Kinds of entries in the change ledger."""

    SECRET = "secret"
    CLASS = "class"
    FUNCTION = "function"
    VARIABLE = "variable"
    URL = "url"
    STRING = "string"
    COMMENT = "comment"


@dataclass(frozen=True)
class ChangeRecord:
    """
    One substitution step in the ledger.

    Rename kinds carry the original and generic names. Secret records carry
    only the rule that fired and how often; never the matched value.
    """

    kind: ChangeKind
    count: int
    original: str | None = None
    replacement: str | None = None
    category: str | None = None
    rule: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"type": self.kind.value, "count": self.count}
        if self.original is not None:
            result["original"] = self.original
        if self.replacement is not None:
            result["replacement"] = self.replacement
        if self.category is not None:
            result["category"] = self.category
        if self.rule is not None:
            result["rule"] = self.rule
        return result


@dataclass(frozen=True)
class RedactionSummary:
    """Number of ledger entries per kind."""

    secrets_redacted: int = 0
    classes_redacted: int = 0
    functions_redacted: int = 0
    variables_redacted: int = 0
    urls_redacted: int = 0
    total_changes: int = 0

    @classmethod
    def from_changes(cls, changes: tuple[ChangeRecord, ...] | list[ChangeRecord]) -> RedactionSummary:
        def count(kind: ChangeKind) -> int:
            return sum(1 for c in changes if c.kind is kind)

        return cls(
            secrets_redacted=count(ChangeKind.SECRET),
            classes_redacted=count(ChangeKind.CLASS),
            functions_redacted=count(ChangeKind.FUNCTION),
            variables_redacted=count(ChangeKind.VARIABLE),
            urls_redacted=count(ChangeKind.URL),
            total_changes=len(changes),
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "secretsRedacted": self.secrets_redacted,
            "classesRedacted": self.classes_redacted,
            "functionsRedacted": self.functions_redacted,
            "variablesRedacted": self.variables_redacted,
            "urlsRedacted": self.urls_redacted,
            "totalChanges": self.total_changes,
        }


@dataclass(frozen=True)
class RedactionResult:
    """Output of one redaction call."""

    redacted_text: str
    changes: tuple[ChangeRecord, ...]
    summary: RedactionSummary
    language: str = DEFAULT_LANGUAGE

    def to_dict(self) -> dict[str, Any]:
        """Convert to the external result shape."""
        return {
            "redactedText": self.redacted_text,
            "changes": [c.to_dict() for c in self.changes],
            "summary": self.summary.to_dict(),
        }


# camelCase option names accepted by RedactionOptions.from_dict
_OPTION_ALIASES: dict[str, str] = {
    "redactSecrets": "redact_secrets",
    "redactAllClasses": "redact_all_classes",
    "redactAllFunctions": "redact_all_functions",
    "redactAllVariables": "redact_all_variables",
    "redactComments": "redact_comments",
    "redactStrings": "redact_strings",
    "redactUrls": "redact_urls",
}


@dataclass(frozen=True)
class RedactionOptions:
    """Per-call switches for the redaction passes."""

    redact_secrets: bool = True
    redact_all_classes: bool = True
    redact_all_functions: bool = True
    redact_all_variables: bool = True
    redact_comments: bool = True
    redact_strings: bool = True
    redact_urls: bool = True
    language: str = DEFAULT_LANGUAGE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RedactionOptions:
        """Create options from a dictionary; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known or value is None:
                continue
            if name == "language":
                values[name] = str(value).lower()
            else:
                values[name] = bool(value)
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (sorted keys for determinism)."""
        return dict(sorted((f.name, getattr(self, f.name)) for f in fields(self)))


# Extensions never passed through the engine by the archive walker
DEFAULT_SKIP_EXTENSIONS: tuple[str, ...] = (
    # Images
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".svg", ".webp",
    # Documents and archives
    ".pdf", ".zip", ".tar", ".gz", ".rar", ".7z",
    # Binaries
    ".exe", ".dll", ".so", ".dylib",
    # Media
    ".mp3", ".mp4", ".avi", ".mov",
    # Fonts
    ".ttf", ".woff", ".woff2", ".eot",
    # Lock files and minified bundles
    ".lock", ".min.js", ".min.css",
)

# Default glob patterns (gitwildmatch) for vendor and generated paths
DEFAULT_EXCLUDE_GLOBS: set[str] = {
    "node_modules/",
    ".git/",
    "dist/",
    "build/",
    ".next/",
    ".vscode/",
    ".idea/",
    "coverage/",
    "__pycache__/",
    ".pytest_cache/",
    ".DS_Store",
    "[Tt]humbs.db",
}

DEFAULT_MAX_FILE_BYTES = 1_048_576  # 1 MB


@dataclass
class FileReport:
    """Ledger for one file of a batch."""

    path: str
    language: str
    status: str  # "redacted" | "skipped" | "errored"
    reason: str | None = None
    result: RedactionResult | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "path": self.path,
            "language": self.language,
            "status": self.status,
        }
        if self.reason:
            data["reason"] = self.reason
        if self.result is not None:
            data["changes"] = [c.to_dict() for c in self.result.changes]
            data["summary"] = self.result.summary.to_dict()
        return data


@dataclass
class BatchStats:
    """Statistics from redacting a directory or archive."""

    total_files: int = 0
    redacted_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    total_secrets: int = 0
    total_classes: int = 0
    total_functions: int = 0
    total_variables: int = 0
    total_urls: int = 0
    total_changes: int = 0
    processing_time_seconds: float = 0.0
    skipped_reasons: dict[str, int] = field(default_factory=dict)
    # Change counts keyed by secret rule name or ledger kind
    redaction_counts: dict[str, int] = field(default_factory=dict)
    languages_detected: dict[str, int] = field(default_factory=dict)
    file_details: list[FileReport] = field(default_factory=list)

    def add(self, report: FileReport) -> None:
        """Fold one file's outcome into the totals."""
        self.total_files += 1
        self.file_details.append(report)

        if report.status == "skipped":
            self.skipped_count += 1
            reason = report.reason or "skipped"
            self.skipped_reasons[reason] = self.skipped_reasons.get(reason, 0) + 1
            return
        if report.status == "errored":
            self.error_count += 1
            return

        self.redacted_count += 1
        self.languages_detected[report.language] = (
            self.languages_detected.get(report.language, 0) + 1
        )
        if report.result is not None:
            summary = report.result.summary
            self.total_secrets += summary.secrets_redacted
            self.total_classes += summary.classes_redacted
            self.total_functions += summary.functions_redacted
            self.total_variables += summary.variables_redacted
            self.total_urls += summary.urls_redacted
            self.total_changes += summary.total_changes
            for change in report.result.changes:
                key = change.rule or change.kind.value
                self.redaction_counts[key] = self.redaction_counts.get(key, 0) + change.count

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Output is deterministic: dicts are sorted by key and files by path.
        """
        changed = [r for r in self.file_details if r.result is not None and r.result.changes]
        return {
            "error_count": self.error_count,
            "file_details": [r.to_dict() for r in sorted(changed, key=lambda r: r.path)],
            "languages_detected": dict(
                sorted(self.languages_detected.items(), key=lambda x: (-x[1], x[0]))
            ),
            "processing_time_seconds": round(self.processing_time_seconds, 3),
            "redaction_counts": dict(
                sorted(self.redaction_counts.items(), key=lambda x: (-x[1], x[0]))
            ),
            "redacted_count": self.redacted_count,
            "skipped_count": self.skipped_count,
            "skipped_reasons": dict(sorted(self.skipped_reasons.items())),
            "total_changes": self.total_changes,
            "total_classes": self.total_classes,
            "total_files": self.total_files,
            "total_functions": self.total_functions,
            "total_secrets": self.total_secrets,
            "total_urls": self.total_urls,
            "total_variables": self.total_variables,
        }


# Language detection by extension
EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".pyi": "python",
    ".pyw": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".cs": "csharp",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".phtml": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".sh": "shell",
    ".bash": "shell",
    ".zsh": "shell",
}


def detect_language(file_name: str) -> str:
    """Map a file name to a profile key by its extension.

    Unknown or missing extensions map to ``"plaintext"``.
    """
    name = file_name.replace("\\", "/").rsplit("/", 1)[-1].lower()
    if "." not in name:
        return PLAINTEXT
    ext = "." + name.rsplit(".", 1)[-1]
    return EXTENSION_TO_LANGUAGE.get(ext, PLAINTEXT)
