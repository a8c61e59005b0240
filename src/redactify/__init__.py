"""redactify: scrub source code before sharing it."""

from .batch import RedactedFile, SourceFile, redact_batch
from .config import (
    ChangeKind,
    ChangeRecord,
    RedactionOptions,
    RedactionResult,
    RedactionSummary,
    detect_language,
)
from .redactor import Redactor, create_redactor, redact

__version__ = "0.1.0"

__all__ = [
    "ChangeKind",
    "ChangeRecord",
    "RedactedFile",
    "RedactionOptions",
    "RedactionResult",
    "RedactionSummary",
    "Redactor",
    "SourceFile",
    "__version__",
    "create_redactor",
    "detect_language",
    "redact",
    "redact_batch",
]
