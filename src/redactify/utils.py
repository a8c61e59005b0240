"""
Utility functions for redactify.

Binary detection, encoding detection and safe decoding of file contents,
plus path helpers used by the archive walker.
"""

from __future__ import annotations

from pathlib import Path

import chardet

# Bytes sampled for binary and encoding checks
SAMPLE_SIZE = 8192


def detect_encoding(data: bytes, sample_size: int = SAMPLE_SIZE) -> str:
    """
    Detect the encoding of raw file contents.

    Strategy:
    1. Check for BOM markers first
    2. Try UTF-8 (most common for modern source files)
    3. Fall back to chardet only if UTF-8 fails

    Args:
        data: Raw bytes
        sample_size: Number of bytes to sample for detection

    Returns:
        Detected encoding name (e.g., 'utf-8', 'windows-1252')
    """
    sample = data[:sample_size]
    if not sample:
        return "utf-8"

    if sample.startswith(b"\xef\xbb\xbf"):
        return "utf-8-sig"
    if sample.startswith(b"\xff\xfe"):
        return "utf-16-le"
    if sample.startswith(b"\xfe\xff"):
        return "utf-16-be"

    try:
        data.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        pass

    encoding = chardet.detect(sample).get("encoding")
    if encoding is None:
        return "utf-8"

    encoding = encoding.lower()
    if encoding in ("ascii", "utf-8", "utf8"):
        return "utf-8"
    return encoding


def is_binary_bytes(data: bytes, sample_size: int = SAMPLE_SIZE) -> bool:
    """
    Check if raw contents appear to be binary.

    Uses null byte detection and the ratio of printable bytes.
    """
    sample = data[:sample_size]
    if not sample:
        return False

    # UTF-16 text carries NUL bytes but also a BOM
    if sample.startswith((b"\xff\xfe", b"\xfe\xff")):
        return False

    if b"\x00" in sample:
        return True

    # Text files typically have >70% printable ASCII; UTF-8 multibyte
    # sequences count as text
    printable_count = sum(
        1 for b in sample
        if 32 <= b <= 126 or b in (9, 10, 12, 13) or b >= 128
    )
    return printable_count / len(sample) < 0.70


def decode_bytes(data: bytes, encoding: str | None = None) -> tuple[str, str]:
    """
    Decode raw contents to text.

    Tries the given encoding, then UTF-8, then the detected encoding with
    replacement of undecodable bytes.

    Returns:
        Tuple of (text, encoding_used)
    """
    if encoding is not None:
        try:
            return data.decode(encoding, errors="replace"), encoding
        except LookupError:
            pass

    try:
        return data.decode("utf-8"), "utf-8"
    except UnicodeDecodeError:
        pass

    detected = detect_encoding(data)
    try:
        return data.decode(detected, errors="replace"), detected
    except LookupError:
        return data.decode("utf-8", errors="replace"), "utf-8"


def read_file_safe(file_path: Path, encoding: str | None = None) -> tuple[str, str]:
    """
    Read a text file with encoding detection.

    Returns:
        Tuple of (content, encoding_used)

    Raises:
        OSError: If the file cannot be read
    """
    data = Path(file_path).read_bytes()
    return decode_bytes(data, encoding)


def encode_text(text: str, encoding: str) -> bytes:
    """Encode redacted text back to the file's encoding (UTF-8 if it cannot)."""
    try:
        return text.encode(encoding)
    except (LookupError, UnicodeEncodeError):
        return text.encode("utf-8")


def normalize_path(path: str) -> str:
    """Normalize a path for consistent comparison (use forward slashes)."""
    return path.replace("\\", "/")


def has_skip_extension(path: str, extensions: tuple[str, ...] | set[str]) -> bool:
    """Check a path against suffixes such as ``.png`` or ``.min.js``."""
    lowered = normalize_path(path).lower()
    return any(lowered.endswith(ext.lower()) for ext in extensions)
