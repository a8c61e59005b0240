"""Tests for encoding and file helpers."""

import tempfile
from pathlib import Path

from redactify.utils import (
    decode_bytes,
    detect_encoding,
    encode_text,
    has_skip_extension,
    is_binary_bytes,
    normalize_path,
    read_file_safe,
)


class TestDetectEncoding:
    """Tests for detect_encoding."""

    def test_empty(self):
        """Test that empty input is treated as UTF-8."""
        assert detect_encoding(b"") == "utf-8"

    def test_boms(self):
        """Test byte order marks."""
        assert detect_encoding(b"\xef\xbb\xbfx = 1") == "utf-8-sig"
        assert detect_encoding(b"\xff\xfex\x00") == "utf-16-le"
        assert detect_encoding(b"\xfe\xff\x00x") == "utf-16-be"

    def test_utf8(self):
        """Test that valid UTF-8 is reported as UTF-8."""
        assert detect_encoding("const name = 'café';".encode()) == "utf-8"


class TestIsBinary:
    """Tests for is_binary_bytes."""

    def test_text(self):
        """Test plain source text."""
        assert not is_binary_bytes(b"def main():\n    return 0\n")

    def test_empty(self):
        """Test that empty content is not binary."""
        assert not is_binary_bytes(b"")

    def test_null_bytes(self):
        """Test that NUL bytes mark binary content."""
        assert is_binary_bytes(b"abc\x00def")

    def test_utf16_with_bom_is_text(self):
        """Test that UTF-16 text is not mistaken for binary."""
        assert not is_binary_bytes("x = 1".encode("utf-16"))

    def test_control_characters(self):
        """Test a low printable ratio."""
        assert is_binary_bytes(bytes(range(1, 9)) * 10)

    def test_utf8_multibyte_is_text(self):
        """Test that non-ASCII UTF-8 counts as printable."""
        assert not is_binary_bytes("日本語のコメント".encode())


class TestDecoding:
    """Tests for decode_bytes, encode_text and read_file_safe."""

    def test_decode_utf8(self):
        """Test the UTF-8 path."""
        assert decode_bytes("naïve".encode()) == ("naïve", "utf-8")

    def test_decode_explicit_encoding(self):
        """Test that an explicit encoding is used as given."""
        assert decode_bytes(b"caf\xe9", "latin-1") == ("café", "latin-1")

    def test_decode_unknown_encoding_falls_back(self):
        """Test that an unknown codec name falls back to UTF-8."""
        assert decode_bytes(b"abc", "no-such-codec") == ("abc", "utf-8")

    def test_encode_round_trip(self):
        """Test re-encoding in the source encoding."""
        assert encode_text("café", "latin-1") == b"caf\xe9"

    def test_encode_fallback(self):
        """Test that unencodable text falls back to UTF-8."""
        assert encode_text("café", "ascii") == "café".encode()
        assert encode_text("x", "no-such-codec") == b"x"

    def test_read_file_safe(self):
        """Test reading a file from disk."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "a.py"
            path.write_bytes(b"x = 1\n")

            assert read_file_safe(path) == ("x = 1\n", "utf-8")


class TestPathHelpers:
    """Tests for path helpers."""

    def test_normalize_path(self):
        """Test backslashes become forward slashes."""
        assert normalize_path("src\\lib\\a.js") == "src/lib/a.js"

    def test_has_skip_extension(self):
        """Test multi-part suffixes and case."""
        extensions = (".png", ".min.js")

        assert has_skip_extension("assets/LOGO.PNG", extensions)
        assert has_skip_extension("dist\\vendor.min.js", extensions)
        assert not has_skip_extension("src/app.js", extensions)
