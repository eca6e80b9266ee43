"""
Tests for codec detection by byte inspection.
"""

from __future__ import annotations

import gzip
import zlib

import brotli
import pytest

from httpcompress.codecs import (
    ZOPFLI_HEADER,
    detect_codec,
    is_brotli,
    is_gzip,
    is_response_compressed,
    is_suspected_zopfli,
)

PAYLOAD = b"<html><body>" + b"<p>compress me</p>" * 100 + b"</body></html>"


class TestIsGzip:
    """gzip is recognised by its two magic bytes only."""

    @pytest.mark.parametrize(
        "data,expected",
        [
            (b"\x1f\x8b", True),
            (b"\x1f\x8b\x08\x00anything", True),
            (b"\x1f", False),
            (b"", False),
            (None, False),
            (b"\x8b\x1f", False),
            (b"\x1f\x8a", False),
        ],
    )
    def test_magic_number(self, data, expected):
        assert is_gzip(data) is expected

    def test_real_gzip_output(self):
        assert is_gzip(gzip.compress(PAYLOAD)) is True

    def test_plain_and_brotli_payloads(self):
        assert is_gzip(PAYLOAD) is False
        assert is_gzip(brotli.compress(PAYLOAD)) is False


class TestIsBrotli:
    """brotli has no magic number; detection is a trial decode."""

    def test_real_brotli_output(self):
        assert is_brotli(brotli.compress(PAYLOAD)) is True

    def test_plain_text_is_not_brotli(self):
        assert is_brotli(PAYLOAD) is False

    def test_gzip_is_not_brotli(self):
        assert is_brotli(gzip.compress(PAYLOAD)) is False

    def test_truncated_stream_is_not_brotli(self):
        compressed = brotli.compress(PAYLOAD)
        assert is_brotli(compressed[: len(compressed) // 2]) is False

    def test_none_is_not_brotli(self):
        assert is_brotli(None) is False

    def test_empty_output_from_non_empty_input(self):
        # 0xff decodes as a final empty meta-block; the rest is junk
        assert is_brotli(b"\xff" * 64) is False


class TestIsSuspectedZopfli:
    """The predicate answers "does not look like zopfli"."""

    def test_zopfli_header_is_not_suspected(self):
        data = bytes(ZOPFLI_HEADER) + b"\x00" * 20
        assert is_suspected_zopfli(data) is False

    def test_exact_header_alone(self):
        assert is_suspected_zopfli(bytes(ZOPFLI_HEADER)) is False

    @pytest.mark.parametrize(
        "data",
        [
            b"",
            None,
            bytes(ZOPFLI_HEADER[:9]),
            # gzip with a non-zero MTIME
            bytes((0x1F, 0x8B, 0x08, 0x00, 0x01, 0x00, 0x00, 0x00, 0x02, 0x03)),
            # XFL=0 (intermediate level)
            bytes((0x1F, 0x8B, 0x08, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x03)),
            # OS=255 as written by Python's gzip module
            bytes((0x1F, 0x8B, 0x08, 0x00, 0x00, 0x00, 0x00, 0x00, 0x02, 0xFF)),
        ],
    )
    def test_everything_else_is_suspected(self, data):
        assert is_suspected_zopfli(data) is True

    def test_python_gzip_output_is_suspected(self):
        assert is_suspected_zopfli(gzip.compress(PAYLOAD, compresslevel=9, mtime=0)) is True

    def test_zopfli_like_gzip(self, encode_body):
        assert is_suspected_zopfli(encode_body(PAYLOAD, "zopfli")) is False


class TestIsResponseCompressed:
    """Compression is visible either in the bytes or in the header."""

    def test_gzip_bytes_without_header(self):
        assert is_response_compressed(gzip.compress(PAYLOAD), None) is True

    def test_brotli_bytes_without_header(self):
        assert is_response_compressed(brotli.compress(PAYLOAD), None) is True

    def test_unverifiable_codec_header(self):
        assert is_response_compressed(zlib.compress(PAYLOAD), "deflate") is True

    def test_identity_header_is_ignored(self):
        assert is_response_compressed(PAYLOAD, "identity") is False
        assert is_response_compressed(PAYLOAD, " Identity ") is False

    def test_plain_payload_without_header(self):
        assert is_response_compressed(PAYLOAD, None) is False
        assert is_response_compressed(PAYLOAD, "") is False


class TestDetectCodec:
    def test_detects_each_codec(self):
        assert detect_codec(gzip.compress(PAYLOAD)) == "gzip"
        assert detect_codec(brotli.compress(PAYLOAD)) == "br"
        assert detect_codec(PAYLOAD) is None
