"""
Tests for decode_content.
"""

from __future__ import annotations

import gzip
import zlib

import brotli
import pytest

from httpcompress.exceptions import DecompressionError, PayloadSizeLimitError
from httpcompress.utils import decode_content

JS = b"function add(a, b) { return a + b; }\n" * 30
URL = "https://example.com/app.js"


class TestDecodeContent:
    def test_gzip(self):
        assert decode_content(gzip.compress(JS), "gzip") == JS

    def test_gzip_found_by_magic_number(self):
        assert decode_content(gzip.compress(JS), None) == JS

    def test_brotli(self):
        assert decode_content(brotli.compress(JS), "br") == JS

    def test_zlib_deflate(self):
        assert decode_content(zlib.compress(JS), "deflate") == JS

    def test_raw_deflate(self):
        compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
        raw = compressor.compress(JS) + compressor.flush()
        assert decode_content(raw, "deflate") == JS

    def test_unknown_coding_is_untouched(self):
        assert decode_content(JS, "sdch") == JS

    def test_plain_body_labelled_br_is_untouched(self):
        assert decode_content(JS, "br") == JS

    def test_empty_body(self):
        assert decode_content(b"", "gzip") == b""


class TestDecodeFailures:
    def test_truncated_gzip(self):
        with pytest.raises(DecompressionError) as exc_info:
            decode_content(gzip.compress(JS)[:-8], "gzip", url=URL)

        assert exc_info.value.encoding == "gzip"
        assert exc_info.value.url == URL
        assert exc_info.value.__cause__ is not None

    def test_corrupt_gzip_without_header(self):
        data = bytearray(gzip.compress(JS))
        data[12:20] = b"\xff" * 8
        with pytest.raises(DecompressionError):
            decode_content(bytes(data), None)

    def test_size_limit(self):
        with pytest.raises(PayloadSizeLimitError) as exc_info:
            decode_content(gzip.compress(JS), "gzip", max_bytes=len(JS) - 1, url=URL)

        assert exc_info.value.actual_size == len(JS)
        assert exc_info.value.max_size == len(JS) - 1

    def test_size_limit_not_reached(self):
        assert decode_content(brotli.compress(JS), "br", max_bytes=len(JS)) == JS

    def test_plain_body_ignores_size_limit(self):
        assert decode_content(JS, None, max_bytes=1) == JS
