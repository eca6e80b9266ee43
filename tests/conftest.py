"""
Shared fakes for the pipeline tests.

FakeSite plays the role of a web server behind the fetch client: it answers
each probe according to its Accept-Encoding / User-Agent request headers and
records every request it receives.
"""

from __future__ import annotations

import gzip
from typing import Mapping, Optional

import brotli
import httpx
import pytest

from httpcompress.models.resource import FetchedResource

BODY = b"const greeting = 'hello world';\nconsole.log(greeting);\n" * 40

_AUTO = object()
_CODEC_HEADERS = {"gzip": "gzip", "zopfli": "gzip", "br": "br"}


def encode(body: bytes, codec: Optional[str]) -> bytes:
    if codec is None:
        return body
    if codec == "gzip":
        return gzip.compress(body, compresslevel=6, mtime=0)
    if codec == "zopfli":
        # level 9 writes XFL=2; patch OS to 3 to get the zopfli header
        data = bytearray(gzip.compress(body, compresslevel=9, mtime=0))
        data[9] = 0x03
        return bytes(data)
    if codec == "br":
        return brotli.compress(body)
    raise ValueError(codec)


def build_resource(
    url: str,
    body: bytes = BODY,
    codec: Optional[str] = None,
    content_encoding=_AUTO,
    headers: Optional[Mapping[str, Optional[str]]] = None,
    media_type: Optional[str] = "text/javascript",
    status_code: int = 200,
) -> FetchedResource:
    """Build a response snapshot; ``None`` header values remove the header."""
    raw = encode(body, codec)
    hdrs: dict[str, str] = {}
    if media_type:
        hdrs["Content-Type"] = media_type
    if content_encoding is _AUTO:
        content_encoding = _CODEC_HEADERS.get(codec)
    if content_encoding:
        hdrs["Content-Encoding"] = content_encoding
    if codec:
        hdrs["Vary"] = "Accept-Encoding"
    for name, value in (headers or {}).items():
        if value is None:
            hdrs.pop(name, None)
        else:
            hdrs[name] = value
    return FetchedResource(
        url=url,
        status_code=status_code,
        headers=httpx.Headers(hdrs),
        media_type=media_type,
        raw_response=raw,
        raw_content=body,
    )


class FakeSite:
    """
    A well-behaved server unless told otherwise.

    ``overrides`` maps a probe name ("identity", "gzip", "gzip+ua", "br",
    "br+ua") to the FetchedResource to return, or to an exception to raise.
    """

    def __init__(
        self,
        url: str,
        body: bytes = BODY,
        media_type: str = "text/javascript",
        gzip_codec: str = "gzip",
        overrides: Optional[dict] = None,
    ) -> None:
        self.url = url
        self.body = body
        self.media_type = media_type
        self.gzip_codec = gzip_codec
        self.overrides = overrides or {}
        self.calls: list[dict[str, str]] = []

    @staticmethod
    def probe_name(request_headers: Mapping[str, str]) -> str:
        name = request_headers.get("Accept-Encoding", "")
        if request_headers.get("User-Agent"):
            name += "+ua"
        return name

    def default_response(self, name: str) -> FetchedResource:
        encoding = name.split("+")[0]
        codec = {"identity": None, "gzip": self.gzip_codec, "br": "br"}[encoding]
        return build_resource(self.url, self.body, codec=codec, media_type=self.media_type)

    async def fetch(self, url: str, request_headers: Mapping[str, str]) -> FetchedResource:
        assert url == self.url
        self.calls.append(dict(request_headers))
        name = self.probe_name(request_headers)
        outcome = self.overrides.get(name) or self.default_response(name)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def probe_names(self) -> list[str]:
        return [self.probe_name(h) for h in self.calls]


@pytest.fixture
def make_resource():
    return build_resource


@pytest.fixture
def encode_body():
    return encode


@pytest.fixture
def fake_site():
    return FakeSite
