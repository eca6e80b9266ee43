"""
Static MIME registry with compressibility flags.

A snapshot of the ``compressible`` flags published by the mime-db project for
the media types a web crawl realistically encounters. Types without a
published flag are absent and classified as not compressible.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

__all__ = ["MIME_REGISTRY", "lookup_compressible"]

_COMPRESSIBLE = (
    # application/*
    "application/atom+xml",
    "application/dash+xml",
    "application/ecmascript",
    "application/geo+json",
    "application/graphql+json",
    "application/javascript",
    "application/json",
    "application/json-patch+json",
    "application/ld+json",
    "application/manifest+json",
    "application/merge-patch+json",
    "application/mathml+xml",
    "application/msword",
    "application/postscript",
    "application/problem+json",
    "application/problem+xml",
    "application/rdf+xml",
    "application/rss+xml",
    "application/rtf",
    "application/schema+json",
    "application/soap+xml",
    "application/sql",
    "application/tar",
    "application/toml",
    "application/vnd.api+json",
    "application/vnd.apple.mpegurl",
    "application/vnd.geo+json",
    "application/vnd.google-earth.kml+xml",
    "application/vnd.mozilla.xul+xml",
    "application/vnd.ms-excel",
    "application/vnd.ms-fontobject",
    "application/vnd.ms-powerpoint",
    "application/wasm",
    "application/x-bash",
    "application/x-csh",
    "application/x-font-otf",
    "application/x-font-truetype",
    "application/x-font-ttf",
    "application/x-httpd-php",
    "application/x-javascript",
    "application/x-mpegurl",
    "application/x-ndjson",
    "application/x-perl",
    "application/x-sh",
    "application/x-tar",
    "application/x-web-app-manifest+json",
    "application/x-www-form-urlencoded",
    "application/xhtml+xml",
    "application/xml",
    "application/xml-dtd",
    "application/xslt+xml",
    "application/yaml",
    # font/*
    "font/otf",
    "font/ttf",
    # image/*
    "image/bmp",
    "image/svg+xml",
    "image/vnd.microsoft.icon",
    "image/x-icon",
    "image/x-ms-bmp",
    # model/*
    "model/gltf+json",
    "model/obj",
    "model/stl",
    "model/vrml",
    "model/x3d+xml",
    # text/*
    "text/cache-manifest",
    "text/calendar",
    "text/css",
    "text/csv",
    "text/html",
    "text/javascript",
    "text/markdown",
    "text/mathml",
    "text/plain",
    "text/richtext",
    "text/tab-separated-values",
    "text/uri-list",
    "text/vcard",
    "text/vtt",
    "text/x-component",
    "text/x-cross-domain-policy",
    "text/x-markdown",
    "text/xml",
    "text/yaml",
)

_NOT_COMPRESSIBLE = (
    # archives and already-compressed containers
    "application/epub+zip",
    "application/gzip",
    "application/java-archive",
    "application/octet-stream",
    "application/ogg",
    "application/pdf",
    "application/vnd.android.package-archive",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/x-7z-compressed",
    "application/x-bzip2",
    "application/x-gzip",
    "application/x-rar-compressed",
    "application/x-shockwave-flash",
    "application/zip",
    "application/zstd",
    # audio/*
    "audio/aac",
    "audio/mp4",
    "audio/mpeg",
    "audio/ogg",
    "audio/opus",
    "audio/webm",
    # font/*
    "font/collection",
    "font/woff",
    "font/woff2",
    # image/*
    "image/avif",
    "image/gif",
    "image/heic",
    "image/jp2",
    "image/jpeg",
    "image/jxl",
    "image/png",
    "image/webp",
    # video/*
    "video/mp4",
    "video/mpeg",
    "video/ogg",
    "video/quicktime",
    "video/webm",
    "video/x-flv",
    "video/x-msvideo",
)

MIME_REGISTRY: Mapping[str, bool] = MappingProxyType({
    **{media_type: True for media_type in _COMPRESSIBLE},
    **{media_type: False for media_type in _NOT_COMPRESSIBLE},
})


def lookup_compressible(media_type: str) -> Optional[bool]:
    """Registry flag for ``media_type``; None when the type is not listed."""
    return MIME_REGISTRY.get(media_type)
