"""Transient data models for a single audit run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CandidateSource(str, Enum):
    """Where in the markup a candidate reference was found."""

    METADATA = "metadata"
    SOURCE_SET = "source_set"
    IMAGE = "image"
    LAZY_ATTRIBUTE = "lazy_attribute"
    IMAGE_SOURCE_SET = "image_source_set"


@dataclass(frozen=True)
class CandidateAssetURL:
    """A raw, unresolved image reference extracted from markup."""

    raw: str
    source: CandidateSource


@dataclass(frozen=True)
class ProxyResponse:
    """What the indirection layer returned for one target URL."""

    status: int
    content_type: str
    body: bytes
    # only what the Content-Type header declares
    charset: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(frozen=True)
class FetchedAsset:
    """An image that was fetched, type-checked and base64-encoded."""

    source_url: str
    encoded_payload: str
    content_type: str
