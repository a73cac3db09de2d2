"""Candidate extraction: pulls raw image references out of page markup."""

from __future__ import annotations

import logging
from typing import Iterator

from bs4 import BeautifulSoup, Tag

from .models import CandidateAssetURL, CandidateSource

logger = logging.getLogger(__name__)

LAZY_ATTRIBUTES = ("data-src", "data-lazy-src", "data-original", "data-zoom-src")


def last_srcset_entry(srcset: str) -> str | None:
    """Return the URL of the last entry in a ``srcset`` attribute.

    Assumes the last candidate is the highest resolution. Nothing in the
    srcset format guarantees that ordering, so this is a heuristic.
    """
    urls = [part.strip().split()[0] for part in srcset.split(",") if part.strip()]
    return urls[-1] if urls else None


def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()


def _image_candidate(img: Tag) -> CandidateAssetURL | None:
    found: CandidateAssetURL | None = None
    src = _attr(img, "src")
    if src:
        found = CandidateAssetURL(src, CandidateSource.IMAGE)
    else:
        for name in LAZY_ATTRIBUTES:
            lazy = _attr(img, name)
            if lazy:
                found = CandidateAssetURL(lazy, CandidateSource.LAZY_ATTRIBUTE)
                break

    srcset = _attr(img, "srcset")
    if srcset:
        best = last_srcset_entry(srcset)
        if best:
            found = CandidateAssetURL(best, CandidateSource.IMAGE_SOURCE_SET)
    return found


def extract_candidates(markup: str, base_url: str = "") -> Iterator[CandidateAssetURL]:
    """Yield raw image references from *markup* in priority order.

    1. the ``og:image`` preview metadata, if any;
    2. the last entry of every ``<source srcset>``;
    3. every ``<img>``: ``src``, else a lazy-load attribute, overridden by the
       last entry of its own ``srcset``.

    References are yielded unresolved and unfiltered. *base_url* is only used
    for logging.
    """
    soup = BeautifulSoup(markup, "html.parser")
    count = 0

    og_image = soup.find("meta", attrs={"property": "og:image"})
    if isinstance(og_image, Tag):
        content = _attr(og_image, "content")
        if content:
            count += 1
            yield CandidateAssetURL(content, CandidateSource.METADATA)

    for source in soup.find_all("source", srcset=True):
        best = last_srcset_entry(_attr(source, "srcset"))
        if best:
            count += 1
            yield CandidateAssetURL(best, CandidateSource.SOURCE_SET)

    for img in soup.find_all("img"):
        candidate = _image_candidate(img)
        if candidate is not None:
            count += 1
            yield candidate

    logger.debug("candidates extracted", extra={"url": base_url, "candidate_count": count})
