"""URL resolution and inclusion policy for candidate image references."""

from __future__ import annotations

import logging
import posixpath
from typing import Iterable
from urllib.parse import urldefrag, urljoin, urlparse

from .errors import NoCandidateAssets

logger = logging.getLogger(__name__)

DEFAULT_MAX_CANDIDATES = 4

_WEB_SCHEMES = {"http", "https"}
_ICON_MARKERS = ("icon", "logo")
_VECTOR_EXTENSIONS = {".svg", ".svgz"}
_VECTOR_MARKERS = (".svg?", ".svg#", "image/svg+xml")

RASTER_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".avif", ".heic", ".heif"}
# Extensions that identify an image format we cannot send for analysis
_UNSUPPORTED_IMAGE_EXTENSIONS = {
    ".gif", ".ico", ".bmp", ".tif", ".tiff", ".cur", ".eps", ".jxl", ".apng",
}


def _extension(url: str) -> str:
    return posixpath.splitext(urlparse(url).path)[1].lower()


def is_vector_reference(ref: str) -> bool:
    """Return ``True`` if *ref* points at (or embeds) a vector image."""
    low = ref.lower()
    if any(marker in low for marker in _VECTOR_MARKERS):
        return True
    try:
        return _extension(low) in _VECTOR_EXTENSIONS
    except ValueError:
        return low.endswith(".svg")


def is_icon_reference(ref: str) -> bool:
    """Return ``True`` if *ref* looks like iconography (icons, logos)."""
    low = ref.lower()
    return any(marker in low for marker in _ICON_MARKERS)


def is_supported_format(url: str) -> bool:
    """Extension check; extensionless URLs are left to fetch-time validation."""
    ext = _extension(url)
    if ext in RASTER_EXTENSIONS:
        return True
    return ext not in _UNSUPPORTED_IMAGE_EXTENSIONS and ext not in _VECTOR_EXTENSIONS


def _absolutize(ref: str, base_url: str) -> str | None:
    try:
        absolute = urljoin(base_url, ref)
        parsed = urlparse(absolute)
    except ValueError:
        return None
    if parsed.scheme.lower() not in _WEB_SCHEMES or not parsed.netloc:
        return None
    return urldefrag(absolute).url


def resolve(
    raw_refs: Iterable[str],
    base_url: str,
    max_candidates: int = DEFAULT_MAX_CANDIDATES,
) -> list[str]:
    """Resolve, dedupe, filter and truncate raw image references.

    Protocol-relative references take the page's scheme and root-relative
    references take its origin. Order is first occurrence; the result holds
    no duplicates, no vector images and no icon/logo matches.

    Raises:
        ValueError: *max_candidates* is below 1.
        NoCandidateAssets: nothing survived the policy.
    """
    if max_candidates < 1:
        raise ValueError(f"max_candidates must be at least 1, got {max_candidates}")

    seen_raw: set[str] = set()
    unique_raw: list[str] = []
    for ref in raw_refs:
        if ref not in seen_raw:
            seen_raw.add(ref)
            unique_raw.append(ref)

    resolved: list[str] = []
    seen_urls: set[str] = set()
    for ref in unique_raw:
        if is_vector_reference(ref):
            continue
        url = _absolutize(ref, base_url)
        if url is None or url in seen_urls:
            continue
        if is_icon_reference(url) or is_vector_reference(url):
            continue
        if not is_supported_format(url):
            continue
        seen_urls.add(url)
        resolved.append(url)

    selected = resolved[:max_candidates]
    logger.info(
        "candidates resolved",
        extra={
            "url": base_url,
            "raw_count": len(unique_raw),
            "eligible_count": len(resolved),
            "selected_count": len(selected),
        },
    )
    if not selected:
        raise NoCandidateAssets()
    return selected
