"""Concurrent asset fetching, content-type validation and base64 encoding."""

from __future__ import annotations

import asyncio
import base64
import logging

from .errors import NoUsableAssets
from .models import FetchedAsset
from .proxy import FetchCapability

logger = logging.getLogger(__name__)

SUPPORTED_CONTENT_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/heic",
    "image/heif",
    "image/avif",
})

_CONTENT_TYPE_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg"}


def normalize_content_type(content_type: str) -> str:
    """Strip parameters and lower-case a Content-Type header value."""
    mime = content_type.split(";")[0].strip().lower()
    return _CONTENT_TYPE_ALIASES.get(mime, mime)


def is_supported_content_type(content_type: str) -> bool:
    mime = normalize_content_type(content_type)
    return "svg" not in mime and mime in SUPPORTED_CONTENT_TYPES


async def fetch_asset(url: str, fetcher: FetchCapability) -> FetchedAsset | None:
    """Fetch and encode a single asset; any failure yields ``None``."""
    try:
        response = await fetcher.fetch(url)
    except Exception:
        logger.warning("asset fetch failed", extra={"url": url}, exc_info=True)
        return None

    if not response.ok:
        logger.warning("asset fetch rejected", extra={"url": url, "status": response.status})
        return None

    if not is_supported_content_type(response.content_type):
        logger.warning(
            "asset has unsupported content type",
            extra={"url": url, "content_type": response.content_type},
        )
        return None

    if not response.body:
        logger.warning("asset body empty", extra={"url": url})
        return None

    try:
        encoded = base64.b64encode(response.body).decode("ascii")
    except (TypeError, ValueError):
        logger.warning("asset encoding failed", extra={"url": url}, exc_info=True)
        return None

    return FetchedAsset(
        source_url=url,
        encoded_payload=encoded,
        content_type=normalize_content_type(response.content_type),
    )


async def fetch_all(urls: list[str], fetcher: FetchCapability) -> list[FetchedAsset]:
    """Fetch every URL concurrently and return the successes in input order.

    All fetches are awaited before returning. The candidate count is capped
    upstream, so there is one task per URL and no worker pool.

    Raises:
        NoUsableAssets: every candidate failed.
    """
    results = await asyncio.gather(*(fetch_asset(url, fetcher) for url in urls))
    assets = [asset for asset in results if asset is not None]
    logger.info(
        "assets fetched",
        extra={"urls_attempted": len(urls), "assets_returned": len(assets)},
    )
    if not assets:
        raise NoUsableAssets()
    return assets
