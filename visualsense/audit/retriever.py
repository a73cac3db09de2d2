"""Markup retrieval for the page under audit."""

from __future__ import annotations

import logging

from bs4 import UnicodeDammit

from .errors import RetrievalBlocked
from .proxy import FetchCapability, IndirectionUnreachable, TargetMisbehaved

logger = logging.getLogger(__name__)


async def retrieve_markup(page_url: str, fetcher: FetchCapability) -> str:
    """Fetch the raw HTML of *page_url* through the indirection layer.

    A charset from the Content-Type header is tried first; otherwise the
    document's own ``<meta charset>`` or byte sniffing decides.

    Raises:
        RetrievalBlocked: the proxy was unreachable, the target looped or sent
            an undecodable body, or it answered with a non-success status
            (carried as ``status_code``).
    """
    try:
        response = await fetcher.fetch(page_url)
    except IndirectionUnreachable as exc:
        logger.warning("markup proxy unreachable", extra={"url": page_url, "reason": exc.reason})
        raise RetrievalBlocked(unreachable=True) from exc
    except TargetMisbehaved as exc:
        logger.warning("markup fetch failed", extra={"url": page_url, "reason": exc.reason})
        raise RetrievalBlocked(f"Site could not be loaded ({exc.reason}).") from exc

    if not response.ok:
        logger.warning("markup fetch blocked", extra={"url": page_url, "status": response.status})
        raise RetrievalBlocked(status_code=response.status)

    dammit = UnicodeDammit(
        response.body,
        known_definite_encodings=[response.charset] if response.charset else [],
        is_html=True,
    )
    markup = dammit.unicode_markup or ""
    logger.debug(
        "markup retrieved",
        extra={"url": page_url, "length": len(markup), "encoding": dammit.original_encoding},
    )
    return markup
