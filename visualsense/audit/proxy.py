"""Indirection layer — fetches pages and assets through a CORS proxy."""

from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import quote

import httpx

from .models import ProxyResponse

logger = logging.getLogger(__name__)


class FetchFailed(Exception):
    """A request for *url* failed before any usable response came back."""

    summary = "fetch failed"

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{self.summary} for {url}: {reason}")


class IndirectionUnreachable(FetchFailed):
    """The proxy itself could not be reached (as opposed to the target refusing)."""

    summary = "proxy unreachable"


class TargetMisbehaved(FetchFailed):
    """The proxy answered, but the target looped on redirects or sent an undecodable body."""

    summary = "target misbehaved"


class FetchCapability(Protocol):
    """Protocol for anything that can fetch a URL on the pipeline's behalf."""

    async def fetch(self, url: str) -> ProxyResponse: ...


def build_proxy_url(template: str, url: str) -> str:
    """Embed *url* into the proxy *template*; an empty template means no proxy."""
    if not template:
        return url
    return template.format(url=quote(url, safe=""))


class ProxyFetcher:
    """Fetches target URLs through an HTTP proxy endpoint using httpx."""

    def __init__(
        self,
        *,
        url_template: str = "https://corsproxy.io/?{url}",
        timeout: float = 20.0,
        user_agent: str = "visualsense/0.1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url_template = url_template
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport

    async def fetch(self, url: str) -> ProxyResponse:
        """Fetch *url*; HTTP errors come back as a status.

        Raises:
            IndirectionUnreachable: connect, timeout or protocol failure.
            TargetMisbehaved: redirect loop or a body that fails to decode.
        """
        proxy_url = build_proxy_url(self._url_template, url)
        logger.debug("proxy fetch", extra={"url": url, "proxy_url": proxy_url})
        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get(proxy_url)
        except httpx.TransportError as exc:
            raise IndirectionUnreachable(url, type(exc).__name__) from exc
        except httpx.RequestError as exc:
            raise TargetMisbehaved(url, type(exc).__name__) from exc

        logger.debug(
            "proxy response",
            extra={
                "url": url,
                "status": resp.status_code,
                "content_type": resp.headers.get("content-type", ""),
                "bytes": len(resp.content),
            },
        )
        return ProxyResponse(
            status=resp.status_code,
            content_type=resp.headers.get("content-type", ""),
            body=resp.content,
            charset=resp.charset_encoding,
        )
