"""Background audit runner and webhook delivery of its outcome."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import urlparse

import httpx

from visualsense.config import Settings

from .engine import AuditEngine
from .errors import TRY_AGAIN, AuditError

logger = logging.getLogger(__name__)

# Gateway answers worth another attempt; any other status is the receiver's verdict.
_RETRY_STATUSES = frozenset({502, 503, 504})


def parse_host_list(hosts: str) -> frozenset[str]:
    return frozenset(h.strip().lower() for h in hosts.split(",") if h.strip())


class CallbackNotifier:
    """POSTs audit outcomes to allow-listed webhooks.

    Shares the outbound identity of the page fetcher (``REQUEST_TIMEOUT`` and
    ``USER_AGENT``). Transport errors and gateway statuses are retried with
    exponential backoff; everything else is final.
    """

    def __init__(
        self,
        *,
        allowed_hosts: frozenset[str],
        timeout: float = 20.0,
        user_agent: str = "visualsense/0.1.0",
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.allowed_hosts = allowed_hosts
        self._timeout = timeout
        self._user_agent = user_agent
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> CallbackNotifier:
        return cls(
            allowed_hosts=parse_host_list(settings.allowed_callback_hosts),
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
            max_retries=settings.callback_max_retries,
        )

    def accepts(self, url: str) -> bool:
        """Whether *url* is a credential-free http(s) URL on an allow-listed host."""
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or parsed.username or parsed.password:
            return False
        return bool(parsed.hostname) and parsed.hostname.lower() in self.allowed_hosts

    def _backoff(self, attempt: int) -> float:
        return min(self._base_delay * 2**attempt, self._max_delay)

    async def deliver(self, url: str, payload: dict[str, Any]) -> bool:
        """Send *payload* to *url*; ``True`` once the receiver answered 2xx."""
        attempts = self._max_retries + 1
        async with httpx.AsyncClient(
            headers={"User-Agent": self._user_agent},
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            for attempt in range(attempts):
                try:
                    resp = await client.post(url, json=payload)
                except httpx.TransportError as exc:
                    reason = type(exc).__name__
                except httpx.RequestError as exc:
                    logger.warning("callback failed", extra={"url": url, "reason": type(exc).__name__})
                    return False
                else:
                    if resp.is_success:
                        logger.info("callback delivered", extra={"url": url, "attempt": attempt + 1})
                        return True
                    if resp.status_code not in _RETRY_STATUSES:
                        logger.warning("callback rejected", extra={"url": url, "status": resp.status_code})
                        return False
                    reason = f"status {resp.status_code}"

                if attempt + 1 < attempts:
                    delay = self._backoff(attempt)
                    logger.warning(
                        "callback attempt failed, retrying",
                        extra={"url": url, "attempt": attempt + 1, "reason": reason, "delay": delay},
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.warning(
                        "callback gave up",
                        extra={"url": url, "attempts": attempts, "reason": reason},
                    )
        return False


def outcome_payload(task_id: str, result: Any = None, error: dict[str, str] | None = None) -> dict[str, Any]:
    if error is not None:
        return {"task_id": task_id, "status": "failed", "error": error}
    return {
        "task_id": task_id,
        "status": "completed",
        "result": result.model_dump(mode="json", by_alias=True),
    }


async def run_background_audit(
    engine: AuditEngine,
    notifier: CallbackNotifier,
    page_url: str,
    callback_url: str,
    task_id: str,
) -> None:
    """Run an audit detached from any request and deliver the outcome to *callback_url*."""
    try:
        result = await engine.run(page_url)
    except AuditError as exc:
        logger.warning(
            "background audit failed",
            extra={"task_id": task_id, "url": page_url, "category": exc.category},
        )
        payload = outcome_payload(task_id, error=exc.to_dict())
    except Exception:
        logger.exception("background audit crashed", extra={"task_id": task_id, "url": page_url})
        payload = outcome_payload(
            task_id,
            error={"category": "internal", "message": "Audit failed", "remediation": TRY_AGAIN},
        )
    else:
        payload = outcome_payload(task_id, result)

    await notifier.deliver(callback_url, payload)
