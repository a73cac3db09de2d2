"""Service layer — runs audits on behalf of the API routes."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, AsyncGenerator

from visualsense.api.schemas import AuditRequest, AuditResult
from visualsense.audit.engine import AuditEngine
from visualsense.audit.errors import AuditError
from visualsense.audit.tasks import CallbackNotifier, run_background_audit

logger = logging.getLogger(__name__)

# Keeps fire-and-forget tasks referenced until they finish.
_background_tasks: set[asyncio.Task[None]] = set()


def _generate_task_id() -> str:
    return uuid.uuid4().hex[:12]


async def run_audit(engine: AuditEngine, body: AuditRequest) -> AuditResult:
    """Run an audit inline; ``AuditError`` propagates to the route."""
    page_url = str(body.url)
    logger.info("sync audit started", extra={"url": page_url})
    return await engine.run(page_url)


def start_background_audit(
    engine: AuditEngine,
    notifier: CallbackNotifier,
    body: AuditRequest,
) -> dict[str, str]:
    """Launch a background audit and return the acceptance payload with task_id."""
    task_id = _generate_task_id()
    page_url = str(body.url)
    logger.info(
        "background audit started",
        extra={"task_id": task_id, "url": page_url, "callback_url": body.callback_url},
    )

    task = asyncio.create_task(
        run_background_audit(
            engine=engine,
            notifier=notifier,
            page_url=page_url,
            callback_url=body.callback_url or "",
            task_id=task_id,
        )
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    return {
        "status": "accepted",
        "task_id": task_id,
        "message": "Audit started. Results will be sent to callback URL.",
    }


async def stream_audit(
    engine: AuditEngine,
    body: AuditRequest,
) -> AsyncGenerator[dict[str, str], None]:
    """Yield SSE-formatted events from the audit engine."""
    page_url = str(body.url)
    logger.info("streaming audit started", extra={"url": page_url})

    queue: asyncio.Queue[tuple[str, dict[str, Any]] | None] = asyncio.Queue()

    async def on_event(event: str, data: dict[str, Any]) -> None:
        await queue.put((event, data))

    async def run_and_signal_done() -> None:
        try:
            result = await engine.run(page_url, on_event=on_event)
            logger.info("streaming audit completed", extra={"audit_id": result.audit_id})
        except AuditError as exc:
            logger.warning("streaming audit failed", extra={"url": page_url, "category": exc.category})
            await queue.put(("error", exc.to_dict()))
        except Exception:
            logger.exception("streaming audit crashed", extra={"url": page_url})
            await queue.put((
                "error",
                {"category": "internal", "message": "Audit failed", "remediation": "try_again"},
            ))
        finally:
            await queue.put(None)  # sentinel

    task = asyncio.create_task(run_and_signal_done())

    try:
        while True:
            item = await queue.get()
            if item is None:
                break
            event, data = item
            yield {"event": event, "data": json.dumps(data)}
    finally:
        # No cache: a disconnected client forfeits the result.
        if not task.done():
            task.cancel()
