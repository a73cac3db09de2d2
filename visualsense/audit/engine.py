"""Audit engine — orchestrates the retrieve -> extract -> resolve -> fetch -> analyze pipeline."""

from __future__ import annotations

import logging
import uuid

from google import genai

from visualsense.api.schemas import AuditMetadata, AuditResult
from visualsense.config import Settings

from .analysis import invoke
from .events import EventCallback, emit_event, emit_status
from .extractor import extract_candidates
from .fetcher import fetch_all
from .proxy import FetchCapability, ProxyFetcher
from .reconciler import reconcile
from .resolver import resolve
from .retriever import retrieve_markup

logger = logging.getLogger(__name__)


class AuditEngine:
    """Runs one visual audit per call; holds configuration and clients only."""

    def __init__(
        self,
        settings: Settings,
        fetcher: FetchCapability | None = None,
        client: genai.Client | None = None,
    ) -> None:
        self._settings = settings
        self._model = settings.gemini_model
        self._fetcher = fetcher or ProxyFetcher(
            url_template=settings.proxy_url_template,
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
        )
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self._settings.gemini_api_key)
        return self._client

    async def run(
        self,
        page_url: str,
        on_event: EventCallback | None = None,
    ) -> AuditResult:
        """Execute the full audit pipeline for *page_url*.

        Any ``AuditError`` aborts the run; no partial result is produced.
        """
        audit_id = uuid.uuid4().hex[:12]
        logger.info(
            "audit pipeline started",
            extra={"audit_id": audit_id, "url": page_url, "model": self._model},
        )
        await emit_event(on_event, "started", {"audit_id": audit_id, "url": page_url})

        # --- Stage 1: Retrieve markup ---
        await emit_status(on_event, "retrieving", "Accessing domain...")
        markup = await retrieve_markup(page_url, self._fetcher)

        # --- Stages 2-3: Extract and resolve candidates ---
        await emit_status(on_event, "extracting", "Identifying visual assets...")
        raw_refs = (c.raw for c in extract_candidates(markup, page_url))
        urls = resolve(raw_refs, page_url, max_candidates=self._settings.max_candidates)

        # --- Stage 4: Fetch assets ---
        await emit_status(on_event, "fetching", f"Encoding {len(urls)} design assets...")
        assets = await fetch_all(urls, self._fetcher)

        # --- Stage 5: Analyze ---
        await emit_status(on_event, "analyzing", "Gemini AI is auditing design...")
        outcome = await invoke(assets, page_url, self.client, self._model)

        # --- Stage 6: Reconcile ---
        await emit_status(on_event, "reconciling", "Assembling audit report...")
        result = reconcile(
            outcome.response,
            assets,
            page_url,
            audit_id=audit_id,
            usage=outcome.usage,
            metadata=AuditMetadata(
                model=self._model,
                candidate_count=len(urls),
                fetched_count=len(assets),
                analyzed_count=len(outcome.response.images),
            ),
        )

        logger.info(
            "audit pipeline completed",
            extra={
                "audit_id": audit_id,
                "url": page_url,
                "candidates": len(urls),
                "assets": len(assets),
                "images": len(result.images),
                "total_tokens": result.usage.total_tokens,
            },
        )
        await emit_event(on_event, "result", result.model_dump(mode="json", by_alias=True))
        await emit_event(on_event, "done", {})
        return result
