"""Merges analysis output back onto the assets that were submitted."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from visualsense.api.schemas import (
    AnalysisResponse,
    AuditMetadata,
    AuditResult,
    ImageAuditRecord,
    Usage,
)

from .models import FetchedAsset

logger = logging.getLogger(__name__)


def reconcile(
    analysis: AnalysisResponse,
    assets: list[FetchedAsset],
    page_url: str,
    *,
    audit_id: str | None = None,
    usage: Usage | None = None,
    metadata: AuditMetadata | None = None,
) -> AuditResult:
    """Pair analysis image ``i`` with fetched asset ``i``.

    The engine is told to answer in submission order; the ``id`` field is not
    cross-checked. Analysis images beyond the asset count keep empty identity
    fields. The summary passes through untouched.
    """
    records: list[ImageAuditRecord] = []
    for idx, image in enumerate(analysis.images):
        asset = assets[idx] if idx < len(assets) else None
        records.append(
            ImageAuditRecord(
                **image.model_dump(),
                url=asset.source_url if asset else "",
                base64=asset.encoded_payload if asset else "",
                mime_type=asset.content_type if asset else "",
            )
        )

    if len(analysis.images) != len(assets):
        logger.warning(
            "analysis image count differs from assets",
            extra={"url": page_url, "analyzed": len(analysis.images), "assets": len(assets)},
        )

    return AuditResult(
        audit_id=audit_id or uuid.uuid4().hex[:12],
        url=page_url,
        images=records,
        summary=analysis.summary,
        usage=usage or Usage(),
        metadata=metadata or AuditMetadata(),
        created_at=datetime.now(timezone.utc),
    )
