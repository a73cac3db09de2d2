"""Gemini invocation — one multimodal request per audit, strict JSON contract."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

from google import genai
from google.genai import types
from pydantic import ValidationError

from visualsense.api.schemas import AnalysisResponse, Usage

from .errors import AnalysisContractViolation, AnalysisEngineFailure
from .models import FetchedAsset
from .prompts import ANALYSIS_SCHEMA, format_audit_prompt

logger = logging.getLogger(__name__)

_SCORE_RANGE = (0.0, 100.0)


@dataclass(frozen=True)
class AnalysisOutcome:
    """A validated analysis response plus the token usage it cost."""

    response: AnalysisResponse
    usage: Usage


def build_parts(assets: list[FetchedAsset], page_url: str) -> list[types.Part]:
    """One inline image part per asset, in order, followed by the instruction."""
    parts = [
        types.Part.from_bytes(
            data=base64.b64decode(asset.encoded_payload),
            mime_type=asset.content_type,
        )
        for asset in assets
    ]
    parts.append(types.Part.from_text(text=format_audit_prompt(page_url, len(assets))))
    return parts


def parse_analysis(text: str | None) -> AnalysisResponse:
    """Validate the engine's raw text against the analysis contract.

    Raises:
        AnalysisEngineFailure: there is no text at all.
        AnalysisContractViolation: the text is not JSON or does not match
            the schema (a missing ``summary`` is never defaulted).
    """
    if not text or not text.strip():
        raise AnalysisEngineFailure("AI engine failure: the analysis returned no content.")
    try:
        return AnalysisResponse.model_validate_json(text)
    except ValidationError as exc:
        logger.warning(
            "analysis response violates contract",
            extra={"errors": exc.error_count(), "first_error": str(exc.errors()[0]["loc"])},
        )
        raise AnalysisContractViolation() from exc


def _warn_on_suspect_scores(analysis: AnalysisResponse, page_url: str) -> None:
    low, high = _SCORE_RANGE
    suspect = [img.id for img in analysis.images if not low <= img.quality_score <= high]
    if not low <= analysis.summary.brand_consistency <= high:
        suspect.append("summary.brandConsistency")
    if suspect:
        logger.warning("analysis scores out of range", extra={"url": page_url, "fields": suspect})


def _usage(response: types.GenerateContentResponse) -> Usage:
    meta = response.usage_metadata
    if meta is None:
        return Usage()
    prompt = meta.prompt_token_count or 0
    completion = meta.candidates_token_count or 0
    return Usage(
        prompt_tokens=prompt,
        completion_tokens=completion,
        total_tokens=meta.total_token_count or prompt + completion,
    )


async def invoke(
    assets: list[FetchedAsset],
    page_url: str,
    client: genai.Client,
    model: str,
) -> AnalysisOutcome:
    """Submit every asset plus the audit instruction in a single request.

    No retry: a failed call aborts the audit.
    """
    config = types.GenerateContentConfig(
        response_mime_type="application/json",
        response_schema=ANALYSIS_SCHEMA,
    )
    logger.info(
        "analysis requested",
        extra={"url": page_url, "model": model, "image_count": len(assets)},
    )
    try:
        response = await client.aio.models.generate_content(
            model=model,
            contents=build_parts(assets, page_url),
            config=config,
        )
    except Exception as exc:
        logger.warning("analysis call failed", extra={"url": page_url, "model": model}, exc_info=True)
        raise AnalysisEngineFailure(f"AI analysis error: {type(exc).__name__}") from exc

    analysis = parse_analysis(response.text)
    _warn_on_suspect_scores(analysis, page_url)
    usage = _usage(response)
    logger.info(
        "analysis received",
        extra={
            "url": page_url,
            "images_analyzed": len(analysis.images),
            "total_tokens": usage.total_tokens,
        },
    )
    return AnalysisOutcome(response=analysis, usage=usage)
