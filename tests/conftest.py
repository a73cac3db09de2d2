"""Fixtures — fake indirection layer, analysis payloads, settings."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from visualsense.audit.models import ProxyResponse
from visualsense.audit.proxy import IndirectionUnreachable
from visualsense.config import Settings

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeFetcher:
    """In-memory FetchCapability: url -> ProxyResponse, exception, or (delay, response)."""

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes = routes or {}
        self.calls: list[str] = []
        self.completed: list[str] = []

    async def fetch(self, url: str) -> ProxyResponse:
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return ProxyResponse(status=404, content_type="text/html", body=b"")
        if isinstance(route, tuple):
            delay, route = route
            await asyncio.sleep(delay)
        if isinstance(route, BaseException):
            raise route
        self.completed.append(url)
        return route


def html_response(markup: str) -> ProxyResponse:
    return ProxyResponse(
        status=200,
        content_type="text/html; charset=utf-8",
        body=markup.encode(),
        charset="utf-8",
    )


def image_response(body: bytes = JPEG_BYTES, content_type: str = "image/jpeg") -> ProxyResponse:
    return ProxyResponse(status=200, content_type=content_type, body=body)


def unreachable(url: str) -> IndirectionUnreachable:
    return IndirectionUnreachable(url, "ConnectError")


def analysis_payload(image_count: int = 1, **summary_overrides: Any) -> dict[str, Any]:
    """A contract-conforming analysis response as the engine would return it."""
    summary = {
        "brandConsistency": 82,
        "creativeStyle": "Minimalist studio",
        "typographyNotes": "Clean sans-serif hierarchy",
        "layoutAnalysis": "Generous whitespace around hero",
        "marketingActionables": ["Add lifestyle shots", "Unify backgrounds"],
        "overallAesthetic": "Calm, premium confidence",
        "visualRoadmap": ["Step 1", "Step 2", "Step 3", "Step 4", "Step 5"],
        "competitors": [
            {
                "name": "Acme",
                "strengths": ["Consistent lighting"],
                "visualTakeaway": "Shoot on seamless white",
                "marketPosition": "Premium",
            }
        ],
    }
    summary.update(summary_overrides)
    images = [
        {
            "id": f"image-{i + 1}",
            "dominantColors": ["#ffffff", "#1a1a1a"],
            "composition": "Rule of thirds compliant",
            "lighting": "Soft-box 45-degree key light",
            "mood": "Calm",
            "aesthetic": "Professional",
            "qualityScore": 75 + i,
            "description": f"Product shot {i + 1}",
            "howToImprove": "Lift the mid-tones",
        }
        for i in range(image_count)
    ]
    return {"images": images, "summary": summary}


def analysis_text(image_count: int = 1) -> str:
    return json.dumps(analysis_payload(image_count))


@pytest.fixture
def settings() -> Settings:
    return Settings(  # type: ignore[call-arg]
        api_key="test-secret-key",
        gemini_api_key="test-gemini",
        gemini_model="gemini-test",
        proxy_url_template="",
        max_candidates=4,
        _env_file=None,
    )
