"""Request/response Pydantic models.

Wire names are camelCase (the analysis engine's schema and the report
consumer both use them); Python attributes are snake_case.
"""

from datetime import datetime
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuditRequest(BaseModel):
    url: AnyHttpUrl
    mode: Literal["sync", "stream", "background"] = "sync"
    callback_url: str | None = None


# --- Analysis engine contract ---


class ImageAnalysis(CamelModel):
    id: str
    dominant_colors: list[str]
    composition: str
    lighting: str
    mood: str
    aesthetic: str
    quality_score: float
    description: str
    how_to_improve: str


class CompetitorInsight(CamelModel):
    name: str
    strengths: list[str]
    visual_takeaway: str
    market_position: str


class SiteSummary(CamelModel):
    brand_consistency: float
    creative_style: str
    typography_notes: str
    layout_analysis: str
    marketing_actionables: list[str]
    overall_aesthetic: str
    visual_roadmap: list[str]
    competitors: list[CompetitorInsight]


class AnalysisResponse(CamelModel):
    images: list[ImageAnalysis]
    summary: SiteSummary


# --- Audit result ---


class ImageAuditRecord(ImageAnalysis):
    url: str = ""
    base64: str = ""
    mime_type: str = ""


class Usage(CamelModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class AuditMetadata(CamelModel):
    model: str = ""
    candidate_count: int = 0
    fetched_count: int = 0
    analyzed_count: int = 0


class AuditResult(CamelModel):
    audit_id: str
    url: str
    images: list[ImageAuditRecord] = []
    summary: SiteSummary
    usage: Usage = Usage()
    metadata: AuditMetadata = AuditMetadata()
    created_at: datetime


class AuditErrorResponse(BaseModel):
    category: str
    message: str
    remediation: str
