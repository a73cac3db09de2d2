"""Prompt template and response schema for the visual audit."""

from __future__ import annotations

from typing import Any

AUDIT_PROMPT = """\
Role: Senior Art Director & E-commerce Strategy Expert.
Task: Conduct a high-fidelity visual audit of the {image_count} attached \
product images from {page_url}.

Audit guidelines:
1. Return exactly one entry in "images" per attached image, in the same \
order the images were attached. Use "image-1", "image-2", ... as ids.
2. For "lighting", describe the technical setup (e.g. "Soft-box 45-degree key \
light", "Natural overcast lighting").
3. For "composition", name specific photographic rules (e.g. "Rule of thirds \
compliant", "Central focus with shallow depth of field").
4. For "howToImprove", give one specific technical photography or \
post-processing change.
5. "qualityScore" and "brandConsistency" are percentages from 0 to 100.
6. For "visualRoadmap", give 5 sequential, actionable steps the merchant \
should take in the next 30 days to increase conversion through design.
7. "overallAesthetic" should capture the emotional value proposition.
8. Benchmark the page against 3 direct competitors in "competitors".

Respond with JSON that strictly matches the provided schema. Do not add, \
rename or omit fields.
"""


def _string() -> dict[str, Any]:
    return {"type": "STRING"}


def _string_list(description: str | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "ARRAY", "items": _string()}
    if description:
        schema["description"] = description
    return schema


_IMAGE_FIELDS = [
    "id", "dominantColors", "composition", "lighting", "mood",
    "aesthetic", "qualityScore", "description", "howToImprove",
]
_COMPETITOR_FIELDS = ["name", "strengths", "visualTakeaway", "marketPosition"]
_SUMMARY_FIELDS = [
    "brandConsistency", "creativeStyle", "typographyNotes", "layoutAnalysis",
    "marketingActionables", "overallAesthetic", "visualRoadmap", "competitors",
]

ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "images": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": _string(),
                    "dominantColors": _string_list(),
                    "composition": _string(),
                    "lighting": _string(),
                    "mood": _string(),
                    "aesthetic": _string(),
                    "qualityScore": {"type": "NUMBER"},
                    "description": _string(),
                    "howToImprove": {
                        "type": "STRING",
                        "description": "Highly technical photography or post-processing advice.",
                    },
                },
                "required": _IMAGE_FIELDS,
            },
        },
        "summary": {
            "type": "OBJECT",
            "properties": {
                "brandConsistency": {"type": "NUMBER"},
                "creativeStyle": _string(),
                "typographyNotes": _string(),
                "layoutAnalysis": _string(),
                "marketingActionables": _string_list(),
                "overallAesthetic": _string(),
                "visualRoadmap": _string_list(
                    "Specific 5-step roadmap to professionalize the site's look."
                ),
                "competitors": {
                    "type": "ARRAY",
                    "items": {
                        "type": "OBJECT",
                        "properties": {
                            "name": _string(),
                            "strengths": _string_list(),
                            "visualTakeaway": _string(),
                            "marketPosition": _string(),
                        },
                        "required": _COMPETITOR_FIELDS,
                    },
                },
            },
            "required": _SUMMARY_FIELDS,
        },
    },
    "required": ["images", "summary"],
}


def format_audit_prompt(page_url: str, image_count: int) -> str:
    return AUDIT_PROMPT.format(page_url=page_url, image_count=image_count)
