"""POST /audit endpoint handler."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from visualsense.api.schemas import AuditRequest, AuditResult
from visualsense.api.service import run_audit, start_background_audit, stream_audit
from visualsense.audit.engine import AuditEngine
from visualsense.audit.errors import AuditError
from visualsense.audit.tasks import CallbackNotifier
from visualsense.auth.dependencies import require_api_key
from visualsense.config import Settings

router = APIRouter(dependencies=[Depends(require_api_key)])

ERROR_STATUS = {
    "blocked": 502,
    "no_assets": 422,
    "analysis": 502,
}


def _get_engine(request: Request) -> AuditEngine:
    return request.app.state.engine


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def audit_error_response(exc: AuditError) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.category, 500),
        content=exc.to_dict(),
    )


@router.post("/audit", response_model=AuditResult)
async def create_audit(
    body: AuditRequest,
    engine: AuditEngine = Depends(_get_engine),
    settings: Settings = Depends(_get_settings),
):
    if body.mode == "background":
        if not body.callback_url:
            raise HTTPException(
                status_code=422,
                detail="callback_url is required for background mode",
            )
        notifier = CallbackNotifier.from_settings(settings)
        if not notifier.accepts(body.callback_url):
            raise HTTPException(
                status_code=422,
                detail="callback_url host not in ALLOWED_CALLBACK_HOSTS",
            )
        return JSONResponse(status_code=202, content=start_background_audit(engine, notifier, body))

    if body.mode == "stream":
        return EventSourceResponse(stream_audit(engine, body))

    try:
        return await run_audit(engine, body)
    except AuditError as exc:
        return audit_error_response(exc)
