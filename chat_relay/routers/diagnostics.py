from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from chat_relay.config import Settings, get_settings
from chat_relay.database import get_db
from chat_relay.logging_config import get_logger
from chat_relay.routers.responses import json_response, preflight_response
from chat_relay.schemas.diagnostics import DiagnosticsRequest
from chat_relay.services.diagnostics_service import diagnose
from chat_relay.services.dispatch_service import utc_timestamp

router = APIRouter(tags=["diagnostics"])

logger = get_logger("diagnostics_router")


@router.options("/chat-diagnostics")
async def chat_diagnostics_preflight():
    return preflight_response("ok")


@router.post("/chat-diagnostics")
async def chat_diagnostics(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Report on everything a notebook needs before chat can work."""
    try:
        payload = await request.json()
        body = DiagnosticsRequest.model_validate(payload if isinstance(payload, dict) else {})
        if not body.notebookId:
            return json_response({"error": "Notebook ID is required"}, status_code=400)

        report = await run_in_threadpool(diagnose, db, body.notebookId, settings)
    except Exception as e:
        logger.error("Error in chat diagnostics", exc_info=True)
        return json_response(
            {
                "error": str(e) or "Diagnostics failed",
                "timestamp": utc_timestamp(),
            },
            status_code=500,
        )

    return json_response(report)
