from typing import Union

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session

from chat_relay.config import Settings, get_settings
from chat_relay.database import get_db
from chat_relay.routers.responses import json_response, preflight_response
from chat_relay.schemas.relay import RelayRequest
from chat_relay.services.relay_service import RequestParseError, relay_message

router = APIRouter(tags=["chat"])


async def _parse_relay_request(request: Request) -> Union[RelayRequest, RequestParseError]:
    """Read the body once; every later stage works from the parsed value."""
    try:
        payload = await request.json()
    except ValueError as exc:
        return RequestParseError(f"Invalid JSON payload: {exc}")

    if not isinstance(payload, dict):
        return RequestParseError("Invalid payload format")

    try:
        return RelayRequest.model_validate(payload)
    except ValidationError as exc:
        return RequestParseError(str(exc))


@router.options("/send-chat-message")
async def send_chat_message_preflight():
    return preflight_response()


@router.post("/send-chat-message")
async def send_chat_message(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Relay a notebook chat message to the n8n chat workflow."""
    parsed = await _parse_relay_request(request)
    result = await run_in_threadpool(relay_message, parsed, db, settings)
    return json_response(result.to_body(), result.status_code)
