"""Outbound call to the chat workflow webhook and classification of its reply."""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional, Tuple

import httpx

from chat_relay.config import DEFAULT_WEBHOOK_ERROR_MARKERS
from chat_relay.logging_config import get_logger, preview

logger = get_logger("dispatch_service")


class DispatchStatus(str, Enum):
    SUCCESS = "success"
    TRANSPORT_FAILURE = "transport_failure"
    SEMANTIC_FAILURE = "semantic_failure"


@dataclass
class DispatchOutcome:
    status: DispatchStatus
    status_code: int
    body: str
    parsed: Any = None

    @property
    def ok(self) -> bool:
        return self.status == DispatchStatus.SUCCESS


def utc_timestamp() -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_webhook_payload(session_id: str, message: str, user_id: Optional[str] = None) -> dict:
    payload = {"session_id": session_id, "message": message}
    if user_id is not None:
        payload["user_id"] = user_id
    payload["timestamp"] = utc_timestamp()
    return payload


def parse_json_body(body: str) -> Tuple[bool, Any]:
    try:
        return True, json.loads(body)
    except ValueError:
        return False, None


def indicates_workflow_error(parsed: Any, error_markers: Iterable[str]) -> bool:
    """Detect a workflow that answered 2xx but failed internally.

    Either the body carries a truthy ``error`` field, or one of the ``output``
    segments contains a known canned-apology marker. The marker match is a
    heuristic tied to the workflow's current wording.
    """
    if not isinstance(parsed, dict):
        return False
    if parsed.get("error"):
        return True

    output = parsed.get("output")
    if not isinstance(output, list):
        return False

    markers = [marker for marker in error_markers if marker]
    for item in output:
        text = item.get("text") if isinstance(item, dict) else None
        if isinstance(text, str) and any(marker in text for marker in markers):
            return True
    return False


def classify_response(
    status_code: int,
    body: str,
    error_markers: Optional[Iterable[str]] = None,
) -> DispatchOutcome:
    if not 200 <= status_code < 300:
        return DispatchOutcome(DispatchStatus.TRANSPORT_FAILURE, status_code, body)

    parsed_ok, parsed = parse_json_body(body)
    if not parsed_ok:
        # Plain-text replies are opaque successes.
        return DispatchOutcome(DispatchStatus.SUCCESS, status_code, body)

    markers = DEFAULT_WEBHOOK_ERROR_MARKERS if error_markers is None else error_markers
    if indicates_workflow_error(parsed, markers):
        return DispatchOutcome(DispatchStatus.SEMANTIC_FAILURE, status_code, body, parsed)
    return DispatchOutcome(DispatchStatus.SUCCESS, status_code, body, parsed)


def dispatch_message(
    endpoint: str,
    auth_token: str,
    payload: dict,
    *,
    error_markers: Optional[Iterable[str]] = None,
    timeout: Optional[float] = None,
) -> DispatchOutcome:
    """POST the payload once. Network errors propagate; HTTP statuses are classified."""
    client_kwargs = {} if timeout is None else {"timeout": timeout}
    headers = {"Content-Type": "application/json", "Authorization": auth_token}

    logger.info(
        "Sending message to chat webhook",
        extra={"context": {"session_id": payload.get("session_id")}},
    )
    with httpx.Client(**client_kwargs) as client:
        response = client.post(endpoint, json=payload, headers=headers)

    outcome = classify_response(response.status_code, response.text, error_markers)
    if outcome.status == DispatchStatus.TRANSPORT_FAILURE:
        logger.error(
            f"Chat webhook responded with status: {outcome.status_code}",
            extra={"context": {"body": preview(outcome.body)}},
        )
    elif outcome.status == DispatchStatus.SEMANTIC_FAILURE:
        logger.error(
            "Chat workflow returned an error response",
            extra={"context": {"body": preview(outcome.body)}},
        )
    else:
        logger.info("Chat webhook response received", extra={"context": {"status": outcome.status_code}})
    return outcome
