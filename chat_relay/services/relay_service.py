"""Request lifecycle for relaying a chat message to the notebook chat workflow.

Stages run in a fixed order: validate the request, check configuration,
check notebook eligibility, record the human message, dispatch to the
webhook, classify the reply. Each stage either hands off to the next or
ends the request with one of the types in ``relay_result``. Anything that
escapes the stages is reported as ``UnexpectedFailure`` after a
best-effort note in the notebook transcript.
"""

from typing import Optional, Union

from sqlalchemy.orm import Session

from chat_relay.config import Settings
from chat_relay.logging_config import get_logger
from chat_relay.schemas.relay import RelayRequest
from chat_relay.services.dispatch_service import (
    DispatchOutcome,
    DispatchStatus,
    build_webhook_payload,
    dispatch_message,
    utc_timestamp,
)
from chat_relay.services.eligibility_service import check_eligibility
from chat_relay.services.history_service import save_assistant_message, save_human_message
from chat_relay.services.relay_result import (
    ConfigurationMissing,
    Delivered,
    DispatchFailure,
    NotEligible,
    NotebookNotFound,
    RelayResult,
    SourceCheckFailed,
    TransportFailed,
    UnexpectedFailure,
    ValidationFailed,
    WorkflowFailed,
)

logger = get_logger("relay_service")

MSG_STATUS_ERROR = (
    "Sorry, I encountered an error processing your request. "
    "The chat service responded with status {status}. "
    "Please check your n8n configuration and try again."
)
MSG_WORKFLOW_ERROR = (
    "I'm having trouble accessing your sources right now. This could be due to:\n\n"
    "1. **Sources still processing** - Please wait for all sources to finish processing\n"
    "2. **n8n workflow configuration** - Check your n8n Chat workflow credentials and connections\n"
    "3. **Vector store issues** - Verify your vector store is properly configured\n"
    "4. **Missing API keys** - Ensure OpenAI and other required API keys are set in n8n\n\n"
    "Please check your n8n workflow logs for more details."
)
MSG_TECHNICAL_ERROR = (
    "Sorry, I encountered a technical error: {error}. "
    "Please try again or contact support if the issue persists."
)


class RequestParseError(Exception):
    """The request body could not be read as a relay request."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def check_configuration(settings: Settings) -> Optional[ConfigurationMissing]:
    if not settings.notebook_chat_url:
        return ConfigurationMissing(setting="NOTEBOOK_CHAT_URL", error="Chat service not configured")
    if not settings.notebook_generation_auth:
        return ConfigurationMissing(
            setting="NOTEBOOK_GENERATION_AUTH",
            error="Chat service authentication not configured",
        )
    return None


def relay_message(
    parsed: Union[RelayRequest, RequestParseError],
    db: Session,
    settings: Settings,
) -> RelayResult:
    if isinstance(parsed, RequestParseError):
        logger.error("Unreadable relay request", extra={"context": {"error": parsed.message}})
        return UnexpectedFailure(parsed.message)

    logger.info(
        "Received message",
        extra={
            "context": {
                "session_id": parsed.session_id,
                "user_id": parsed.user_id,
                "message_length": len(parsed.message or ""),
            }
        },
    )

    if not parsed.is_complete:
        presence = parsed.field_presence()
        logger.warning("Missing required fields", extra={"context": presence})
        return ValidationFailed(**presence)

    try:
        return _relay(parsed, db, settings)
    except Exception as e:
        logger.error(
            "Error relaying chat message",
            exc_info=True,
            extra={"context": {"session_id": parsed.session_id}},
        )
        _record_unexpected_failure(db, parsed.session_id, e)
        return UnexpectedFailure(str(e))


def _relay(request: RelayRequest, db: Session, settings: Settings) -> RelayResult:
    missing = check_configuration(settings)
    if missing:
        logger.error(f"{missing.setting} environment variable not set")
        return missing

    eligibility = check_eligibility(db, request.session_id)
    if not eligibility.exists:
        return NotebookNotFound(details=eligibility.error)
    if eligibility.sources_unreadable:
        return SourceCheckFailed(details=eligibility.sources_error)
    if not eligibility.has_completed_source:
        logger.info(
            "No processed sources found for notebook",
            extra={"context": {"session_id": request.session_id}},
        )
        return NotEligible()

    saved = save_human_message(db, request.session_id, request.message)
    if not saved.ok:
        logger.error(
            "Could not save user message, continuing",
            extra={"context": {"session_id": request.session_id, "error": saved.error}},
        )

    outcome = dispatch_message(
        settings.notebook_chat_url,
        settings.notebook_generation_auth,
        build_webhook_payload(request.session_id, request.message, request.user_id),
        error_markers=settings.webhook_error_markers,
        timeout=settings.notebook_chat_timeout,
    )
    if outcome.status == DispatchStatus.SUCCESS:
        return Delivered(data=outcome.body)
    return _report_dispatch_failure(db, request.session_id, outcome)


def _report_dispatch_failure(db: Session, session_id: str, outcome: DispatchOutcome) -> DispatchFailure:
    if outcome.status == DispatchStatus.TRANSPORT_FAILURE:
        text = MSG_STATUS_ERROR.format(status=outcome.status_code)
        metadata = {"error": True, "status": outcome.status_code}
        result = TransportFailed(webhook_status=outcome.status_code, body=outcome.body)
    else:
        text = MSG_WORKFLOW_ERROR
        metadata = {"error": True, "n8n_response": outcome.parsed, "timestamp": utc_timestamp()}
        result = WorkflowFailed(response=outcome.parsed)

    saved = save_assistant_message(db, session_id, text, metadata)
    if not saved.ok:
        logger.error(
            "Could not record dispatch failure in chat history",
            extra={"context": {"session_id": session_id, "error": saved.error}},
        )
    return result


def _record_unexpected_failure(db: Session, session_id: Optional[str], error: Exception) -> None:
    if not session_id:
        return
    try:
        db.rollback()
        save_assistant_message(
            db,
            session_id,
            MSG_TECHNICAL_ERROR.format(error=error),
            {"error": True, "errorMessage": str(error)},
        )
    except Exception as save_error:
        logger.error(f"Failed to save error message to chat history: {save_error}")
