import json
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chat_relay.logging_config import get_logger
from chat_relay.models import ChatHistory
from chat_relay.services.result import Result

logger = get_logger("history_service")

ROLE_HUMAN = "human"
ROLE_AI = "ai"


def assistant_envelope(text: str) -> str:
    """Serialize assistant text into the {output: [{text, citations}]} envelope renderers expect."""
    return json.dumps({"output": [{"text": text, "citations": []}]}, ensure_ascii=False)


def build_history_message(role: str, content: str, response_metadata: Optional[dict] = None) -> dict:
    return {
        "type": role,
        "content": content,
        "additional_kwargs": {},
        "response_metadata": response_metadata or {},
    }


def append_message(
    db: Session,
    session_id: str,
    role: str,
    content: str,
    response_metadata: Optional[dict] = None,
) -> Result[ChatHistory]:
    """Insert one message into the notebook transcript. Never raises."""
    row = ChatHistory(
        session_id=session_id,
        message=build_history_message(role, content, response_metadata),
    )
    try:
        db.add(row)
        db.commit()
    except Exception as e:
        logger.error(
            "Failed to append chat history message",
            extra={"context": {"session_id": session_id, "role": role, "error": str(e)}},
        )
        try:
            db.rollback()
        except SQLAlchemyError as rollback_error:
            logger.error(f"Rollback after failed history append failed: {rollback_error}")
        return Result.failure(str(e), "history_write_failed")

    return Result.success(row)


def save_human_message(db: Session, session_id: str, text: str) -> Result[ChatHistory]:
    return append_message(db, session_id, ROLE_HUMAN, text)


def save_assistant_message(
    db: Session,
    session_id: str,
    text: str,
    response_metadata: Optional[dict] = None,
) -> Result[ChatHistory]:
    return append_message(db, session_id, ROLE_AI, assistant_envelope(text), response_metadata)


def recent_messages(db: Session, session_id: str, limit: int = 5) -> List[ChatHistory]:
    """Most recently inserted messages first."""
    return (
        db.query(ChatHistory)
        .filter(ChatHistory.session_id == session_id)
        .order_by(ChatHistory.id.desc())
        .limit(limit)
        .all()
    )


def message_had_error(row: ChatHistory) -> bool:
    message = row.message if isinstance(row.message, dict) else {}
    metadata = message.get("response_metadata")
    if not isinstance(metadata, dict):
        return False
    return bool(metadata.get("error", False))
