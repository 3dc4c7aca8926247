"""Read-only health report for a notebook's chat dependencies."""

from typing import List

from sqlalchemy.orm import Session

from chat_relay.config import Settings
from chat_relay.logging_config import get_logger
from chat_relay.models import Document
from chat_relay.services.dispatch_service import utc_timestamp
from chat_relay.services.eligibility_service import (
    fetch_sources,
    find_notebook,
    has_completed_source,
    parse_notebook_id,
)
from chat_relay.services.history_service import message_had_error, recent_messages

logger = get_logger("diagnostics_service")

STATUS_HEALTHY = "HEALTHY"
STATUS_ISSUES_FOUND = "ISSUES_FOUND"
RECENT_MESSAGE_LIMIT = 5
NOT_SET = "NOT_SET"

REC_SET_CHAT_URL = "Set NOTEBOOK_CHAT_URL in the service environment"
REC_SET_GENERATION_AUTH = "Set NOTEBOOK_GENERATION_AUTH in the service environment"
REC_NOTEBOOK_NOT_FOUND = "Notebook not found - check the notebook ID"
REC_NO_COMPLETED_SOURCES = "No completed sources found - wait for source processing to complete"
REC_NO_DOCUMENTS = "No documents in vector index - check if sources were properly processed and embedded"
REC_INVALID_WEBHOOK_URL = "NOTEBOOK_CHAT_URL should be a valid n8n webhook URL"


def check_environment(settings: Settings) -> dict:
    return {
        "hasNotebookChatUrl": bool(settings.notebook_chat_url),
        "hasNotebookGenerationAuth": bool(settings.notebook_generation_auth),
        "hasDatabaseUrl": bool(settings.database_url),
        "hasDatabasePassword": bool(settings.database_password),
        "notebookChatUrl": settings.notebook_chat_url or NOT_SET,
    }


def check_notebook(db: Session, notebook_id: str) -> dict:
    notebook, error = find_notebook(db, notebook_id)
    return {
        "exists": notebook is not None,
        "error": error,
        "data": notebook.to_dict() if notebook is not None else None,
    }


def check_sources(db: Session, notebook_id: str) -> dict:
    notebook_uuid = parse_notebook_id(notebook_id)
    # A malformed id cannot own any source.
    sources = fetch_sources(db, notebook_uuid) if notebook_uuid else []
    return {
        "count": len(sources),
        "statuses": [
            {"id": str(source.id), "title": source.title, "status": source.processing_status}
            for source in sources
        ],
        "hasCompletedSource": has_completed_source(sources),
    }


def check_vector_store(db: Session, notebook_id: str) -> dict:
    count = (
        db.query(Document)
        .filter(Document.document_metadata["notebook_id"].astext == str(notebook_id))
        .count()
    )
    return {"documentCount": count, "hasDocuments": count > 0}


def check_chat_history(db: Session, notebook_id: str) -> dict:
    rows = recent_messages(db, str(notebook_id), limit=RECENT_MESSAGE_LIMIT)
    return {
        "messageCount": len(rows),
        "recentMessages": [
            {
                "id": row.id,
                "role": (row.message or {}).get("type"),
                "hadError": message_had_error(row),
            }
            for row in rows
        ],
    }


def build_recommendations(report: dict) -> List[str]:
    """Remediation steps in a fixed order; empty means healthy."""
    environment = report["environment"]
    recommendations = []

    if not environment["hasNotebookChatUrl"]:
        recommendations.append(REC_SET_CHAT_URL)
    if not environment["hasNotebookGenerationAuth"]:
        recommendations.append(REC_SET_GENERATION_AUTH)
    if not report["notebook"]["exists"]:
        recommendations.append(REC_NOTEBOOK_NOT_FOUND)
    if not report["sources"]["hasCompletedSource"]:
        recommendations.append(REC_NO_COMPLETED_SOURCES)
    if not report["vectorStore"]["hasDocuments"]:
        recommendations.append(REC_NO_DOCUMENTS)
    # An unset URL is reported as NOT_SET and fails this check as well.
    if "webhook" not in environment["notebookChatUrl"]:
        recommendations.append(REC_INVALID_WEBHOOK_URL)

    return recommendations


def diagnose(db: Session, notebook_id: str, settings: Settings) -> dict:
    """Collect the report. Storage faults outside the notebook lookup propagate to the caller."""
    report = {
        "notebookId": notebook_id,
        "timestamp": utc_timestamp(),
        "environment": check_environment(settings),
        "notebook": check_notebook(db, notebook_id),
        "sources": check_sources(db, notebook_id),
        "vectorStore": check_vector_store(db, notebook_id),
        "chatHistory": check_chat_history(db, notebook_id),
    }
    recommendations = build_recommendations(report)
    report["recommendations"] = recommendations
    report["overallStatus"] = STATUS_HEALTHY if not recommendations else STATUS_ISSUES_FOUND

    logger.info(
        "Diagnostics completed",
        extra={
            "context": {
                "notebook_id": notebook_id,
                "overall_status": report["overallStatus"],
                "issues": len(recommendations),
            }
        },
    )
    return report
