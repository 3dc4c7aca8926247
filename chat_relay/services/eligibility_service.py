from dataclasses import dataclass
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chat_relay.logging_config import get_logger
from chat_relay.models import PROCESSING_COMPLETED, Notebook, Source

logger = get_logger("eligibility_service")


@dataclass
class Eligibility:
    exists: bool
    has_completed_source: bool = False
    error: Optional[str] = None
    sources_error: Optional[str] = None
    notebook: Optional[Notebook] = None

    @property
    def sources_unreadable(self) -> bool:
        return self.sources_error is not None


def parse_notebook_id(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except ValueError:
        return None


def find_notebook(db: Session, notebook_id: str) -> Tuple[Optional[Notebook], Optional[str]]:
    """Look up exactly one notebook. Returns (notebook, None) or (None, error)."""
    notebook_uuid = parse_notebook_id(notebook_id)
    if notebook_uuid is None:
        return None, f"Invalid notebook id: {notebook_id}"

    try:
        return db.query(Notebook).filter(Notebook.id == notebook_uuid).one(), None
    except SQLAlchemyError as e:
        # NoResultFound and MultipleResultsFound land here too.
        db.rollback()
        return None, str(e)


def fetch_sources(db: Session, notebook_id: UUID) -> List[Source]:
    return db.query(Source).filter(Source.notebook_id == notebook_id).all()


def has_completed_source(sources: List[Source]) -> bool:
    return any(source.processing_status == PROCESSING_COMPLETED for source in sources)


def check_eligibility(db: Session, notebook_id: str) -> Eligibility:
    """Check that a notebook exists and has at least one fully processed source."""
    notebook, error = find_notebook(db, notebook_id)
    if notebook is None:
        logger.info(
            "Notebook not found or inaccessible",
            extra={"context": {"notebook_id": notebook_id, "error": error}},
        )
        return Eligibility(exists=False, error=error)

    try:
        sources = fetch_sources(db, notebook.id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "Failed to fetch notebook sources",
            extra={"context": {"notebook_id": notebook_id, "error": str(e)}},
        )
        return Eligibility(exists=True, sources_error=str(e), notebook=notebook)

    return Eligibility(
        exists=True,
        has_completed_source=has_completed_source(sources),
        notebook=notebook,
    )
