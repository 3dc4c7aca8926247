import uuid

from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import relationship

from chat_relay.database import Base

PROCESSING_COMPLETED = "completed"


class Source(Base):
    __tablename__ = "sources"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    notebook_id = Column(UUID(as_uuid=True), ForeignKey("notebooks.id"), nullable=False)
    title = Column(Text)
    type = Column(Text)
    processing_status = Column(Text)  # pending, processing, completed, failed
    created_at = Column(TIMESTAMP(timezone=True))

    notebook = relationship("Notebook", back_populates="sources")
