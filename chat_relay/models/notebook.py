import uuid

from sqlalchemy import Column, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import relationship

from chat_relay.database import Base


class Notebook(Base):
    __tablename__ = "notebooks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(Text)
    user_id = Column(UUID(as_uuid=True))
    created_at = Column(TIMESTAMP(timezone=True))

    sources = relationship("Source", back_populates="notebook")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id) if self.id else None,
            "title": self.title,
            "user_id": str(self.user_id) if self.user_id else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
