from sqlalchemy import BigInteger, Column, Text
from sqlalchemy.dialects.postgresql import JSONB

from chat_relay.database import Base


class Document(Base):
    """Embedded chunk in the vector index, tagged to a notebook through metadata."""

    __tablename__ = "documents"

    id = Column(BigInteger, primary_key=True)
    content = Column(Text)
    document_metadata = Column("metadata", JSONB, nullable=False, default=dict)
