from sqlalchemy import Column, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB

from chat_relay.database import Base


class ChatHistory(Base):
    """One turn of a notebook transcript, in the n8n chat memory format."""

    __tablename__ = "n8n_chat_histories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Text, nullable=False)
    message = Column(JSONB, nullable=False)  # {type, content, additional_kwargs, response_metadata}
