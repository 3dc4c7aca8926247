from chat_relay.models.chat_history import ChatHistory
from chat_relay.models.document import Document
from chat_relay.models.notebook import Notebook
from chat_relay.models.source import PROCESSING_COMPLETED, Source

__all__ = [
    "Notebook",
    "Source",
    "Document",
    "ChatHistory",
    "PROCESSING_COMPLETED",
]
