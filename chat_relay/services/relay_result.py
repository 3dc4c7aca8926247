"""Terminal outcomes of a relay request, one type per response shape."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union

SUCCESS_MESSAGE = "Message sent to chat service successfully"


@dataclass(frozen=True)
class ValidationFailed:
    status_code: ClassVar[int] = 400
    session_id: bool
    message: bool

    def to_body(self) -> dict:
        return {
            "error": "session_id and message are required",
            "details": {"session_id": self.session_id, "message": self.message},
        }


@dataclass(frozen=True)
class NotebookNotFound:
    status_code: ClassVar[int] = 404
    details: Optional[str] = None

    def to_body(self) -> dict:
        return {"error": "Notebook not found or access denied", "details": self.details}


@dataclass(frozen=True)
class SourceCheckFailed:
    status_code: ClassVar[int] = 500
    details: str

    def to_body(self) -> dict:
        return {"error": "Failed to check notebook sources", "details": self.details}


@dataclass(frozen=True)
class NotEligible:
    status_code: ClassVar[int] = 400

    def to_body(self) -> dict:
        return {
            "error": "No processed sources available for this notebook",
            "details": "Please wait for sources to finish processing before chatting",
        }


@dataclass(frozen=True)
class ConfigurationMissing:
    status_code: ClassVar[int] = 500
    setting: str
    error: str

    def to_body(self) -> dict:
        return {"error": self.error, "details": f"{self.setting} environment variable not set"}


@dataclass(frozen=True)
class TransportFailed:
    status_code: ClassVar[int] = 500
    webhook_status: int
    body: str

    def to_body(self) -> dict:
        return {
            "error": f"n8n webhook failed with status: {self.webhook_status}",
            "details": self.body,
            "suggestion": "Check your n8n workflow configuration and credentials",
        }


@dataclass(frozen=True)
class WorkflowFailed:
    status_code: ClassVar[int] = 500
    response: Any = field(default=None, hash=False)

    def to_body(self) -> dict:
        return {
            "success": False,
            "error": "n8n workflow returned an error",
            "details": "Check the chat for debugging information",
            "n8n_response": self.response,
        }


@dataclass(frozen=True)
class Delivered:
    status_code: ClassVar[int] = 200
    data: str

    def to_body(self) -> dict:
        return {"success": True, "message": SUCCESS_MESSAGE, "data": self.data}


@dataclass(frozen=True)
class UnexpectedFailure:
    status_code: ClassVar[int] = 500
    error: str

    def to_body(self) -> dict:
        return {
            "error": self.error or "Failed to send message to chat service",
            "details": "Check the function logs for more information",
        }


DispatchFailure = Union[TransportFailed, WorkflowFailed]

RelayResult = Union[
    ValidationFailed,
    NotebookNotFound,
    SourceCheckFailed,
    NotEligible,
    ConfigurationMissing,
    TransportFailed,
    WorkflowFailed,
    Delivered,
    UnexpectedFailure,
]
