from typing import Any, Optional

from pydantic import BaseModel, field_validator


class RelayRequest(BaseModel):
    session_id: Optional[str] = None
    message: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("session_id", "message", "user_id", mode="before")
    @classmethod
    def scalars_as_text(cls, value: Any) -> Any:
        # Numbers and booleans are read as text; falsy ones count as absent.
        if isinstance(value, (bool, int, float)):
            if not value:
                return None
            return "true" if value is True else str(value)
        return value

    def field_presence(self) -> dict[str, bool]:
        """Presence flags for the required fields."""
        return {"session_id": bool(self.session_id), "message": bool(self.message)}

    @property
    def is_complete(self) -> bool:
        return all(self.field_presence().values())
