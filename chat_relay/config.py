from typing import Optional

from pydantic_settings import BaseSettings

DEFAULT_WEBHOOK_ERROR_MARKERS = ["Sorry, I encountered an error"]


class Settings(BaseSettings):
    database_url: Optional[str] = None
    database_password: Optional[str] = None
    notebook_chat_url: Optional[str] = None
    notebook_generation_auth: Optional[str] = None
    notebook_chat_timeout: Optional[float] = None
    # Substrings the chat workflow uses in its canned apology when it fails internally.
    webhook_error_markers: list[str] = DEFAULT_WEBHOOK_ERROR_MARKERS
    log_level: str = "INFO"
    debug: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()


def get_settings() -> Settings:
    return settings
