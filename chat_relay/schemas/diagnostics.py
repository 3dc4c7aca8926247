from typing import Optional

from pydantic import BaseModel


class DiagnosticsRequest(BaseModel):
    notebookId: Optional[str] = None
