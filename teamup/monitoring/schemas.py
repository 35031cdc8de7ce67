from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ErrorLogEntry(BaseModel):
    """Erreur capturée côté client."""
    timestamp: Optional[str] = None
    message: str = ""
    stack: Optional[str] = None
    url: str = ""
    userAgent: str = ""
    userId: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class SaveLogsResponse(BaseModel):
    success: bool = True
    saved: int


class ErrorLogsResponse(BaseModel):
    date: str
    logs: List[Dict[str, Any]]
