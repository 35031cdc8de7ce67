from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Identity(BaseModel):
    """Identité de l'appelant, issue d'un token vérifié."""
    uid: str
    email: Optional[str] = None
    claims: Dict[str, Any] = Field(default_factory=dict)
