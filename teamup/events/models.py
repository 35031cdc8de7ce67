from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class MembershipRole(str, Enum):
    ORGANISATEUR = "organisateur"
    PARTICIPANT = "participant"


class Event(BaseModel):
    """Document de la collection ``events``."""
    id: str = Field(alias="_id")
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    location_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_by: Optional[str] = None
    max_participants: Optional[int] = None
    visibility: Optional[str] = "public"

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Event":
        return cls.model_validate(doc)

    def is_organizer(self, user_id: str) -> bool:
        return self.created_by is not None and self.created_by == user_id


class UserEvent(BaseModel):
    """Participation d'un utilisateur à un événement (collection ``userEvents``)."""
    id_user: str
    id_event: str
    role: MembershipRole
    joined_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore", use_enum_values=True)
