from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from teamup.users.models import UserSummary


# ===========================
# PARTICIPATION
# ===========================
class ParticipationResponse(BaseModel):
    success: bool = True
    message: str


# ===========================
# STATISTIQUES
# ===========================
class ParticipantOut(BaseModel):
    id_user: str
    id_event: str
    role: str
    joined_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class EventStats(BaseModel):
    totalParticipants: int
    organizer: Optional[ParticipantOut] = None
    participants: List[ParticipantOut] = []
    userRole: Optional[str] = None


class EventStatsResponse(BaseModel):
    success: bool = True
    data: EventStats
