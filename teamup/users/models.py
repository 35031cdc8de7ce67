from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ────────────────────────────────
# PROFIL UTILISATEUR (collection "users")
# ────────────────────────────────

class UserProfile(BaseModel):
    id: str = Field(alias="_id")              # uid Firebase
    email: Optional[str] = None
    name: Optional[str] = None
    location: Optional[str] = None
    profile_picture_url: Optional[str] = None

    # Compteurs
    number_event_created: int = 0
    number_event_joined: int = 0
    number_message_sent: int = 0

    # Notifications push
    notifications_enabled: bool = False
    fcm_token: Optional[str] = None
    fcm_token_updated_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UserSummary(BaseModel):
    """Informations publiques affichées à côté d'une participation."""
    name: Optional[str] = None
    profile_picture_url: Optional[str] = None
