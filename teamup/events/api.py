from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query
from pymongo.errors import PyMongoError

from teamup.auth.dependencies import get_current_identity
from teamup.auth.schemas import Identity
from teamup.db.mongo import get_store
from teamup.db.store import EventStore
from teamup.errors import Internal
from teamup.events.schemas import EventStatsResponse, ParticipationResponse
from teamup.events.services import MembershipService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/events", tags=["events"])


# ===============================
# S'INSCRIRE À UN ÉVÉNEMENT
# ===============================
@router.post("/{event_id}/join", response_model=ParticipationResponse)
async def join_event(
    event_id: str,
    identity: Identity = Depends(get_current_identity),
    store: EventStore = Depends(get_store),
):
    try:
        await MembershipService(store).join(identity.uid, event_id)
    except PyMongoError as e:
        logger.exception(f"Erreur API POST /events/{event_id}/join: {e}")
        raise Internal()

    return ParticipationResponse(message="Inscription réussie à l'événement")


# ===============================
# SE DÉSINSCRIRE D'UN ÉVÉNEMENT
# ===============================
@router.post("/{event_id}/leave", response_model=ParticipationResponse)
async def leave_event(
    event_id: str,
    identity: Identity = Depends(get_current_identity),
    store: EventStore = Depends(get_store),
):
    try:
        await MembershipService(store).leave(identity.uid, event_id)
    except PyMongoError as e:
        logger.exception(f"Erreur API POST /events/{event_id}/leave: {e}")
        raise Internal()

    return ParticipationResponse(message="Désinscription réussie de l'événement")


# ===============================
# STATISTIQUES D'UN ÉVÉNEMENT
# ===============================
@router.get("/{event_id}/stats", response_model=EventStatsResponse)
async def get_event_stats(
    event_id: str,
    user_id: Optional[str] = Query(None, alias="userId", description="Utilisateur dont on veut le rôle"),
    identity: Identity = Depends(get_current_identity),
    store: EventStore = Depends(get_store),
):
    try:
        stats = await MembershipService(store).get_stats(event_id, user_id or identity.uid)
    except PyMongoError as e:
        logger.exception(f"Erreur API GET /events/{event_id}/stats: {e}")
        raise Internal()

    return EventStatsResponse(data=stats)
