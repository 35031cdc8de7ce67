import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

from teamup.auth.dependencies import get_service_identity
from teamup.auth.schemas import Identity
from teamup.db.mongo import get_optional_store
from teamup.db.store import EventStore
from teamup.errors import TeamUpError
from teamup.notifications.push import PushSender, get_push_sender
from teamup.notifications.schemas import (
    PushTestRequest,
    PushTestResponse,
    TokenRequest,
    TokenResponse,
)
from teamup.notifications.services import NotificationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.post("/token", response_model=TokenResponse)
async def save_token(
    payload: TokenRequest,
    identity: Identity = Depends(get_service_identity),
    store: Optional[EventStore] = Depends(get_optional_store),
):
    try:
        await NotificationService(store).set_token(identity, payload.userId, payload.token)
    except PyMongoError as e:
        logger.exception(f"Error saving FCM token: {e}")
        raise TeamUpError("Erreur lors de la sauvegarde du token FCM")

    return TokenResponse(message="Token FCM sauvegardé avec succès")


@router.post("/test", response_model=PushTestResponse)
async def send_test_notification(
    payload: PushTestRequest,
    identity: Identity = Depends(get_service_identity),
    store: Optional[EventStore] = Depends(get_optional_store),
    sender: PushSender = Depends(get_push_sender),
):
    try:
        message_name = await NotificationService(store, sender).send_test(identity, payload.userId)
    except PyMongoError as e:
        logger.exception(f"Error sending test notification: {e}")
        raise TeamUpError("Erreur lors de l'envoi de la notification de test")

    return PushTestResponse(
        message="Notification de test envoyée avec succès via FCM V1 !",
        response=message_name,
    )
