import logging
from datetime import datetime, timezone
from typing import Optional

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from teamup.auth.schemas import Identity
from teamup.config import settings
from teamup.db.store import EventStore
from teamup.errors import (
    Forbidden,
    InvalidPayload,
    PushDeliveryError,
    ServiceUnavailable,
    UserNotFoundError,
)
from teamup.notifications.push import PushSender
from teamup.users.models import UserProfile

logger = logging.getLogger(__name__)

TEST_NOTIFICATION_TAG = "teamup-test"


class NotificationService:
    def __init__(self, store: Optional[EventStore], sender: Optional[PushSender] = None):
        self.store = store
        self.sender = sender

    def _require_store(self) -> EventStore:
        if self.store is None:
            raise ServiceUnavailable("Base de données non disponible")
        return self.store

    @staticmethod
    def _check_owner(caller: Identity, target_user_id: str) -> None:
        # Un utilisateur ne peut agir que sur son propre profil
        if caller.uid != target_user_id:
            logger.warning(f"⛔ uid={caller.uid} tente d'agir sur le profil {target_user_id}")
            raise Forbidden()

    async def set_token(self, caller: Identity, target_user_id: str, token: str) -> None:
        self._check_owner(caller, target_user_id)
        await self._require_store().set_fcm_token(caller.uid, token)
        logger.info(f"FCM token saved for user {caller.uid}")

    async def send_test(self, caller: Identity, target_user_id: str) -> str:
        self._check_owner(caller, target_user_id)
        store = self._require_store()

        doc = await store.get_user(caller.uid)
        if not doc:
            raise UserNotFoundError()
        profile = UserProfile.model_validate(doc)

        if not profile.fcm_token:
            raise InvalidPayload("Token FCM non trouvé. Veuillez d'abord autoriser les notifications.")
        if not profile.notifications_enabled:
            raise InvalidPayload("Les notifications sont désactivées pour cet utilisateur")

        if self.sender is None or not self.sender.available:
            raise ServiceUnavailable()

        origin = settings.APP_ORIGIN.rstrip("/")
        try:
            return await self.sender.send(
                token=profile.fcm_token,
                title="🏆 TeamUp - Test de notification",
                body=f"Salut {profile.name or 'Sportif'} ! Vos notifications fonctionnent parfaitement. 🎉",
                tag=TEST_NOTIFICATION_TAG,
                data={
                    "type": "test_notification",
                    "userId": caller.uid,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "url": "/profile",
                },
                # FCM n'accepte qu'un lien HTTPS absolu
                link=f"{origin}/profile" if origin.startswith("https://") else None,
            )
        except messaging.UnregisteredError as e:
            logger.warning(f"🔔 Token FCM expiré pour {caller.uid} : {e}")
            raise PushDeliveryError(
                "Token FCM expiré. Veuillez recharger la page et réautoriser les notifications.",
                "TOKEN_EXPIRED",
                400,
            )
        except (firebase_exceptions.InvalidArgumentError, ValueError) as e:
            logger.warning(f"🔔 Token FCM invalide pour {caller.uid} : {e}")
            raise PushDeliveryError(
                "Token FCM invalide. Veuillez réautoriser les notifications.", "TOKEN_INVALID", 400
            )
        except firebase_exceptions.PermissionDeniedError as e:
            logger.error(f"🔔 Permission refusée par FCM : {e}")
            raise PushDeliveryError("Configuration Firebase incorrecte.", "CONFIG_ERROR", 500)
        except firebase_exceptions.FirebaseError as e:
            logger.exception(f"🔔 Erreur FCM inattendue : {e}")
            raise PushDeliveryError(None, "UNKNOWN_ERROR", 500)
