import logging
from typing import Dict, Optional

import firebase_admin
from fastapi import Request
from firebase_admin import messaging
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

ICON_URL = "/images/logo/teamup-logo-192.png"
BADGE_URL = "/images/logo/teamup-logo-72.png"
PUSH_TTL_SECONDS = 86400


class PushSender:
    """Envoi de notifications push via Firebase Cloud Messaging."""

    def __init__(self, app: Optional[firebase_admin.App]):
        self.app = app

    @property
    def available(self) -> bool:
        return self.app is not None

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        tag: str,
        data: Optional[Dict[str, str]] = None,
        link: Optional[str] = None,
    ) -> str:
        message = messaging.Message(
            token=token,
            notification=messaging.Notification(title=title, body=body),
            data=data or {},
            webpush=messaging.WebpushConfig(
                headers={"TTL": str(PUSH_TTL_SECONDS)},
                notification=messaging.WebpushNotification(
                    icon=ICON_URL,
                    badge=BADGE_URL,
                    tag=tag,
                    require_interaction=True,
                    actions=[messaging.WebpushNotificationAction("open", "Ouvrir TeamUp")],
                ),
                fcm_options=messaging.WebpushFCMOptions(link=link) if link else None,
            ),
        )
        # messaging.send est bloquant
        message_name = await run_in_threadpool(messaging.send, message, app=self.app)
        logger.info(f"🔔 Notification envoyée : {message_name}")
        return message_name


def get_push_sender(request: Request) -> PushSender:
    sender = getattr(request.app.state, "push_sender", None)
    return sender or PushSender(None)
