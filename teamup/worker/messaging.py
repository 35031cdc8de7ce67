"""
Réception des notifications push dans le worker.

Le thread principal transmet la configuration Firebase par un message
``{"type": "FIREBASE_CONFIG", "config": {...}}`` ; le client de messagerie est
initialisé à la première réception seulement. Une reconfiguration demande un
redémarrage du worker.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from teamup.worker.events import ExtendableEvent

logger = logging.getLogger(__name__)

CONFIG_MESSAGE_TYPE = "FIREBASE_CONFIG"
DEFAULT_TITLE = "TeamUp"
DEFAULT_BODY = "Nouvelle notification"
DEFAULT_TAG = "teamup-notification"
DEFAULT_ICON = "/images/logo/teamup-logo-192.png"
BADGE_ICON = "/images/logo/teamup-logo-96.png"
CLOSE_ACTION = "close"


class WindowClient(Protocol):
    url: str

    async def focus(self) -> None: ...

    async def navigate(self, url: str) -> None: ...


class Notification(Protocol):
    data: Optional[Dict[str, Any]]

    def close(self) -> None: ...


class WorkerHost(Protocol):
    origin: str

    async def show_notification(self, title: str, options: Dict[str, Any]) -> None: ...

    async def match_clients(self) -> List[WindowClient]: ...

    async def open_window(self, url: str) -> Optional[WindowClient]: ...


def build_notification(payload: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    notification = payload.get("notification") or {}
    data = payload.get("data") or {}
    title = notification.get("title") or DEFAULT_TITLE
    options = {
        "body": notification.get("body") or DEFAULT_BODY,
        "icon": notification.get("icon") or DEFAULT_ICON,
        "badge": BADGE_ICON,
        # Même tag : la nouvelle notification remplace la précédente
        "tag": data.get("tag") or DEFAULT_TAG,
        "data": data,
        "actions": [
            {"action": "open", "title": "Ouvrir"},
            {"action": CLOSE_ACTION, "title": "Fermer"},
        ],
        "requireInteraction": False,
        "silent": False,
    }
    return title, options


class ClientNotificationDispatcher:
    def __init__(self, host: WorkerHost, messaging_factory: Callable[[Dict[str, Any]], Any]):
        self.host = host
        self.messaging_factory = messaging_factory
        self.messaging: Any = None

    @property
    def initialized(self) -> bool:
        return self.messaging is not None

    def on_message(self, message: Any) -> bool:
        """Retourne True si le message a initialisé le client de messagerie."""
        if not isinstance(message, dict) or message.get("type") != CONFIG_MESSAGE_TYPE:
            return False
        if self.initialized:
            logger.debug("FCM: configuration déjà reçue, message ignoré")
            return False

        self.messaging = self.messaging_factory(message.get("config") or {})
        logger.info("🔔 FCM: client de messagerie initialisé")
        return True

    def on_push(self, payload: Dict[str, Any], event: ExtendableEvent) -> bool:
        if not self.initialized:
            logger.warning("FCM: push reçu avant la configuration, ignoré")
            return False

        title, options = build_notification(payload or {})
        event.wait_until(self.host.show_notification(title, options))
        return True

    def on_notification_click(
        self, notification: Notification, action: Optional[str], event: ExtendableEvent
    ) -> None:
        notification.close()
        if action == CLOSE_ACTION:
            return

        url = (notification.data or {}).get("url") or "/"
        event.wait_until(self._focus_or_open(url))

    async def _focus_or_open(self, url: str) -> None:
        for client in await self.host.match_clients():
            if client.url.startswith(self.host.origin):
                await client.focus()
                if url != "/":
                    await client.navigate(url)
                return
        await self.host.open_window(self.host.origin + url)
