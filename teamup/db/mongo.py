import logging
from typing import Optional

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from teamup.config import Settings
from teamup.db.store import USER_EVENTS, EventStore
from teamup.errors import ServiceUnavailable

logger = logging.getLogger(__name__)


def create_mongo_client(settings: Settings) -> AsyncIOMotorClient:
    """Client MongoDB asynchrone, créé une seule fois au démarrage."""
    logger.info(f"🔌 Connexion MongoDB : base={settings.MONGO_DB}")
    return AsyncIOMotorClient(settings.MONGO_URL)


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    # Au plus une participation par couple (utilisateur, événement)
    await db[USER_EVENTS].create_index(
        [("id_user", 1), ("id_event", 1)],
        unique=True,
        name="uniq_user_event",
    )
    await db[USER_EVENTS].create_index([("id_event", 1), ("role", 1)], name="event_role")


def get_store(request: Request) -> EventStore:
    """Dépendance FastAPI : accès au store partagé construit au démarrage."""
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise ServiceUnavailable("Base de données non disponible")
    return EventStore(db)


def get_optional_store(request: Request) -> Optional[EventStore]:
    db = getattr(request.app.state, "db", None)
    return EventStore(db) if db is not None else None
