from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamup.events.models import MembershipRole

# Collections
EVENTS = "events"
USER_EVENTS = "userEvents"
USERS = "users"


class EventStore:
    """
    Accès aux collections ``events``, ``userEvents`` et ``users``.

    Aucune règle métier ici : chaque méthode correspond à une lecture ou une
    écriture sur la base. Les mises à jour de compteurs passent par ``$inc``,
    atomique sur un seul document. Le nombre de participants se compte sur
    ``userEvents``, aucun compteur n'est stocké sur l'événement.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.events = db[EVENTS]
        self.user_events = db[USER_EVENTS]
        self.users = db[USERS]

    # ── events ────────────────────────────────────

    async def get_event(self, event_id: str) -> Optional[Dict[str, Any]]:
        return await self.events.find_one({"_id": event_id})

    # ── userEvents ────────────────────────────────

    async def find_membership(self, user_id: str, event_id: str) -> Optional[Dict[str, Any]]:
        return await self.user_events.find_one({"id_user": user_id, "id_event": event_id})

    async def insert_membership(self, user_id: str, event_id: str, role: str) -> Dict[str, Any]:
        """Lève ``pymongo.errors.DuplicateKeyError`` si le couple existe déjà."""
        record = {
            "id_user": user_id,
            "id_event": event_id,
            "role": role,
            "joined_at": datetime.now(timezone.utc),
        }
        result = await self.user_events.insert_one(record)
        record["_id"] = result.inserted_id
        return record

    async def delete_membership(self, record: Dict[str, Any]) -> bool:
        result = await self.user_events.delete_one({"_id": record["_id"], "role": record["role"]})
        return result.deleted_count == 1

    async def count_participants(self, event_id: str, before: Optional[ObjectId] = None) -> int:
        """Nombre de participations ``participant`` ; avec ``before``, seulement celles d'``_id`` inférieur."""
        query: Dict[str, Any] = {"id_event": event_id, "role": MembershipRole.PARTICIPANT.value}
        if before is not None:
            query["_id"] = {"$lt": before}
        return await self.user_events.count_documents(query)

    async def list_memberships(self, event_id: str) -> List[Dict[str, Any]]:
        cursor = self.user_events.find({"id_event": event_id})
        return [doc async for doc in cursor]

    # ── users ─────────────────────────────────────

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self.users.find_one({"_id": user_id})

    async def get_users(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        cursor = self.users.find({"_id": {"$in": ids}})
        return {doc["_id"]: doc async for doc in cursor}

    async def adjust_joined_counter(self, user_id: str, delta: int) -> bool:
        result = await self.users.update_one(
            {"_id": user_id}, {"$inc": {"number_event_joined": delta}}
        )
        return result.matched_count == 1

    async def set_fcm_token(self, user_id: str, token: str) -> None:
        await self.users.update_one(
            {"_id": user_id},
            {"$set": {"fcm_token": token, "fcm_token_updated_at": datetime.now(timezone.utc)}},
            upsert=True,
        )
