import logging
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

from teamup.db.store import EventStore
from teamup.errors import (
    AlreadyMember,
    EventFullError,
    EventNotFoundError,
    NotAMember,
    OrganizerCannotLeave,
)
from teamup.events.models import Event, MembershipRole, UserEvent
from teamup.events.schemas import EventStats, ParticipantOut
from teamup.users.models import UserSummary

logger = logging.getLogger(__name__)


class MembershipService:
    """
    Transitions d'inscription d'un utilisateur à un événement.

    États possibles pour un couple (utilisateur, événement) : non inscrit, ou
    inscrit avec un rôle. Le créateur de l'événement est toujours considéré
    comme inscrit en tant qu'organisateur.

    Sans transaction multi-documents, l'unicité d'une participation repose sur
    l'index unique (id_user, id_event) : une insertion concurrente perdante
    est rejetée en ``AlreadyMember`` au lieu de créer un doublon.
    """

    def __init__(self, store: EventStore):
        self.store = store

    async def _get_event(self, event_id: str) -> Event:
        doc = await self.store.get_event(event_id)
        if not doc:
            logger.warning(f"❌ Événement introuvable : id={event_id}")
            raise EventNotFoundError()
        return Event.from_document(doc)

    async def join(self, user_id: str, event_id: str) -> UserEvent:
        event = await self._get_event(event_id)

        if event.is_organizer(user_id) or await self.store.find_membership(user_id, event_id):
            logger.warning(f"⚠️ Inscription refusée, déjà inscrit : user={user_id}, event={event_id}")
            raise AlreadyMember()

        if event.max_participants and await self.store.count_participants(event_id) >= event.max_participants:
            logger.warning(f"⚠️ Événement complet : event={event_id}, max={event.max_participants}")
            raise EventFullError()

        try:
            record = await self.store.insert_membership(
                user_id, event_id, MembershipRole.PARTICIPANT.value
            )
        except DuplicateKeyError:
            # Une inscription concurrente du même utilisateur a gagné
            logger.warning(f"⚠️ Inscription concurrente détectée : user={user_id}, event={event_id}")
            raise AlreadyMember()

        try:
            await self._check_seat(event, record)
            if not await self.store.adjust_joined_counter(user_id, 1):
                logger.warning(f"⚠️ Profil introuvable, compteur non mis à jour : user={user_id}")
        except (EventFullError, PyMongoError):
            # Pas d'inscription à moitié appliquée
            await self.store.delete_membership(record)
            raise

        logger.info(f"✅ Inscription : user={user_id}, event={event_id}")
        return UserEvent.model_validate(record)

    async def _check_seat(self, event: Event, record: Dict[str, Any]) -> None:
        """
        Revérifie la capacité une fois la participation écrite.

        Les participations sont départagées par ``_id`` : seules les
        ``max_participants`` premières gardent leur place, quel que soit
        l'ordre dans lequel les inscriptions concurrentes font ce contrôle.
        """
        if not event.max_participants:
            return
        ahead = await self.store.count_participants(event.id, before=record["_id"])
        if ahead >= event.max_participants:
            logger.warning(f"⚠️ Place prise par une inscription concurrente : event={event.id}")
            raise EventFullError()

    async def leave(self, user_id: str, event_id: str) -> None:
        event = await self._get_event(event_id)

        # Le créateur reste organisateur, même sans participation enregistrée
        if event.is_organizer(user_id):
            logger.warning(f"⛔ L'organisateur tente de quitter son événement : user={user_id}, event={event_id}")
            raise OrganizerCannotLeave()

        record = await self.store.find_membership(user_id, event_id)
        if not record:
            raise NotAMember()

        if record.get("role") == MembershipRole.ORGANISATEUR.value:
            logger.warning(f"⛔ L'organisateur tente de quitter son événement : user={user_id}, event={event_id}")
            raise OrganizerCannotLeave()

        if not await self.store.delete_membership(record):
            # Déjà supprimée par une désinscription concurrente
            raise NotAMember()

        await self.store.adjust_joined_counter(user_id, -1)
        logger.info(f"👋 Désinscription : user={user_id}, event={event_id}")

    async def get_stats(self, event_id: str, user_id: str) -> EventStats:
        event = await self._get_event(event_id)
        records = await self.store.list_memberships(event_id)
        users = await self.store.get_users(r["id_user"] for r in records)

        organizer: Optional[ParticipantOut] = None
        participants: List[ParticipantOut] = []
        user_role: Optional[str] = None

        for record in records:
            info = self._participant_out(record, users.get(record["id_user"]))
            if record["id_user"] == user_id:
                user_role = record["role"]
            if record["role"] == MembershipRole.ORGANISATEUR.value:
                organizer = info
            elif record["role"] == MembershipRole.PARTICIPANT.value:
                participants.append(info)

        # Événement créé sans participation organisateur : on la recrée
        if organizer is None and user_role is None and event.is_organizer(user_id):
            organizer = await self._restore_organizer(event_id, user_id)
            if organizer is not None:
                user_role = MembershipRole.ORGANISATEUR.value

        return EventStats(
            totalParticipants=len(participants) + (1 if organizer else 0),
            organizer=organizer,
            participants=participants,
            userRole=user_role,
        )

    async def _restore_organizer(self, event_id: str, user_id: str) -> Optional[ParticipantOut]:
        try:
            record = await self.store.insert_membership(
                user_id, event_id, MembershipRole.ORGANISATEUR.value
            )
        except DuplicateKeyError:
            record = await self.store.find_membership(user_id, event_id)
            if not record or record.get("role") != MembershipRole.ORGANISATEUR.value:
                return None
        logger.info(f"🔧 Participation organisateur recréée : user={user_id}, event={event_id}")
        return self._participant_out(record, await self.store.get_user(user_id))

    @staticmethod
    def _participant_out(record: Dict[str, Any], user_doc: Optional[Dict[str, Any]]) -> ParticipantOut:
        return ParticipantOut(
            id_user=record["id_user"],
            id_event=record["id_event"],
            role=record["role"],
            joined_at=record.get("joined_at"),
            user=UserSummary(**user_doc) if user_doc else None,
        )
