"""
Fixtures partagées : base MongoDB en mémoire (mongomock-motor), tokens JWT
locaux et application FastAPI câblée sur ces dépendances.
"""
import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from teamup.auth.jwt_handler import create_access_token
from teamup.auth.verifier import JWTVerifier
from teamup.db.mongo import ensure_indexes
from teamup.db.store import EventStore
from teamup.main import create_app
from teamup.monitoring.services import ErrorLogSink

JWT_SECRET = "test-secret"


def make_auth_headers(uid: str) -> dict:
    token = create_access_token(uid, secret=JWT_SECRET)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return make_auth_headers


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    database = client["teamup_test"]
    await ensure_indexes(database)

    await database["events"].insert_many([
        {"_id": "E1", "name": "Foot du dimanche", "type": "foot", "created_by": "organizer"},
        {"_id": "E2", "name": "Tennis en double", "type": "tennis", "created_by": "organizer",
         "max_participants": 1},
        {"_id": "E3", "name": "Course du soir", "type": "course", "created_by": "u2"},
    ])
    await database["users"].insert_many([
        {"_id": "organizer", "name": "Olivia", "number_event_created": 2, "number_event_joined": 0},
        {"_id": "u1", "name": "Alice", "number_event_joined": 0, "notifications_enabled": True},
        {"_id": "u2", "name": "Bruno", "number_event_joined": 0},
    ])
    await database["userEvents"].insert_many([
        {"id_user": "organizer", "id_event": "E1", "role": "organisateur"},
        {"id_user": "organizer", "id_event": "E2", "role": "organisateur"},
    ])
    return database


@pytest.fixture
def store(db):
    return EventStore(db)


@pytest.fixture
def app(db, tmp_path):
    application = create_app()
    application.state.db = db
    application.state.verifier = JWTVerifier(JWT_SECRET)
    application.state.error_sink = ErrorLogSink(str(tmp_path / "logs"))
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
