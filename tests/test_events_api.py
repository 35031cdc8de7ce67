"""
Routes HTTP d'inscription : /api/events/{id}/join, /leave, /stats.
"""
import pytest
from httpx import AsyncClient

from teamup.auth.jwt_handler import create_access_token


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestMembershipRoutes:

    async def test_join_then_leave_scenario(self, client, auth_headers, db):
        headers = auth_headers("u1")

        response = await client.post("/api/events/E1/join", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Inscription réussie à l'événement"}

        response = await client.post("/api/events/E1/join", headers=headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Vous êtes déjà inscrit à cet événement"}

        response = await client.post("/api/events/E1/leave", headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Désinscription réussie de l'événement"

        response = await client.post("/api/events/E1/leave", headers=headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Vous n'êtes pas inscrit à cet événement"}

        user = await db["users"].find_one({"_id": "u1"})
        assert user["number_event_joined"] == 0

    async def test_organizer_leave_is_rejected(self, client, auth_headers, db):
        response = await client.post("/api/events/E1/leave", headers=auth_headers("organizer"))

        assert response.status_code == 400
        assert response.json() == {"error": "L'organisateur ne peut pas quitter son propre événement"}
        assert await db["userEvents"].count_documents({"id_user": "organizer", "id_event": "E1"}) == 1

    async def test_full_event(self, client, auth_headers):
        assert (await client.post("/api/events/E2/join", headers=auth_headers("u1"))).status_code == 200

        response = await client.post("/api/events/E2/join", headers=auth_headers("u2"))

        assert response.status_code == 400
        assert response.json() == {"error": "Cet événement est complet"}

    async def test_unknown_event(self, client, auth_headers):
        response = await client.post("/api/events/nope/leave", headers=auth_headers("u1"))

        assert response.status_code == 404
        assert response.json() == {"error": "Événement non trouvé"}

    async def test_missing_credential(self, client):
        response = await client.post("/api/events/E1/join")

        assert response.status_code == 401
        assert response.json() == {"error": "Token d'authentification requis"}
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_malformed_header(self, client):
        response = await client.post("/api/events/E1/join", headers={"Authorization": "Token abc"})
        assert response.status_code == 401

    async def test_token_signed_with_another_secret(self, client):
        token = create_access_token("u1", secret="someone-else")
        response = await client.post("/api/events/E1/join", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json() == {"error": "Token invalide"}

    async def test_store_not_configured(self, app, client, auth_headers):
        app.state.db = None

        response = await client.post("/api/events/E1/join", headers=auth_headers("u1"))

        assert response.status_code == 503
        assert response.json() == {"error": "Base de données non disponible"}


class TestStatsRoute:

    async def test_stats_payload(self, client, auth_headers):
        await client.post("/api/events/E1/join", headers=auth_headers("u1"))

        response = await client.get("/api/events/E1/stats", headers=auth_headers("u1"))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["totalParticipants"] == 2
        assert data["userRole"] == "participant"
        assert data["organizer"]["id_user"] == "organizer"
        assert data["participants"][0]["user"] == {"name": "Alice", "profile_picture_url": None}

    async def test_stats_for_another_user(self, client, auth_headers):
        response = await client.get(
            "/api/events/E1/stats", params={"userId": "organizer"}, headers=auth_headers("u1")
        )

        assert response.status_code == 200
        assert response.json()["data"]["userRole"] == "organisateur"
