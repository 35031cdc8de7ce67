"""
Journal d'erreurs client et gestionnaire d'erreurs inattendues.
"""
import json
from datetime import date, datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from teamup.monitoring.services import ErrorLogSink

SAMPLE_LOG = {
    "timestamp": "2026-10-19T09:00:00.000Z",
    "message": "Cannot read properties of undefined",
    "stack": "TypeError: ...",
    "url": "https://teamup.app/events",
    "userAgent": "Mozilla/5.0",
}


class TestErrorLogSink:

    def test_append_is_additive(self, tmp_path):
        sink = ErrorLogSink(str(tmp_path))
        day = date(2026, 10, 19)

        sink.append([SAMPLE_LOG], day=day)
        sink.append([{**SAMPLE_LOG, "message": "second"}], day=day)

        logs = sink.read(day)
        assert [log["message"] for log in logs] == ["Cannot read properties of undefined", "second"]
        assert (tmp_path / "errors-2026-10-19.jsonl").exists()

    def test_unknown_day_is_empty(self, tmp_path):
        assert ErrorLogSink(str(tmp_path)).read(date(2020, 1, 1)) == []

    def test_corrupted_line_is_skipped(self, tmp_path):
        sink = ErrorLogSink(str(tmp_path))
        day = date(2026, 10, 19)
        sink.append([SAMPLE_LOG], day=day)
        with open(sink.path_for(day), "a", encoding="utf-8") as f:
            f.write("{not json\n")

        assert len(sink.read(day)) == 1


class TestErrorRoutes:

    async def test_logs_saved(self, app, client):
        response = await client.post("/api/monitoring/errors", json={"logs": [SAMPLE_LOG, SAMPLE_LOG]})

        assert response.status_code == 200
        assert response.json() == {"success": True, "saved": 2}

        today = datetime.now(timezone.utc).date()
        with open(app.state.error_sink.path_for(today), encoding="utf-8") as f:
            lines = [json.loads(line) for line in f]
        assert len(lines) == 2
        assert lines[0]["message"] == SAMPLE_LOG["message"]

    async def test_logs_read_back(self, client, auth_headers):
        await client.post("/api/monitoring/errors", json={"logs": [SAMPLE_LOG]})

        response = await client.get("/api/monitoring/errors", headers=auth_headers("u1"))

        assert response.status_code == 200
        assert response.json()["logs"][0]["url"] == SAMPLE_LOG["url"]

    async def test_read_other_day(self, client, auth_headers):
        response = await client.get(
            "/api/monitoring/errors", params={"date": "2020-01-01"}, headers=auth_headers("u1")
        )

        assert response.status_code == 200
        assert response.json() == {"date": "2020-01-01", "logs": []}

    @pytest.mark.parametrize("body", [{}, {"logs": "oops"}, {"logs": [1, 2]}, [SAMPLE_LOG]])
    async def test_invalid_format(self, client, body):
        response = await client.post("/api/monitoring/errors", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid logs format"}

    async def test_not_json(self, client):
        response = await client.post(
            "/api/monitoring/errors", content=b"not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

    async def test_read_requires_credential(self, client):
        await client.post("/api/monitoring/errors", json={"logs": [SAMPLE_LOG]})

        response = await client.get("/api/monitoring/errors")

        assert response.status_code == 401
        assert "logs" not in response.json()

    async def test_body_not_utf8(self, client):
        response = await client.post(
            "/api/monitoring/errors", content=b'{"logs": ["\xff\xfe"]}', headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid logs format"}


class TestUnexpectedErrors:

    async def test_unexpected_error_is_hidden_and_recorded(self, app):
        async def boom():
            raise RuntimeError("connection pool exhausted")

        app.add_api_route("/boom", boom)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "Erreur interne du serveur"}
        assert "pool" not in response.text

        logs = app.state.error_sink.read(datetime.now(timezone.utc).date())
        assert logs[-1]["message"] == "RuntimeError: connection pool exhausted"
        assert logs[-1]["source"] == "server"
