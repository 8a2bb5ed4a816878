"""HTTP tests for the /v1/api-keys endpoints."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

import httpx
import pytest

from keyforge import main as main_module
from keyforge.config import SecurityConfig, Settings, StoreConfig
from keyforge.utils.datetime import utcnow
from tests.fakes import FakeRowStore

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        security=SecurityConfig(allow_anonymous=True, session_tokens={"tok-alice": "alice"}),
        store=StoreConfig(timeout_seconds=2.0, list_retries=0),
    )


def _client(store, settings: Settings):
    app = main_module.create_app()
    app.state.row_store = store
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://testserver")


@pytest.fixture
async def client(sql_store, settings: Settings):
    with patch("keyforge.api.dependencies.get_settings", return_value=settings):
        async with _client(sql_store, settings) as client:
            yield client


class TestApiKeysEndpoints:
    async def test_create_list_delete_flow(self, client: httpx.AsyncClient):
        resp = await client.post("/v1/api-keys", json={"name": "Prod"}, headers=ALICE)
        assert resp.status_code == 201
        created = resp.json()
        secret = created["secret"]
        assert len(secret) >= 24
        assert created["name"] == "Prod"
        assert created["expires_at"] is None
        assert created["is_expired"] is False

        resp = await client.get("/v1/api-keys", headers=ALICE)
        assert resp.status_code == 200
        items = resp.json()["items"]
        assert [i["id"] for i in items] == [created["id"]]
        assert "secret" not in items[0]
        assert items[0]["masked_secret"] == secret[:4] + "*" * (len(secret) - 4)

        resp = await client.delete(f"/v1/api-keys/{created['id']}", headers=ALICE)
        assert resp.status_code == 204

        resp = await client.get("/v1/api-keys", headers=ALICE)
        assert resp.json()["items"] == []

    async def test_delete_is_idempotent(self, client: httpx.AsyncClient):
        resp = await client.post("/v1/api-keys", json={"name": "Prod"}, headers=ALICE)
        key_id = resp.json()["id"]

        first = await client.delete(f"/v1/api-keys/{key_id}", headers=ALICE)
        second = await client.delete(f"/v1/api-keys/{key_id}", headers=ALICE)

        assert first.status_code == 204
        assert second.status_code == 204

    async def test_cross_tenant_isolation(self, client: httpx.AsyncClient):
        resp = await client.post("/v1/api-keys", json={"name": "Prod"}, headers=ALICE)
        key_id = resp.json()["id"]

        assert (await client.get("/v1/api-keys", headers=BOB)).json()["items"] == []

        resp = await client.delete(f"/v1/api-keys/{key_id}", headers=BOB)
        assert resp.status_code == 204

        items = (await client.get("/v1/api-keys", headers=ALICE)).json()["items"]
        assert [i["id"] for i in items] == [key_id]

    async def test_session_token_identity(self, client: httpx.AsyncClient):
        await client.post("/v1/api-keys", json={"name": "Prod"}, headers=ALICE)

        resp = await client.get(
            "/v1/api-keys", headers={"Authorization": "Bearer tok-alice"}
        )

        assert len(resp.json()["items"]) == 1

    async def test_create_with_expiry(self, client: httpx.AsyncClient):
        expires_at = (utcnow() + timedelta(days=30)).replace(microsecond=0)

        resp = await client.post(
            "/v1/api-keys",
            json={"name": "Temp", "expires_at": expires_at.isoformat()},
            headers=ALICE,
        )

        assert resp.status_code == 201
        assert resp.json()["expires_at"].startswith(expires_at.isoformat())

    async def test_empty_name_is_validation_error(self, client: httpx.AsyncClient):
        resp = await client.post("/v1/api-keys", json={"name": ""}, headers=ALICE)

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"
        assert (await client.get("/v1/api-keys", headers=ALICE)).json()["items"] == []

    async def test_past_expiry_is_validation_error(self, client: httpx.AsyncClient):
        resp = await client.post(
            "/v1/api-keys",
            json={"name": "Old", "expires_at": "2000-01-01T00:00:00"},
            headers=ALICE,
        )

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"

    async def test_unparseable_expiry_is_validation_error(self, client: httpx.AsyncClient):
        resp = await client.post(
            "/v1/api-keys",
            json={"name": "Bad", "expires_at": "next tuesday"},
            headers=ALICE,
        )

        assert resp.status_code == 400
        body = resp.json()["error"]
        assert body["code"] == "validation_error"
        assert "body.expires_at" in body["details"]["fields"]

    async def test_missing_identity_is_unauthorized(self, client: httpx.AsyncClient):
        resp = await client.get("/v1/api-keys")

        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    async def test_request_id_is_echoed(self, client: httpx.AsyncClient):
        resp = await client.get("/v1/api-keys", headers={**ALICE, "X-Request-Id": "req-1"})
        assert resp.headers["X-Request-Id"] == "req-1"


class TestDefaultSecurity:
    async def test_user_header_ignored_without_opt_in(self, sql_store, settings: Settings):
        async with _client(sql_store, settings) as client:
            with patch("keyforge.api.dependencies.get_settings", return_value=settings):
                created = await client.post(
                    "/v1/api-keys",
                    json={"name": "Prod"},
                    headers={"Authorization": "Bearer tok-alice"},
                )
            key_id = created.json()["id"]

            defaults = Settings(
                security=SecurityConfig(session_tokens={"tok-alice": "alice"}),
            )
            with patch("keyforge.api.dependencies.get_settings", return_value=defaults):
                listed = await client.get("/v1/api-keys", headers=ALICE)
                deleted = await client.delete(f"/v1/api-keys/{key_id}", headers=ALICE)
                remaining = await client.get(
                    "/v1/api-keys", headers={"Authorization": "Bearer tok-alice"}
                )

        assert defaults.security.allow_anonymous is False
        assert listed.status_code == 401
        assert deleted.status_code == 401
        assert [i["id"] for i in remaining.json()["items"]] == [key_id]


class TestStoreFailures:
    async def test_list_failure_returns_503_envelope(self, settings: Settings):
        store = FakeRowStore(fail_next={"select": 1})

        with patch("keyforge.api.dependencies.get_settings", return_value=settings):
            async with _client(store, settings) as client:
                resp = await client.get(
                    "/v1/api-keys", headers={**ALICE, "X-Request-Id": "req-9"}
                )

        assert resp.status_code == 503
        error = resp.json()["error"]
        assert error["code"] == "store_unavailable"
        assert error["request_id"] == "req-9"

    async def test_create_failure_returns_503(self, settings: Settings):
        store = FakeRowStore(fail_next={"insert": 1})

        with patch("keyforge.api.dependencies.get_settings", return_value=settings):
            async with _client(store, settings) as client:
                resp = await client.post("/v1/api-keys", json={"name": "Prod"}, headers=ALICE)

        assert resp.status_code == 503
        assert len(store.calls_for("insert")) == 1
