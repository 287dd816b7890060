"""Tests for API key authentication, exercised through the ping endpoint."""

from httpx import AsyncClient

from app.config import ClientKeyRegistry, Settings

PING = "/api/v1/ping"


class TestAuthenticateClient:
    """authenticate_client resolves callers from the static key registry."""

    async def test_valid_key(self, client: AsyncClient, api_headers: dict):
        response = await client.get(PING, headers=api_headers)
        assert response.status_code == 200
        assert response.json()["clientName"] == "Test Client"

    async def test_missing_key(self, client: AsyncClient):
        response = await client.get(PING)
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized", "message": "API key is required"}

    async def test_unknown_key(self, client: AsyncClient):
        response = await client.get(PING, headers={"X-API-Key": "nope"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid API key"

    async def test_inactive_key(self, client: AsyncClient, inactive_headers: dict):
        response = await client.get(PING, headers=inactive_headers)
        assert response.status_code == 401
        assert response.json()["message"] == "API key is inactive"

    async def test_frontend_header_is_exempt(self, client: AsyncClient, frontend_headers: dict):
        response = await client.get(PING, headers=frontend_headers)
        assert response.status_code == 200
        assert response.json()["clientName"] == "Frontend"

    async def test_frontend_header_must_be_true(self, client: AsyncClient, frontend_headers: dict):
        headers = {name: "false" for name in frontend_headers}
        response = await client.get(PING, headers=headers)
        assert response.status_code == 401

    async def test_preflight_needs_no_key(self, client: AsyncClient):
        """OPTIONS is answered by the preflight route or CORS middleware, never by key checks."""
        plain = await client.options("/api/v1/disrepair/calculate")
        assert plain.status_code == 200

        cors = await client.options(
            PING,
            headers={"Origin": "https://example.org", "Access-Control-Request-Method": "GET"},
        )
        assert cors.status_code == 200


class TestClientKeyRegistry:
    """Parsing the CLIENT_API_KEYS setting."""

    def test_lookup(self):
        registry = ClientKeyRegistry.model_validate({"keys": {"abc": {"name": "Acme"}}})
        client = registry.lookup("abc")
        assert client is not None
        assert client.name == "Acme"
        assert client.active is True
        assert registry.lookup("xyz") is None

    def test_loaded_from_environment(self, monkeypatch):
        monkeypatch.setenv(
            "CLIENT_API_KEYS",
            '{"keys": {"k1": {"name": "One"}, "k2": {"name": "Two", "active": false}}}',
        )
        loaded = Settings(_env_file=None)
        assert loaded.client_api_keys.lookup("k1").name == "One"
        assert loaded.client_api_keys.lookup("k2").active is False

    def test_empty_by_default(self, monkeypatch):
        monkeypatch.delenv("CLIENT_API_KEYS", raising=False)
        assert Settings(_env_file=None).client_api_keys.keys == {}
