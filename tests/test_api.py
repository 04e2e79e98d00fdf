"""Tests for the HTTP service."""

import pytest


class TestHealth:
    """Tests for the health endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["components"]["connectors"]["modules"]["jira"] == 11

    @pytest.mark.asyncio
    async def test_ping(self, client):
        response = await client.get("/ping")

        assert response.json() == {"ping": "pong"}


class TestCatalogue:
    """Tests for listing and describing connectors."""

    @pytest.mark.asyncio
    async def test_list_all(self, client):
        response = await client.get("/connectors")

        assert response.status_code == 200
        assert len(response.json()) == 28

    @pytest.mark.asyncio
    async def test_filter_by_module(self, client):
        response = await client.get("/connectors", params={"module": "service-now"})

        names = {spec["name"] for spec in response.json()}
        assert "GETFromTable" in names
        assert len(names) == 8

    @pytest.mark.asyncio
    async def test_describe(self, client):
        response = await client.get("/connectors/yext/GetEntity")

        assert response.status_code == 200
        spec = response.json()
        entity = next(argument for argument in spec["arguments"] if argument["name"] == "entity")
        assert entity["type"] == "select"
        assert "Locations" in entity["choices"]

    @pytest.mark.asyncio
    async def test_describe_unknown(self, client):
        response = await client.get("/connectors/jira/doesNotExist")

        assert response.status_code == 404


class TestInvoke:
    """Tests for invoking connectors over HTTP."""

    @pytest.fixture(autouse=True)
    def development(self, monkeypatch):
        monkeypatch.delenv("FLOW_CONNECTORS_ENVIRONMENT", raising=False)
        monkeypatch.delenv("FLOW_CONNECTORS_API_KEYS", raising=False)

    @pytest.mark.asyncio
    async def test_extract_ticket(self, client):
        response = await client.post(
            "/connectors/jira/extractTicket/invoke",
            json={
                "args": {"contextStore": "ticket", "stopOnError": False},
                "input": {"text": "Any news on OPS-42?"},
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["connector"] == "jira.extractTicket"
        assert body["context"] == {"ticket": "OPS-42"}
        assert body["input"] == {"text": "Any news on OPS-42?"}

    @pytest.mark.asyncio
    async def test_validation_error_is_400(self, client):
        response = await client.post(
            "/connectors/jira/extractTicket/invoke",
            json={"args": {"stopOnError": False}},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Context store not defined."

    @pytest.mark.asyncio
    async def test_abort_is_502(self, client):
        response = await client.post(
            "/connectors/jira/extractTicket/invoke",
            json={"args": {"contextStore": "ticket", "stopOnError": True}, "input": {"text": 42}},
        )

        assert response.status_code == 502

    @pytest.mark.asyncio
    async def test_unknown_connector(self, client):
        response = await client.post("/connectors/nope/nothing/invoke", json={"args": {}})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_api_key_required_in_production(self, client, monkeypatch):
        monkeypatch.setenv("FLOW_CONNECTORS_ENVIRONMENT", "production")
        monkeypatch.setenv("FLOW_CONNECTORS_API_KEYS", "secret-key")
        payload = {
            "args": {"contextStore": "ticket", "stopOnError": False},
            "input": {"text": "OPS-1"},
        }

        rejected = await client.post("/connectors/jira/extractTicket/invoke", json=payload)
        accepted = await client.post(
            "/connectors/jira/extractTicket/invoke", json=payload, headers={"x-api-key": "secret-key"}
        )

        assert rejected.status_code == 401
        assert accepted.status_code == 200
