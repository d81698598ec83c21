"""
Build API — HTTP Endpoint Tests
=================================

What:  The full HTTP contract, end to end against a temporary SQLite file.
How:   test_client (conftest) routes requests straight into the ASGI app.

What we test:
    ✅ Crushed Stone scenario: create → get → update → delete → get 404
    ✅ 400 on missing/empty name or no body, with no row created
    ✅ 404 on unknown ids for get/update/delete, and on a repeated delete
    ✅ 400 name-required for parsed non-object bodies
    ✅ non-numeric densities stored and returned as sent
    ✅ 500 with a generic body when the store fails or anything else raises
    ✅ landing page, /api-docs, /openapi.json, /health, CORS, X-Request-ID
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError
from unittest.mock import AsyncMock, MagicMock

from buildapi.exceptions import DatabaseError
from buildapi.routes.aggregates import get_aggregate_store
from buildapi.services.aggregate_store import AggregateStore

BASE = "/api/aggregates"


class TestAggregateScenario:

    @pytest.mark.asyncio
    async def test_crushed_stone_lifecycle(self, test_client, sample_payload):
        created = await test_client.post(BASE, json=sample_payload)
        assert created.status_code == 201
        body = created.json()
        new_id = body["id"]
        assert isinstance(new_id, int)
        assert body == {"id": new_id, **sample_payload}

        fetched = await test_client.get(f"{BASE}/{new_id}")
        assert fetched.status_code == 200
        assert fetched.json() == {"id": new_id, **sample_payload}

        update = {**sample_payload, "name": "Crushed Stone Fine"}
        updated = await test_client.put(f"{BASE}/{new_id}", json=update)
        assert updated.status_code == 200
        assert updated.json() == {"id": new_id, **update}

        refetched = await test_client.get(f"{BASE}/{new_id}")
        assert refetched.json()["name"] == "Crushed Stone Fine"

        deleted = await test_client.delete(f"{BASE}/{new_id}")
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Aggregate deleted successfully"}

        gone = await test_client.get(f"{BASE}/{new_id}")
        assert gone.status_code == 404
        assert gone.json() == {"error": "Aggregate not found"}


class TestListAndGet:

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client):
        response = await test_client.get(BASE)
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_after_creates(self, test_client):
        for name in ("Sand (Fine)", "Gravel (20mm)"):
            await test_client.post(BASE, json={"name": name})
        response = await test_client.get(BASE)
        assert [a["name"] for a in response.json()] == ["Sand (Fine)", "Gravel (20mm)"]

    @pytest.mark.asyncio
    async def test_ids_unique(self, test_client):
        ids = set()
        for i in range(5):
            response = await test_client.post(BASE, json={"name": f"Aggregate {i}"})
            ids.add(response.json()["id"])
        assert len(ids) == 5

    @pytest.mark.asyncio
    async def test_omitted_fields_are_null(self, test_client):
        created = await test_client.post(BASE, json={"name": "River Rock"})
        assert created.json()["looseDensity"] is None

        fetched = await test_client.get(f"{BASE}/{created.json()['id']}")
        assert fetched.json() == {
            "id": created.json()["id"],
            "name": "River Rock",
            "looseDensity": None,
            "compactedDensity": None,
            "category": None,
        }

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, test_client):
        response = await test_client.get(f"{BASE}/999")
        assert response.status_code == 404
        assert response.json() == {"error": "Aggregate not found"}

    @pytest.mark.asyncio
    async def test_get_non_numeric_id(self, test_client):
        """Non-numeric ids reach the store and simply match nothing."""
        response = await test_client.get(f"{BASE}/abc")
        assert response.status_code == 404


class TestCreateValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"name": ""}, {"name": None}, {"looseDensity": 1450}])
    async def test_missing_name(self, test_client, body):
        response = await test_client.post(BASE, json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Aggregate name is required"}

        listed = await test_client.get(BASE)
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_no_body(self, test_client):
        response = await test_client.post(BASE)
        assert response.status_code == 400
        assert response.json() == {"error": "Aggregate name is required"}

    @pytest.mark.asyncio
    async def test_malformed_json(self, test_client):
        response = await test_client.post(
            BASE, content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[], "Crushed Stone", 5, [{"name": "Sand"}]])
    async def test_non_object_body_has_no_name(self, test_client, body):
        response = await test_client.post(BASE, json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Aggregate name is required"}

        listed = await test_client.get(BASE)
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_non_object_body_on_update(self, test_client, sample_payload):
        created = await test_client.post(BASE, json=sample_payload)
        response = await test_client.put(f"{BASE}/{created.json()['id']}", json=[])
        assert response.status_code == 400
        assert response.json() == {"error": "Aggregate name is required"}

    @pytest.mark.asyncio
    async def test_optional_fields_not_validated(self, test_client):
        response = await test_client.post(
            BASE, json={"name": "Odd", "looseDensity": -1, "category": "Anything Goes"}
        )
        assert response.status_code == 201
        assert response.json()["looseDensity"] == -1

    @pytest.mark.asyncio
    async def test_non_numeric_density_stored_as_sent(self, test_client):
        body = {"name": "X", "looseDensity": "abc", "compactedDensity": "n/a", "category": "Base Material"}

        created = await test_client.post(BASE, json=body)
        assert created.status_code == 201
        new_id = created.json()["id"]
        assert created.json() == {"id": new_id, **body}

        fetched = await test_client.get(f"{BASE}/{new_id}")
        assert fetched.status_code == 200
        assert fetched.json() == {"id": new_id, **body}

    @pytest.mark.asyncio
    async def test_non_numeric_density_on_update(self, test_client, sample_payload):
        created = await test_client.post(BASE, json=sample_payload)
        new_id = created.json()["id"]
        update = {**sample_payload, "compactedDensity": "unknown"}

        updated = await test_client.put(f"{BASE}/{new_id}", json=update)
        assert updated.status_code == 200

        fetched = await test_client.get(f"{BASE}/{new_id}")
        assert fetched.json()["compactedDensity"] == "unknown"


class TestUpdateAndDelete:

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, test_client):
        response = await test_client.put(f"{BASE}/404", json={"name": "Ghost"})
        assert response.status_code == 404
        assert response.json() == {"error": "Aggregate not found"}

        listed = await test_client.get(BASE)
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_update_missing_name(self, test_client, sample_payload):
        created = await test_client.post(BASE, json=sample_payload)
        response = await test_client.put(
            f"{BASE}/{created.json()['id']}", json={"category": "Base Material"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Aggregate name is required"}

    @pytest.mark.asyncio
    async def test_update_is_full_replace(self, test_client, sample_payload):
        created = await test_client.post(BASE, json=sample_payload)
        new_id = created.json()["id"]

        await test_client.put(f"{BASE}/{new_id}", json={"name": "Bare"})

        fetched = await test_client.get(f"{BASE}/{new_id}")
        assert fetched.json() == {
            "id": new_id,
            "name": "Bare",
            "looseDensity": None,
            "compactedDensity": None,
            "category": None,
        }

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, test_client):
        response = await test_client.delete(f"{BASE}/123")
        assert response.status_code == 404
        assert response.json() == {"error": "Aggregate not found"}

    @pytest.mark.asyncio
    async def test_repeated_delete(self, test_client, sample_payload):
        created = await test_client.post(BASE, json=sample_payload)
        new_id = created.json()["id"]

        first = await test_client.delete(f"{BASE}/{new_id}")
        second = await test_client.delete(f"{BASE}/{new_id}")
        assert first.status_code == 200
        assert second.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_removes_only_target(self, test_client):
        keep = (await test_client.post(BASE, json={"name": "Keep"})).json()["id"]
        drop = (await test_client.post(BASE, json={"name": "Drop"})).json()["id"]

        await test_client.delete(f"{BASE}/{drop}")

        listed = await test_client.get(BASE)
        assert [a["id"] for a in listed.json()] == [keep]


class TestStorageFailures:

    @pytest.mark.asyncio
    async def test_store_failure_is_generic_500(self, app, test_client):
        session = MagicMock()
        session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("no such table: Aggregates"))
        )
        app.dependency_overrides[get_aggregate_store] = lambda: AggregateStore(session)

        response = await test_client.get(BASE)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "no such table" not in response.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path, kwargs",
        [
            ("get", f"{BASE}/1", {}),
            ("post", BASE, {"json": {"name": "Sand"}}),
            ("put", f"{BASE}/1", {"json": {"name": "Sand"}}),
            ("delete", f"{BASE}/1", {}),
        ],
    )
    async def test_every_route_maps_database_error(self, app, test_client, mock_store, method, path, kwargs):
        failure = DatabaseError(message="boom", context={"original_error": "disk I/O error"})
        for name in ("get_by_id", "insert", "update_by_id", "delete_by_id"):
            getattr(mock_store, name).side_effect = failure
        app.dependency_overrides[get_aggregate_store] = lambda: mock_store

        response = await getattr(test_client, method)(path, **kwargs)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestAmbientRoutes:

    @pytest.mark.asyncio
    async def test_landing_page(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Construction Aggregates API" in response.text
        assert 'href="/api-docs"' in response.text

    @pytest.mark.asyncio
    async def test_api_docs(self, test_client):
        response = await test_client.get("/api-docs")
        assert response.status_code == 200
        assert "swagger-ui" in response.text.lower()

    @pytest.mark.asyncio
    async def test_openapi_document(self, test_client):
        response = await test_client.get("/openapi.json")
        spec = response.json()
        assert spec["info"]["title"] == "Build API"
        assert set(spec["paths"]) >= {"/api/aggregates", "/api/aggregates/{aggregate_id}"}

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "connected"

    @pytest.mark.asyncio
    async def test_cors_preflight(self, test_client):
        response = await test_client.options(
            BASE,
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "PUT",
                "Access-Control-Request-Headers": "Content-Type, Authorization",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "PUT" in response.headers["access-control-allow-methods"]

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        generated = await test_client.get(BASE)
        assert generated.headers["X-Request-ID"]

        echoed = await test_client.get(BASE, headers={"X-Request-ID": "abc12345"})
        assert echoed.headers["X-Request-ID"] == "abc12345"


class TestUnexpectedErrors:

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic_500_with_request_id(self, app, mock_store):
        mock_store.list_all.side_effect = RuntimeError("kaboom")
        app.dependency_overrides[get_aggregate_store] = lambda: mock_store

        # The fallback handler answers, then Starlette re-raises to the server
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get(BASE, headers={"X-Request-ID": "req00042"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "kaboom" not in response.text
        assert response.headers["X-Request-ID"] == "req00042"
