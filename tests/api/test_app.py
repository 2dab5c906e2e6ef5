"""Application-level behaviour: health check and error bodies."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.json() == {"status": "healthy", "version": "0.1.0"}
    assert response.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_error_body_carries_request_id(client: AsyncClient):
    response = await client.get("/api/v1/products/missing-id", headers={"X-Request-Id": "req-123"})

    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "NOT_FOUND"
    assert body["details"] == {"resource": "Product"}
    assert body["request_id"] == "req-123"
    assert response.headers["X-Request-Id"] == "req-123"


@pytest.mark.asyncio
async def test_validation_errors_are_listed(client: AsyncClient):
    response = await client.post("/api/v1/products/", json={"price": "12.00"})

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert response.json()["errors"][0]["loc"][-1] == "name"
