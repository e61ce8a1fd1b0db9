"""Global error handlers — one envelope for domain, validation and unexpected errors."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from payrates.api.error_handlers import register_error_handlers
from payrates.core.errors import DatabaseError
from payrates.schemas.rates import RateWrite


@pytest.fixture
async def handler_client():
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/db-down")
    async def db_down():
        raise DatabaseError("Connection or operational error", "execute")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret stack detail")

    @app.post("/rates")
    async def write(body: RateWrite):
        return {"ok": True}

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def test_domain_error_uses_its_status(handler_client):
    response = await handler_client.get("/db-down")

    assert response.status_code == 503
    error = response.json()["error"]
    assert error["code"] == "DATABASE_ERROR"
    assert error["severity"] == "critical"


async def test_validation_error_is_400_with_details(handler_client):
    response = await handler_client.post("/rates", json={"userId": 1, "hourly_rate": "1,234"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID_INPUT"
    assert error["category"] == "validation"
    fields = {d["field"] for d in error["details"]}
    assert fields == {"body.effective_from", "body.hourly_rate"}


async def test_unexpected_error_hides_details(handler_client):
    response = await handler_client.get("/boom")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL_ERROR"
    assert "secret" not in response.text
