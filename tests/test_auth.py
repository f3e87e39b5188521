"""Trigger API key and cron secret validation tests."""

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from feedwatch.auth.dependencies import require_api_key, require_cron_secret
from feedwatch.config import Settings, get_settings

API_KEY = "test-secret-key"
CRON_SECRET = "cron-secret"


def _make_app(api_key: str = API_KEY, cron_secret: str = CRON_SECRET) -> FastAPI:
    app = FastAPI()

    def _override_settings() -> Settings:
        return Settings(api_key=api_key, cron_secret=cron_secret)  # type: ignore[call-arg]

    app.dependency_overrides[get_settings] = _override_settings

    @app.post("/trigger")
    async def trigger(key: str | None = Depends(require_api_key)):
        return {"status": "ok"}

    @app.get("/cron", dependencies=[Depends(require_cron_secret)])
    async def cron():
        return {"status": "ok"}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


@pytest.fixture
def client() -> TestClient:
    return TestClient(_make_app())


class TestApiKeyAuth:
    def test_valid_key(self, client: TestClient) -> None:
        resp = client.post("/trigger", headers={"X-API-Key": API_KEY})
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_missing_key(self, client: TestClient) -> None:
        resp = client.post("/trigger")
        assert resp.status_code == 401

    def test_wrong_key(self, client: TestClient) -> None:
        resp = client.post("/trigger", headers={"X-API-Key": "wrong-key"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid API key"

    def test_empty_key(self, client: TestClient) -> None:
        resp = client.post("/trigger", headers={"X-API-Key": ""})
        assert resp.status_code == 401

    def test_no_key_configured_is_open(self) -> None:
        client = TestClient(_make_app(api_key=""))
        resp = client.post("/trigger")
        assert resp.status_code == 200

    def test_health_no_auth(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200


class TestCronSecret:
    def test_valid_bearer(self, client: TestClient) -> None:
        resp = client.get("/cron", headers={"Authorization": f"Bearer {CRON_SECRET}"})
        assert resp.status_code == 200

    def test_missing_bearer(self, client: TestClient) -> None:
        resp = client.get("/cron")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Unauthorized"

    def test_wrong_bearer(self, client: TestClient) -> None:
        resp = client.get("/cron", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_api_key_is_not_a_cron_secret(self, client: TestClient) -> None:
        resp = client.get("/cron", headers={"X-API-Key": API_KEY})
        assert resp.status_code == 401

    def test_no_secret_configured_is_open(self) -> None:
        client = TestClient(_make_app(cron_secret=""))
        resp = client.get("/cron")
        assert resp.status_code == 200
