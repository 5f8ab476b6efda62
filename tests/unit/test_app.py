"""
Unit tests for app-wide middleware and error handling.
"""

from unittest.mock import AsyncMock

from fastapi import status
from fastapi.testclient import TestClient

from products import repository

ALLOWED = "https://acme-services.vercel.app"


class TestCors:
    def test_disallowed_origin_is_rejected(self, client, catalog):
        response = client.get("/api/products", headers={"Origin": "https://evil.example"})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"message": "Not allowed by CORS"}
        assert catalog.calls == []

    def test_allowed_origin(self, client, catalog):
        response = client.get("/api/products", headers={"Origin": ALLOWED})

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["access-control-allow-origin"] == ALLOWED

    def test_no_origin_is_allowed(self, client, catalog):
        response = client.get("/api/products")

        assert response.status_code == status.HTTP_200_OK
        assert "access-control-allow-origin" not in response.headers

    def test_preflight_from_allowed_origin(self, client):
        response = client.options(
            "/api/products",
            headers={"Origin": ALLOWED, "Access-Control-Request-Method": "POST"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["access-control-allow-origin"] == ALLOWED

    def test_preflight_from_disallowed_origin(self, client):
        response = client.options(
            "/api/products",
            headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_origins_from_environment(self, monkeypatch, app_factory):
        monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://shop.example, https://admin.example/")
        client = TestClient(app_factory())

        assert client.get("/api/products", headers={"Origin": "https://admin.example"}).status_code == 200
        assert client.get("/api/products", headers={"Origin": ALLOWED}).status_code == 403


class TestSecurityHeaders:
    def test_applied_to_success(self, client, catalog):
        response = client.get("/health")

        assert response.json() == {"status": "ok"}
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert "strict-transport-security" not in response.headers

    def test_applied_to_errors(self, client, catalog):
        for response in (
            client.get("/api/products/999"),
            client.get("/api/products?page=0"),
            client.get("/health", headers={"Origin": "https://evil.example"}),
        ):
            assert response.headers["x-content-type-options"] == "nosniff"

    def test_hsts_in_production(self, monkeypatch, app_factory):
        monkeypatch.setenv("APP_ENV", "production")
        response = TestClient(app_factory()).get("/health")

        assert response.headers["strict-transport-security"].startswith("max-age=")


def test_unexpected_error_is_plain_text_500(app, monkeypatch):
    monkeypatch.setattr(repository, "get_product", AsyncMock(side_effect=KeyError("boom")))
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/api/products/1")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.text == "Something broke!"


def test_unknown_route_uses_message_shape(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "Not Found"}
