"""
Tests for the error envelope and the application health check
"""

from propertyhub.core.exceptions import NotFoundError, ValidationError


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {
            "status": "ok",
            "app": "PropertyHub API",
            "env": "test",
            "version": "1.0.0",
        }


class TestErrorEnvelope:
    def test_unknown_route(self, client):
        resp = client.get("/api/v1/does-not-exist")
        assert resp.status_code == 404
        assert resp.json() == {
            "error": {"code": "NOT_FOUND", "message": "Resource not found"}
        }

    def test_method_not_allowed(self, client):
        resp = client.patch("/health")
        assert resp.status_code == 405
        assert resp.json()["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_request_validation_is_400_with_details(self, client):
        resp = client.post("/api/v1/auth/login", json={"email": "not-an-email"})
        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Request validation failed"
        fields = {d["field"] for d in error["details"]}
        assert {"email", "password"} <= fields

    def test_missing_token_is_401_with_challenge(self, client):
        resp = client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"
        assert resp.json()["error"]["code"] == "UNAUTHORIZED"

    def test_not_found_entity(self, client):
        resp = client.get("/api/v1/properties/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"


class TestExceptions:
    def test_not_found_message(self):
        assert NotFoundError("Property").message == "Property not found"
        assert NotFoundError("Import", "abc").message == "Import 'abc' not found"

    def test_validation_status(self):
        exc = ValidationError("bad")
        assert (exc.status_code, exc.code) == (400, "VALIDATION_ERROR")
