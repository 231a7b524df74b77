"""
Tests for the write-request audit middleware
"""

from sqlalchemy import select
from starlette.requests import Request

from propertyhub.core.config import settings
from propertyhub.core.security import create_access_token
from propertyhub.domain.activity import ActivityLog
from propertyhub.main import create_app
from propertyhub.middleware.audit import AuditMiddleware, _entity_from, _user_id_from

from conftest import db, run

PROPERTY_ID = "0b6b3c59-3d4e-4d7a-9a36-0c5ad1f1e001"


def _request(method: str, path: str, headers: dict[str, str] | None = None) -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "scheme": "http",
        "server": ("testserver", 80),
        "client": ("10.0.0.7", 52000),
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    return Request(scope)


class TestEntityFromPath:
    def test_id_segment(self):
        path = f"/api/v1/properties/{PROPERTY_ID}/favorite"
        assert _entity_from(path) == ("property", PROPERTY_ID)

    def test_collection(self):
        assert _entity_from("/api/v1/tenancies") == ("tenancy", None)
        assert _entity_from("/api/v1/rent-payments/") == ("rent-payment", None)

    def test_action_without_id(self):
        assert _entity_from("/api/v1/auth/login") == ("login", None)


class TestUserFromRequest:
    def test_bearer_token(self):
        token = create_access_token("user-1", {"role": "agent"})
        request = _request("POST", "/", {"Authorization": f"Bearer {token}"})
        assert _user_id_from(request) == "user-1"

    def test_missing_or_invalid(self):
        assert _user_id_from(_request("POST", "/")) is None
        assert _user_id_from(_request("POST", "/", {"Authorization": "Bearer junk"})) is None
        assert _user_id_from(_request("POST", "/", {"Authorization": "Basic abc"})) is None


class TestRecord:
    def test_writes_activity_row(self):
        token = create_access_token("user-9")
        request = _request(
            "DELETE",
            f"/api/v1/properties/{PROPERTY_ID}",
            {"Authorization": f"Bearer {token}", "User-Agent": "pytest"},
        )
        run(AuditMiddleware(app=None)._record(request, 204, 15))

        async def _rows(session):
            return list((await session.execute(select(ActivityLog))).scalars().all())

        rows = db(_rows)
        assert len(rows) == 1
        row = rows[0]
        assert row.action == "DELETE:204"
        assert row.category == "http"
        assert row.user_id == "user-9"
        assert (row.entity_type, row.entity_id) == ("property", PROPERTY_ID)
        assert row.ip_address == "10.0.0.7"
        assert row.user_agent == "pytest"
        assert row.details == f"DELETE /api/v1/properties/{PROPERTY_ID} → 204 (15ms)"


class TestRegistration:
    def test_toggled_by_settings(self, monkeypatch):
        def has_audit(app) -> bool:
            return any(m.cls is AuditMiddleware for m in app.user_middleware)

        assert not has_audit(create_app())
        monkeypatch.setattr(settings, "audit_log_enabled", True)
        assert has_audit(create_app())
