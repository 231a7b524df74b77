"""
Tests for the Land Registry import endpoints and background job

Covers validation reports, import with duplicate handling, progress polling,
cancellation (including rollback of a running import), history and health.
"""

from __future__ import annotations

import inspect
from datetime import timedelta

from sqlalchemy import func, select

from propertyhub.core.config import settings
from propertyhub.domain.activity import ActivityLog
from propertyhub.domain.property import Property
from propertyhub.repositories.property import PropertyRepository
from propertyhub.routers.v1 import land_registry as land_registry_routes
from propertyhub.services import land_registry_import
from propertyhub.services.land_registry_import import (
    ImportOptions,
    ImportProgressRegistry,
    progress_registry,
    run_import,
)

from conftest import db, run

BASE = "/api/v1/admin/land-registry"

ROWS = [
    "{A1},250000,2023-01-15,SW1A 1AA,D,N,F,10,,DOWNING STREET,,LONDON,WESTMINSTER,GREATER LONDON,A,A",
    "{A2},450000,2023-02-20,M1 1AA,S,N,F,1,,MARKET STREET,,MANCHESTER,MANCHESTER,GREATER MANCHESTER,A,A",
]
BAD_ROW = "{A3},abc,2023-02-20,INVALID,F,N,F,2,,HIGH STREET,,LEEDS,LEEDS,WEST YORKSHIRE,A,A"


def _csv(*rows: str) -> bytes:
    return ("\n".join(rows) + "\n").encode()


def _files(content: bytes, name: str = "prices.csv") -> dict:
    return {"file": (name, content, "text/csv")}


async def _properties(session):
    result = await session.execute(
        select(Property).where(Property.deleted_at.is_(None)).order_by(Property.price)
    )
    return list(result.scalars().all())


async def _property_count(session) -> int:
    return (await session.execute(select(func.count()).select_from(Property))).scalar_one()


async def _activity_actions(session) -> list[str]:
    result = await session.execute(select(ActivityLog.action).order_by(ActivityLog.created_at))
    return list(result.scalars().all())


# =============================================================================
# Access and validation
# =============================================================================


class TestAccess:
    def test_admin_only(self, client, agent_headers):
        resp = client.get(f"{BASE}/health", headers=agent_headers)
        assert resp.status_code == 403

    def test_health(self, client, admin_headers):
        data = client.get(f"{BASE}/health", headers=admin_headers).json()["data"]
        assert data["status"] == "healthy"
        assert data["activeImports"] == 0
        assert data["version"] == "1.0.0"

    def test_template_download(self, client, admin_headers):
        resp = client.get(f"{BASE}/template/download", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert 'filename="land-registry-template.csv"' in resp.headers["content-disposition"]
        assert resp.text.splitlines()[0].startswith("transactionId,price,dateOfTransfer")


class TestValidate:
    def test_report(self, client, admin_headers):
        resp = client.post(
            f"{BASE}/validate", files=_files(_csv(*ROWS, BAD_ROW)), headers=admin_headers
        )
        data = resp.json()["data"]
        assert data["isValid"] is False
        assert data["recordCount"] == 3
        assert data["errors"] == [
            "Record 3: Valid price is required",
            "Record 3: Invalid postcode format",
        ]
        assert len(data["sampleRecords"]) == 2
        assert data["sampleRecords"][0]["postcode"] == "SW1A 1AA"
        assert data["sampleRecords"][0]["price"] == 250000

    def test_empty_file(self, client, admin_headers):
        resp = client.post(f"{BASE}/validate", files=_files(b"\n\n"), headers=admin_headers)
        data = resp.json()["data"]
        assert data["isValid"] is False
        assert data["errors"] == ["CSV file is empty or has no valid records"]

    def test_non_csv_rejected(self, client, admin_headers):
        resp = client.post(
            f"{BASE}/validate", files=_files(_csv(*ROWS), "prices.txt"), headers=admin_headers
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "File must be a CSV file"

    def test_undecodable_file(self, client, admin_headers):
        resp = client.post(f"{BASE}/validate", files=_files(b"\xff\xfe\x00bad"), headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"].startswith("CSV validation failed:")


# =============================================================================
# Import job
# =============================================================================


class TestImport:
    def _import(self, client, headers, content: bytes, **form) -> dict:
        resp = client.post(f"{BASE}/import", files=_files(content), data=form, headers=headers)
        assert resp.status_code == 202, resp.text
        import_id = resp.json()["data"]["importId"]
        # TestClient runs background tasks before returning
        return client.get(f"{BASE}/progress/{import_id}", headers=headers).json()["data"]

    def test_import_creates_properties(self, client, admin_headers):
        progress = self._import(client, admin_headers, _csv(*ROWS, BAD_ROW))
        assert progress["status"] == "completed"
        assert progress["progress"] == 100
        assert progress["totalRecords"] == 2
        assert progress["currentRecord"] == 2
        assert progress["message"] == "Import completed: 2 imported, 0 duplicates, 0 failed"
        assert "Record 3: Valid price is required" in progress["errors"]

        props = db(_properties)
        assert [p.property_type for p in props] == ["detached", "semi_detached"]
        first = props[0]
        assert first.title == "10 DOWNING STREET LONDON"
        assert first.address_line1 == "10, DOWNING STREET, LONDON, WESTMINSTER, GREATER LONDON"
        assert first.city == "LONDON"
        assert first.source == "land_registry"
        assert first.listing_type == "sale"
        assert first.bedrooms == 0
        assert first.description == "Property imported from Land Registry data"

    def test_reimport_counts_duplicates(self, client, admin_headers):
        self._import(client, admin_headers, _csv(*ROWS))
        progress = self._import(client, admin_headers, _csv(*ROWS))
        assert progress["message"] == "Import completed: 0 imported, 2 duplicates, 0 failed"
        assert db(_property_count) == 2

    def test_update_existing_changes_price(self, client, admin_headers):
        self._import(client, admin_headers, _csv(ROWS[0]))
        repriced = ROWS[0].replace(",250000,", ",275000,")
        progress = self._import(
            client,
            admin_headers,
            _csv(repriced),
            skipDuplicates="false",
            updateExisting="true",
        )
        assert progress["status"] == "completed"
        props = db(_properties)
        assert len(props) == 1
        assert props[0].price == 275000

    def test_batch_size_bounds(self, client, admin_headers):
        resp = client.post(
            f"{BASE}/import",
            files=_files(_csv(*ROWS)),
            data={"batchSize": "10"},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_history_lists_completed_imports(self, client, admin, admin_headers):
        progress = self._import(client, admin_headers, _csv(*ROWS))
        body = client.get(f"{BASE}/history", headers=admin_headers).json()
        assert body["meta"]["total"] == 1
        entry = body["data"][0]
        assert entry["importId"] == progress["importId"]
        assert entry["adminId"] == admin[0].id
        assert entry["metadata"]["result"]["successfulImports"] == 2
        assert entry["metadata"]["result"]["totalRecords"] == 2

    def test_unknown_progress(self, client, admin_headers):
        resp = client.get(f"{BASE}/progress/import_0_missing", headers=admin_headers)
        assert resp.status_code == 404


# =============================================================================
# Cancellation
# =============================================================================


class TestCancel:
    def test_cancel_pending_import(self, client, admin, admin_headers):
        state = progress_registry.register(admin[0].id)
        active = client.get(f"{BASE}/active-imports", headers=admin_headers).json()["data"]
        assert [p["importId"] for p in active] == [state.import_id]

        resp = client.delete(f"{BASE}/cancel/{state.import_id}", headers=admin_headers)
        assert resp.json()["data"] == {"success": True, "message": "Import cancelled successfully"}
        assert state.status == "cancelled"
        assert state.message == "Import cancelled by admin"

        # A cancelled import never starts
        assert run(run_import(state.import_id, _csv(*ROWS), admin[0].id)) is None
        assert db(_property_count) == 0

        again = client.delete(f"{BASE}/cancel/{state.import_id}", headers=admin_headers)
        assert again.status_code == 400
        assert again.json()["error"]["message"] == "Cannot cancel completed or failed import"

    def test_cancel_unknown(self, client, admin_headers):
        resp = client.delete(f"{BASE}/cancel/import_0_missing", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Import not found"

    def test_cancel_mid_run_rolls_back(self, monkeypatch):
        state = progress_registry.register(None)
        original = land_registry_import._process_record

        async def cancel_after_first(properties, record, options):
            outcome = await original(properties, record, options)
            state.finish("cancelled", "Import cancelled by admin")
            return outcome

        monkeypatch.setattr(land_registry_import, "_process_record", cancel_after_first)

        result = run(run_import(state.import_id, _csv(*ROWS), None, ImportOptions(batch_size=100)))
        assert result is None
        assert state.status == "cancelled"
        assert state.current_record == 1
        assert db(_property_count) == 0

    def test_direct_run_returns_result(self):
        state = progress_registry.register(None)
        result = run(run_import(state.import_id, _csv(*ROWS, BAD_ROW), None))
        assert result.success is True
        assert result.total_records == 3
        assert result.processed_records == 2
        assert result.successful_imports == 2
        assert result.duration >= 0
        assert state.finished_at is not None

    def test_cancel_during_last_record_rolls_back(self, monkeypatch):
        state = progress_registry.register(None)
        original = land_registry_import._process_record

        async def cancel_while_writing(properties, record, options):
            outcome = await original(properties, record, options)
            state.finish("cancelled", "Import cancelled by admin")
            return outcome

        monkeypatch.setattr(land_registry_import, "_process_record", cancel_while_writing)

        assert run(run_import(state.import_id, _csv(ROWS[0]), None)) is None
        assert state.status == "cancelled"
        assert state.message == "Import cancelled by admin"
        assert db(_property_count) == 0

    def test_cancel_refused_while_committing(self, client, admin, admin_headers):
        state = progress_registry.register(admin[0].id)
        state.status = "processing"
        state.finalising = True

        resp = client.delete(f"{BASE}/cancel/{state.import_id}", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Cannot cancel completed or failed import"
        assert state.status == "processing"

    def test_finished_state_is_not_overwritten(self):
        state = progress_registry.register(None)
        state.finish("cancelled", "Import cancelled by admin")
        state.finish("completed", "Import completed: 1 imported, 0 duplicates, 0 failed")
        assert state.status == "cancelled"
        assert state.message == "Import cancelled by admin"


# =============================================================================
# Failure handling
# =============================================================================


class TestFailures:
    def test_record_failure_is_counted_and_skipped(self, monkeypatch):
        original = land_registry_import.build_title
        calls = []

        def title_missing_once(record):
            calls.append(record)
            return None if len(calls) == 1 else original(record)

        monkeypatch.setattr(land_registry_import, "build_title", title_missing_once)

        state = progress_registry.register(None)
        result = run(run_import(state.import_id, _csv(*ROWS), None))

        assert state.status == "completed"
        assert state.message == "Import completed: 1 imported, 0 duplicates, 1 failed"
        assert result.failed_imports == 1
        assert result.successful_imports == 1
        assert any(e.startswith("Record 1:") for e in state.errors)
        assert [p.city for p in db(_properties)] == ["MANCHESTER"]

    def test_unexpected_error_rolls_back_everything(self, monkeypatch):
        original = PropertyRepository.find_by_address
        calls = []

        async def lookup_fails_second_time(self, address_line1, postcode):
            calls.append(address_line1)
            if len(calls) == 2:
                raise RuntimeError("index offline")
            return await original(self, address_line1, postcode)

        monkeypatch.setattr(PropertyRepository, "find_by_address", lookup_fails_second_time)

        state = progress_registry.register(None)
        assert run(run_import(state.import_id, _csv(*ROWS), None)) is None

        assert state.status == "failed"
        assert state.message == "Import failed: index offline"
        assert "index offline" in state.errors
        assert db(_property_count) == 0
        assert db(_activity_actions) == ["CSV_IMPORT_FAILED"]


# =============================================================================
# Large files and progress retention
# =============================================================================


class TestLimits:
    def test_large_file_warning(self, client, admin_headers, monkeypatch):
        monkeypatch.setattr(settings, "import_large_file_threshold", 1)
        resp = client.post(f"{BASE}/validate", files=_files(_csv(*ROWS)), headers=admin_headers)
        data = resp.json()["data"]
        assert data["isValid"] is True
        assert data["warnings"] == [
            "Large file detected (2 records). Consider splitting into smaller files."
        ]

    def test_finished_progress_expires(self):
        registry = ImportProgressRegistry(ttl_seconds=60)
        old = registry.register(None)
        old.finish("completed", "done")
        old.finished_at -= timedelta(seconds=61)
        recent = registry.register(None)
        recent.finish("completed", "done")
        running = registry.register(None)

        assert registry.get(old.import_id) is None
        assert registry.get(recent.import_id) is recent
        assert registry.get(running.import_id) is running

    def test_in_memory_endpoints_take_no_session(self):
        for handler in (
            land_registry_routes.import_progress,
            land_registry_routes.active_imports,
            land_registry_routes.import_health,
        ):
            assert "session" not in inspect.signature(handler).parameters
        assert land_registry_import.import_health().status == "healthy"
