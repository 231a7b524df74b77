"""
Tests for file uploads: validation, storage, PDF extraction, download and stats.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from propertyhub.core.config import settings
from propertyhub.core.exceptions import (
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from propertyhub.db.base import async_session_factory
from propertyhub.services.file_upload import (
    FileUploadService,
    extract_pdf_metadata,
    validate_upload,
)

from conftest import create_user, run

BASE = "/api/v1/files"


def minimal_pdf(text: bytes) -> bytes:
    """Build a one-page PDF with a correct xref table."""
    stream = b"BT /F1 24 Tf 72 720 Td (" + text + b") Tj ET"
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref,
    )
    return bytes(out)


def _upload(client, headers, name, content, mime, **form):
    return client.post(
        BASE,
        files={"file": (name, content, mime)},
        data=form,
        headers=headers,
    )


# =============================================================================
# Validation helpers
# =============================================================================


class TestValidateUpload:
    def test_empty_file(self):
        with pytest.raises(ValidationError):
            validate_upload(b"", "image/png", "image")

    def test_too_large(self, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_size_mb", 1)
        with pytest.raises(PayloadTooLargeError):
            validate_upload(b"x" * (1024 * 1024 + 1), "image/png", "image")

    @pytest.mark.parametrize(
        "mime, file_type",
        [("application/pdf", "image"), ("image/png", "document"), ("application/zip", "other")],
    )
    def test_wrong_type(self, mime, file_type):
        with pytest.raises(UnsupportedMediaTypeError):
            validate_upload(b"data", mime, file_type)

    @pytest.mark.parametrize(
        "mime, file_type",
        [("image/webp", "image"), ("text/csv", "document"), ("video/mp4", "video"), ("text/plain", "other")],
    )
    def test_allowed(self, mime, file_type):
        validate_upload(b"data", mime, file_type)


class TestPdfExtraction:
    def test_reads_page_count_and_text(self):
        pages, text = extract_pdf_metadata(minimal_pdf(b"Hello tenancy"))
        assert pages == 1
        assert "Hello tenancy" in text

    def test_garbage_is_ignored(self):
        assert extract_pdf_metadata(b"%PDF-1.4 not really") == (None, None)


# =============================================================================
# API
# =============================================================================


class TestUploadApi:
    def test_upload_pdf(self, client, user_headers):
        resp = _upload(
            client,
            user_headers,
            "lease.pdf",
            minimal_pdf(b"Lease"),
            "application/pdf",
            fileType="document",
            entityType="tenancy",
            entityId="t-1",
            description="Signed lease",
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()["data"]
        assert data["originalName"] == "lease.pdf"
        assert data["fileName"].endswith(".pdf")
        assert data["fileUrl"] == f"/uploads/{data['fileName']}"
        assert data["pageCount"] == 1
        assert data["entityType"] == "tenancy"
        assert data["isPublic"] is False
        assert (Path(settings.upload_dir) / data["fileName"]).is_file()

    def test_empty_upload_rejected(self, client, user_headers):
        resp = _upload(client, user_headers, "a.txt", b"", "text/plain")
        assert resp.status_code == 400

    def test_disallowed_type(self, client, user_headers):
        resp = _upload(client, user_headers, "a.exe", b"MZ", "application/x-msdownload")
        assert resp.status_code == 415
        assert resp.json()["error"]["code"] == "UNSUPPORTED_MEDIA_TYPE"

    def test_requires_auth(self, client):
        resp = _upload(client, {}, "a.txt", b"hi", "text/plain")
        assert resp.status_code == 401

    def test_download_counts(self, client, user_headers):
        record = _upload(client, user_headers, "notes.txt", b"hello", "text/plain").json()["data"]
        resp = client.get(f"{BASE}/{record['id']}/download", headers=user_headers)
        assert resp.status_code == 200
        assert resp.content == b"hello"

        data = client.get(f"{BASE}/{record['id']}", headers=user_headers).json()["data"]
        assert data["downloadCount"] == 1
        assert data["lastAccessedAt"] is not None

    def test_download_missing_on_disk(self, client, user_headers):
        record = _upload(client, user_headers, "notes.txt", b"hello", "text/plain").json()["data"]
        (Path(settings.upload_dir) / record["fileName"]).unlink()
        resp = client.get(f"{BASE}/{record['id']}/download", headers=user_headers)
        assert resp.status_code == 404

    def test_update_and_delete_own_file(self, client, user_headers, agent_headers):
        record = _upload(client, user_headers, "notes.txt", b"hello", "text/plain").json()["data"]
        url = f"{BASE}/{record['id']}"

        assert client.patch(url, json={"isPublic": True}, headers=agent_headers).status_code == 403
        resp = client.patch(url, json={"isPublic": True, "description": "x"}, headers=user_headers)
        assert resp.json()["data"]["isPublic"] is True

        assert client.delete(url, headers=user_headers).status_code == 204
        assert client.get(url, headers=user_headers).status_code == 404
        assert not (Path(settings.upload_dir) / record["fileName"]).exists()

    def test_list_and_stats(self, client, user_headers, agent):
        agent_user, agent_headers = agent
        _upload(client, user_headers, "a.txt", b"12345", "text/plain")
        _upload(client, user_headers, "b.png", b"123", "image/png", fileType="image")
        _upload(client, agent_headers, "c.png", b"1", "image/png", fileType="image")

        body = client.get(BASE, params={"fileType": "image"}, headers=user_headers).json()
        assert body["meta"]["total"] == 2

        stats = client.get(f"{BASE}/stats", headers=user_headers).json()["data"]
        assert stats["totalFiles"] == 3
        assert stats["totalSize"] == 9
        assert stats["byType"] == [
            {"type": "document", "count": 1, "size": 5},
            {"type": "image", "count": 2, "size": 4},
        ]

        mine = client.get(
            f"{BASE}/stats", params={"uploadedById": agent_user.id}, headers=user_headers
        ).json()["data"]
        assert mine["totalFiles"] == 1


# =============================================================================
# Disk state follows the database transaction
# =============================================================================


class TestStorageFollowsTransaction:
    @staticmethod
    async def _store(service: FileUploadService, owner) -> tuple[str, Path]:
        record = await service.upload(
            content=b"lease terms",
            original_name="lease.txt",
            mime_type="text/plain",
            file_type="document",
            uploaded_by=owner,
        )
        return record.id, Path(record.file_path)

    def test_rolled_back_upload_leaves_no_file(self):
        owner = create_user("owner@example.com")

        async def scenario():
            async with async_session_factory() as session:
                _, path = await self._store(FileUploadService(session), owner)
                assert path.is_file()
                await session.rollback()
                return path

        assert not run(scenario()).exists()

    def test_delete_removes_file_only_after_commit(self):
        owner = create_user("owner@example.com")

        async def scenario():
            async with async_session_factory() as session:
                service = FileUploadService(session)
                file_id, path = await self._store(service, owner)
                await session.commit()

                await service.delete_file(file_id)
                assert path.is_file()
                await session.rollback()
                assert path.is_file()

                await service.delete_file(file_id)
                await session.commit()
                return path

        assert not run(scenario()).exists()
