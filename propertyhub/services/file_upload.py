"""File upload service — local-disk storage with PDF metadata extraction.

Files land in ``settings.upload_dir`` as ``<uuid><ext>`` and are served from
``/uploads/<name>``. PDFs additionally get their page count and the leading
text extracted with **pdfplumber**; a PDF that cannot be parsed is still stored.
Disk writes and removals follow the session: bytes written for a rolled-back
upload are removed, and a deleted file is unlinked only once the delete commits.

Rule: No FastAPI here. Routers pass raw bytes plus the declared metadata.
"""

import io
import logging
import mimetypes
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pdfplumber
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from propertyhub.core.config import settings
from propertyhub.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from propertyhub.core.pagination import PaginationParams
from propertyhub.domain.enums import ADMIN_ROLES
from propertyhub.domain.file_upload import FileUpload
from propertyhub.domain.user import User
from propertyhub.repositories.file_upload import FileUploadRepository
from propertyhub.schemas.file_upload import FileStats, FileTypeStats, FileUploadUpdate

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
DOCUMENT_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "text/csv",
        "text/plain",
    }
)
VIDEO_MIME_TYPES = frozenset({"video/mp4", "video/webm", "video/quicktime"})

ALLOWED_MIME_TYPES: dict[str, frozenset[str]] = {
    "image": IMAGE_MIME_TYPES,
    "document": DOCUMENT_MIME_TYPES,
    "video": VIDEO_MIME_TYPES,
    "other": IMAGE_MIME_TYPES | DOCUMENT_MIME_TYPES | VIDEO_MIME_TYPES,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def validate_upload(content: bytes, mime_type: str, file_type: str) -> None:
    """Raise when the payload is empty, too large, or of a disallowed type."""
    if len(content) == 0:
        raise ValidationError("Uploaded file is empty")
    if len(content) > settings.max_upload_size_bytes:
        raise PayloadTooLargeError(
            f"File size exceeds the {settings.max_upload_size_mb}MB limit"
        )
    allowed = ALLOWED_MIME_TYPES.get(file_type)
    if allowed is None or mime_type not in allowed:
        raise UnsupportedMediaTypeError(
            f"File type '{mime_type}' is not allowed for {file_type} uploads"
        )


def _extension(original_name: str, mime_type: str) -> str:
    suffix = Path(original_name).suffix.lower()
    if suffix:
        return suffix
    return mimetypes.guess_extension(mime_type) or ""


def extract_pdf_metadata(content: bytes) -> tuple[int | None, str | None]:
    """Return ``(page_count, text)``; ``(None, None)`` when the PDF is unreadable."""
    try:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            page_count = len(pdf.pages)
            pages: list[str] = []
            length = 0
            for page in pdf.pages:
                text = page.extract_text()
                if text:
                    pages.append(text)
                    length += len(text)
                if length >= settings.pdf_text_max_chars:
                    break
    except Exception:  # pdfminer raises a wide range of parser errors
        logger.warning("Could not extract PDF metadata", exc_info=True)
        return None, None
    text = "\n".join(pages)[: settings.pdf_text_max_chars]
    return page_count, text or None


def _can_manage(user: User, record: FileUpload) -> bool:
    return record.uploaded_by_id == user.id or user.role in ADMIN_ROLES


# ---------------------------------------------------------------------------
# Disk changes tied to the surrounding transaction
# ---------------------------------------------------------------------------

_PENDING_KEY = "file_upload.pending"


def _pending(session: AsyncSession) -> dict[str, list[Path]]:
    """Paths written or due for removal in the session's open transaction."""
    sync_session = session.sync_session
    pending = sync_session.info.get(_PENDING_KEY)
    if pending is None:
        pending = sync_session.info[_PENDING_KEY] = {"written": [], "removed": []}
        event.listen(sync_session, "after_commit", _apply_on_commit)
        event.listen(sync_session, "after_rollback", _discard_on_rollback)
    return pending


def _apply_on_commit(sync_session: Session) -> None:
    if sync_session.in_nested_transaction():
        return
    pending = sync_session.info[_PENDING_KEY]
    for path in pending["removed"]:
        path.unlink(missing_ok=True)
    pending["written"].clear()
    pending["removed"].clear()


def _discard_on_rollback(sync_session: Session) -> None:
    # Savepoint outcomes are settled by the enclosing transaction
    if sync_session.in_nested_transaction():
        return
    pending = sync_session.info[_PENDING_KEY]
    for path in pending["written"]:
        path.unlink(missing_ok=True)
        logger.info("Removed %s after rollback", path.name)
    pending["written"].clear()
    pending["removed"].clear()


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class FileUploadService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._repo = FileUploadRepository(session)
        self._root = Path(settings.upload_dir)

    async def upload(
        self,
        *,
        content: bytes,
        original_name: str,
        mime_type: str,
        file_type: str,
        uploaded_by: User,
        entity_type: str | None = None,
        entity_id: str | None = None,
        description: str | None = None,
        is_public: bool = False,
    ) -> FileUpload:
        validate_upload(content, mime_type, file_type)

        file_name = f"{uuid.uuid4()}{_extension(original_name, mime_type)}"
        path = self._root / file_name

        page_count = extracted_text = None
        if mime_type == "application/pdf":
            page_count, extracted_text = extract_pdf_metadata(content)

        record = await self._repo.create(
            file_name=file_name,
            original_name=original_name,
            file_path=str(path),
            file_url=f"/uploads/{file_name}",
            file_type=file_type,
            mime_type=mime_type,
            file_size=len(content),
            uploaded_by_id=uploaded_by.id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            is_public=is_public,
            page_count=page_count,
            extracted_text=extracted_text,
        )
        # The row is flushed; the bytes are removed again if the transaction rolls back
        self._root.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        _pending(self._session)["written"].append(path)
        logger.info(
            "Stored %s (%d bytes, %s) as %s", original_name, len(content), mime_type, file_name
        )
        return record

    async def list_files(
        self,
        pagination: PaginationParams,
        *,
        uploaded_by_id: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        file_type: str | None = None,
    ):
        return await self._repo.list(
            **pagination.window(),
            filters={
                "uploaded_by_id": uploaded_by_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "file_type": file_type,
            },
        )

    async def get_file(self, file_id: str) -> FileUpload:
        record = await self._repo.get_by_id(file_id)
        if not record:
            raise NotFoundError("File", file_id)
        return record

    async def open_for_download(self, file_id: str) -> FileUpload:
        record = await self.get_file(file_id)
        if not Path(record.file_path).is_file():
            raise NotFoundError("File content", file_id)
        return await self._repo.apply(
            record,
            download_count=record.download_count + 1,
            last_accessed_at=datetime.now(timezone.utc),
        )

    async def update_file(self, file_id: str, data: FileUploadUpdate, user: User) -> FileUpload:
        record = await self.get_file(file_id)
        if not _can_manage(user, record):
            raise ForbiddenError("You can only modify your own files")
        return await self._repo.apply(record, **data.model_dump(exclude_unset=True))

    async def delete_file(self, file_id: str, user: User | None = None) -> FileUpload:
        record = await self.get_file(file_id)
        if user is not None and not _can_manage(user, record):
            raise ForbiddenError("You can only delete your own files")
        await self._repo.soft_delete(file_id)
        # Unlinked only once the soft delete commits
        _pending(self._session)["removed"].append(Path(record.file_path))
        return record

    async def stats(self, uploaded_by_id: str | None = None) -> FileStats:
        rows = await self._repo.stats(uploaded_by_id)
        by_type = [FileTypeStats(type=t, count=c, size=s) for t, c, s in rows]
        return FileStats(
            total_files=sum(r.count for r in by_type),
            total_size=sum(r.size for r in by_type),
            by_type=by_type,
        )
