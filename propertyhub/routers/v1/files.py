"""File upload endpoints — thin HTTP layer.

Storage, MIME validation and PDF text extraction live in
:mod:`propertyhub.services.file_upload`. This router only reads the multipart
body and shapes responses.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.pagination import PaginationParams
from propertyhub.core.response import DataResponse, ListResponse, paginated
from propertyhub.db.base import get_db
from propertyhub.domain.enums import FileType
from propertyhub.domain.user import User
from propertyhub.routers.deps import get_current_user
from propertyhub.schemas.file_upload import FileStats, FileUploadOut, FileUploadUpdate
from propertyhub.services.file_upload import FileUploadService

router = APIRouter(prefix="/files", tags=["Files"])


# ---------------------------------------------------------------------------
# POST /api/v1/files (multipart upload)
# ---------------------------------------------------------------------------

@router.post("", response_model=DataResponse[FileUploadOut], status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    file_type: FileType = Form(default=FileType.DOCUMENT, alias="fileType"),
    entity_type: Optional[str] = Form(default=None, alias="entityType"),
    entity_id: Optional[str] = Form(default=None, alias="entityId"),
    description: Optional[str] = Form(default=None),
    is_public: bool = Form(default=False, alias="isPublic"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    """Store an image, document or video and return its metadata.

    PDFs additionally get their page count and leading text extracted.
    """
    content = await file.read()
    record = await FileUploadService(session).upload(
        content=content,
        original_name=file.filename or "upload",
        mime_type=file.content_type or "application/octet-stream",
        file_type=file_type.value,
        uploaded_by=user,
        entity_type=entity_type,
        entity_id=entity_id,
        description=description,
        is_public=is_public,
    )
    return {"data": FileUploadOut.model_validate(record)}


# ---------------------------------------------------------------------------
# Listing and stats
# ---------------------------------------------------------------------------

@router.get("", response_model=ListResponse[FileUploadOut])
async def list_files(
    uploaded_by_id: Optional[str] = Query(default=None, alias="uploadedById"),
    entity_type: Optional[str] = Query(default=None, alias="entityType"),
    entity_id: Optional[str] = Query(default=None, alias="entityId"),
    file_type: Optional[FileType] = Query(default=None, alias="fileType"),
    pagination: PaginationParams = Depends(),
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    items, total = await FileUploadService(session).list_files(
        pagination,
        uploaded_by_id=uploaded_by_id,
        entity_type=entity_type,
        entity_id=entity_id,
        file_type=file_type.value if file_type else None,
    )
    return paginated(
        [FileUploadOut.model_validate(f) for f in items], total, pagination.page, pagination.limit
    )


@router.get("/stats", response_model=DataResponse[FileStats])
async def file_stats(
    uploaded_by_id: Optional[str] = Query(default=None, alias="uploadedById"),
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await FileUploadService(session).stats(uploaded_by_id)}


# ---------------------------------------------------------------------------
# Single file
# ---------------------------------------------------------------------------

@router.get("/{file_id}", response_model=DataResponse[FileUploadOut])
async def get_file(
    file_id: str,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    return {"data": FileUploadOut.model_validate(await FileUploadService(session).get_file(file_id))}


@router.get("/{file_id}/download")
async def download_file(
    file_id: str,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    record = await FileUploadService(session).open_for_download(file_id)
    return FileResponse(
        record.file_path,
        media_type=record.mime_type,
        filename=record.original_name,
    )


@router.patch("/{file_id}", response_model=DataResponse[FileUploadOut])
async def update_file(
    file_id: str,
    body: FileUploadUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    record = await FileUploadService(session).update_file(file_id, body, user)
    return {"data": FileUploadOut.model_validate(record)}


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    await FileUploadService(session).delete_file(file_id, user)
