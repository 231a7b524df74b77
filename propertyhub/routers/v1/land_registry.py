"""Admin endpoints for HM Land Registry Price Paid CSV imports.

Validation runs inline; the import itself is handed to a background task
after the 202 response. Progress is polled via ``/progress/{import_id}``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.config import settings
from propertyhub.core.pagination import PaginationParams
from propertyhub.core.response import DataResponse, ListResponse, paginated
from propertyhub.db.base import get_db
from propertyhub.domain.user import User
from propertyhub.routers.deps import require_admin
from propertyhub.schemas.land_registry import (
    CancelResult,
    ImportHealth,
    ImportHistoryEntry,
    ImportProgress,
    ImportStarted,
    ValidationResult,
)
from propertyhub.services import land_registry_import
from propertyhub.services.land_registry_import import (
    TEMPLATE_FILENAME,
    ImportOptions,
    LandRegistryImportService,
    check_csv_upload,
    run_import,
    template_csv,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/land-registry", tags=["Land Registry Import"])


# ---------------------------------------------------------------------------
# Validation and import
# ---------------------------------------------------------------------------

@router.post("/validate", response_model=DataResponse[ValidationResult])
async def validate_csv(
    file: UploadFile = File(...),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    """Parse the CSV and report every row error without touching properties."""
    content = await file.read()
    check_csv_upload(file.filename, content)
    result = await LandRegistryImportService(session).validate(content, admin.id)
    return {"data": result}


@router.post(
    "/import",
    response_model=DataResponse[ImportStarted],
    status_code=status.HTTP_202_ACCEPTED,
)
async def import_csv(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    skip_duplicates: bool = Form(default=True, alias="skipDuplicates"),
    update_existing: bool = Form(default=False, alias="updateExisting"),
    batch_size: int = Form(default=settings.import_batch_size, ge=100, le=5000, alias="batchSize"),
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    content = await file.read()
    check_csv_upload(file.filename, content)

    state = LandRegistryImportService(session).start_import(admin.id)
    options = ImportOptions(
        skip_duplicates=skip_duplicates,
        update_existing=update_existing,
        batch_size=batch_size,
    )
    background_tasks.add_task(run_import, state.import_id, content, admin.id, options)
    logger.info(
        "Scheduled import %s (%s, %d bytes)", state.import_id, file.filename, len(content)
    )
    return {
        "data": ImportStarted(
            import_id=state.import_id,
            message="Import started. Use the import ID to track progress.",
        )
    }


# ---------------------------------------------------------------------------
# Progress, cancellation and history
# ---------------------------------------------------------------------------

@router.get("/progress/{import_id}", response_model=DataResponse[ImportProgress])
async def import_progress(import_id: str, _: User = Depends(require_admin)):
    return {"data": land_registry_import.get_progress(import_id)}


@router.get("/active-imports", response_model=DataResponse[list[ImportProgress]])
async def active_imports(_: User = Depends(require_admin)):
    return {"data": land_registry_import.active_imports()}


@router.delete("/cancel/{import_id}", response_model=DataResponse[CancelResult])
async def cancel_import(
    import_id: str,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await LandRegistryImportService(session).cancel(import_id, admin.id)}


@router.get("/history", response_model=ListResponse[ImportHistoryEntry])
async def import_history(
    pagination: PaginationParams = Depends(),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    entries, total = await LandRegistryImportService(session).history(pagination)
    return paginated(entries, total, pagination.page, pagination.limit)


@router.get("/health", response_model=DataResponse[ImportHealth])
async def import_health(_: User = Depends(require_admin)):
    return {"data": land_registry_import.import_health()}


@router.get("/template/download")
async def download_template(_: User = Depends(require_admin)):
    return Response(
        content=template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )
