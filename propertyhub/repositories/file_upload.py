"""File upload repository."""

from __future__ import annotations

from sqlalchemy import func, select

from propertyhub.domain.file_upload import FileUpload
from propertyhub.repositories.base import BaseRepository


class FileUploadRepository(BaseRepository[FileUpload]):
    model = FileUpload

    async def stats(self, uploaded_by_id: str | None = None) -> list[tuple[str, int, int]]:
        """Return (file_type, count, total_size) rows."""
        q = (
            select(
                FileUpload.file_type,
                func.count(FileUpload.id),
                func.coalesce(func.sum(FileUpload.file_size), 0),
            )
            .where(FileUpload.deleted_at.is_(None))
            .group_by(FileUpload.file_type)
            .order_by(FileUpload.file_type)
        )
        if uploaded_by_id:
            q = q.where(FileUpload.uploaded_by_id == uploaded_by_id)
        result = await self._session.execute(q)
        return [(row[0], int(row[1]), int(row[2])) for row in result.all()]
