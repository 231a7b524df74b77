"""File upload Pydantic schemas."""


from datetime import datetime

from propertyhub.schemas.common import CamelModel

class FileUploadOut(CamelModel):
    id: str
    file_name: str
    original_name: str
    file_url: str
    file_type: str
    mime_type: str
    file_size: int
    uploaded_by_id: str
    entity_type: str | None = None
    entity_id: str | None = None
    description: str | None = None
    is_public: bool
    download_count: int
    last_accessed_at: datetime | None = None
    page_count: int | None = None
    created_at: datetime

class FileUploadUpdate(CamelModel):
    description: str | None = None
    is_public: bool | None = None
    entity_type: str | None = None
    entity_id: str | None = None

class FileTypeStats(CamelModel):
    type: str
    count: int
    size: int

class FileStats(CamelModel):
    total_files: int
    total_size: int
    by_type: list[FileTypeStats]
