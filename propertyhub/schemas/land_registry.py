"""Land Registry CSV import Pydantic schemas."""


from datetime import date, datetime
from typing import Any

from propertyhub.schemas.common import CamelModel, Money

class LandRegistryRecord(CamelModel):
    """One parsed Price Paid row."""

    transaction_id: str
    price: Money
    date_of_transfer: date
    postcode: str
    property_type: str
    old_new: str = ""
    duration: str = ""
    paon: str = ""
    saon: str = ""
    street: str = ""
    locality: str = ""
    town: str = ""
    district: str = ""
    county: str = ""
    ppd: str = ""
    record_status: str = ""

class ValidationResult(CamelModel):
    is_valid: bool
    errors: list[str]
    warnings: list[str]
    record_count: int
    sample_records: list[LandRegistryRecord]

class ImportStarted(CamelModel):
    import_id: str
    message: str

class ImportProgress(CamelModel):
    import_id: str
    status: str
    progress: int
    current_record: int
    total_records: int
    message: str
    errors: list[str]
    start_time: datetime
    finished_at: datetime | None = None

class ImportResult(CamelModel):
    success: bool
    total_records: int
    processed_records: int
    successful_imports: int
    failed_imports: int
    duplicates: int
    errors: list[str]
    warnings: list[str]
    import_id: str
    start_time: datetime
    end_time: datetime
    duration: int  # milliseconds

class ImportHistoryEntry(CamelModel):
    import_id: str | None = None
    admin_id: str | None = None
    start_time: datetime
    details: str | None = None
    metadata: dict[str, Any] | None = None

class CancelResult(CamelModel):
    success: bool
    message: str

class ImportHealth(CamelModel):
    status: str
    active_imports: int
    timestamp: datetime
    version: str
