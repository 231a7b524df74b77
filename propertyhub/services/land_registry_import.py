"""HM Land Registry Price Paid CSV bulk import.

The CSV has no meaningful header: rows are positional over the fixed 16-column
Price Paid schema (``CSV_COLUMNS``). A leading row whose first cell is
``transactionId`` (the downloadable template) is skipped.

Flow:
  validate()      -> parse + report errors, log CSV_VALIDATION
  start_import()  -> register progress, return an import id (router schedules run_import)
  run_import()    -> background job: parse, validate, upsert inside ONE transaction
                     with a savepoint per record; cancellation rolls everything back

Progress lives in a process-local registry; entries are purged
``settings.import_progress_ttl_seconds`` after they finish.

Rule: No FastAPI here. Routers hand over raw bytes.
"""

from __future__ import annotations

import csv
import io
import logging
import random
import re
import string
import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.core.config import settings
from propertyhub.core.exceptions import NotFoundError, ValidationError
from propertyhub.core.pagination import PaginationParams
from propertyhub.db.base import async_session_factory
from propertyhub.repositories.activity import ActivityLogRepository
from propertyhub.repositories.property import PropertyRepository
from propertyhub.schemas.land_registry import (
    CancelResult,
    ImportHealth,
    ImportHistoryEntry,
    ImportProgress,
    ImportResult,
    LandRegistryRecord,
    ValidationResult,
)

logger = logging.getLogger(__name__)

CSV_COLUMNS = (
    "transactionId",
    "price",
    "dateOfTransfer",
    "postcode",
    "propertyType",
    "oldNew",
    "duration",
    "paon",
    "saon",
    "street",
    "locality",
    "town",
    "district",
    "county",
    "ppd",
    "recordStatus",
)

TEMPLATE_FILENAME = "land-registry-template.csv"
TEMPLATE_ROWS = (
    ",".join(CSV_COLUMNS),
    "{12345678-1234-1234-1234-123456789012},250000,2023-01-15,SW1A 1AA,D,N,F,1,,"
    "DOWNING STREET,,LONDON,CITY OF WESTMINSTER,GREATER LONDON,A,A",
    "{87654321-4321-4321-4321-210987654321},450000,2023-02-20,M1 1AA,S,N,F,10,,"
    "MARKET STREET,,MANCHESTER,MANCHESTER,GREATER MANCHESTER,A,A",
)

ACTIVITY_CATEGORY = "land_registry_import"
IMPORT_DESCRIPTION = "Property imported from Land Registry data"
SAMPLE_SIZE = 5
VERSION = "1.0.0"

POSTCODE_RE = re.compile(r"^[A-Z]{1,2}[0-9][A-Z0-9]? ?[0-9][A-Z]{2}$", re.IGNORECASE)
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[ T]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?Z?)?$")
_UK_DATE_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")

_ACTIVE_STATUSES = ("validating", "processing")
_FINISHED_STATUSES = ("completed", "failed", "cancelled")


# ---------------------------------------------------------------------------
# Row parsing / validation (pure)
# ---------------------------------------------------------------------------

def iter_rows(content: bytes) -> Iterator[dict[str, str]]:
    """Yield positional rows as column dicts; blank lines and the header are skipped.

    Decoding is lazy, so a UnicodeDecodeError surfaces while iterating.
    """
    text = io.TextIOWrapper(io.BytesIO(content), encoding="utf-8-sig", newline="")
    reader = csv.reader(text)
    first = True
    for row in reader:
        if not row or all(not cell.strip() for cell in row):
            continue
        if first:
            first = False
            if row[0].strip() == CSV_COLUMNS[0]:
                continue
        padded = list(row[: len(CSV_COLUMNS)]) + [""] * (len(CSV_COLUMNS) - len(row))
        yield dict(zip(CSV_COLUMNS, padded))


def parse_date(raw: str) -> date | None:
    raw = raw.strip()
    try:
        m = _ISO_DATE_RE.match(raw)
        if m:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        m = _UK_DATE_RE.match(raw)
        if m:
            return date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
    except ValueError:
        return None
    return None


def parse_price(raw: str) -> Decimal | None:
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, ValueError):
        return None
    return value if value.is_finite() else None


def validate_record(row: dict[str, str], record_number: int) -> list[str]:
    prefix = f"Record {record_number}:"
    errors: list[str] = []

    transaction_id = row.get("transactionId", "").strip()
    price_raw = row.get("price", "").strip()
    date_raw = row.get("dateOfTransfer", "").strip()
    postcode = row.get("postcode", "").strip()
    property_type = row.get("propertyType", "").strip()
    price = parse_price(price_raw) if price_raw else None

    if not transaction_id:
        errors.append(f"{prefix} Transaction ID is required")
    if price is None:
        errors.append(f"{prefix} Valid price is required")
    if not date_raw:
        errors.append(f"{prefix} Date of transfer is required")
    if not postcode:
        errors.append(f"{prefix} Postcode is required")
    if not property_type:
        errors.append(f"{prefix} Property type is required")

    if price is not None and price <= 0:
        errors.append(f"{prefix} Price must be greater than 0")
    if date_raw and parse_date(date_raw) is None:
        errors.append(f"{prefix} Invalid date format")
    if postcode and not POSTCODE_RE.match(postcode):
        errors.append(f"{prefix} Invalid postcode format")
    return errors


def parse_record(row: dict[str, str]) -> LandRegistryRecord:
    """Build a record from a row that already passed validate_record()."""
    clean = {key: (value or "").strip() for key, value in row.items()}
    return LandRegistryRecord(
        transaction_id=clean["transactionId"],
        price=parse_price(clean["price"]),
        date_of_transfer=parse_date(clean["dateOfTransfer"]),
        postcode=clean["postcode"].upper(),
        property_type=clean["propertyType"],
        old_new=clean["oldNew"],
        duration=clean["duration"],
        paon=clean["paon"],
        saon=clean["saon"],
        street=clean["street"],
        locality=clean["locality"],
        town=clean["town"],
        district=clean["district"],
        county=clean["county"],
        ppd=clean["ppd"],
        record_status=clean["recordStatus"],
    )


def build_address(record: LandRegistryRecord) -> str:
    parts = (
        record.saon,
        record.paon,
        record.street,
        record.locality,
        record.town,
        record.district,
        record.county,
    )
    return ", ".join(p for p in parts if p and p.strip())


def build_title(record: LandRegistryRecord) -> str:
    parts = (record.paon, record.street, record.town)
    return " ".join(p for p in parts if p and p.strip()) or "Property"


def map_property_type(code: str) -> str:
    value = (code or "").strip().lower()
    if value in ("d", "detached"):
        return "detached"
    if value in ("s", "semi-detached", "semi_detached"):
        return "semi_detached"
    if value in ("t", "terraced"):
        return "terraced"
    if value in ("f", "flat", "maisonette"):
        return "flat"
    return "house"


def generate_import_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"import_{int(time.time() * 1000)}_{suffix}"


def template_csv() -> str:
    return "\n".join(TEMPLATE_ROWS) + "\n"


def check_csv_upload(filename: str | None, content: bytes) -> None:
    if not filename or not content:
        raise ValidationError("CSV file is required")
    if not filename.lower().endswith(".csv"):
        raise ValidationError("File must be a CSV file")
    if len(content) > settings.import_max_file_size_mb * 1024 * 1024:
        raise ValidationError(
            f"File size must be less than {settings.import_max_file_size_mb}MB"
        )


# ---------------------------------------------------------------------------
# Progress registry
# ---------------------------------------------------------------------------

@dataclass
class ImportOptions:
    skip_duplicates: bool = True
    update_existing: bool = False
    batch_size: int = 1000


@dataclass
class ImportState:
    import_id: str
    user_id: str | None
    status: str = "validating"
    progress: int = 0
    current_record: int = 0
    total_records: int = 0
    message: str = "Starting import validation..."
    errors: list[str] = field(default_factory=list)
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    # Set once the records are written and the commit is under way
    finalising: bool = False

    @property
    def is_active(self) -> bool:
        return self.status in _ACTIVE_STATUSES

    def finish(self, status: str, message: str) -> None:
        if self.finished_at is not None:
            return
        self.status = status
        self.message = message
        self.finished_at = datetime.now(timezone.utc)


class ImportProgressRegistry:
    """In-process map of import id -> state, with lazy TTL purging."""

    def __init__(self, ttl_seconds: int):
        self._ttl = ttl_seconds
        self._states: dict[str, ImportState] = {}

    def _purge(self) -> None:
        now = datetime.now(timezone.utc)
        expired = [
            key
            for key, state in self._states.items()
            if state.finished_at and (now - state.finished_at).total_seconds() > self._ttl
        ]
        for key in expired:
            del self._states[key]

    def register(self, user_id: str | None) -> ImportState:
        self._purge()
        state = ImportState(import_id=generate_import_id(), user_id=user_id)
        self._states[state.import_id] = state
        return state

    def get(self, import_id: str) -> ImportState | None:
        self._purge()
        return self._states.get(import_id)

    def active(self) -> list[ImportState]:
        self._purge()
        return [s for s in self._states.values() if s.is_active]

    def clear(self) -> None:
        self._states.clear()


progress_registry = ImportProgressRegistry(settings.import_progress_ttl_seconds)


class ImportCancelled(Exception):
    """Raised inside the import transaction to roll it back."""


# In-memory lookups; these never need a database session

def get_progress(import_id: str) -> ImportProgress:
    state = progress_registry.get(import_id)
    if state is None:
        raise NotFoundError("Import", import_id)
    return ImportProgress.model_validate(state)


def active_imports() -> list[ImportProgress]:
    return [ImportProgress.model_validate(s) for s in progress_registry.active()]


def import_health() -> ImportHealth:
    return ImportHealth(
        status="healthy",
        active_imports=len(progress_registry.active()),
        timestamp=datetime.now(timezone.utc),
        version=VERSION,
    )


# ---------------------------------------------------------------------------
# Service (request-scoped operations)
# ---------------------------------------------------------------------------

class LandRegistryImportService:
    def __init__(self, session: AsyncSession):
        self._activity = ActivityLogRepository(session)

    async def validate(self, content: bytes, user_id: str) -> ValidationResult:
        import_id = generate_import_id()
        errors: list[str] = []
        warnings: list[str] = []
        samples: list[LandRegistryRecord] = []
        record_count = 0

        try:
            for row in iter_rows(content):
                record_count += 1
                row_errors = validate_record(row, record_count)
                if row_errors:
                    errors.extend(row_errors)
                elif len(samples) < SAMPLE_SIZE:
                    samples.append(parse_record(row))
        except (UnicodeDecodeError, csv.Error) as exc:
            logger.error("CSV validation failed: %s", exc)
            raise ValidationError(f"CSV validation failed: {exc}") from exc

        if record_count == 0:
            errors.append("CSV file is empty or has no valid records")
        if record_count > settings.import_large_file_threshold:
            warnings.append(
                f"Large file detected ({record_count} records). "
                "Consider splitting into smaller files."
            )

        await self._activity.record(
            action="CSV_VALIDATION",
            category=ACTIVITY_CATEGORY,
            user_id=user_id,
            details=(
                f"Validated CSV file: {record_count} records, "
                f"{len(errors)} errors, {len(warnings)} warnings"
            ),
            metadata={
                "importId": import_id,
                "recordCount": record_count,
                "errors": len(errors),
                "warnings": len(warnings),
            },
        )
        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            record_count=record_count,
            sample_records=samples,
        )

    def start_import(self, user_id: str) -> ImportState:
        state = progress_registry.register(user_id)
        logger.info("Import %s registered by %s", state.import_id, user_id)
        return state

    async def cancel(self, import_id: str, user_id: str) -> CancelResult:
        state = progress_registry.get(import_id)
        if state is None:
            raise ValidationError("Import not found")
        if state.status in _FINISHED_STATUSES or state.finalising:
            raise ValidationError("Cannot cancel completed or failed import")

        state.finish("cancelled", "Import cancelled by admin")
        await self._activity.record(
            action="CSV_IMPORT_CANCELLED",
            category=ACTIVITY_CATEGORY,
            user_id=user_id,
            details=f"Cancelled CSV import: {import_id}",
            metadata={"importId": import_id},
        )
        logger.info("Import %s cancelled by %s", import_id, user_id)
        return CancelResult(success=True, message="Import cancelled successfully")

    async def history(self, pagination: PaginationParams):
        rows, total = await self._activity.by_action(
            "CSV_IMPORT_COMPLETED", offset=pagination.offset, limit=pagination.limit
        )
        entries = [
            ImportHistoryEntry(
                import_id=(row.metadata_ or {}).get("importId"),
                admin_id=row.user_id,
                start_time=row.created_at,
                details=row.details,
                metadata=row.metadata_,
            )
            for row in rows
        ]
        return entries, total


# ---------------------------------------------------------------------------
# Background job
# ---------------------------------------------------------------------------

async def _process_record(
    properties: PropertyRepository,
    record: LandRegistryRecord,
    options: ImportOptions,
) -> str:
    """Return "imported", "updated" or "duplicate"."""
    address = build_address(record)
    existing = await properties.find_by_address(address, record.postcode)
    if existing is not None:
        if options.skip_duplicates:
            return "duplicate"
        if options.update_existing:
            await properties.apply(existing, price=record.price)
            return "updated"

    await properties.create(
        title=build_title(record),
        description=IMPORT_DESCRIPTION,
        address_line1=address,
        city=record.town or record.district or record.county,
        county=record.county or None,
        postcode=record.postcode,
        price=record.price,
        property_type=map_property_type(record.property_type),
        listing_type="sale",
        status="available",
        bedrooms=0,
        bathrooms=0,
        source="land_registry",
    )
    return "imported"


async def run_import(
    import_id: str,
    content: bytes,
    user_id: str | None,
    options: ImportOptions | None = None,
) -> ImportResult | None:
    """Background entry point; owns its own session and transaction."""
    options = options or ImportOptions()
    state = progress_registry.get(import_id)
    if state is None or state.status == "cancelled":
        return None

    state.status = "processing"
    state.message = "Processing CSV records..."

    records: list[LandRegistryRecord] = []
    row_count = 0
    processed = imported = duplicates = failed = 0

    async with async_session_factory() as session:
        activity = ActivityLogRepository(session)
        try:
            for row in iter_rows(content):
                row_count += 1
                row_errors = validate_record(row, row_count)
                if row_errors:
                    state.errors.extend(row_errors)
                else:
                    records.append(parse_record(row))

            state.total_records = len(records)
            state.message = f"Processing {len(records)} valid records..."

            properties = PropertyRepository(session)
            async with session.begin():
                for offset in range(0, len(records), options.batch_size):
                    for record in records[offset : offset + options.batch_size]:
                        if state.status == "cancelled":
                            raise ImportCancelled()
                        try:
                            async with session.begin_nested():
                                outcome = await _process_record(properties, record, options)
                        except SQLAlchemyError as exc:
                            failed += 1
                            state.errors.append(f"Record {processed + 1}: {exc}")
                        else:
                            if outcome == "duplicate":
                                duplicates += 1
                            else:
                                imported += 1
                        processed += 1
                        state.current_record = processed
                        state.progress = int(processed * 100 / len(records) + 0.5)
                        state.message = f"Processed {processed}/{len(records)} records"
                # Last chance to honour a cancel before the commit
                if state.status == "cancelled":
                    raise ImportCancelled()
                state.finalising = True
        except ImportCancelled:
            logger.info("Import %s cancelled; rolled back %d records", import_id, processed)
            return None
        except Exception as exc:
            logger.exception("CSV import %s failed", import_id)
            state.errors.append(str(exc))
            state.finish("failed", f"Import failed: {exc}")
            async with session.begin():
                await activity.record(
                    action="CSV_IMPORT_FAILED",
                    category=ACTIVITY_CATEGORY,
                    user_id=user_id,
                    details=f"CSV import failed: {exc}",
                    metadata={"importId": import_id, "error": str(exc)},
                )
            return None

        summary = f"{imported} imported, {duplicates} duplicates, {failed} failed"
        state.progress = 100
        state.finish("completed", f"Import completed: {summary}")

        end_time = state.finished_at
        result = ImportResult(
            success=True,
            total_records=row_count,
            processed_records=processed,
            successful_imports=imported,
            failed_imports=failed,
            duplicates=duplicates,
            errors=list(state.errors),
            warnings=[],
            import_id=import_id,
            start_time=state.start_time,
            end_time=end_time,
            duration=int((end_time - state.start_time).total_seconds() * 1000),
        )
        async with session.begin():
            await activity.record(
                action="CSV_IMPORT_COMPLETED",
                category=ACTIVITY_CATEGORY,
                user_id=user_id,
                details=f"CSV import completed: {summary}",
                metadata={"importId": import_id, "result": result.model_dump(mode="json", by_alias=True)},
            )
        logger.info("CSV import %s completed: %s", import_id, summary)
        return result
