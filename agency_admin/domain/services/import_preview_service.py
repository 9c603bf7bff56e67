"""Bulk agency import: row validation, preview state and submission."""

import logging
import re
from datetime import date
from typing import Dict, Iterable, List, Optional, Set
from urllib.parse import urlsplit

from pydantic import BaseModel

from ..models.agency import COMPANY_SIZE_VALUES, EMPLOYEE_COUNT_VALUES
from ..models.import_preview import (
    BulkImportResult,
    ParsedAgencyRow,
    RowStatus,
    RowValidationResult,
    ValidationSummary,
)
from ..models.notification import Notification
from ..ports.admin_api import AdminAPIError, AdminAPIProvider
from ..ports.notifier import Notifier

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
YEAR_PATTERN = re.compile(r"^\d{4}$")
MIN_FOUNDED_YEAR = 1800


def website_error(website: str) -> Optional[str]:
    """Validate a website URL; returns the error message or None."""
    value = website.strip()
    try:
        parts = urlsplit(value)
    except ValueError:
        return "Website must be a valid URL"
    if parts.scheme and parts.scheme not in ("http", "https"):
        return "Website must start with http:// or https://"
    if not parts.scheme or not parts.netloc or any(ch.isspace() for ch in value):
        return "Website must be a valid URL"
    return None


def founded_year_error(founded_year: str, current_year: Optional[int] = None) -> Optional[str]:
    """Validate a founded year; returns the error message or None."""
    current_year = current_year or date.today().year
    value = founded_year.strip()
    if not YEAR_PATTERN.match(value):
        return "Founded year must be a valid 4-digit year"
    if not MIN_FOUNDED_YEAR <= int(value) <= current_year:
        return f"Founded year must be between {MIN_FOUNDED_YEAR} and {current_year}"
    return None


def _normalize_company_size(value: str) -> str:
    value = value.strip()
    return value[:1].upper() + value[1:].lower()


class ImportRowValidator:
    """Validates parsed agency rows before import.

    Names are unique case-insensitively against existing agencies and within
    the uploaded batch. Trades match by name or slug, regions by code or
    name; unknown ones are only warnings.
    """

    def __init__(
        self,
        existing_names: Iterable[str] = (),
        known_trades: Iterable[str] = (),
        known_regions: Iterable[str] = (),
        current_year: Optional[int] = None,
    ):
        self.existing_names: Set[str] = {n.lower() for n in existing_names}
        self.known_trades: Set[str] = {t.lower() for t in known_trades}
        self.known_regions: Set[str] = {r.lower() for r in known_regions}
        self.current_year = current_year or date.today().year

    def validate(self, rows: List[ParsedAgencyRow]) -> List[RowValidationResult]:
        """Validate every row of a batch."""
        first_rows: Dict[str, int] = {}
        for row in rows:
            if row.name:
                first_rows.setdefault(row.name.strip().lower(), row.row_number)
        return [self.validate_row(row, first_rows) for row in rows]

    def validate_row(self, row: ParsedAgencyRow, first_rows: Dict[str, int]) -> RowValidationResult:
        errors: List[str] = []
        warnings: List[str] = []

        name = (row.name or "").strip()
        if not name:
            errors.append("Name is required")
        else:
            if len(name) < 2:
                errors.append("Name must be at least 2 characters")
            elif len(name) > 200:
                errors.append("Name must be less than 200 characters")

            if name.lower() in self.existing_names:
                errors.append("Agency with this name already exists in database")

            first_row = first_rows.get(name.lower())
            if first_row is not None and first_row != row.row_number:
                errors.append(f"Duplicate name in upload (first appears in row {first_row})")

        if row.description and len(row.description) > 5000:
            errors.append("Description must be less than 5000 characters")

        if row.website and row.website.strip():
            error = website_error(row.website)
            if error:
                errors.append(error)

        if row.phone and row.phone.strip():
            if not PHONE_PATTERN.match(row.phone.strip()):
                errors.append("Phone must be in E.164 format (e.g., +12345678900)")

        if row.email and row.email.strip():
            if not EMAIL_PATTERN.match(row.email.strip()):
                errors.append("Email must be a valid email address")

        if row.headquarters and len(row.headquarters) > 200:
            errors.append("Headquarters must be less than 200 characters")

        if row.founded_year and row.founded_year.strip():
            error = founded_year_error(row.founded_year, self.current_year)
            if error:
                errors.append(error)

        if row.employee_count and row.employee_count.strip():
            if row.employee_count.strip() not in EMPLOYEE_COUNT_VALUES:
                warnings.append(
                    f'Employee count "{row.employee_count}" is not a standard value. '
                    f"Valid options: {', '.join(EMPLOYEE_COUNT_VALUES)}"
                )

        if row.company_size and row.company_size.strip():
            if _normalize_company_size(row.company_size) not in COMPANY_SIZE_VALUES:
                warnings.append(
                    f'Company size "{row.company_size}" is not a standard value. '
                    f"Valid options: {', '.join(COMPANY_SIZE_VALUES)}"
                )

        unknown_trades = [t for t in row.trades or [] if t.strip().lower() not in self.known_trades]
        if unknown_trades:
            warnings.append(f"Unknown trades will be skipped: {', '.join(unknown_trades)}")

        unknown_regions = [r for r in row.regions or [] if r.strip().lower() not in self.known_regions]
        if unknown_regions:
            warnings.append(f"Unknown regions will be skipped: {', '.join(unknown_regions)}")

        return RowValidationResult(
            row_number=row.row_number,
            valid=not errors,
            errors=errors,
            warnings=warnings,
            data=row,
        )


def summarize(results: List[RowValidationResult]) -> ValidationSummary:
    """Count valid, invalid and warning rows."""
    return ValidationSummary(
        total=len(results),
        valid=sum(1 for r in results if r.valid),
        invalid=sum(1 for r in results if not r.valid),
        with_warnings=sum(1 for r in results if r.warnings),
    )


class PreviewRow(BaseModel):
    """One rendered preview row."""

    row_number: int
    name: str
    status: RowStatus
    expandable: bool
    expanded: bool
    errors: List[str]
    warnings: List[str]


class ImportPreviewView(BaseModel):
    rows: List[PreviewRow]
    summary: ValidationSummary
    import_label: str
    import_disabled: bool


def import_button_label(valid_count: int, importing: bool = False) -> str:
    if importing:
        return "Importing..."
    return f"Import {valid_count} Valid {'Row' if valid_count == 1 else 'Rows'}"


class ImportPreview:
    """Preview of a validation pass with per-row expansion.

    The summary is taken as given and never recomputed here.
    """

    def __init__(
        self,
        results: List[RowValidationResult],
        summary: ValidationSummary,
        admin_api: AdminAPIProvider,
        notifier: Notifier,
    ):
        self.results = results
        self.summary = summary
        self.admin_api = admin_api
        self.notifier = notifier
        self.expanded: Dict[int, bool] = {}
        self.importing = False
        self.import_result: Optional[BulkImportResult] = None

    @property
    def import_disabled(self) -> bool:
        return self.summary.valid == 0 or self.importing

    @property
    def valid_rows(self) -> List[ParsedAgencyRow]:
        return [r.data for r in self.results if r.valid]

    def toggle(self, row_number: int) -> bool:
        """Expand or collapse a row; rows without details stay collapsed."""
        result = next((r for r in self.results if r.row_number == row_number), None)
        if result is None or not result.has_details:
            return False
        self.expanded[row_number] = not self.expanded.get(row_number, False)
        return self.expanded[row_number]

    def view(self) -> ImportPreviewView:
        return ImportPreviewView(
            rows=[
                PreviewRow(
                    row_number=r.row_number,
                    name=r.data.name or "",
                    status=r.status,
                    expandable=r.has_details,
                    expanded=self.expanded.get(r.row_number, False),
                    errors=r.errors,
                    warnings=r.warnings,
                )
                for r in self.results
            ],
            summary=self.summary,
            import_label=import_button_label(self.summary.valid, self.importing),
            import_disabled=self.import_disabled,
        )

    async def submit(self) -> Optional[BulkImportResult]:
        """Import the valid rows. Returns None when nothing was imported."""
        if self.import_disabled:
            return None

        rows = [row.model_dump(by_alias=True, exclude_none=True) for row in self.valid_rows]
        self.importing = True
        logger.info(f"📦 Importing {len(rows)} valid agency rows")
        try:
            result = await self.admin_api.bulk_import(rows)
        except AdminAPIError as e:
            logger.error(f"❌ Bulk import failed: {e.message}")
            self.notifier.notify(Notification.error("Import Failed", e.message or "Failed to import agencies"))
            return None
        except Exception as e:
            logger.error(f"❌ Unexpected error during bulk import: {e}")
            self.notifier.notify(Notification.error("Import Failed", "An unexpected error occurred"))
            return None
        finally:
            self.importing = False

        self.import_result = result
        s = result.summary
        logger.info(f"✅ Import finished: {s.created} created, {s.skipped} skipped, {s.failed} failed")
        if s.failed:
            self.notifier.notify(Notification.warning(
                "Import Completed with Errors",
                f"{s.created} created, {s.skipped} skipped, {s.failed} failed.",
            ))
        else:
            self.notifier.notify(Notification.success(
                "Import Complete",
                f"{s.created} created, {s.skipped} skipped.",
            ))
        return result
