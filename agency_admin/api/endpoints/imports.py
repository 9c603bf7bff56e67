"""Bulk agency import endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ...domain.models.import_preview import (
    BulkImportResult,
    ParsedAgencyRow,
    RowValidationResult,
    ValidationSummary,
)
from ...domain.models.notification import Notification
from ...domain.ports.admin_api import AdminAPIProvider
from ...domain.services.import_preview_service import (
    ImportPreview,
    ImportPreviewView,
    ImportRowValidator,
    summarize,
)
from ...infrastructure.dependencies import get_admin_api, get_notifier
from ...infrastructure.notifications import CollectingNotifier

router = APIRouter(prefix="/console/imports", tags=["imports"])

logger = logging.getLogger(__name__)


class ImportPreviewRequest(BaseModel):
    """Parsed rows plus the reference data they are checked against."""

    rows: List[ParsedAgencyRow]
    existing_names: List[str] = Field(default_factory=list)
    known_trades: List[str] = Field(default_factory=list, description="Trade names and slugs")
    known_regions: List[str] = Field(default_factory=list, description="Region codes and names")


class ImportRequest(BaseModel):
    """A validation pass to import from."""

    rows: List[RowValidationResult]
    summary: Optional[ValidationSummary] = None


class ImportResponse(BaseModel):
    result: Optional[BulkImportResult] = None
    notifications: List[Notification] = []


@router.post("/preview", response_model=ImportPreviewView)
async def preview_import(
    request: ImportPreviewRequest,
    admin_api: AdminAPIProvider = Depends(get_admin_api),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> ImportPreviewView:
    """Validate parsed rows and render the preview table."""
    validator = ImportRowValidator(
        existing_names=request.existing_names,
        known_trades=request.known_trades,
        known_regions=request.known_regions,
    )
    results = validator.validate(request.rows)
    summary = summarize(results)
    logger.info(f"🔎 Previewed {summary.total} rows: {summary.valid} valid, {summary.invalid} invalid")
    return ImportPreview(results, summary, admin_api, notifier).view()


@router.post("", response_model=ImportResponse)
async def run_import(
    request: ImportRequest,
    admin_api: AdminAPIProvider = Depends(get_admin_api),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> ImportResponse:
    """Import the valid rows of a validation pass."""
    summary = request.summary or summarize(request.rows)
    preview = ImportPreview(request.rows, summary, admin_api, notifier)
    if preview.import_disabled:
        raise HTTPException(status_code=400, detail="No valid rows to import")

    result = await preview.submit()
    return ImportResponse(result=result, notifications=notifier.notifications)
