"""Tests for bulk import validation and preview."""

import pytest

from agency_admin.domain.models.import_preview import (
    BulkImportResult,
    ImportRowResult,
    ImportSummary,
    ParsedAgencyRow,
    RowStatus,
)
from agency_admin.domain.models.notification import NotificationVariant
from agency_admin.domain.ports.admin_api import AdminAPIError
from agency_admin.domain.services.import_preview_service import (
    ImportPreview,
    ImportRowValidator,
    founded_year_error,
    import_button_label,
    summarize,
    website_error,
)


def row(number: int, **fields) -> ParsedAgencyRow:
    return ParsedAgencyRow(row_number=number, **fields)


@pytest.fixture
def validator():
    return ImportRowValidator(
        existing_names=["Elite Staffing"],
        known_trades=["Electrician", "plumbing"],
        known_regions=["TX", "California"],
        current_year=2024,
    )


class TestFieldRules:
    @pytest.mark.parametrize(
        "website,expected",
        [
            ("https://example.com", None),
            ("http://example.com/jobs", None),
            ("ftp://example.com", "Website must start with http:// or https://"),
            ("example.com", "Website must be a valid URL"),
            ("https://exa mple.com", "Website must be a valid URL"),
        ],
    )
    def test_website(self, website, expected):
        assert website_error(website) == expected

    @pytest.mark.parametrize(
        "year,expected",
        [
            ("1999", None),
            ("99", "Founded year must be a valid 4-digit year"),
            ("1700", "Founded year must be between 1800 and 2024"),
            ("2025", "Founded year must be between 1800 and 2024"),
        ],
    )
    def test_founded_year(self, year, expected):
        assert founded_year_error(year, current_year=2024) == expected


class TestImportRowValidator:
    def test_valid_row(self, validator):
        [result] = validator.validate([
            row(2, name="Gulf Coast Crew", website="https://gulfcoast.com", phone="+12345678900",
                email="info@gulfcoast.com", founded_year="2001", trades=["electrician"], regions=["tx"])
        ])

        assert result.valid
        assert result.errors == [] and result.warnings == []
        assert result.status == RowStatus.VALID

    def test_name_required(self, validator):
        [result] = validator.validate([row(2, name="  ")])

        assert not result.valid
        assert result.errors == ["Name is required"]

    def test_existing_name_case_insensitive(self, validator):
        [result] = validator.validate([row(2, name="elite staffing")])

        assert "Agency with this name already exists in database" in result.errors

    def test_duplicate_in_upload(self, validator):
        first, second = validator.validate([row(2, name="Acme"), row(3, name="ACME")])

        assert first.valid
        assert second.errors == ["Duplicate name in upload (first appears in row 2)"]

    def test_field_errors(self, validator):
        [result] = validator.validate([
            row(4, name="Acme", phone="555-1234", email="not-an-email", founded_year="1700")
        ])

        assert result.errors == [
            "Phone must be in E.164 format (e.g., +12345678900)",
            "Email must be a valid email address",
            "Founded year must be between 1800 and 2024",
        ]

    def test_warnings_do_not_invalidate(self, validator):
        [result] = validator.validate([
            row(5, name="Acme", employee_count="lots", company_size="small",
                trades=["Welding"], regions=["Mars"])
        ])

        assert result.valid
        assert result.status == RowStatus.WARNING
        assert len(result.warnings) == 3
        assert result.warnings[0].startswith('Employee count "lots" is not a standard value.')
        assert "Unknown trades will be skipped: Welding" in result.warnings
        assert "Unknown regions will be skipped: Mars" in result.warnings

    def test_summarize(self, validator):
        results = validator.validate([
            row(2, name="Acme"),
            row(3, name=""),
            row(4, name="Beta", trades=["Welding"]),
        ])

        summary = summarize(results)

        assert (summary.total, summary.valid, summary.invalid, summary.with_warnings) == (3, 2, 1, 1)


@pytest.mark.parametrize(
    "count,importing,label",
    [(1, False, "Import 1 Valid Row"), (3, False, "Import 3 Valid Rows"), (3, True, "Importing...")],
)
def test_import_button_label(count, importing, label):
    assert import_button_label(count, importing) == label


@pytest.fixture
def preview(validator, admin_api, notifier):
    results = validator.validate([
        row(2, name="Acme", website="https://acme.com"),
        row(3, name=""),
        row(4, name="Beta", trades=["Welding"]),
    ])
    return ImportPreview(results, summarize(results), admin_api, notifier)


class TestImportPreview:
    def test_toggle_only_rows_with_details(self, preview):
        assert preview.toggle(2) is False
        assert preview.toggle(3) is True
        assert preview.toggle(3) is False
        assert preview.toggle(99) is False

    def test_view(self, preview):
        preview.toggle(4)

        view = preview.view()

        assert [r.status for r in view.rows] == [RowStatus.VALID, RowStatus.INVALID, RowStatus.WARNING]
        assert [r.expanded for r in view.rows] == [False, False, True]
        assert view.import_label == "Import 2 Valid Rows"
        assert not view.import_disabled

    @pytest.mark.asyncio
    async def test_submit_sends_valid_rows(self, preview, admin_api, notifier):
        admin_api.bulk_import.return_value = BulkImportResult(
            results=[
                ImportRowResult(row_number=2, status="created", agency_id="a1", agency_name="Acme"),
                ImportRowResult(row_number=4, status="created", agency_id="a2", agency_name="Beta"),
            ],
            summary=ImportSummary(total=2, created=2),
        )

        result = await preview.submit()

        rows = admin_api.bulk_import.await_args.args[0]
        assert rows == [
            {"name": "Acme", "website": "https://acme.com", "_rowNumber": 2},
            {"name": "Beta", "trades": ["Welding"], "_rowNumber": 4},
        ]
        assert result.summary.created == 2
        assert notifier.notifications[-1].title == "Import Complete"
        assert not preview.importing

    @pytest.mark.asyncio
    async def test_partial_failure_warns(self, preview, admin_api, notifier):
        admin_api.bulk_import.return_value = BulkImportResult(
            summary=ImportSummary(total=2, created=1, failed=1)
        )

        await preview.submit()

        assert notifier.notifications[-1].title == "Import Completed with Errors"
        assert notifier.notifications[-1].variant == NotificationVariant.WARNING

    @pytest.mark.asyncio
    async def test_api_error(self, preview, admin_api, notifier):
        admin_api.bulk_import.side_effect = AdminAPIError("Validation failed", status_code=400)

        assert await preview.submit() is None
        assert notifier.notifications[-1].title == "Import Failed"
        assert preview.import_result is None

    @pytest.mark.asyncio
    async def test_unexpected_error(self, preview, admin_api, notifier):
        admin_api.bulk_import.side_effect = RuntimeError("Provider not initialized")

        assert await preview.submit() is None
        assert not preview.importing
        toast = notifier.notifications[-1]
        assert (toast.title, toast.description) == ("Import Failed", "An unexpected error occurred")

    @pytest.mark.asyncio
    async def test_nothing_valid_to_import(self, validator, admin_api, notifier):
        results = validator.validate([row(2, name="")])
        preview = ImportPreview(results, summarize(results), admin_api, notifier)

        assert preview.import_disabled
        assert await preview.submit() is None
        admin_api.bulk_import.assert_not_awaited()
