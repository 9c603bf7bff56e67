"""Agency create/edit, logo handling and compliance settings."""

import inspect
import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from ..models.agency import (
    COMPANY_SIZE_VALUES,
    EMPLOYEE_COUNT_VALUES,
    Agency,
    AgencyFormData,
    ComplianceAction,
    ComplianceItem,
    ComplianceType,
    LogoUpload,
    Tag,
)
from ..models.notification import Notification
from ..ports.admin_api import AdminAPIError, AdminAPIProvider
from ..ports.notifier import Notifier
from .import_preview_service import EMAIL_PATTERN, PHONE_PATTERN, YEAR_PATTERN

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000
HEADQUARTERS_MAX_LENGTH = 200
MIN_FOUNDED_YEAR = 1800


def validate_agency_form(form: AgencyFormData, current_year: Optional[int] = None) -> Dict[str, str]:
    """Validate the agency form.

    Returns:
        Field name to error message; empty when the form is valid
    """
    current_year = current_year or date.today().year
    errors: Dict[str, str] = {}

    name = form.name.strip()
    if not name:
        errors["name"] = "Company name is required"
    elif len(name) < NAME_MIN_LENGTH:
        errors["name"] = f"Company name must be at least {NAME_MIN_LENGTH} characters"
    elif len(name) > NAME_MAX_LENGTH:
        errors["name"] = f"Company name must be less than {NAME_MAX_LENGTH} characters"

    if form.description and len(form.description.strip()) > DESCRIPTION_MAX_LENGTH:
        errors["description"] = f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters"

    website = (form.website or "").strip()
    if website:
        try:
            parts = urlsplit(website)
        except ValueError:
            parts = None
        if parts is None or not parts.scheme or not parts.netloc or any(ch.isspace() for ch in website):
            errors["website"] = "Must be a valid URL (e.g., https://example.com)"
        elif parts.scheme not in ("http", "https"):
            errors["website"] = "Website must start with http:// or https://"

    phone = (form.phone or "").strip()
    if phone and not PHONE_PATTERN.match(phone):
        errors["phone"] = "Phone must be in E.164 format (e.g., +12345678900 or 12345678900)"

    email = (form.email or "").strip()
    if email and not EMAIL_PATTERN.match(email):
        errors["email"] = "Must be a valid email address"

    if form.headquarters and len(form.headquarters.strip()) > HEADQUARTERS_MAX_LENGTH:
        errors["headquarters"] = f"Headquarters must be less than {HEADQUARTERS_MAX_LENGTH} characters"

    year = (form.founded_year or "").strip()
    if year:
        if not YEAR_PATTERN.match(year):
            errors["founded_year"] = "Must be a valid 4-digit year"
        elif not MIN_FOUNDED_YEAR <= int(year) <= current_year:
            errors["founded_year"] = f"Year must be between {MIN_FOUNDED_YEAR} and {current_year}"

    if form.employee_count and form.employee_count not in EMPLOYEE_COUNT_VALUES:
        errors["employee_count"] = f"Employee count must be one of: {', '.join(EMPLOYEE_COUNT_VALUES)}"

    if form.company_size and form.company_size not in COMPANY_SIZE_VALUES:
        errors["company_size"] = f"Company size must be one of: {', '.join(COMPANY_SIZE_VALUES)}"

    return errors


def _ids_changed(before: List[Tag], after: List[Tag]) -> bool:
    return sorted(t.id for t in before) != sorted(t.id for t in after)


def build_agency_payload(
    form: AgencyFormData,
    trades: List[Tag],
    regions: List[Tag],
    existing: Optional[Agency] = None,
) -> Dict[str, Any]:
    """Build the create/patch request body.

    Creation always sends ``trade_ids`` and ``region_ids``; an edit sends
    them only when the selection changed.
    """
    payload = {
        key: value.strip() if isinstance(value, str) else value
        for key, value in form.model_dump().items()
    }
    if existing is None or _ids_changed(existing.trades, trades):
        payload["trade_ids"] = [t.id for t in trades]
    if existing is None or _ids_changed(existing.regions, regions):
        payload["region_ids"] = [r.id for r in regions]
    return payload


class AgencySaveOutcome(BaseModel):
    """Result of submitting the agency form."""

    saved: bool
    agency: Optional[Agency] = None
    field_errors: Dict[str, str] = Field(default_factory=dict)
    logo_failed: bool = False


class AgencyAdminService:
    """Service for the agency form, status toggle and compliance tab."""

    def __init__(self, admin_api: AdminAPIProvider, notifier: Notifier):
        self.admin_api = admin_api
        self.notifier = notifier

    async def save_agency(
        self,
        form: AgencyFormData,
        trades: Optional[List[Tag]] = None,
        regions: Optional[List[Tag]] = None,
        existing: Optional[Agency] = None,
        logo: Optional[LogoUpload] = None,
        remove_logo: bool = False,
        on_success: Optional[Callable[[], Any]] = None,
    ) -> AgencySaveOutcome:
        """Create or update an agency, then apply any logo change.

        A failed logo upload or removal leaves the saved agency in place,
        shows a warning and still calls ``on_success``.
        """
        field_errors = validate_agency_form(form)
        if field_errors:
            logger.info(f"⚠️ Agency form has {len(field_errors)} invalid field(s)")
            return AgencySaveOutcome(saved=False, field_errors=field_errors)

        edit_mode = existing is not None
        payload = build_agency_payload(form, trades or [], regions or [], existing)
        name = payload["name"]
        failure_title = "Update Failed" if edit_mode else "Creation Failed"

        try:
            if edit_mode:
                logger.info(f"✏️ Updating agency {existing.id}")
                agency = await self.admin_api.update_agency(existing.id, payload)
            else:
                logger.info(f"🏢 Creating agency {name}")
                agency = await self.admin_api.create_agency(payload)
        except AdminAPIError as e:
            logger.error(f"❌ Agency save failed: {e.message}")
            self.notifier.notify(Notification.error(failure_title, e.message or "An error occurred"))
            return AgencySaveOutcome(saved=False)
        except Exception as e:
            logger.error(f"❌ Unexpected error saving agency {name}: {e}")
            self.notifier.notify(Notification.error(failure_title, "An unexpected error occurred"))
            return AgencySaveOutcome(saved=False)

        agency_id = existing.id if edit_mode else agency.id

        logo_action = None
        try:
            if logo is not None and agency_id:
                logo_action = "upload"
                await self.admin_api.upload_logo(agency_id, logo)
            elif remove_logo and edit_mode:
                logo_action = "removal"
                await self.admin_api.delete_logo(agency_id)
        except Exception as e:
            reason = e.message if isinstance(e, AdminAPIError) else e
            logger.warning(f"⚠️ Logo {logo_action} failed for agency {agency_id}: {reason}")
            self.notifier.notify(Notification.warning(
                "Agency Saved",
                f"{name} was saved, but logo {logo_action} failed. You can try again.",
            ))
            await self._call(on_success)
            return AgencySaveOutcome(saved=True, agency=agency, logo_failed=True)

        self.notifier.notify(Notification.success(
            "Agency Updated" if edit_mode else "Agency Created",
            f"{name} has been {'updated' if edit_mode else 'created'} successfully.",
        ))
        await self._call(on_success)
        return AgencySaveOutcome(saved=True, agency=agency)

    async def set_agency_status(self, agency_id: str, active: bool) -> Optional[Agency]:
        """Activate or deactivate an agency; returns the updated agency or None."""
        action = "activated" if active else "deactivated"
        try:
            agency = await self.admin_api.set_agency_status(agency_id, active)
        except AdminAPIError as e:
            logger.error(f"❌ Failed to update status of agency {agency_id}: {e.message}")
            self.notifier.notify(Notification.error("Error", e.message or "Failed to update agency status"))
            return None
        except Exception as e:
            logger.error(f"❌ Unexpected error updating status of agency {agency_id}: {e}")
            self.notifier.notify(Notification.error("Error", "An unexpected error occurred"))
            return None

        logger.info(f"🔁 Agency {agency_id} {action}")
        self.notifier.notify(Notification.success("Success", f"Agency {action} successfully"))
        return agency

    async def load_compliance(self, agency_id: str) -> List[ComplianceItem]:
        """Load compliance items; failures notify and return an empty list."""
        try:
            return await self.admin_api.get_compliance(agency_id)
        except AdminAPIError as e:
            logger.error(f"❌ Failed to load compliance for agency {agency_id}: {e.message}")
            if e.code == "NETWORK_ERROR":
                description = "A network error occurred while loading compliance data."
            else:
                description = e.message or "Unable to load compliance data."
            self.notifier.notify(Notification.error("Failed to Load Compliance", description))
            return []
        except Exception as e:
            logger.error(f"❌ Unexpected error loading compliance for agency {agency_id}: {e}")
            self.notifier.notify(Notification.error("Failed to Load Compliance", "An unexpected error occurred"))
            return []

    async def save_compliance(
        self, agency_id: str, items: List[ComplianceItem]
    ) -> Optional[List[ComplianceItem]]:
        """Replace compliance items; returns the saved items or None on failure."""
        try:
            saved = await self.admin_api.update_compliance(agency_id, items)
        except AdminAPIError as e:
            logger.error(f"❌ Failed to save compliance for agency {agency_id}: {e.message}")
            self.notifier.notify(Notification.error("Update Failed", e.message or "An error occurred"))
            return None
        except Exception as e:
            logger.error(f"❌ Unexpected error saving compliance for agency {agency_id}: {e}")
            self.notifier.notify(Notification.error("Update Failed", "An unexpected error occurred"))
            return None

        self.notifier.notify(Notification.success(
            "Compliance Updated",
            "Compliance settings have been saved successfully.",
        ))
        return saved

    async def review_compliance_document(
        self,
        agency_id: str,
        agency_name: str,
        compliance_type: ComplianceType,
        action: ComplianceAction,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Optional[ComplianceItem]:
        """Verify or reject an uploaded compliance document.

        Rejecting needs a reason; the agency owner is emailed by the
        backend. Returns the updated item, or None when nothing changed.
        """
        compliance_type = ComplianceType(compliance_type)
        action = ComplianceAction(action)
        reason = (reason or "").strip()
        notes = (notes or "").strip() or None
        verifying = action == ComplianceAction.VERIFY

        if not verifying and not reason:
            self.notifier.notify(Notification.error(
                "Rejection Reason Required",
                "Please provide a reason for rejecting this document.",
            ))
            return None

        failure_title = "Verification Failed" if verifying else "Rejection Failed"
        try:
            item = await self.admin_api.verify_compliance(
                agency_id,
                compliance_type,
                action,
                reason=None if verifying else reason,
                notes=notes,
            )
        except AdminAPIError as e:
            logger.error(f"❌ Compliance {action.value} failed for agency {agency_id}: {e.message}")
            fallback = f"Failed to {action.value} compliance document"
            self.notifier.notify(Notification.error(failure_title, e.message or fallback))
            return None
        except Exception as e:
            logger.error(f"❌ Unexpected error during compliance {action.value} for agency {agency_id}: {e}")
            self.notifier.notify(Notification.error(failure_title, "An unexpected error occurred"))
            return None

        label = f"{compliance_type.display_name} for {agency_name}"
        if verifying:
            self.notifier.notify(Notification.success("Document Verified", f"{label} has been verified."))
        else:
            self.notifier.notify(Notification.success(
                "Document Rejected",
                f"{label} has been rejected. Agency will be notified.",
            ))
        return item

    @staticmethod
    async def _call(callback: Optional[Callable[[], Any]]) -> None:
        if callback is None:
            return
        result = callback()
        if inspect.isawaitable(result):
            await result
