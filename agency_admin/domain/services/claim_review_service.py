"""Claim review workflow: detail view, confirmation dialogs and actions."""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Union
from urllib.parse import quote

from pydantic import BaseModel

from ..models.claim import ClaimRequest
from ..models.claim_event import ClaimEvent, ClaimEventType
from ..models.notification import Notification
from ..models.verification import VerificationSummary
from ..ports.admin_api import AdminAPIError, AdminAPIProvider
from ..ports.notifier import Notifier
from .claim_events import ClaimEventBus
from .verification_scorer import score_claim

logger = logging.getLogger(__name__)

MIN_REJECTION_REASON_LENGTH = 20


class InvalidTransitionError(Exception):
    """Raised when a review action is requested on a non-pending claim."""


class ClaimActionExecutor:
    """Calls the approve/reject endpoints and announces the result.

    The backend also changes the requester's role on approval; that side
    effect is outside this code's control.
    """

    def __init__(self, admin_api: AdminAPIProvider, event_bus: Optional[ClaimEventBus] = None):
        self.admin_api = admin_api
        self.event_bus = event_bus

    async def approve(self, claim_id: str, agency_name: str = "") -> None:
        """Approve a claim. Raises ``AdminAPIError`` on failure."""
        logger.info(f"✅ Approving claim {claim_id} ({agency_name})")
        await self.admin_api.approve_claim(claim_id)
        await self._publish(ClaimEvent(
            event_type=ClaimEventType.APPROVED,
            claim_id=claim_id,
            agency_name=agency_name,
        ))

    async def reject(self, claim_id: str, rejection_reason: str, agency_name: str = "") -> None:
        """Reject a claim. Raises ``AdminAPIError`` on failure."""
        logger.info(f"🚫 Rejecting claim {claim_id} ({agency_name})")
        await self.admin_api.reject_claim(claim_id, rejection_reason)
        await self._publish(ClaimEvent(
            event_type=ClaimEventType.REJECTED,
            claim_id=claim_id,
            agency_name=agency_name,
            rejection_reason=rejection_reason,
        ))

    async def _publish(self, event: ClaimEvent) -> None:
        if self.event_bus is not None:
            await self.event_bus.publish(event)


@dataclass(frozen=True)
class DelegatedReview:
    """Review mode where the decision is handed to the caller."""

    on_approve: Callable[[str], Any]
    on_reject: Callable[[str], Any]


@dataclass(frozen=True)
class SelfManagedReview:
    """Review mode with local confirmation dialogs."""


ReviewMode = Union[DelegatedReview, SelfManagedReview]


class ConfirmationDialog(str, Enum):
    """Confirmation sub-dialog currently shown."""
    NONE = "none"
    APPROVE = "approve"
    REJECT = "reject"


class ApprovalDialog(BaseModel):
    """Content of the approval confirmation dialog."""

    title: str
    consequences: List[str]
    warning: str
    confirm_label: str
    confirm_disabled: bool
    cancel_disabled: bool

    @classmethod
    def for_agency(cls, agency_name: str, in_flight: bool = False) -> "ApprovalDialog":
        return cls(
            title=f"Approve Claim for {agency_name}?",
            consequences=[
                "The requester's role will change to agency_owner",
                "They will be able to edit agency information, services, and settings",
                "An approval notification will be sent to their email",
            ],
            warning=(
                "This action cannot be easily reversed. Please ensure you have "
                "verified the requester's identity and authority."
            ),
            confirm_label="Approving..." if in_flight else "Approve Claim",
            confirm_disabled=in_flight,
            cancel_disabled=in_flight,
        )


class RejectionForm:
    """Rejection reason input with its live character counter."""

    def __init__(self, min_length: int = MIN_REJECTION_REASON_LENGTH):
        self.min_length = min_length
        self.reason = ""
        self.error = ""

    @property
    def character_count(self) -> int:
        return len(self.reason.strip())

    @property
    def is_valid(self) -> bool:
        return self.character_count >= self.min_length

    @property
    def remaining(self) -> int:
        return max(self.min_length - self.character_count, 0)

    @property
    def counter_text(self) -> str:
        text = f"{self.character_count} / {self.min_length} characters"
        if not self.is_valid:
            text += f" ({self.remaining} more required)"
        return text

    def set_reason(self, reason: str) -> None:
        """Update the reason; editing clears a previous submit error."""
        self.reason = reason
        if self.error:
            self.error = ""

    def submit(self) -> Optional[str]:
        """Return the trimmed reason, or record an error and return None."""
        trimmed = self.reason.strip()
        if len(trimmed) < self.min_length:
            self.error = (
                f"Rejection reason must be at least {self.min_length} characters "
                f"(currently {len(trimmed)} characters)"
            )
            return None
        self.error = ""
        return trimmed

    def reset(self) -> None:
        self.reason = ""
        self.error = ""


class RequesterInfo(BaseModel):
    """Requester section of the detail view."""

    business_email: str
    email_domain_verified: bool
    phone_number: Optional[str] = None
    position_title: Optional[str] = None
    account_name: Optional[str] = None
    account_email: str


class ExternalLink(BaseModel):
    label: str
    url: str


class ClaimDetailView(BaseModel):
    """Everything the claim detail view renders."""

    claim_id: str
    status: str
    status_display: str
    agency_name: str
    agency_slug: str
    agency_website: Optional[str] = None
    agency_logo_url: Optional[str] = None
    requester: RequesterInfo
    show_phone: bool
    verification: VerificationSummary
    additional_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    external_links: List[ExternalLink]
    submitted_at: str
    show_actions: bool


def build_detail_view(claim: ClaimRequest, with_domains: bool = False) -> ClaimDetailView:
    """Build the detail view model for a claim."""
    links = []
    if claim.agency.website:
        links.append(ExternalLink(label="Visit Agency Website", url=claim.agency.website))
    links.append(ExternalLink(
        label=f'Google "{claim.agency.name}"',
        url=f"https://www.google.com/search?q={quote(claim.agency.name, safe='')}",
    ))

    show_rejection = claim.status.value == "rejected" and bool(claim.rejection_reason)
    return ClaimDetailView(
        claim_id=claim.id,
        status=claim.status.value,
        status_display=claim.status.display_name,
        agency_name=claim.agency.name,
        agency_slug=claim.agency.slug,
        agency_website=claim.agency.website,
        agency_logo_url=claim.agency.logo_url,
        requester=RequesterInfo(
            business_email=claim.business_email,
            email_domain_verified=claim.email_domain_verified,
            phone_number=claim.phone_number if claim.phone_provided else None,
            position_title=claim.position_title,
            account_name=claim.user.full_name,
            account_email=claim.user.email,
        ),
        show_phone=claim.phone_provided,
        verification=score_claim(claim, with_domains=with_domains),
        additional_notes=claim.additional_notes,
        rejection_reason=claim.rejection_reason if show_rejection else None,
        external_links=links,
        submitted_at=claim.created_at.strftime("%B %d, %Y at %I:%M %p"),
        show_actions=claim.is_pending,
    )


class ClaimReviewSession:
    """State of one open claim detail view.

    The review mode is fixed at construction. In self-managed mode approve
    and reject open a confirmation dialog; confirming runs the request as a
    task that ``close()`` cancels, after which late results are ignored.
    """

    def __init__(
        self,
        claim: ClaimRequest,
        executor: ClaimActionExecutor,
        notifier: Notifier,
        mode: Optional[ReviewMode] = None,
    ):
        self.claim = claim
        self.executor = executor
        self.notifier = notifier
        self.mode = mode or SelfManagedReview()
        self.dialog = ConfirmationDialog.NONE
        self.rejection_form = RejectionForm()
        self.is_open = True
        self._in_flight = False
        self._task: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def can_review(self) -> bool:
        """Approve/Reject are offered only while the claim is pending."""
        return self.is_open and self.claim.is_pending

    @property
    def reject_confirm_disabled(self) -> bool:
        return self._in_flight or not self.rejection_form.is_valid

    @property
    def reject_confirm_label(self) -> str:
        return "Rejecting..." if self._in_flight else "Reject Claim"

    @property
    def rejection_title(self) -> str:
        return f"Reject Claim for {self.claim.agency.name}"

    def detail(self, with_domains: bool = False) -> ClaimDetailView:
        return build_detail_view(self.claim, with_domains=with_domains)

    def approval_dialog(self) -> ApprovalDialog:
        return ApprovalDialog.for_agency(self.claim.agency.name, in_flight=self._in_flight)

    async def request_approve(self) -> None:
        """Approve button: delegate upward or open the approval dialog."""
        self._ensure_reviewable()
        if isinstance(self.mode, DelegatedReview):
            await self._call(self.mode.on_approve, self.claim.id)
            return
        self.dialog = ConfirmationDialog.APPROVE

    async def request_reject(self) -> None:
        """Reject button: delegate upward or open the rejection dialog."""
        self._ensure_reviewable()
        if isinstance(self.mode, DelegatedReview):
            await self._call(self.mode.on_reject, self.claim.id)
            return
        self.rejection_form.reset()
        self.dialog = ConfirmationDialog.REJECT

    def cancel_dialog(self) -> None:
        """Close the confirmation dialog unless a request is in flight."""
        if self._in_flight:
            return
        self.dialog = ConfirmationDialog.NONE
        self.rejection_form.reset()

    async def confirm_approve(self) -> bool:
        """Confirm the approval dialog. Returns True when the claim was approved."""
        if self._in_flight or self.dialog != ConfirmationDialog.APPROVE:
            return False
        return await self._run(
            self.executor.approve(self.claim.id, self.claim.agency.name),
            success=Notification.success(
                "Claim Approved",
                f"{self.claim.agency.name} has been assigned to the requester.",
            ),
            fallback="Failed to approve claim",
        )

    async def confirm_reject(self) -> bool:
        """Confirm the rejection dialog. Returns True when the claim was rejected."""
        if self._in_flight or self.dialog != ConfirmationDialog.REJECT:
            return False
        reason = self.rejection_form.submit()
        if reason is None:
            return False
        return await self._run(
            self.executor.reject(self.claim.id, reason, self.claim.agency.name),
            success=Notification.success(
                "Claim Rejected",
                f"The claim for {self.claim.agency.name} has been rejected.",
            ),
            fallback="Failed to reject claim",
        )

    def close(self) -> None:
        """Close the detail view and cancel any in-flight request."""
        self.is_open = False
        self.dialog = ConfirmationDialog.NONE
        if self._task is not None and not self._task.done():
            logger.info(f"🛑 Cancelling in-flight review request for claim {self.claim.id}")
            self._task.cancel()

    def _ensure_reviewable(self) -> None:
        if not self.can_review:
            raise InvalidTransitionError(
                f"Claim {self.claim.id} is {self.claim.status.value}; only pending claims can be reviewed"
            )

    async def _run(self, action, success: Notification, fallback: str) -> bool:
        self._in_flight = True
        self._task = asyncio.create_task(action)
        try:
            await self._task
        except asyncio.CancelledError:
            if not self.is_open:
                logger.info(f"🛑 Review request for claim {self.claim.id} cancelled")
                return False
            raise
        except AdminAPIError as e:
            logger.error(f"❌ Review request for claim {self.claim.id} failed: {e.message}")
            if self.is_open:
                self.notifier.notify(Notification.error("Error", e.message or fallback))
            return False
        except Exception as e:
            logger.error(f"❌ Review request for claim {self.claim.id} failed: {e}")
            if self.is_open:
                self.notifier.notify(Notification.error("Error", str(e) or fallback))
            return False
        finally:
            self._in_flight = False
            self._task = None

        if not self.is_open:
            return True

        self.notifier.notify(success)
        self.dialog = ConfirmationDialog.NONE
        self.rejection_form.reset()
        self.close()
        return True

    @staticmethod
    async def _call(callback: Callable[[str], Any], claim_id: str) -> None:
        result = callback(claim_id)
        if inspect.isawaitable(result):
            await result
