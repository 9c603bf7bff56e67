"""Paginated, filtered browsing of claim requests."""

import logging
from typing import List, Optional

from pydantic import BaseModel

from ..models.claim import ClaimRequest, Pagination, StatusFilter
from ..models.claim_event import ClaimEvent
from ..models.notification import Notification
from ..ports.admin_api import AdminAPIError, AdminAPIProvider
from ..ports.notifier import Notifier
from .claim_events import ClaimEventBus

logger = logging.getLogger(__name__)

CLAIMS_PER_PAGE = 25
SKELETON_ROWS = 5


class ClaimRow(BaseModel):
    """One row of the claims table."""

    id: str
    agency_name: str
    agency_logo_url: Optional[str] = None
    requester_name: str
    business_email: str
    email_domain_verified: bool
    status: str
    status_display: str
    submitted: str


class EmptyState(BaseModel):
    title: str
    description: str


class ClaimsListView(BaseModel):
    """Everything the claims table renders."""

    rows: List[ClaimRow]
    is_loading: bool
    skeleton_rows: int = 0
    error: Optional[str] = None
    error_panel: Optional[str] = None
    empty_state: Optional[EmptyState] = None
    range_summary: Optional[str] = None
    page_label: Optional[str] = None
    can_go_previous: bool
    can_go_next: bool
    pagination: Pagination


def _row(claim: ClaimRequest) -> ClaimRow:
    return ClaimRow(
        id=claim.id,
        agency_name=claim.agency.name,
        agency_logo_url=claim.agency.logo_url,
        requester_name=claim.user.full_name or claim.user.email,
        business_email=claim.business_email,
        email_domain_verified=claim.email_domain_verified,
        status=claim.status.value,
        status_display=claim.status.display_name,
        submitted=claim.created_at.strftime("%b %d, %Y"),
    )


class ClaimsListController:
    """Server-backed claims list with search, status filter and paging.

    Every change of page, status or search triggers a fetch whose result
    replaces the current page wholesale. Subscribed to the claim event bus,
    it re-fetches after approvals and rejections.
    """

    def __init__(
        self,
        admin_api: AdminAPIProvider,
        notifier: Notifier,
        event_bus: Optional[ClaimEventBus] = None,
        page_size: int = CLAIMS_PER_PAGE,
    ):
        self.admin_api = admin_api
        self.notifier = notifier
        self.event_bus = event_bus
        self.page_size = page_size

        self.claims: List[ClaimRequest] = []
        self.pagination = Pagination(limit=page_size)
        self.page = 1
        self.status_filter = StatusFilter.ALL
        self.search = ""
        self.is_loading = False
        self.error: Optional[str] = None
        self._generation = 0

        if self.event_bus is not None:
            self.event_bus.subscribe_all(self.on_claim_event)

    @property
    def filters_active(self) -> bool:
        return bool(self.search) or self.status_filter != StatusFilter.ALL

    def detach(self) -> None:
        """Stop listening for claim events."""
        if self.event_bus is not None:
            self.event_bus.unsubscribe_all(self.on_claim_event)

    async def on_claim_event(self, event: ClaimEvent) -> None:
        logger.info(f"🔄 Refreshing claims after {event.event_type.value} ({event.claim_id})")
        await self.load()

    async def load(self) -> None:
        """Fetch the current page with the current filters."""
        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.error = None

        status = None if self.status_filter == StatusFilter.ALL else self.status_filter.value
        search = self.search or None

        try:
            result = await self.admin_api.list_claims(
                page=self.page,
                limit=self.page_size,
                status=status,
                search=search,
            )
        except AdminAPIError as e:
            if generation == self._generation:
                self._fail(e.message or "Failed to fetch claims")
            return
        except Exception as e:
            logger.error(f"❌ Unexpected error fetching claims: {e}")
            if generation == self._generation:
                self._fail("An error occurred while fetching claims")
            return

        if generation != self._generation:
            logger.debug("Discarding stale claims response")
            return
        self.claims = list(result.data)
        self.pagination = result.pagination
        self.is_loading = False
        logger.info(f"📋 Loaded {len(self.claims)} claims (page {self.page}, total {self.pagination.total})")

    def _fail(self, message: str) -> None:
        logger.error(f"❌ Failed to fetch claims: {message}")
        self.error = message
        self.is_loading = False
        self.notifier.notify(Notification.error("Error", message))

    async def set_search(self, search: str) -> None:
        """Change the search text; resets to page 1."""
        self.search = search
        self.page = 1
        await self.load()

    async def set_status_filter(self, status: StatusFilter) -> None:
        """Change the status filter; resets to page 1."""
        self.status_filter = StatusFilter(status)
        self.page = 1
        await self.load()

    async def next_page(self) -> None:
        if not self.pagination.has_more:
            return
        self.page += 1
        await self.load()

    async def previous_page(self) -> None:
        if self.page <= 1:
            return
        self.page = max(1, self.page - 1)
        await self.load()

    def find(self, claim_id: str) -> Optional[ClaimRequest]:
        """Look up a claim on the current page."""
        return next((c for c in self.claims if c.id == claim_id), None)

    def view(self) -> ClaimsListView:
        """Build the table view for the current state."""
        p = self.pagination
        show_skeleton = self.is_loading and not self.claims
        empty_state = None
        if not self.is_loading and not self.error and not self.claims:
            empty_state = EmptyState(
                title="No claim requests found",
                description=(
                    "Try adjusting your filters"
                    if self.filters_active
                    else "Claims will appear here when submitted"
                ),
            )

        range_summary = None
        page_label = None
        if p.total_pages > 1:
            range_summary = (
                f"Showing {p.offset + 1} to {min(p.offset + p.limit, p.total)} "
                f"of {p.total} claims"
            )
            page_label = f"Page {self.page} of {p.total_pages}"

        return ClaimsListView(
            rows=[] if show_skeleton else [_row(c) for c in self.claims],
            is_loading=self.is_loading,
            skeleton_rows=SKELETON_ROWS if show_skeleton else 0,
            error=self.error,
            error_panel=(
                "Error loading claim requests" if self.error and not self.claims else None
            ),
            empty_state=empty_state,
            range_summary=range_summary,
            page_label=page_label,
            can_go_previous=self.page > 1,
            can_go_next=p.has_more,
            pagination=p,
        )
