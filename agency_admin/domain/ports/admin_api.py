"""Port interface for the admin REST API."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..models.agency import Agency, ComplianceAction, ComplianceItem, ComplianceType, LogoUpload
from ..models.claim import ClaimsPage
from ..models.import_preview import BulkImportResult


class AdminAPIError(Exception):
    """Error returned by (or raised while talking to) the admin API.

    Carries the ``{error: {code, message, details}}`` envelope of a failed
    response. Transport failures use the ``NETWORK_ERROR`` code and a
    ``status_code`` of 0.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}

    @property
    def is_conflict(self) -> bool:
        return self.status_code == 409


class AdminAPIProvider(ABC):
    """Abstract interface for the admin API consumed by the console.

    Every method raises ``AdminAPIError`` when the call fails.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Open the underlying client."""
        pass

    @abstractmethod
    async def list_claims(
        self,
        page: int = 1,
        limit: int = 25,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> ClaimsPage:
        """Fetch one page of claim requests.

        Args:
            page: 1-based page number
            limit: Page size
            status: Status filter, omitted when None
            search: Free-text search, omitted when None

        Returns:
            Claims and pagination summary
        """
        pass

    @abstractmethod
    async def approve_claim(self, claim_id: str) -> None:
        """Approve a pending claim."""
        pass

    @abstractmethod
    async def reject_claim(self, claim_id: str, rejection_reason: str) -> None:
        """Reject a pending claim with a reason."""
        pass

    @abstractmethod
    async def create_agency(self, payload: Dict[str, Any]) -> Agency:
        """Create an agency."""
        pass

    @abstractmethod
    async def update_agency(self, agency_id: str, payload: Dict[str, Any]) -> Agency:
        """Patch an agency."""
        pass

    @abstractmethod
    async def set_agency_status(self, agency_id: str, active: bool) -> Agency:
        """Activate or deactivate an agency."""
        pass

    @abstractmethod
    async def upload_logo(self, agency_id: str, logo: LogoUpload) -> str:
        """Upload a logo and return its public URL."""
        pass

    @abstractmethod
    async def delete_logo(self, agency_id: str) -> None:
        """Remove an agency's logo."""
        pass

    @abstractmethod
    async def get_compliance(self, agency_id: str) -> List[ComplianceItem]:
        """Fetch an agency's compliance items."""
        pass

    @abstractmethod
    async def update_compliance(
        self, agency_id: str, items: List[ComplianceItem]
    ) -> List[ComplianceItem]:
        """Replace an agency's compliance items."""
        pass

    @abstractmethod
    async def verify_compliance(
        self,
        agency_id: str,
        compliance_type: ComplianceType,
        action: ComplianceAction,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ComplianceItem:
        """Verify or reject an agency's uploaded compliance document.

        Args:
            agency_id: Agency owning the document
            compliance_type: Which compliance item the document backs
            action: Verify or reject
            reason: Rejection reason sent to the agency owner
            notes: Optional admin notes stored on the item

        Returns:
            The updated compliance item
        """
        pass

    @abstractmethod
    async def bulk_import(self, rows: List[Dict[str, Any]]) -> BulkImportResult:
        """Import validated agency rows."""
        pass

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        """Delete a user account."""
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Close the underlying client."""
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the name of this provider."""
        pass

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is ready for requests."""
        pass
