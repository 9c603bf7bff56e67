"""Domain events emitted when a claim is reviewed."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ClaimEventType(str, Enum):
    """Kinds of claim events."""
    APPROVED = "claim.approved"
    REJECTED = "claim.rejected"


@dataclass
class ClaimEvent:
    """A successful review decision on a claim."""

    event_type: ClaimEventType
    claim_id: str
    agency_name: str
    rejection_reason: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "event_type": self.event_type.value,
            "claim_id": self.claim_id,
            "agency_name": self.agency_name,
            "rejection_reason": self.rejection_reason,
            "timestamp": self.timestamp.isoformat(),
        }
