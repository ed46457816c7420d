"""Record data model"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dateutil import parser as dateutil_parser


@dataclass
class Record:
    """A user-submitted problem under evaluation."""

    id: str = ""
    title: str = ""
    description: str = ""

    # engagement
    vote_count: int = 0
    created_at: Optional[datetime] = None

    # moderation
    category_assigned: bool = False
    pending_flag_count: int = 0
    moderation_status: str = "approved"

    # denormalized score written back by the engine
    quality_score: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        """Build a Record from a storage row."""
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = dateutil_parser.parse(created_at)
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        category_assigned = data.get("category_assigned")
        if category_assigned is None:
            category_assigned = bool(data.get("category_id"))

        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            description=data.get("description") or "",
            vote_count=int(data.get("vote_count") or 0),
            created_at=created_at,
            category_assigned=bool(category_assigned),
            pending_flag_count=int(data.get("pending_flag_count") or 0),
            moderation_status=data.get("moderation_status", "approved"),
            quality_score=data.get("quality_score"),
        )


@dataclass
class RecordFilter:
    """Selection passed to the storage collaborator's fetch_records."""

    moderation_status: Optional[str] = "approved"
    limit: Optional[int] = None
    exclude_ids: List[str] = field(default_factory=list)

    def matches(self, record: Record) -> bool:
        if self.moderation_status is not None and record.moderation_status != self.moderation_status:
            return False
        return record.id not in self.exclude_ids
