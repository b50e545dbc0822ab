"""Read access to the organization's billing activity trail."""
import base64
from datetime import datetime
from typing import List, Optional

import strawberry
from strawberry.scalars import JSON
from strawberry.types import Info

from apps.audit.models import ActivityLog
from apps.core.permissions import require_perm

MAX_PAGE_SIZE = 100
CURSOR_PREFIX = "activity:"


@strawberry.type
class ActivityLogType:
    id: int
    action: str
    entity_type: str
    entity_ids: List[int]
    user_id: Optional[int]
    user_name: Optional[str]
    details: JSON
    timestamp: datetime

    @classmethod
    def from_model(cls, entry: ActivityLog) -> "ActivityLogType":
        return cls(
            id=entry.id,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_ids=list(entry.entity_ids or []),
            user_id=entry.user_id,
            # System runs (cron, Celery) have no actor
            user_name=entry.user.email if entry.user else None,
            details=entry.details or {},
            timestamp=entry.timestamp,
        )


@strawberry.type
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: Optional[str]
    end_cursor: Optional[str]


@strawberry.type
class ActivityLogEdge:
    node: ActivityLogType
    cursor: str


@strawberry.type
class ActivityLogConnection:
    """Newest-first page of entries; ``total_count`` ignores the cursor."""

    edges: List[ActivityLogEdge]
    page_info: PageInfo
    total_count: int


def encode_cursor(entry_id: int) -> str:
    return base64.b64encode(f"{CURSOR_PREFIX}{entry_id}".encode()).decode()


def decode_cursor(cursor: str) -> int:
    raw = base64.b64decode(cursor.encode()).decode()
    return int(raw.removeprefix(CURSOR_PREFIX))


@strawberry.type
class ActivityLogQuery:
    @strawberry.field
    def activity_logs(
        self,
        info: Info,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        action: Optional[str] = None,
        first: int = 25,
        after: Optional[str] = None,
    ) -> ActivityLogConnection:
        """Who finalized, voided or repriced what, newest first.

        ``entity_id`` matches entries whose ``entity_ids`` contain it, so a
        bulk finalize shows up under each of its invoices.
        """
        user = require_perm(info, "activity", "read")

        entries = ActivityLog.objects.filter(organization_id=user.organization_id)
        if entity_type:
            entries = entries.filter(entity_type=entity_type)
        if action:
            entries = entries.filter(action=action)
        entries = list(entries.select_related("user").order_by("-timestamp", "-id"))

        if entity_id is not None:
            # JSON containment lookups are not portable across backends
            entries = [e for e in entries if entity_id in (e.entity_ids or [])]
        total_count = len(entries)

        if after:
            boundary = decode_cursor(after)
            entries = [e for e in entries if e.id < boundary]

        page_size = min(first, MAX_PAGE_SIZE)
        page = entries[:page_size]
        edges = [
            ActivityLogEdge(node=ActivityLogType.from_model(e), cursor=encode_cursor(e.id))
            for e in page
        ]
        return ActivityLogConnection(
            edges=edges,
            page_info=PageInfo(
                has_next_page=len(entries) > page_size,
                has_previous_page=after is not None,
                start_cursor=edges[0].cursor if edges else None,
                end_cursor=edges[-1].cursor if edges else None,
            ),
            total_count=total_count,
        )
