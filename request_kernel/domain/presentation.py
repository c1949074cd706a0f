"""
Read-only presentation lookups for request statuses.

Dashboards and request lists call these; nothing here feeds the
transition policy.  ``display_rank`` gives lists and progress bars a
stable order without implying that a higher rank is a legal next step.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from request_kernel.domain.status import RequestStatus, normalize


class Severity(str, Enum):
    """Badge variant a display layer uses for a status."""

    SUCCESS = "success"
    DESTRUCTIVE = "destructive"
    WARNING = "warning"
    SECONDARY = "secondary"
    DEFAULT = "default"


_LABELS: dict[RequestStatus, str] = {
    RequestStatus.PROCESSING: "Processing",
    RequestStatus.DEPARTMENT_PENDING: "Department Approval Pending",
    RequestStatus.DEPARTMENT_REJECTED: "Department Rejected",
    RequestStatus.DEPARTMENT_APPROVED: "Department Approved",
    RequestStatus.CLUB_REJECTED: "Club Rejected",
    RequestStatus.CLUB_APPROVED: "Club Approved",
    RequestStatus.COLLECTED: "Collected",
    RequestStatus.OVERDUE: "Overdue",
    RequestStatus.RETURNED: "Returned",
}

_SEVERITIES: dict[RequestStatus, Severity] = {
    RequestStatus.PROCESSING: Severity.WARNING,
    RequestStatus.DEPARTMENT_PENDING: Severity.WARNING,
    RequestStatus.DEPARTMENT_REJECTED: Severity.DESTRUCTIVE,
    RequestStatus.DEPARTMENT_APPROVED: Severity.SUCCESS,
    RequestStatus.CLUB_REJECTED: Severity.DESTRUCTIVE,
    RequestStatus.CLUB_APPROVED: Severity.SUCCESS,
    RequestStatus.COLLECTED: Severity.SECONDARY,
    RequestStatus.OVERDUE: Severity.WARNING,
    RequestStatus.RETURNED: Severity.SECONDARY,
}

# Progress position for display.  Rejections close their branch, so they
# share the rank of the step they ended on.
_DISPLAY_RANK: dict[RequestStatus, int] = {
    RequestStatus.DEPARTMENT_PENDING: 0,
    RequestStatus.DEPARTMENT_REJECTED: 1,
    RequestStatus.DEPARTMENT_APPROVED: 1,
    RequestStatus.PROCESSING: 2,
    RequestStatus.CLUB_REJECTED: 3,
    RequestStatus.CLUB_APPROVED: 3,
    RequestStatus.COLLECTED: 4,
    RequestStatus.OVERDUE: 5,
    RequestStatus.RETURNED: 6,
}


def label(status: Any) -> str:
    """Human-readable label for a (possibly legacy) status."""
    return _LABELS[normalize(status)]


def severity(status: Any) -> Severity:
    return _SEVERITIES.get(normalize(status), Severity.DEFAULT)


def display_rank(status: Any) -> int:
    """Display-only progress position; says nothing about legal moves."""
    return _DISPLAY_RANK[normalize(status)]


def sort_key(status: Any) -> tuple[int, int]:
    """Sort key for request lists: progress first, storage code as tiebreak."""
    canonical = normalize(status)
    return (_DISPLAY_RANK[canonical], int(canonical))
