"""
Request domain value objects (``request_kernel.domain.dtos``).

Responsibility
--------------
Frozen records exchanged between the controller, the stores, the role
resolver and the selectors.  ORM models convert to and from these; no
caller outside ``models/`` and ``services/request_store`` ever sees an ORM
instance.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``Request.status`` is always a ``RequestStatus`` member (stores
  normalize on the way out).
* Audit fields are set together: a request either has both
  ``last_transition_at`` and ``last_transition_by`` or neither.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from request_kernel.domain.fund_type import FundType
from request_kernel.domain.status import RequestStatus
from request_kernel.domain.transition_policy import ActingRole


# =========================================================================
# Request
# =========================================================================


@dataclass(frozen=True)
class Request:
    """Immutable snapshot of a resource or fund request."""

    request_id: UUID
    status: RequestStatus
    requesting_party: str
    club_id: str
    department_id: str | None = None
    quantity: int = 1
    due_date: date | None = None
    message: str | None = None
    fund_type: FundType | None = None
    created_at: datetime | None = None
    last_transition_at: datetime | None = None
    last_transition_by: str | None = None

    def with_transition(self, new_status: RequestStatus, audit: TransitionAudit) -> Request:
        """Copy with the new status and audit fields applied."""
        return replace(
            self,
            status=new_status,
            last_transition_at=audit.transitioned_at,
            last_transition_by=audit.actor_id,
        )


# =========================================================================
# Transition audit
# =========================================================================


@dataclass(frozen=True)
class TransitionAudit:
    """Audit fields written alongside a committed status change."""

    actor_id: str
    actor_role: ActingRole
    transitioned_at: datetime


@dataclass(frozen=True)
class TransitionRecord:
    """One committed transition from the append-only history.

    ``sequence`` numbers a request's transitions 1, 2, 3 ... in commit order.
    """

    transition_id: UUID
    request_id: UUID
    from_status: RequestStatus
    to_status: RequestStatus
    actor_id: str
    actor_role: ActingRole
    transitioned_at: datetime
    sequence: int


# =========================================================================
# Actor scope
# =========================================================================


@dataclass(frozen=True)
class ActorScope:
    """What the identity service says an acting identity is allowed to own.

    A department reviewer is scoped by ``department_id``; a club officer
    by ``club_id``.
    """

    identity: str
    role: ActingRole
    department_id: str | None = None
    club_id: str | None = None

    def owns(self, request: Request) -> bool:
        if self.role is ActingRole.DEPARTMENT:
            return (
                self.department_id is not None
                and self.department_id == request.department_id
            )
        return self.club_id is not None and self.club_id == request.club_id


# =========================================================================
# Submission
# =========================================================================


class SubmitterKind(str, Enum):
    """Who is opening the request."""

    CLUB = "club"
    STUDENT = "student"
    FACULTY = "faculty"


@dataclass(frozen=True)
class RequestSubmission:
    """Input to the submission flow.

    ``is_club_member`` only matters for students: non-members are routed
    through their department first.
    """

    submitter_kind: SubmitterKind
    requesting_party: str
    club_id: str
    quantity: int
    department_id: str | None = None
    is_club_member: bool = False
    available_quantity: int | None = None
    due_date: date | None = None
    message: str | None = None
    fund_type: FundType | None = None
    request_id: UUID = field(default_factory=uuid4)
