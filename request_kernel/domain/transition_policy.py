"""
Role-gated transition policy (``request_kernel.domain.transition_policy``).

Responsibility
--------------
Single source of truth for which states an acting role may move a request
to from its current state.

Architecture position
---------------------
**Kernel domain layer** -- pure table lookup.  ZERO I/O.  May import only
from ``domain/status`` and ``exceptions``.

Invariants enforced
-------------------
* ``TRANSITION_TABLE`` has an entry for every (role, status) pair; pairs
  not listed in ``_GRANTS`` map to the empty set (default deny).
* Terminal statuses have no outgoing edges for any role.
* Legality is never inferred from the numeric status codes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from request_kernel.domain.status import RequestStatus, normalize
from request_kernel.exceptions import UnknownRoleError


class ActingRole(str, Enum):
    """Roles that may move a request."""

    DEPARTMENT = "department"
    CLUB = "club"


_S = RequestStatus

_GRANTS: dict[tuple[ActingRole, RequestStatus], frozenset[RequestStatus]] = {
    # Department review
    (ActingRole.DEPARTMENT, _S.DEPARTMENT_PENDING): frozenset({
        _S.DEPARTMENT_APPROVED,
        _S.DEPARTMENT_REJECTED,
    }),
    # Club review, either directly or after department approval
    (ActingRole.CLUB, _S.PROCESSING): frozenset({
        _S.CLUB_APPROVED,
        _S.CLUB_REJECTED,
    }),
    (ActingRole.CLUB, _S.DEPARTMENT_APPROVED): frozenset({
        _S.CLUB_APPROVED,
        _S.CLUB_REJECTED,
    }),
    # Fulfillment
    (ActingRole.CLUB, _S.CLUB_APPROVED): frozenset({
        _S.COLLECTED,
        _S.OVERDUE,
        _S.RETURNED,
    }),
    (ActingRole.CLUB, _S.COLLECTED): frozenset({
        _S.RETURNED,
        _S.OVERDUE,
    }),
    (ActingRole.CLUB, _S.OVERDUE): frozenset({
        _S.RETURNED,
    }),
}

TRANSITION_TABLE: dict[tuple[ActingRole, RequestStatus], frozenset[RequestStatus]] = {
    (role, status): _GRANTS.get((role, status), frozenset())
    for role in ActingRole
    for status in RequestStatus
}


def coerce_role(role: Any) -> ActingRole:
    """Accept an ``ActingRole`` or its string value (case-insensitive).

    Raises:
        UnknownRoleError: if ``role`` names no known role.
    """
    if isinstance(role, ActingRole):
        return role
    if isinstance(role, str):
        try:
            return ActingRole(role.strip().lower())
        except ValueError:
            raise UnknownRoleError(role) from None
    raise UnknownRoleError(role)


def allowed_next_states(current: Any, role: Any) -> frozenset[RequestStatus]:
    """States ``role`` may move a request to from ``current``.

    ``current`` is normalized first, so legacy stored values are accepted.
    """
    return TRANSITION_TABLE[(coerce_role(role), normalize(current))]


def is_transition_allowed(current: Any, desired: RequestStatus, role: Any) -> bool:
    return desired in allowed_next_states(current, role)
