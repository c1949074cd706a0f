"""
Request status vocabulary (``request_kernel.domain.status``).

Responsibility
--------------
Canonical set of request lifecycle states plus the normalizer that maps
stored values -- including the free-text statuses written by older
versions of the platform -- onto that set.

Architecture position
---------------------
**Kernel domain layer** -- pure values and functions.  ZERO I/O.

Invariants enforced
-------------------
* Every value returned by ``normalize`` is a ``RequestStatus`` member.
* ``normalize`` never raises: unknown input is treated as still in
  progress (``PROCESSING``).
* The integer codes are storage codes, NOT a precedence order.
  ``DEPARTMENT_REJECTED`` (2) sits between ``DEPARTMENT_PENDING`` (1) and
  ``DEPARTMENT_APPROVED`` (3).  Legality of a move lives in
  ``transition_policy``; display order lives in ``presentation``.
"""

from __future__ import annotations

import numbers
from enum import IntEnum
from typing import Any


class RequestStatus(IntEnum):
    """Request lifecycle states, keyed by their storage code."""

    PROCESSING = 0
    DEPARTMENT_PENDING = 1
    DEPARTMENT_REJECTED = 2
    DEPARTMENT_APPROVED = 3
    CLUB_REJECTED = 4
    CLUB_APPROVED = 5
    COLLECTED = 6
    OVERDUE = 7
    RETURNED = 8


# Free-text statuses written before the numeric codes existed.
# Keys are lower-case; lookups lower-case and strip the input first.
LEGACY_STATUS_ALIASES: dict[str, RequestStatus] = {
    "pending": RequestStatus.PROCESSING,
    "processing": RequestStatus.PROCESSING,
    "department approval pending": RequestStatus.DEPARTMENT_PENDING,
    "underconsideration": RequestStatus.DEPARTMENT_PENDING,
    "under consideration": RequestStatus.DEPARTMENT_PENDING,
    "dept approved": RequestStatus.DEPARTMENT_APPROVED,
    "approved": RequestStatus.CLUB_APPROVED,
    "club approved": RequestStatus.CLUB_APPROVED,
    "rejected": RequestStatus.CLUB_REJECTED,
    "club rejected": RequestStatus.CLUB_REJECTED,
    "dept rejected": RequestStatus.DEPARTMENT_REJECTED,
    "collected": RequestStatus.COLLECTED,
    "overdue": RequestStatus.OVERDUE,
    "returned": RequestStatus.RETURNED,
}

TERMINAL_STATUSES: frozenset[RequestStatus] = frozenset({
    RequestStatus.DEPARTMENT_REJECTED,
    RequestStatus.CLUB_REJECTED,
    RequestStatus.RETURNED,
})

# Requests still open from the borrower's point of view.
ACTIVE_STATUSES: frozenset[RequestStatus] = frozenset({
    RequestStatus.PROCESSING,
    RequestStatus.DEPARTMENT_PENDING,
    RequestStatus.DEPARTMENT_APPROVED,
    RequestStatus.CLUB_APPROVED,
    RequestStatus.COLLECTED,
    RequestStatus.OVERDUE,
})

_CODES: frozenset[int] = frozenset(int(s) for s in RequestStatus)


def normalize(raw: Any) -> RequestStatus:
    """Map a stored status (code, legacy string, or None) to a canonical state.

    Integral numbers of any numeric type (``5``, ``5.0``, ``Decimal("5")``)
    resolve to their code.  Total: anything unrecognized, including
    ``None``, fractional numbers, digit strings and booleans, yields
    ``RequestStatus.PROCESSING``.
    """
    if isinstance(raw, RequestStatus):
        return raw
    if isinstance(raw, numbers.Number) and not isinstance(raw, bool):
        try:
            code = int(raw)
        except (TypeError, ValueError, OverflowError):
            return RequestStatus.PROCESSING
        if code == raw and code in _CODES:
            return RequestStatus(code)
        return RequestStatus.PROCESSING
    if isinstance(raw, str):
        return LEGACY_STATUS_ALIASES.get(
            raw.strip().lower(), RequestStatus.PROCESSING,
        )
    return RequestStatus.PROCESSING


def is_terminal(status: Any) -> bool:
    """True when no role can move the request any further."""
    return normalize(status) in TERMINAL_STATUSES


def is_active(status: Any) -> bool:
    return normalize(status) in ACTIVE_STATUSES
