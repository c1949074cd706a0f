"""
Request kernel domain layer -- pure values and functions, zero I/O.

Re-exports the status vocabulary, the transition policy and the
presentation lookups that display layers consume.
"""

from request_kernel.domain.presentation import (
    Severity,
    display_rank,
    label,
    severity,
    sort_key,
)
from request_kernel.domain.status import (
    ACTIVE_STATUSES,
    LEGACY_STATUS_ALIASES,
    TERMINAL_STATUSES,
    RequestStatus,
    is_active,
    is_terminal,
    normalize,
)
from request_kernel.domain.transition_policy import (
    TRANSITION_TABLE,
    ActingRole,
    allowed_next_states,
    is_transition_allowed,
)

__all__ = [
    "ACTIVE_STATUSES",
    "LEGACY_STATUS_ALIASES",
    "TERMINAL_STATUSES",
    "TRANSITION_TABLE",
    "ActingRole",
    "RequestStatus",
    "Severity",
    "allowed_next_states",
    "display_rank",
    "is_active",
    "is_terminal",
    "is_transition_allowed",
    "label",
    "normalize",
    "severity",
    "sort_key",
]
