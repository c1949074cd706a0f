"""
Typed exception hierarchy for the request kernel.

Every error has a typed class, a machine-readable ``code`` class attribute,
and structured attributes so callers never parse message strings:

    try:
        controller.attempt_transition(request_id, desired, role, identity)
    except ConflictRetryError:
        # someone else committed first -- re-read and let the user decide
        ...
    except IllegalTransitionError as e:
        api_response(code=e.code, current=e.current.name, desired=e.desired)

Hierarchy:

    RequestKernelError (base)
    |
    +-- TransitionError
    |   +-- IllegalTransitionError
    |   +-- ScopeMismatchError
    |   +-- UnknownRoleError
    |
    +-- RequestNotFoundError
    |
    +-- ConcurrencyError
    |   +-- ConflictRetryError
    |
    +-- SubmissionError
    |   +-- InvalidSubmissionError
    |
    +-- ImmutabilityViolationError

Error codes:

Category     | Code                    | When raised
-------------|-------------------------|----------------------------------------
Transition   | ILLEGAL_TRANSITION      | Desired state unreachable for the role
             | SCOPE_MISMATCH          | Actor does not own the request
             | UNKNOWN_ROLE            | Acting role is not a known role
Lookup       | REQUEST_NOT_FOUND       | Request id not in the store
Concurrency  | CONFLICT_RETRY          | Compare-and-swap lost to another commit
Submission   | INVALID_SUBMISSION      | Submitter/quantity cannot open a request
Immutability | IMMUTABILITY_VIOLATION  | Transition history row modified/deleted

None of these are retried inside the kernel. ``ConflictRetryError`` is the
only one a caller is expected to retry, after re-reading the request.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class RequestKernelError(Exception):
    """
    Base exception for all request kernel errors.

    All subclasses carry a ``code`` class attribute.
    """

    code: str = "REQUEST_KERNEL_ERROR"


# Transition-related exceptions


class TransitionError(RequestKernelError):
    """Base exception for rejected transitions."""

    code: str = "TRANSITION_ERROR"


class IllegalTransitionError(TransitionError):
    """Desired state is not reachable from the current state for this role."""

    code: str = "ILLEGAL_TRANSITION"

    def __init__(self, current: Any, desired: Any, role: Any):
        self.current = current
        self.desired = desired
        self.role = role
        super().__init__(
            f"Illegal transition for role {_display(role)}: "
            f"{_display(current)} -> {_display(desired)}"
        )


class ScopeMismatchError(TransitionError):
    """Resolved actor role/scope does not own the request."""

    code: str = "SCOPE_MISMATCH"

    def __init__(self, request_id: str, identity: str, role: Any, reason: str):
        self.request_id = request_id
        self.identity = identity
        self.role = role
        self.reason = reason
        super().__init__(
            f"Actor {identity} ({_display(role)}) may not act on request "
            f"{request_id}: {reason}"
        )


class UnknownRoleError(TransitionError):
    """Acting role is not one of the known roles."""

    code: str = "UNKNOWN_ROLE"

    def __init__(self, role: Any):
        self.role = role
        super().__init__(f"Unknown acting role: {role!r}")


# Lookup exceptions


class RequestNotFoundError(RequestKernelError):
    """Request with given ID was not found."""

    code: str = "REQUEST_NOT_FOUND"

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"Request not found: {request_id}")


# Concurrency-related exceptions


class ConcurrencyError(RequestKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class ConflictRetryError(ConcurrencyError):
    """
    A concurrent commit changed the request between read and write.

    The caller should re-read the request and decide again.
    """

    code: str = "CONFLICT_RETRY"

    def __init__(self, request_id: str, expected_status: Any, desired_status: Any):
        self.request_id = request_id
        self.expected_status = expected_status
        self.desired_status = desired_status
        super().__init__(
            f"Conflict on request {request_id}: status is no longer "
            f"{_display(expected_status)}, {_display(desired_status)} not applied"
        )


# Submission-related exceptions


class SubmissionError(RequestKernelError):
    """Base exception for request submission errors."""

    code: str = "SUBMISSION_ERROR"


class InvalidSubmissionError(SubmissionError):
    """The submission cannot open a request."""

    code: str = "INVALID_SUBMISSION"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid request submission: {reason}")


# Immutability-related exceptions


class ImmutabilityViolationError(RequestKernelError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


def _display(value: Any) -> str:
    if isinstance(value, Enum):
        return value.value if isinstance(value, str) else value.name
    return str(value)
