"""
RequestSubmissionService -- opens new requests in their initial state.

Routing:
    club submitter                      -> PROCESSING (straight to club review)
    student, member of the owning club  -> PROCESSING
    student, not a member               -> DEPARTMENT_PENDING (department
                                           reviews first; needs department_id)
    anyone else                         -> InvalidSubmissionError

Quantity must be positive and, when the caller knows the stock on hand,
no larger than ``available_quantity``.  Stock is not reserved here.
"""

from __future__ import annotations

from request_kernel.domain.clock import Clock, SystemClock
from request_kernel.domain.dtos import Request, RequestSubmission, SubmitterKind
from request_kernel.domain.protocols import RequestStore
from request_kernel.domain.status import RequestStatus
from request_kernel.exceptions import InvalidSubmissionError
from request_kernel.logging_config import get_logger

logger = get_logger("services.submission_service")


def initial_status(submission: RequestSubmission) -> RequestStatus:
    """Starting state for a submission.

    Raises:
        InvalidSubmissionError: if the submitter cannot open a request.
    """
    kind = submission.submitter_kind
    if kind is SubmitterKind.CLUB:
        return RequestStatus.PROCESSING
    if kind is SubmitterKind.STUDENT:
        if submission.is_club_member:
            return RequestStatus.PROCESSING
        if not submission.department_id:
            raise InvalidSubmissionError(
                "non-member student requests need a department"
            )
        return RequestStatus.DEPARTMENT_PENDING
    raise InvalidSubmissionError(f"{kind.value} submitters cannot open requests")


class RequestSubmissionService:
    """Validates submissions and stores them as new requests."""

    def __init__(self, store: RequestStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def submit(self, submission: RequestSubmission) -> Request:
        self._validate_quantity(submission)
        status = initial_status(submission)

        request = Request(
            request_id=submission.request_id,
            status=status,
            requesting_party=submission.requesting_party,
            club_id=submission.club_id,
            department_id=submission.department_id,
            quantity=submission.quantity,
            due_date=submission.due_date,
            message=submission.message,
            fund_type=submission.fund_type,
            created_at=self._clock.now(),
        )
        stored = self._store.add(request)

        logger.info(
            "request_submitted",
            extra={
                "request_id": str(stored.request_id),
                "submitter_kind": submission.submitter_kind.value,
                "club_id": stored.club_id,
                "status": stored.status.name,
                "quantity": stored.quantity,
            },
        )
        return stored

    @staticmethod
    def _validate_quantity(submission: RequestSubmission) -> None:
        if submission.quantity <= 0:
            raise InvalidSubmissionError("quantity must be positive")
        available = submission.available_quantity
        if available is not None and submission.quantity > available:
            raise InvalidSubmissionError(
                f"requested quantity {submission.quantity} exceeds "
                f"available quantity {available}"
            )
