"""
Module: request_kernel.selectors.request_selector
Responsibility: Read-only queries over requests and their transition
    history for club, department and borrower dashboards.
Architecture position: Kernel > Selectors.  May import from db/, models/
    and the pure domain layer.  Never adds, flushes or commits.

Invariants enforced:
    - Returns frozen DTOs, never ORM instances.
    - Statuses in returned DTOs are normalized.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from request_kernel.domain.dtos import Request, TransitionRecord
from request_kernel.domain.presentation import sort_key
from request_kernel.domain.status import ACTIVE_STATUSES, RequestStatus
from request_kernel.models.request import RequestModel, RequestTransitionModel


class RequestSelector:
    """
    Read-only request queries.

    The caller owns the session and its transaction scope.
    """

    def __init__(self, session: Session):
        self.session = session

    def list_for_club(self, club_id: str) -> list[Request]:
        """All requests addressed to a club, ordered by display progress."""
        models = self.session.execute(
            select(RequestModel).where(RequestModel.club_id == club_id)
        ).scalars().all()
        dtos = [m.to_dto() for m in models]
        return sorted(dtos, key=lambda r: (sort_key(r.status), r.created_at is None, r.created_at))

    def list_pending_for_department(self, department_id: str) -> list[Request]:
        """Requests waiting on this department's review, oldest first."""
        models = self.session.execute(
            select(RequestModel)
            .where(
                RequestModel.department_id == department_id,
                RequestModel.status == int(RequestStatus.DEPARTMENT_PENDING),
            )
            .order_by(RequestModel.created_at, RequestModel.id)
        ).scalars().all()
        return [m.to_dto() for m in models]

    def list_for_party(
        self,
        requesting_party: str,
        active_only: bool = False,
    ) -> list[Request]:
        """A borrower's requests, newest first."""
        stmt = select(RequestModel).where(
            RequestModel.requesting_party == requesting_party,
        )
        if active_only:
            stmt = stmt.where(
                RequestModel.status.in_([int(s) for s in ACTIVE_STATUSES])
            )
        models = self.session.execute(
            stmt.order_by(RequestModel.created_at.desc(), RequestModel.id)
        ).scalars().all()
        return [m.to_dto() for m in models]

    def collected_quantity(self, requesting_party: str) -> int:
        """Units currently in the borrower's hands (status COLLECTED)."""
        total = self.session.execute(
            select(func.coalesce(func.sum(RequestModel.quantity), 0)).where(
                RequestModel.requesting_party == requesting_party,
                RequestModel.status == int(RequestStatus.COLLECTED),
            )
        ).scalar_one()
        return int(total)

    def transition_history(self, request_id: UUID) -> list[TransitionRecord]:
        """Committed transitions for a request in commit order."""
        models = self.session.execute(
            select(RequestTransitionModel)
            .where(RequestTransitionModel.request_id == request_id)
            .order_by(RequestTransitionModel.sequence)
        ).scalars().all()
        return [m.to_dto() for m in models]
