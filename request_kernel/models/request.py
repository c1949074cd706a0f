"""
Module: request_kernel.models.request
Responsibility: ORM persistence for requests and their transition history.

Architecture position: Kernel > Models.  May import from db/base.py and the
    pure domain layer.

Invariants enforced:
    - Stored status is always a canonical code: CHECK (status BETWEEN 0 AND 8).
      Legacy free-text statuses are normalized before they reach this table.
    - Transition history is append-only: ORM listeners reject UPDATE and
      DELETE of RequestTransitionModel rows.
    - (request_id, sequence) is unique: a request's history has one row per
      position in commit order.

Failure modes:
    - IntegrityError on an out-of-range status or fund type.
    - ImmutabilityViolationError on transition row UPDATE/DELETE.
"""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column

from request_kernel.db.base import Base, UUIDString
from request_kernel.domain.dtos import Request, TransitionRecord
from request_kernel.domain.fund_type import FundType
from request_kernel.domain.status import RequestStatus, normalize
from request_kernel.domain.transition_policy import ActingRole
from request_kernel.exceptions import ImmutabilityViolationError


class RequestModel(Base):
    """Persistent resource/fund request.

    Contract:
        ``status`` changes only through a conditional UPDATE keyed on the
        previously read status (see SqlRequestStore).
    """

    __tablename__ = "requests"

    __table_args__ = (
        CheckConstraint(
            "status BETWEEN 0 AND 8",
            name="ck_requests_valid_status",
        ),
        CheckConstraint(
            "quantity > 0",
            name="ck_requests_positive_quantity",
        ),
        CheckConstraint(
            "fund_type IS NULL OR fund_type BETWEEN 0 AND 12",
            name="ck_requests_valid_fund_type",
        ),
        Index("ix_requests_club_status", "club_id", "status"),
        Index("ix_requests_department_status", "department_id", "status"),
        Index("ix_requests_party", "requesting_party"),
    )

    request_id: Mapped[UUID] = mapped_column(
        UUIDString(), nullable=False, unique=True,
    )
    status: Mapped[int] = mapped_column(Integer, nullable=False)
    requesting_party: Mapped[str] = mapped_column(String(100), nullable=False)
    club_id: Mapped[str] = mapped_column(String(100), nullable=False)
    department_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    fund_type: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    last_transition_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    last_transition_by: Mapped[str | None] = mapped_column(
        String(100), nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Request {self.request_id} club={self.club_id} "
            f"status={self.status}>"
        )

    def to_dto(self) -> Request:
        """Convert ORM model to frozen domain DTO."""
        return Request(
            request_id=self.request_id,
            status=normalize(self.status),
            requesting_party=self.requesting_party,
            club_id=self.club_id,
            department_id=self.department_id,
            quantity=self.quantity,
            due_date=self.due_date,
            message=self.message,
            fund_type=FundType(self.fund_type) if self.fund_type is not None else None,
            created_at=self.created_at,
            last_transition_at=self.last_transition_at,
            last_transition_by=self.last_transition_by,
        )

    @classmethod
    def from_dto(cls, dto: Request) -> RequestModel:
        """Create ORM model from domain DTO."""
        return cls(
            request_id=dto.request_id,
            status=int(normalize(dto.status)),
            requesting_party=dto.requesting_party,
            club_id=dto.club_id,
            department_id=dto.department_id,
            quantity=dto.quantity,
            due_date=dto.due_date,
            message=dto.message,
            fund_type=int(dto.fund_type) if dto.fund_type is not None else None,
            created_at=dto.created_at,
            last_transition_at=dto.last_transition_at,
            last_transition_by=dto.last_transition_by,
        )


class RequestTransitionModel(Base):
    """Append-only record of a committed status transition."""

    __tablename__ = "request_transitions"

    __table_args__ = (
        UniqueConstraint(
            "request_id", "sequence",
            name="uq_request_transitions_request_sequence",
        ),
    )

    transition_id: Mapped[UUID] = mapped_column(
        UUIDString(), nullable=False, unique=True,
    )
    request_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("requests.request_id"),
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    from_status: Mapped[int] = mapped_column(Integer, nullable=False)
    to_status: Mapped[int] = mapped_column(Integer, nullable=False)
    actor_id: Mapped[str] = mapped_column(String(100), nullable=False)
    actor_role: Mapped[str] = mapped_column(String(20), nullable=False)
    transitioned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<RequestTransition {self.transition_id} "
            f"request={self.request_id} #{self.sequence} {self.from_status}->{self.to_status}>"
        )

    def to_dto(self) -> TransitionRecord:
        return TransitionRecord(
            transition_id=self.transition_id,
            request_id=self.request_id,
            from_status=RequestStatus(self.from_status),
            to_status=RequestStatus(self.to_status),
            actor_id=self.actor_id,
            actor_role=ActingRole(self.actor_role),
            transitioned_at=self.transitioned_at,
            sequence=self.sequence,
        )


# =============================================================================
# ORM-Level Immutability for Transition History (Append-Only)
# =============================================================================


@event.listens_for(RequestTransitionModel, "before_update")
def prevent_transition_update(mapper, connection, target):
    """Prevent updates to transition history records."""
    raise ImmutabilityViolationError(
        entity_type="RequestTransition",
        entity_id=str(target.transition_id),
        reason="Transition history is immutable -- cannot modify",
    )


@event.listens_for(RequestTransitionModel, "before_delete")
def prevent_transition_delete(mapper, connection, target):
    """Prevent deletion of transition history records."""
    raise ImmutabilityViolationError(
        entity_type="RequestTransition",
        entity_id=str(target.transition_id),
        reason="Transition history is immutable -- cannot delete",
    )
