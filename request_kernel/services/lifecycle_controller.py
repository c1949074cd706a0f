"""
RequestLifecycleController -- validates and commits request status changes.

Responsibility:
    The only write path for a request's status.  Loads the request,
    checks the acting identity's scope, asks the transition policy
    whether the move is legal, and commits it with a compare-and-swap
    on the status it read.

Architecture position:
    Kernel > Services -- imperative shell.  Receives its store and role
    resolver by constructor injection; holds no connection of its own.

Invariants enforced:
    - Transitions come only from ``TRANSITION_TABLE``; never from the
      ordering of status codes.
    - Per-request commits are serialized by compare-and-swap; a losing
      attempt raises ConflictRetryError and is NOT retried here.
    - All-or-nothing: either status and audit fields are committed
      together, or nothing is written.
    - No cascades: inventory counts, notifications etc. are the caller's
      business once it sees the returned Request.

Failure modes:
    - UnknownRoleError: acting role is not a known role.
    - RequestNotFoundError: request id not in the store.
    - ScopeMismatchError: unknown identity, role mismatch, or the actor's
      department/club does not own the request.
    - IllegalTransitionError: desired state not reachable for the role.
    - ConflictRetryError: a concurrent commit changed the status first.

Audit relevance:
    Every commit sets ``last_transition_at``/``last_transition_by`` and
    appends a transition history row; every rejection and conflict is logged
    with the typed error attached, so the record carries its code and
    fields.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from request_kernel.domain.clock import Clock, SystemClock
from request_kernel.domain.dtos import ActorScope, Request, TransitionAudit
from request_kernel.domain.protocols import RequestStore, RoleResolver
from request_kernel.domain.status import RequestStatus, normalize
from request_kernel.domain.transition_policy import (
    ActingRole,
    allowed_next_states,
    coerce_role,
)
from request_kernel.exceptions import (
    ConflictRetryError,
    IllegalTransitionError,
    ScopeMismatchError,
    TransitionError,
)
from request_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.lifecycle_controller")


class RequestLifecycleController:
    """Role-gated, concurrency-safe request status transitions."""

    def __init__(
        self,
        store: RequestStore,
        role_resolver: RoleResolver,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._role_resolver = role_resolver
        self._clock = clock or SystemClock()

    def attempt_transition(
        self,
        request_id: UUID,
        desired_status: RequestStatus | int,
        acting_role: ActingRole | str,
        acting_identity: str,
        *,
        correlation_id: str | None = None,
    ) -> Request:
        """Move a request to ``desired_status`` on behalf of an actor.

        ``correlation_id`` is stamped on every log record of the call.

        Returns:
            The updated Request as committed.

        Raises:
            UnknownRoleError, RequestNotFoundError, ScopeMismatchError,
            IllegalTransitionError, ConflictRetryError.
        """
        role = coerce_role(acting_role)
        with LogContext.bind(
            correlation_id=correlation_id,
            request_id=str(request_id),
            actor_id=acting_identity,
            role=role.value,
        ):
            request = self._store.get(request_id)
            try:
                self._check_scope(request, role, acting_identity)
                current = normalize(request.status)
                desired = self._coerce_desired(desired_status, current, role)
                if desired not in allowed_next_states(current, role):
                    raise IllegalTransitionError(current, desired, role)
            except TransitionError as exc:
                logger.info("transition_rejected", exc_info=exc)
                raise

            audit = TransitionAudit(
                actor_id=acting_identity,
                actor_role=role,
                transitioned_at=self._clock.now(),
            )
            if not self._store.compare_and_swap_status(
                request_id, current, desired, audit,
            ):
                conflict = ConflictRetryError(str(request_id), current, desired)
                logger.warning("transition_conflict", exc_info=conflict)
                raise conflict

            logger.info(
                "transition_committed",
                extra={"from_status": current.name, "to_status": desired.name},
            )
            return request.with_transition(desired, audit)

    def available_actions(
        self,
        request_id: UUID,
        acting_role: ActingRole | str,
    ) -> frozenset[RequestStatus]:
        """States the role could move the request to right now (for menus)."""
        request = self._store.get(request_id)
        return allowed_next_states(request.status, acting_role)

    def _check_scope(
        self,
        request: Request,
        role: ActingRole,
        identity: str,
    ) -> ActorScope:
        scope = self._role_resolver.resolve(identity)
        if scope is None:
            raise ScopeMismatchError(
                str(request.request_id), identity, role, "unknown identity",
            )
        if scope.role is not role:
            raise ScopeMismatchError(
                str(request.request_id), identity, role,
                f"identity resolves to role {scope.role.value}",
            )
        if not scope.owns(request):
            raise ScopeMismatchError(
                str(request.request_id), identity, role,
                f"request belongs to another {role.value}",
            )
        return scope

    @staticmethod
    def _coerce_desired(
        desired: Any,
        current: RequestStatus,
        role: ActingRole,
    ) -> RequestStatus:
        # Unknown target codes are rejected, never normalized to PROCESSING.
        if isinstance(desired, bool) or not isinstance(desired, int):
            raise IllegalTransitionError(current, desired, role)
        try:
            return RequestStatus(desired)
        except ValueError:
            raise IllegalTransitionError(current, desired, role) from None
