"""Boundary contracts the lifecycle controller consumes."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from request_kernel.domain.dtos import ActorScope, Request, TransitionAudit
from request_kernel.domain.status import RequestStatus


class RequestStore(Protocol):
    """Durable record store for requests."""

    def get(self, request_id: UUID) -> Request:
        """Return the request with its status normalized.

        Raises:
            RequestNotFoundError: if no such request exists.
        """
        ...

    def compare_and_swap_status(
        self,
        request_id: UUID,
        expected_status: RequestStatus,
        new_status: RequestStatus,
        audit: TransitionAudit,
    ) -> bool:
        """Atomically set ``new_status`` and audit fields if the stored
        status still equals ``expected_status``.  Returns False otherwise.
        """
        ...

    def add(self, request: Request) -> Request:
        """Persist a newly submitted request."""
        ...


class RoleResolver(Protocol):
    """Identity service view: who is acting, and over which department/club."""

    def resolve(self, identity: str) -> ActorScope | None:
        """None when the identity is unknown to the identity service."""
        ...
