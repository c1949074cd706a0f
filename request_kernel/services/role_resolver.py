"""
StaticRoleResolver -- mapping-backed identity/role resolver.

The platform's identity service is the real resolver; this one is filled
from a fixed set of scopes (membership exports, seed data, tests).
"""

from __future__ import annotations

from typing import Iterable

from request_kernel.domain.dtos import ActorScope
from request_kernel.domain.transition_policy import ActingRole


class StaticRoleResolver:
    """Resolves identities from registered ``ActorScope`` entries."""

    def __init__(self, scopes: Iterable[ActorScope] = ()) -> None:
        self._scopes: dict[str, ActorScope] = {}
        for scope in scopes:
            self.register(scope)

    def register(self, scope: ActorScope) -> None:
        self._scopes[scope.identity] = scope

    def register_department_reviewer(self, identity: str, department_id: str) -> ActorScope:
        scope = ActorScope(
            identity=identity,
            role=ActingRole.DEPARTMENT,
            department_id=department_id,
        )
        self.register(scope)
        return scope

    def register_club_officer(self, identity: str, club_id: str) -> ActorScope:
        scope = ActorScope(
            identity=identity,
            role=ActingRole.CLUB,
            club_id=club_id,
        )
        self.register(scope)
        return scope

    def resolve(self, identity: str) -> ActorScope | None:
        return self._scopes.get(identity)
