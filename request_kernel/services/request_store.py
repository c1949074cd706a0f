"""
Request store adapters -- durable record store behind the lifecycle controller.

Responsibility:
    Implements the ``RequestStore`` contract: load a request with its status
    normalized, persist a new request, and commit a status change only if
    the stored status still matches what the caller read.

Architecture position:
    Kernel > Services -- imperative shell.  ``SqlRequestStore`` may import
    from models/ and db/; ``InMemoryRequestStore`` is dependency-free and
    serves as the test double and as the store for embedded use.

Invariants enforced:
    - Compare-and-swap: a status write names the expected current status;
      a zero-row UPDATE (SQL) or a mismatch under the record lock
      (in-memory) returns False and writes nothing.
    - Atomic commit: status, audit fields and the transition history row
      are written in one database transaction.
    - History rows of a request are numbered 1, 2, 3 ... in commit order.
    - No lock or session outlives a single call.

Failure modes:
    - RequestNotFoundError from ``get`` for unknown ids.
    - IntegrityError from ``add`` on a duplicate request id.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, sessionmaker

from request_kernel.domain.dtos import Request, TransitionAudit, TransitionRecord
from request_kernel.domain.status import RequestStatus, normalize
from request_kernel.exceptions import RequestNotFoundError
from request_kernel.logging_config import get_logger
from request_kernel.models.request import RequestModel, RequestTransitionModel

logger = get_logger("services.request_store")


class SqlRequestStore:
    """RequestStore backed by the ``requests`` table.

    Each call opens its own session from ``session_factory`` and closes it
    before returning, so one store instance is safe to share across threads.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, request_id: UUID) -> Request:
        with self._session_factory() as session:
            model = session.execute(
                select(RequestModel).where(RequestModel.request_id == request_id)
            ).scalar_one_or_none()
            if model is None:
                raise RequestNotFoundError(str(request_id))
            return model.to_dto()

    def add(self, request: Request) -> Request:
        with self._session_factory.begin() as session:
            model = RequestModel.from_dto(request)
            session.add(model)
            session.flush()
            dto = model.to_dto()
        logger.debug(
            "request_stored",
            extra={"request_id": str(dto.request_id), "status": dto.status.name},
        )
        return dto

    def compare_and_swap_status(
        self,
        request_id: UUID,
        expected_status: RequestStatus,
        new_status: RequestStatus,
        audit: TransitionAudit,
    ) -> bool:
        with self._session_factory.begin() as session:
            # Conditional UPDATE: the WHERE on status is the whole race check.
            result = session.execute(
                update(RequestModel)
                .where(
                    RequestModel.request_id == request_id,
                    RequestModel.status == int(expected_status),
                )
                .values(
                    status=int(new_status),
                    last_transition_at=audit.transitioned_at,
                    last_transition_by=audit.actor_id,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                return False

            # The UPDATE above holds this request's row lock until commit,
            # so no other writer can append between MAX() and INSERT.
            sequence = session.execute(
                select(func.coalesce(func.max(RequestTransitionModel.sequence), 0))
                .where(RequestTransitionModel.request_id == request_id)
            ).scalar_one() + 1

            session.add(RequestTransitionModel(
                transition_id=uuid4(),
                request_id=request_id,
                sequence=sequence,
                from_status=int(expected_status),
                to_status=int(new_status),
                actor_id=audit.actor_id,
                actor_role=audit.actor_role.value,
                transitioned_at=audit.transitioned_at,
            ))
        return True


class InMemoryRequestStore:
    """RequestStore held in process memory.

    Stores the raw status value as written, so rows imported from the
    legacy free-text vocabulary can be loaded with ``load_raw`` and are
    normalized on read.  The first committed transition replaces the raw
    value with a canonical one.
    """

    def __init__(self) -> None:
        self._requests: dict[UUID, Request] = {}
        self._raw_status: dict[UUID, Any] = {}
        self._history: dict[UUID, list[TransitionRecord]] = {}
        self._locks: dict[UUID, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def add(self, request: Request) -> Request:
        return self.load_raw(request, int(request.status))

    def load_raw(self, request: Request, raw_status: Any) -> Request:
        """Insert a request whose stored status is ``raw_status`` verbatim."""
        with self._registry_lock:
            if request.request_id in self._requests:
                raise ValueError(f"Request already exists: {request.request_id}")
            self._requests[request.request_id] = request
            self._raw_status[request.request_id] = raw_status
            self._history[request.request_id] = []
            self._locks[request.request_id] = threading.Lock()
        return self.get(request.request_id)

    def get(self, request_id: UUID) -> Request:
        lock = self._lock_for(request_id)
        with lock:
            request = self._requests[request_id]
            raw = self._raw_status[request_id]
        return replace(request, status=normalize(raw))

    def compare_and_swap_status(
        self,
        request_id: UUID,
        expected_status: RequestStatus,
        new_status: RequestStatus,
        audit: TransitionAudit,
    ) -> bool:
        lock = self._lock_for(request_id)
        with lock:
            if normalize(self._raw_status[request_id]) != expected_status:
                return False
            self._raw_status[request_id] = int(new_status)
            self._requests[request_id] = self._requests[request_id].with_transition(
                new_status, audit,
            )
            history = self._history[request_id]
            history.append(TransitionRecord(
                transition_id=uuid4(),
                request_id=request_id,
                from_status=expected_status,
                to_status=new_status,
                actor_id=audit.actor_id,
                actor_role=audit.actor_role,
                transitioned_at=audit.transitioned_at,
                sequence=len(history) + 1,
            ))
        return True

    def raw_status(self, request_id: UUID) -> Any:
        """Stored status exactly as held, before normalization."""
        with self._lock_for(request_id):
            return self._raw_status[request_id]

    def transitions(self, request_id: UUID) -> list[TransitionRecord]:
        with self._lock_for(request_id):
            return list(self._history[request_id])

    def _lock_for(self, request_id: UUID) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(request_id)
        if lock is None:
            raise RequestNotFoundError(str(request_id))
        return lock
