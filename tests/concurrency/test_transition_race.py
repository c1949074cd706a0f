"""
Concurrent transition attempts on one request.

Two club officers' sessions both read CLUB_APPROVED, then one commits
COLLECTED and the other RETURNED.  Exactly one commit lands; the other
gets ConflictRetryError and writes nothing.  A barrier after the read
guarantees both attempts decided from the same snapshot.

Runs against the in-memory store and the SQL store.
"""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

import pytest

from request_kernel.domain.status import RequestStatus
from request_kernel.exceptions import ConflictRetryError
from request_kernel.selectors.request_selector import RequestSelector
from request_kernel.services.lifecycle_controller import RequestLifecycleController
from request_kernel.services.role_resolver import StaticRoleResolver
from tests.conftest import CLUB_ID, CLUB_OFFICER, build_request

pytestmark = pytest.mark.slow_locks

S = RequestStatus
SECOND_OFFICER = "treasurer@robotics"


class _ReadBarrierStore:
    """Holds every reader at a barrier until all parties have read."""

    def __init__(self, inner, parties: int):
        self._inner = inner
        self._barrier = Barrier(parties, timeout=10)

    def get(self, request_id):
        request = self._inner.get(request_id)
        self._barrier.wait()
        return request

    def compare_and_swap_status(self, *args):
        return self._inner.compare_and_swap_status(*args)

    def add(self, request):
        return self._inner.add(request)


def _race(store, role_resolver, clock, request_id, attempts):
    """Run (desired, identity) attempts in parallel; return outcomes in order."""
    controller = RequestLifecycleController(
        _ReadBarrierStore(store, len(attempts)), role_resolver, clock,
    )

    def attempt(desired, identity):
        try:
            return controller.attempt_transition(request_id, desired, "club", identity)
        except ConflictRetryError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=len(attempts)) as pool:
        futures = [pool.submit(attempt, desired, identity) for desired, identity in attempts]
        return [f.result(timeout=30) for f in futures]


@pytest.fixture
def two_officers(role_resolver) -> StaticRoleResolver:
    role_resolver.register_club_officer(SECOND_OFFICER, CLUB_ID)
    return role_resolver


class TestCollectVersusReturn:

    def _assert_single_winner(self, outcomes, final_status, history):
        conflicts = [o for o in outcomes if isinstance(o, ConflictRetryError)]
        winners = [o for o in outcomes if not isinstance(o, ConflictRetryError)]

        assert len(winners) == 1
        assert len(conflicts) == 1
        assert conflicts[0].expected_status is S.CLUB_APPROVED
        assert final_status is winners[0].status
        assert [t.to_status for t in history] == [winners[0].status]

    def test_in_memory_store(self, memory_store, two_officers, deterministic_clock):
        request = memory_store.add(build_request(S.CLUB_APPROVED))

        outcomes = _race(
            memory_store, two_officers, deterministic_clock, request.request_id,
            [(S.COLLECTED, CLUB_OFFICER), (S.RETURNED, SECOND_OFFICER)],
        )

        self._assert_single_winner(
            outcomes,
            memory_store.get(request.request_id).status,
            memory_store.transitions(request.request_id),
        )

    def test_sql_store(self, sql_store, session, two_officers, deterministic_clock):
        request = sql_store.add(build_request(S.CLUB_APPROVED))

        outcomes = _race(
            sql_store, two_officers, deterministic_clock, request.request_id,
            [(S.COLLECTED, CLUB_OFFICER), (S.RETURNED, SECOND_OFFICER)],
        )

        self._assert_single_winner(
            outcomes,
            sql_store.get(request.request_id).status,
            RequestSelector(session).transition_history(request.request_id),
        )


class TestManyRacers:

    def test_only_one_of_many_same_target_commits(
        self, memory_store, two_officers, deterministic_clock,
    ):
        request = memory_store.add(build_request(S.PROCESSING))

        outcomes = _race(
            memory_store, two_officers, deterministic_clock, request.request_id,
            [(S.CLUB_APPROVED, CLUB_OFFICER)] * 4 + [(S.CLUB_REJECTED, SECOND_OFFICER)] * 4,
        )

        winners = [o for o in outcomes if not isinstance(o, ConflictRetryError)]
        assert len(winners) == 1
        assert len(memory_store.transitions(request.request_id)) == 1
