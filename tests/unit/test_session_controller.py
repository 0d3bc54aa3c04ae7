"""Unit tests for SessionController - cursor, decisions, cooldown, reset."""

from __future__ import annotations

import asyncio

import pytest

from src.models.catalog import Decision
from src.models.session import SessionPhase, SessionView
from src.pipeline.session_controller import SessionController
from src.services.enrichment_service import EnrichmentService
from src.utils.concurrency import RateLimitGate
from src.utils.errors import SessionError
from tests.conftest import FakeClock, FakeMetadataProvider, make_entries


def _controller(
    provider: FakeMetadataProvider,
    clock: FakeClock,
    *,
    window: int = 3,
    cooldown: float = 1.0,
) -> SessionController:
    gate = RateLimitGate(min_interval=0.0)
    return SessionController(
        lambda: EnrichmentService(provider, gate),
        prefetch_window=window,
        decision_cooldown=cooldown,
        clock=clock,
    )


@pytest.fixture()
def provider() -> FakeMetadataProvider:
    return FakeMetadataProvider()


@pytest.fixture()
def controller(provider: FakeMetadataProvider, fake_clock: FakeClock) -> SessionController:
    return _controller(provider, fake_clock)


# ======================================================================
# Loading
# ======================================================================


class TestLoadList:
    @pytest.mark.asyncio
    async def test_initial_state_is_empty(self, controller: SessionController) -> None:
        view = controller.view()
        assert view.phase == SessionPhase.EMPTY
        assert view.total == 0
        assert view.progress_label == "0 / 0"

    @pytest.mark.asyncio
    async def test_load_starts_resolving_first_entry(
        self, controller: SessionController, provider: FakeMetadataProvider
    ) -> None:
        view = await controller.load_list(make_entries("1", "2", "3", "4"))

        assert view.phase == SessionPhase.RESOLVING
        assert view.loading is True
        assert view.entry is not None and view.entry.id == "1"

        view = await controller.wait_for_current()

        assert view.phase == SessionPhase.READY
        assert view.current is not None and view.current.id == 1
        assert view.progress_label == "1 / 4"

    @pytest.mark.asyncio
    async def test_load_warms_window(
        self, controller: SessionController, provider: FakeMetadataProvider
    ) -> None:
        await controller.load_list(make_entries("1", "2", "3", "4", "5"))
        await controller.enrichment.wait_idle()

        assert dict(provider.calls) == {1: 1, 2: 1, 3: 1, 4: 1}
        assert not controller.enrichment.is_cached("5")

    @pytest.mark.asyncio
    async def test_empty_list(self, controller: SessionController) -> None:
        view = await controller.load_list([])

        assert view.phase == SessionPhase.EMPTY
        assert await controller.decide(Decision.LIKED) is False

    @pytest.mark.asyncio
    async def test_using_default_list_flag(self, controller: SessionController) -> None:
        view = await controller.load_list(make_entries("1"), using_default_list=True)
        assert view.using_default_list is True


# ======================================================================
# Decisions
# ======================================================================


class TestDecide:
    @pytest.mark.asyncio
    async def test_like_then_advance(
        self, controller: SessionController, fake_clock: FakeClock
    ) -> None:
        await controller.load_list(make_entries("1", "2", "3", "4"))
        await controller.wait_for_current()

        accepted = await controller.decide(Decision.LIKED)

        assert accepted is True
        assert controller.cursor == 1
        assert [m.id for m in controller.liked] == [1]
        assert controller.decisions == {"1": Decision.LIKED}

    @pytest.mark.asyncio
    async def test_dislike_is_recorded_but_not_liked(
        self, controller: SessionController
    ) -> None:
        await controller.load_list(make_entries("1", "2"))
        await controller.wait_for_current()

        assert await controller.decide("disliked") is True

        assert controller.liked == []
        assert controller.decisions == {"1": Decision.DISLIKED}

    @pytest.mark.asyncio
    async def test_unknown_decision_raises_session_error(
        self, controller: SessionController
    ) -> None:
        await controller.load_list(make_entries("1", "2"))
        await controller.wait_for_current()

        with pytest.raises(SessionError):
            await controller.decide("maybe")

        assert controller.cursor == 0
        assert controller.decisions == {}

    @pytest.mark.asyncio
    async def test_second_decision_within_cooldown_is_ignored(
        self, controller: SessionController, fake_clock: FakeClock
    ) -> None:
        await controller.load_list(make_entries("1", "2", "3", "4"))
        await controller.enrichment.wait_idle()
        await controller.wait_for_current()

        first = await controller.decide(Decision.LIKED)
        second = await controller.decide(Decision.LIKED)

        assert first is True
        assert second is False
        assert controller.cursor == 1
        assert len(controller.decisions) == 1
        assert controller.view().cooldown_active is True

    @pytest.mark.asyncio
    async def test_decision_accepted_after_cooldown(
        self, controller: SessionController, fake_clock: FakeClock
    ) -> None:
        await controller.load_list(make_entries("1", "2", "3"))
        await controller.wait_for_current()
        await controller.decide(Decision.LIKED)

        fake_clock.advance(1.0)
        await controller.wait_for_current()

        assert controller.cooldown_active is False
        assert await controller.decide(Decision.DISLIKED) is True
        assert controller.cursor == 2

    @pytest.mark.asyncio
    async def test_decision_ignored_while_resolving(self, fake_clock: FakeClock) -> None:
        provider = FakeMetadataProvider(block_ids={1})
        controller = _controller(provider, fake_clock)
        await controller.load_list(make_entries("1", "2"))

        assert await controller.decide(Decision.LIKED) is False
        assert controller.cursor == 0

        provider.release(1)
        await controller.wait_for_current()
        assert await controller.decide(Decision.LIKED) is True
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_duplicate_id_keeps_first_verdict(
        self, controller: SessionController, fake_clock: FakeClock
    ) -> None:
        await controller.load_list(make_entries("1", "1", "2"))
        await controller.wait_for_current()
        await controller.decide(Decision.LIKED)
        fake_clock.advance(1.0)
        await controller.wait_for_current()

        await controller.decide(Decision.DISLIKED)

        assert controller.cursor == 2
        assert controller.decisions == {"1": Decision.LIKED}

    @pytest.mark.asyncio
    async def test_exhausted_after_last_entry(
        self, controller: SessionController
    ) -> None:
        await controller.load_list(make_entries("1"))
        await controller.wait_for_current()

        await controller.decide(Decision.LIKED)

        assert controller.phase == SessionPhase.EXHAUSTED
        assert controller.current_entry is None
        assert controller.view().progress_label == "1 / 1"
        assert [m.id for m in controller.liked] == [1]

    @pytest.mark.asyncio
    async def test_end_to_end_like_advances_and_warms(
        self, provider: FakeMetadataProvider, fake_clock: FakeClock
    ) -> None:
        controller = _controller(provider, fake_clock, window=3)
        await controller.load_list(make_entries("1", "2", "3", "4"))
        await controller.wait_for_current()

        await controller.decide(Decision.LIKED)

        assert controller.cursor == 1
        assert [m.id for m in controller.liked] == [1]
        assert controller.current_entry is not None and controller.current_entry.id == "2"
        enrichment = controller.enrichment
        assert enrichment.is_cached("2") or enrichment.is_in_flight("2")
        assert enrichment.is_cached("3") or enrichment.is_in_flight("3")

        await enrichment.wait_idle()
        view = await controller.wait_for_current()

        assert view.phase == SessionPhase.READY
        assert view.current is not None and view.current.id == 2
        # Foreground and prefetch shared every call.
        assert dict(provider.calls) == {1: 1, 2: 1, 3: 1, 4: 1}


# ======================================================================
# Failures
# ======================================================================


class TestFailures:
    @pytest.mark.asyncio
    async def test_failed_foreground_becomes_unavailable(self, fake_clock: FakeClock) -> None:
        provider = FakeMetadataProvider(fail_ids={1})
        controller = _controller(provider, fake_clock)
        await controller.load_list(make_entries("1", "2"))

        view = await controller.wait_for_current()

        assert view.phase == SessionPhase.UNAVAILABLE
        assert view.current is None
        assert await controller.decide(Decision.LIKED) is False

    @pytest.mark.asyncio
    async def test_retry_current_after_failure(self, fake_clock: FakeClock) -> None:
        provider = FakeMetadataProvider(fail_ids={1})
        controller = _controller(provider, fake_clock)
        await controller.load_list(make_entries("1", "2"))
        await controller.wait_for_current()

        provider.fail_ids.clear()
        assert await controller.retry_current() is True
        view = await controller.wait_for_current()

        assert view.phase == SessionPhase.READY
        assert provider.calls[1] == 2

    @pytest.mark.asyncio
    async def test_retry_is_noop_when_not_unavailable(
        self, controller: SessionController
    ) -> None:
        await controller.load_list(make_entries("1"))
        await controller.wait_for_current()

        assert await controller.retry_current() is False

    @pytest.mark.asyncio
    async def test_non_numeric_current_entry(
        self, controller: SessionController, provider: FakeMetadataProvider
    ) -> None:
        view = await controller.load_list(make_entries("abc", "2"))

        assert view.phase == SessionPhase.UNAVAILABLE
        await controller.enrichment.wait_idle()
        assert dict(provider.calls) == {2: 1}


# ======================================================================
# Reset and stale results
# ======================================================================


class TestReset:
    @pytest.mark.asyncio
    async def test_new_list_discards_all_state(
        self, controller: SessionController, fake_clock: FakeClock
    ) -> None:
        await controller.load_list(make_entries("1", "2", "3", "4"))
        await controller.wait_for_current()
        await controller.decide(Decision.LIKED)
        old_enrichment = controller.enrichment

        view = await controller.load_list(make_entries("30", "199"))

        assert controller.enrichment is not old_enrichment
        assert controller.cursor == 0
        assert controller.decisions == {}
        assert controller.liked == []
        assert view.decisions_made == 0
        for old_id in ("1", "2", "3", "4"):
            assert not controller.enrichment.is_cached(old_id)
            assert not controller.enrichment.is_in_flight(old_id)
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_reset_clears_cooldown(
        self, controller: SessionController
    ) -> None:
        await controller.load_list(make_entries("1", "2"))
        await controller.wait_for_current()
        await controller.decide(Decision.LIKED)

        await controller.load_list(make_entries("5", "6"))
        await controller.wait_for_current()

        assert await controller.decide(Decision.LIKED) is True

    @pytest.mark.asyncio
    async def test_stale_result_from_previous_list_is_not_presented(
        self, fake_clock: FakeClock
    ) -> None:
        provider = FakeMetadataProvider(block_ids={1})
        controller = _controller(provider, fake_clock)
        await controller.load_list(make_entries("1", "2"))

        await controller.load_list(make_entries("30"))
        view = await controller.wait_for_current()
        provider.release(1)
        await asyncio.sleep(0)

        assert view.current is not None and view.current.id == 30
        assert controller.current_metadata is not None
        assert controller.current_metadata.id == 30
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_decision_during_reset_is_not_applied_to_old_list(
        self, fake_clock: FakeClock
    ) -> None:
        provider = FakeMetadataProvider(block_ids={4})
        controller = _controller(provider, fake_clock)
        await controller.load_list(make_entries("1", "2", "3", "4", "5"))
        await controller.wait_for_current()
        old_enrichment = controller.enrichment

        reset = asyncio.create_task(controller.load_list(make_entries("30", "31")))
        await asyncio.sleep(0)
        accepted = await controller.decide(Decision.LIKED)
        await reset
        await controller.wait_for_current()
        await controller.enrichment.wait_idle()

        assert accepted is False
        assert controller.cursor == 0
        assert controller.liked == []
        assert controller.decisions == {}
        assert provider.calls[5] == 0
        assert provider.calls[4] <= 1
        assert provider.calls[30] == 1
        assert provider.calls[31] == 1
        assert old_enrichment.closed
        assert old_enrichment.in_flight_count == 0
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_old_fetch_tasks_end_cleanly_after_reset(self, fake_clock: FakeClock) -> None:
        provider = FakeMetadataProvider(block_ids={2, 3})
        controller = _controller(provider, fake_clock)
        await controller.load_list(make_entries("1", "2", "3"))
        await controller.wait_for_current()
        old_enrichment = controller.enrichment
        old_tasks = list(old_enrichment._tasks)

        await controller.load_list(make_entries("30"))
        provider.release(2)
        provider.release(3)
        await controller.wait_for_current()

        assert old_tasks
        for task in old_tasks:
            assert task.done()
            assert task.cancelled() or task.exception() is None
        assert old_enrichment.in_flight_count == 0
        with pytest.raises(SessionError):
            old_enrichment.request("5")
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_overlapping_loads_keep_the_latest_list(
        self, controller: SessionController
    ) -> None:
        await controller.load_list(make_entries("1", "2"))

        await asyncio.gather(
            controller.load_list(make_entries("30")),
            controller.load_list(make_entries("199")),
        )
        view = await controller.wait_for_current()

        assert view.total == 1
        assert view.current is not None and view.current.id == 199
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_views_are_broadcast(self, controller: SessionController) -> None:
        received: list[SessionView] = []
        controller.broadcaster.register_listener(received.append)

        await controller.load_list(make_entries("1", "2"))
        await controller.wait_for_current()

        phases = [v.phase for v in received]
        assert phases[0] == SessionPhase.RESOLVING
        assert phases[-1] == SessionPhase.READY
