"""Tests for height-based pagination and the debounced engine."""

import math

import pytest

from pageflow.geometry import PageGeometry
from pageflow.model import PageBreak, PaginationState
from pageflow.pagination import PaginationEngine, compute_pagination, normalize_height
from pageflow.scheduler import ManualScheduler

P = 864  # Letter content height at 96 DPI


class FakeProvider:
    """Content height provider with a settable height."""

    def __init__(self, height=0.0):
        self.height = height
        self.callbacks = []
        self.measurements = 0

    def content_height(self):
        self.measurements += 1
        if isinstance(self.height, Exception):
            raise self.height
        return self.height

    def subscribe(self, callback):
        self.callbacks.append(callback)
        return lambda: self.callbacks.remove(callback)

    def notify(self):
        for callback in list(self.callbacks):
            callback()


@pytest.fixture
def geometry():
    return PageGeometry.letter()


def make_engine(geometry, height=0.0):
    provider = FakeProvider(height)
    scheduler = ManualScheduler()
    engine = PaginationEngine(geometry, provider, scheduler)
    return engine, provider, scheduler


def test_empty_content_is_one_page(geometry):
    state = compute_pagination(0, geometry)
    assert state.total_pages == 1
    assert state.page_breaks == ()


def test_partial_first_page(geometry):
    state = compute_pagination(100, geometry)
    assert state.total_pages == 1
    assert state.page_breaks == ()


def test_exact_multiple_has_no_trailing_break(geometry):
    """Content exactly filling three pages breaks only between them."""
    state = compute_pagination(3 * P, geometry)
    assert state.total_pages == 3
    assert state.page_breaks == (PageBreak(1, P), PageBreak(2, 2 * P))


def test_one_pixel_over_adds_page(geometry):
    state = compute_pagination(3 * P + 1, geometry)
    assert state.total_pages == 4
    assert state.page_breaks == (PageBreak(1, P), PageBreak(2, 2 * P), PageBreak(3, 3 * P))


def test_exactly_one_page(geometry):
    state = compute_pagination(P, geometry)
    assert state.total_pages == 1
    assert state.page_breaks == ()


@pytest.mark.parametrize("height", [1, 500, 863, 864, 865, 1728, 5000, 86400, 86401.5])
def test_page_count_and_breaks_follow_formula(geometry, height):
    state = compute_pagination(height, geometry)
    assert state.total_pages == max(1, math.ceil(height / P))
    expected_breaks = sum(1 for k in range(1, 200) if k * P < height)
    assert len(state.page_breaks) == expected_breaks
    for i, page_break in enumerate(state.page_breaks, 1):
        assert page_break.page_number == i
        assert page_break.height_from_top == i * P
        assert page_break.height_from_top < height


@pytest.mark.parametrize("raw", [-10, float("nan"), float("inf"), None, "tall", object()])
def test_unmeasurable_height_is_zero(raw):
    assert normalize_height(raw) == 0.0


def test_numeric_string_height_accepted():
    assert normalize_height("1200.5") == 1200.5


def test_negative_height_paginates_as_empty(geometry):
    state = compute_pagination(-500, geometry)
    assert state == PaginationState(page_breaks=(), total_pages=1, content_height=0.0)


def test_start_computes_immediately(geometry):
    engine, provider, scheduler = make_engine(geometry, 2 * P + 10)
    state = engine.start()
    assert state.total_pages == 3
    assert engine.total_pages == 3
    assert engine.recalculation_count == 1
    assert scheduler.pending == 0


def test_initial_state_before_start(geometry):
    engine, _, _ = make_engine(geometry, 5000)
    assert engine.state == PaginationState.initial()
    assert engine.total_pages == 1
    assert engine.page_breaks == ()


def test_trigger_waits_for_debounce_window(geometry):
    engine, provider, scheduler = make_engine(geometry)
    engine.start()

    provider.height = 2000
    engine.on_content_changed()
    scheduler.advance(0.1)
    assert engine.total_pages == 1
    assert engine.pending

    scheduler.advance(0.1)
    assert engine.total_pages == 3
    assert not engine.pending


def test_two_triggers_within_window_recompute_once(geometry):
    """The second trigger restarts the window; its end uses the latest height."""
    engine, provider, scheduler = make_engine(geometry)
    engine.start()
    assert engine.recalculation_count == 1

    provider.height = 2000
    engine.on_content_changed()
    scheduler.advance(0.1)

    provider.height = 3000
    engine.on_size_changed()
    scheduler.advance(0.1)
    assert engine.recalculation_count == 1

    provider.height = 2600
    scheduler.advance(0.2)
    assert engine.recalculation_count == 2
    assert engine.state.content_height == 2600
    assert engine.total_pages == 4


def test_provider_notifications_use_size_channel(geometry):
    engine, provider, scheduler = make_engine(geometry)
    engine.start()

    provider.height = P * 2 + 1
    provider.notify()
    assert engine.total_pages == 1
    scheduler.advance(0.2)
    assert engine.total_pages == 3


def test_shrinking_content_removes_stale_breaks(geometry):
    engine, provider, scheduler = make_engine(geometry, 5 * P + 1)
    engine.start()
    assert len(engine.page_breaks) == 5

    provider.height = P + 1
    engine.on_size_changed()
    scheduler.advance(0.2)
    assert engine.page_breaks == (PageBreak(1, P),)
    assert engine.total_pages == 2

    provider.height = 0
    engine.on_content_changed()
    scheduler.advance(0.2)
    assert engine.page_breaks == ()
    assert engine.total_pages == 1


def test_listeners_receive_new_state(geometry):
    engine, provider, scheduler = make_engine(geometry, 100)
    received = []
    unsubscribe = engine.subscribe(received.append)
    engine.start()
    assert received == [engine.state]

    unsubscribe()
    provider.height = 5000
    engine.recalculate_now()
    assert len(received) == 1


def test_failing_listener_does_not_starve_others(geometry, caplog):
    engine, provider, scheduler = make_engine(geometry, 100)
    received = []

    def broken(state):
        raise RuntimeError("listener detached")

    engine.subscribe(broken)
    engine.subscribe(received.append)
    engine.start()

    provider.height = 2 * P + 1
    engine.on_content_changed()
    scheduler.advance(0.2)

    assert [state.total_pages for state in received] == [1, 3]
    assert engine.total_pages == 3
    assert "listener detached" in caplog.text


def test_recalculate_now_supersedes_pending(geometry):
    engine, provider, scheduler = make_engine(geometry)
    engine.start()
    engine.on_content_changed()
    provider.height = 1000
    engine.recalculate_now()
    assert engine.recalculation_count == 2
    assert scheduler.advance(1.0) == 0
    assert engine.recalculation_count == 2


def test_close_cancels_pending_recomputation(geometry):
    engine, provider, scheduler = make_engine(geometry)
    engine.start()
    engine.on_content_changed()
    engine.close()

    provider.height = 5000
    assert scheduler.advance(1.0) == 0
    assert engine.total_pages == 1
    assert provider.callbacks == []


def test_triggers_after_close_are_ignored(geometry):
    engine, provider, scheduler = make_engine(geometry)
    engine.start()
    engine.close()
    engine.on_content_changed()
    engine.on_size_changed()
    assert scheduler.pending == 0
    assert engine.recalculate_now() == engine.state


def test_start_after_close_raises(geometry):
    engine, _, _ = make_engine(geometry)
    engine.close()
    with pytest.raises(RuntimeError):
        engine.start()


def test_failing_provider_yields_one_page(geometry):
    engine, provider, _ = make_engine(geometry, RuntimeError("detached"))
    state = engine.start()
    assert state.total_pages == 1
    assert state.page_breaks == ()


def test_state_replaced_not_mutated(geometry):
    engine, provider, _ = make_engine(geometry, 2 * P + 1)
    first = engine.start()
    provider.height = 10
    second = engine.recalculate_now()
    assert first is not second
    assert first.total_pages == 3
    assert second.total_pages == 1


def test_custom_debounce_interval(geometry):
    provider = FakeProvider()
    scheduler = ManualScheduler()
    engine = PaginationEngine(geometry, provider, scheduler, debounce_ms=500)
    engine.start()
    provider.height = 2000
    engine.on_content_changed()
    scheduler.advance(0.3)
    assert engine.total_pages == 1
    scheduler.advance(0.3)
    assert engine.total_pages == 3
