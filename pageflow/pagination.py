"""Height-based pagination of a continuous content flow.

The engine never looks at the content itself. It takes one scalar height
measurement, cuts it into page-sized slices of the geometry's content height
and reports where each page ends. Measurements are coalesced through a
debounce window so bursts of edits or resizes cause a single recomputation.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, List, Optional, Protocol

from .constants import PageConstants
from .geometry import PageGeometry
from .model import PageBreak, PaginationState
from .scheduler import Debouncer, Scheduler

logger = logging.getLogger(__name__)

PaginationListener = Callable[[PaginationState], Any]


class ContentHeightProvider(Protocol):
    """Source of the content height measurement."""

    def content_height(self) -> Optional[float]: ...

    def subscribe(self, callback: Callable[[], Any]) -> Callable[[], None]: ...


def normalize_height(height: Any) -> float:
    """Coerce a raw measurement to a usable height.

    Negative, non-finite, missing or non-numeric values become 0.
    """
    try:
        value = float(height)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def compute_pagination(height: Any, geometry: PageGeometry) -> PaginationState:
    """Split a content height into pages.

    A break is emitted at every multiple of the content height that lies
    strictly inside the content, so content that exactly fills its last page
    gets no trailing break.

    Args:
        height: Measured content height in device pixels.
        geometry: Page geometry supplying the content height per page.

    Returns:
        The new pagination state.
    """
    content_height = normalize_height(height)
    page_height = geometry.content_height_px

    breaks: List[PageBreak] = []
    page_number = 1
    while page_number * page_height < content_height:
        breaks.append(PageBreak(page_number, page_number * page_height))
        page_number += 1

    total_pages = max(1, math.ceil(content_height / page_height))
    return PaginationState(
        page_breaks=tuple(breaks),
        total_pages=total_pages,
        content_height=content_height,
    )


class PaginationEngine:
    """Keeps a PaginationState in sync with a content height provider.

    Content edits and size changes both go through the same debounce window.
    Listeners are called with each new state after it replaces the old one.
    """

    def __init__(self, geometry: PageGeometry, provider: ContentHeightProvider,
                 scheduler: Scheduler, debounce_ms: float = PageConstants.DEBOUNCE_MS):
        """Initialize the engine.

        Args:
            geometry: Page geometry used for every recomputation.
            provider: Source of the content height and change notifications.
            scheduler: Timer source for the debounce window.
            debounce_ms: Length of the debounce window in milliseconds.
        """
        self.geometry = geometry
        self._provider = provider
        self._debouncer = Debouncer(scheduler, debounce_ms / 1000.0, self._on_timer)
        self._state = PaginationState.initial()
        self._listeners: List[PaginationListener] = []
        self._unsubscribe_provider: Optional[Callable[[], None]] = None
        self._closed = False
        self.recalculation_count = 0

    @property
    def state(self) -> PaginationState:
        return self._state

    @property
    def page_breaks(self):
        return self._state.page_breaks

    @property
    def total_pages(self) -> int:
        return self._state.total_pages

    @property
    def pending(self) -> bool:
        """Whether a recomputation is waiting for the debounce window."""
        return self._debouncer.pending

    def start(self) -> PaginationState:
        """Compute the initial state and start listening to the provider."""
        if self._closed:
            raise RuntimeError("PaginationEngine has been closed")
        if self._unsubscribe_provider is None:
            self._unsubscribe_provider = self._provider.subscribe(self.on_size_changed)
        return self.recalculate_now()

    def subscribe(self, listener: PaginationListener) -> Callable[[], None]:
        """Register a listener for new states.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def on_content_changed(self) -> None:
        """Content was edited; recompute after the debounce window."""
        self._schedule()

    def on_size_changed(self) -> None:
        """Rendered size changed without an edit (resize, reflow)."""
        self._schedule()

    def recalculate_now(self) -> PaginationState:
        """Recompute immediately, superseding any pending recomputation."""
        self._debouncer.cancel()
        if self._closed:
            return self._state
        return self._recalculate()

    def close(self) -> None:
        """Stop listening and cancel any pending recomputation."""
        self._closed = True
        self._debouncer.cancel()
        if self._unsubscribe_provider is not None:
            self._unsubscribe_provider()
            self._unsubscribe_provider = None
        self._listeners.clear()

    def _schedule(self) -> None:
        if self._closed:
            return
        self._debouncer.trigger()

    def _on_timer(self) -> None:
        if self._closed:
            return
        self._recalculate()

    def _measure(self) -> float:
        try:
            raw = self._provider.content_height()
        except Exception as e:
            # Justification: pagination must always produce a displayable state
            logger.warning(f"Content height could not be measured, using 0: {e}")
            return 0.0
        return normalize_height(raw)

    def _recalculate(self) -> PaginationState:
        height = self._measure()
        state = compute_pagination(height, self.geometry)
        self._state = state
        self.recalculation_count += 1
        logger.debug(
            f"Paginated {height:.1f}px into {state.total_pages} page(s), "
            f"{len(state.page_breaks)} break(s)"
        )
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                # Justification: remaining listeners still receive the new state
                logger.exception(f"Pagination listener {listener!r} failed")
        return state
