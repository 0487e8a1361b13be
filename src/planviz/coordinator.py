"""Scroll synchronization and debounced re-layout.

The diagram has three scrollable regions: the label list on the left, the
timeline body and the timeline header. Vertical scrolling of the label
list and the body mirror each other; horizontal scrolling of the body is
mirrored onto the header, which has no scroll source of its own.

Everything here runs on a single event thread. The resize debouncer does
not start timers; the host loop calls ``poll()``.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from .config import RESIZE_DEBOUNCE_MS
from .logger import get_logger
from .renderer import GanttDiagram, RenderedDiagram

ScrollListener = Callable[["ScrollRegion"], None]


def _no_listeners() -> list[ScrollListener]:
    return []


@dataclass
class ScrollRegion:
    """A scrollable viewport onto some content.

    Changing the offset notifies listeners, the same way a browser fires a
    scroll event for both user and programmatic scrolling.
    """

    name: str
    viewport_height: float = 0.0
    viewport_width: float = 0.0
    content_height: float = 0.0
    content_width: float = 0.0
    scroll_top: float = 0.0
    scroll_left: float = 0.0
    listeners: list[ScrollListener] = field(default_factory=_no_listeners)

    @property
    def max_scroll_top(self) -> float:
        return max(self.content_height - self.viewport_height, 0.0)

    @property
    def max_scroll_left(self) -> float:
        return max(self.content_width - self.viewport_width, 0.0)

    def scroll_to(self, *, top: float | None = None, left: float | None = None) -> None:
        """Move the viewport, clamped to the content, and notify on change."""
        new_top = self.scroll_top if top is None else min(max(top, 0.0), self.max_scroll_top)
        new_left = self.scroll_left if left is None else min(max(left, 0.0), self.max_scroll_left)
        if new_top == self.scroll_top and new_left == self.scroll_left:
            return
        self.scroll_top = new_top
        self.scroll_left = new_left
        for listener in list(self.listeners):
            listener(self)

    def resize_content(self, height: float, width: float) -> None:
        """Set new content extents and re-clamp the current offsets."""
        self.content_height = height
        self.content_width = width
        self.scroll_to(top=self.scroll_top, left=self.scroll_left)


class ScrollCoordinator:
    """Keeps the label list, timeline body and timeline header aligned."""

    def __init__(self, left_rows: ScrollRegion, body: ScrollRegion, header: ScrollRegion):
        self.left_rows = left_rows
        self.body = body
        self.header = header
        self._syncing = False
        left_rows.listeners.append(self._on_left_scroll)
        body.listeners.append(self._on_body_scroll)

    @property
    def syncing(self) -> bool:
        return self._syncing

    def _on_left_scroll(self, region: ScrollRegion) -> None:
        if self._syncing:
            return
        self._syncing = True
        try:
            self.body.scroll_to(top=region.scroll_top)
        finally:
            self._syncing = False

    def _on_body_scroll(self, region: ScrollRegion) -> None:
        if self._syncing:
            return
        self._syncing = True
        try:
            self.left_rows.scroll_to(top=region.scroll_top)
            self.header.scroll_to(left=region.scroll_left)
        finally:
            self._syncing = False

    def update_extents(self, content_height: float, content_width: float) -> None:
        """Apply a new diagram size to all three regions.

        The body is resized first so that any clamping it causes is
        mirrored onto the other two regions.
        """
        self.body.resize_content(content_height, content_width)
        self.left_rows.resize_content(content_height, self.left_rows.content_width)
        self.header.resize_content(self.header.content_height, content_width)


class ResizeDebouncer:
    """Collapses a burst of resize notifications into one callback.

    Each ``notify`` restarts the delay; the callback receives the most
    recent width once the delay elapses without another notification.
    """

    def __init__(
        self,
        callback: Callable[[float], None],
        delay_ms: float = RESIZE_DEBOUNCE_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._callback = callback
        self._delay = delay_ms / 1000.0
        self._clock = clock
        self._pending_width: float | None = None
        self._deadline: float | None = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def notify(self, width: float) -> None:
        """Record a resize to ``width`` and restart the delay."""
        self._pending_width = width
        self._deadline = self._clock() + self._delay

    def poll(self) -> bool:
        """Fire the callback if the delay has elapsed.

        Returns:
            True if the callback ran
        """
        if self._deadline is None or self._clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Fire immediately if a resize is pending."""
        if self._deadline is None or self._pending_width is None:
            return False
        width = self._pending_width
        self.cancel()
        self._callback(width)
        return True

    def cancel(self) -> None:
        """Drop any pending resize."""
        self._pending_width = None
        self._deadline = None


class DiagramSession:
    """Wires a diagram to its scroll regions and the resize debouncer.

    Mirrors the lifetime of one displayed diagram: every render (initial,
    collapse toggle, debounced resize) replaces ``current`` and re-applies
    the new extents to the scroll regions.
    """

    def __init__(
        self,
        diagram: GanttDiagram,
        width: float,
        *,
        viewport_height: float = 0.0,
        delay_ms: float = RESIZE_DEBOUNCE_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.diagram = diagram
        self.width = width
        self.left_rows = ScrollRegion("left-rows", viewport_height=viewport_height)
        self.body = ScrollRegion("timeline-body", viewport_height=viewport_height)
        self.header = ScrollRegion("timeline-header")
        self.scroll = ScrollCoordinator(self.left_rows, self.body, self.header)
        self.debouncer = ResizeDebouncer(self._on_resize, delay_ms=delay_ms, clock=clock)
        self.render_count = 0
        self.current: RenderedDiagram = self._render()

    def _render(self) -> RenderedDiagram:
        rendered = self.diagram.render(self.width)
        self.render_count += 1
        self.body.viewport_width = self.width
        self.header.viewport_width = self.width
        self.scroll.update_extents(rendered.body_height, rendered.width)
        self.current = rendered
        return rendered

    def _on_resize(self, width: float) -> None:
        get_logger().changes(f"Re-laying out for width {width:.0f}px")
        self.width = width
        self._render()

    def toggle_group(self, group_id: str) -> RenderedDiagram:
        """Collapse or expand a phase and re-render at the current width."""
        self.current = self.diagram.toggle_group(group_id, self.width)
        self.render_count += 1
        self.scroll.update_extents(self.current.body_height, self.current.width)
        return self.current

    def resize(self, width: float) -> None:
        """Report a viewport resize; the re-layout is debounced."""
        self.debouncer.notify(width)

    def poll(self) -> bool:
        """Run a pending debounced re-layout if it is due."""
        return self.debouncer.poll()
