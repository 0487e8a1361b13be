"""Elbow routing for dependency arrows.

An arrow runs from the end of the predecessor's bar to the start of the
successor's bar using only horizontal and vertical segments, and always
arrives moving rightward so the arrowhead orientation never changes.

Two shapes exist:

- ``ClearRoute``: there is room for two elbows between the bars. Right,
  down/up to the successor row, right into the bar.
- ``DetourRoute``: the predecessor ends too late. The arrow steps out to
  the gap just below (or above) the predecessor row, runs back left to
  just before the successor, then drops into the successor row.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum

from .config import DETOUR_OFFSET, ELBOW
from .logger import get_logger
from .models import Task
from .rows import Row
from .svg import fmt_num
from .timeline import date_to_x

Point = tuple[float, float]


class RouteKind(Enum):
    """Arrow path variants."""

    CLEAR = "clear"
    DETOUR = "detour"


@dataclass(frozen=True)
class ArrowGeometry:
    """Screen-space endpoints of one dependency arrow."""

    from_x: float
    from_y: float
    to_x: float
    to_y: float
    pred_top: float  # y of the predecessor row's top edge
    row_height: float

    @property
    def successor_below(self) -> bool:
        return self.from_y < self.to_y


@dataclass(frozen=True)
class ClearRoute:
    """Three-segment path: right, vertical, right."""

    geometry: ArrowGeometry
    elbow: float = ELBOW

    @property
    def kind(self) -> RouteKind:
        return RouteKind.CLEAR

    def points(self) -> list[Point]:
        g = self.geometry
        turn_x = g.from_x + self.elbow
        return [(g.from_x, g.from_y), (turn_x, g.from_y), (turn_x, g.to_y), (g.to_x, g.to_y)]

    def path_d(self) -> str:
        g = self.geometry
        return (
            f"M {fmt_num(g.from_x)} {fmt_num(g.from_y)} "
            f"H {fmt_num(g.from_x + self.elbow)} V {fmt_num(g.to_y)} H {fmt_num(g.to_x)}"
        )


@dataclass(frozen=True)
class DetourRoute:
    """Five-segment path around the predecessor row."""

    geometry: ArrowGeometry
    elbow: float = ELBOW
    offset: float = DETOUR_OFFSET

    @property
    def kind(self) -> RouteKind:
        return RouteKind.DETOUR

    @property
    def detour_y(self) -> float:
        g = self.geometry
        if g.successor_below:
            return g.pred_top + g.row_height + self.offset
        return g.pred_top - self.offset

    @property
    def approach_x(self) -> float:
        return max(self.elbow, self.geometry.to_x - self.elbow)

    def points(self) -> list[Point]:
        g = self.geometry
        turn_x = g.from_x + self.elbow
        return [
            (g.from_x, g.from_y),
            (turn_x, g.from_y),
            (turn_x, self.detour_y),
            (self.approach_x, self.detour_y),
            (self.approach_x, g.to_y),
            (g.to_x, g.to_y),
        ]

    def path_d(self) -> str:
        g = self.geometry
        return (
            f"M {fmt_num(g.from_x)} {fmt_num(g.from_y)} "
            f"H {fmt_num(g.from_x + self.elbow)} V {fmt_num(self.detour_y)} "
            f"H {fmt_num(self.approach_x)} V {fmt_num(g.to_y)} H {fmt_num(g.to_x)}"
        )


Route = ClearRoute | DetourRoute


@dataclass(frozen=True)
class RoutedArrow:
    """A dependency edge together with its chosen route."""

    predecessor_id: str
    successor_id: str
    route: Route


def choose_route(geometry: ArrowGeometry, elbow: float = ELBOW) -> Route:
    """Pick the clear route when both elbows fit between the bars."""
    if geometry.from_x + 2 * elbow <= geometry.to_x:
        return ClearRoute(geometry, elbow)
    return DetourRoute(geometry, elbow)


def arrow_geometry(
    predecessor: Row,
    successor: Row,
    project_start: date,
    day_width: float,
    row_height: float,
) -> ArrowGeometry | None:
    """Endpoints for an arrow between two laid-out task rows.

    Returns None when either row is not placed (hidden) or lacks the date
    the arrow is anchored to.
    """
    if predecessor.y is None or successor.y is None:
        return None
    pred_end = predecessor.source.end
    succ_start = successor.source.start
    if pred_end is None or succ_start is None:
        return None

    half = row_height / 2
    return ArrowGeometry(
        from_x=date_to_x(pred_end, project_start, day_width) + day_width,
        from_y=predecessor.y + half,
        to_x=date_to_x(succ_start, project_start, day_width),
        to_y=successor.y + half,
        pred_top=predecessor.y,
        row_height=row_height,
    )


def route(
    predecessor: Row,
    successor: Row,
    project_start: date,
    day_width: float,
    row_height: float,
) -> Route | None:
    """Route the arrow from ``predecessor`` to ``successor``.

    Returns None when either row is currently hidden or an anchor date is
    missing; nothing is deferred, the next render pass decides afresh.
    """
    if not (predecessor.visible and successor.visible):
        return None
    geometry = arrow_geometry(predecessor, successor, project_start, day_width, row_height)
    if geometry is None:
        return None
    return choose_route(geometry)


def route_dependencies(
    rows: Sequence[Row],
    task_index: Mapping[str, Row],
    project_start: date,
    day_width: float,
    row_height: float,
) -> Iterator[RoutedArrow]:
    """Route every drawable dependency arrow, successor rows in display order.

    Unknown predecessor ids and edges touching hidden rows are skipped.
    """
    logger = get_logger()
    for row in rows:
        if not row.is_task or not row.visible:
            continue
        task = row.source
        assert isinstance(task, Task)
        for dep_id in task.depends_on:
            pred_row = task_index.get(dep_id)
            if pred_row is None:
                logger.checks(f"Skipping arrow {dep_id} -> {task.id}: unknown task id")
                continue
            routed = route(pred_row, row, project_start, day_width, row_height)
            if routed is None:
                logger.debug(f"Skipping arrow {dep_id} -> {task.id}: endpoint hidden or undated")
                continue
            yield RoutedArrow(dep_id, task.id, routed)
