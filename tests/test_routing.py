"""Tests for dependency arrow routing."""

from datetime import date

import pytest

from planviz.config import ROW_HEIGHT
from planviz.models import Schedule, Task
from planviz.routing import (
    ArrowGeometry,
    ClearRoute,
    DetourRoute,
    RouteKind,
    choose_route,
    route,
    route_dependencies,
)
from planviz.rows import Row, RowKind, build_task_index, flatten, layout_rows
from tests.conftest import group, make_schedule, task

START = date(2024, 1, 1)


def _geometry(from_x: float, from_y: float, to_x: float, to_y: float, pred_top: float) -> ArrowGeometry:
    return ArrowGeometry(from_x, from_y, to_x, to_y, pred_top=pred_top, row_height=ROW_HEIGHT)


def _task_row(task_id: str, start: date | None, end: date | None, y: float | None, *, visible: bool = True) -> Row:
    return Row(
        kind=RowKind.TASK,
        source=Task(id=task_id, name=task_id, start=start, end=end),
        index=0,
        group_id="phase-1",
        visible=visible,
        visible_index=None if y is None else int(y // ROW_HEIGHT),
        y=y,
    )


def _segments(points: list[tuple[float, float]]) -> list[tuple[tuple[float, float], tuple[float, float]]]:
    return list(zip(points, points[1:]))


class TestChooseRoute:
    """Test clear vs detour selection."""

    def test_clear_when_gap_fits_two_elbows(self) -> None:
        """from_x + 2 * elbow <= to_x uses the clear route."""
        assert choose_route(_geometry(100, 66, 120, 110, 44)).kind is RouteKind.CLEAR
        assert choose_route(_geometry(100, 66, 140, 110, 44)).kind is RouteKind.CLEAR

    def test_detour_when_gap_is_too_small(self) -> None:
        """One pixel short of two elbows detours."""
        assert choose_route(_geometry(100, 66, 119, 110, 44)).kind is RouteKind.DETOUR

    def test_detour_when_successor_starts_earlier(self) -> None:
        """Overlapping bars detour."""
        assert choose_route(_geometry(100, 66, 70, 110, 44)).kind is RouteKind.DETOUR


class TestClearRoute:
    """Test the three-segment path."""

    def test_path(self) -> None:
        """Right, down, right."""
        r = ClearRoute(_geometry(100, 66, 140, 110, 44))
        assert r.path_d() == "M 100 66 H 110 V 110 H 140"
        assert r.points() == [(100, 66), (110, 66), (110, 110), (140, 110)]

    def test_upward_path(self) -> None:
        """A successor above the predecessor goes up instead."""
        r = ClearRoute(_geometry(100, 110, 140, 66, 88))
        assert r.path_d() == "M 100 110 H 110 V 66 H 140"

    def test_arrives_moving_right(self) -> None:
        """The final segment always points in +x."""
        (x1, y1), (x2, y2) = _segments(ClearRoute(_geometry(100, 66, 140, 110, 44)).points())[-1]
        assert y1 == y2
        assert x2 > x1


class TestDetourRoute:
    """Test the five-segment path."""

    def test_successor_below(self) -> None:
        """Detour runs 4px below the predecessor row."""
        r = DetourRoute(_geometry(100, 66, 70, 110, 44))
        assert r.detour_y == 92
        assert r.path_d() == "M 100 66 H 110 V 92 H 60 V 110 H 70"

    def test_successor_above(self) -> None:
        """Detour runs 4px above the predecessor row."""
        r = DetourRoute(_geometry(100, 110, 70, 66, 88))
        assert r.detour_y == 84
        assert r.path_d() == "M 100 110 H 110 V 84 H 60 V 66 H 70"

    def test_approach_never_left_of_elbow(self) -> None:
        """A successor at the very start of the timeline approaches from x=10."""
        r = DetourRoute(_geometry(50, 66, 0, 110, 44))
        assert r.approach_x == 10
        assert r.path_d() == "M 50 66 H 60 V 92 H 10 V 110 H 0"

    def test_arrives_moving_right(self) -> None:
        """The final segment points in +x."""
        (x1, y1), (x2, y2) = _segments(DetourRoute(_geometry(100, 66, 70, 110, 44)).points())[-1]
        assert y1 == y2
        assert x2 > x1

    @pytest.mark.parametrize(
        ("from_y", "to_y", "pred_top"),
        [(66, 110, 44), (66, 198, 44), (110, 66, 88), (198, 22, 176)],
    )
    def test_horizontal_run_clears_predecessor_row(
        self, from_y: float, to_y: float, pred_top: float
    ) -> None:
        """The leftward run is strictly outside the predecessor's row band."""
        r = DetourRoute(_geometry(100, from_y, 70, to_y, pred_top))
        assert r.detour_y < pred_top or r.detour_y > pred_top + ROW_HEIGHT

    def test_only_axis_aligned_segments(self) -> None:
        """Every segment is horizontal or vertical."""
        points = DetourRoute(_geometry(100, 66, 70, 110, 44)).points()
        for (x1, y1), (x2, y2) in _segments(points):
            assert x1 == x2 or y1 == y2


class TestRoute:
    """Test routing between laid-out rows."""

    def test_routes_from_bar_end_to_bar_start(self) -> None:
        """Endpoints sit at the row midlines, the end bar edge including its last day."""
        pred = _task_row("a", date(2024, 1, 1), date(2024, 1, 10), 44)
        succ = _task_row("b", date(2024, 1, 15), date(2024, 1, 20), 88)
        r = route(pred, succ, START, 10, ROW_HEIGHT)
        assert r is not None
        assert r.path_d() == "M 100 66 H 110 V 110 H 140"

    def test_hidden_endpoint_returns_none(self) -> None:
        """Arrows touching hidden rows are not drawn."""
        pred = _task_row("a", date(2024, 1, 1), date(2024, 1, 10), None, visible=False)
        succ = _task_row("b", date(2024, 1, 15), date(2024, 1, 20), 88)
        assert route(pred, succ, START, 10, ROW_HEIGHT) is None
        assert route(succ, pred, START, 10, ROW_HEIGHT) is None

    def test_missing_dates_return_none(self) -> None:
        """No anchor date, no arrow."""
        pred = _task_row("a", date(2024, 1, 1), None, 44)
        succ = _task_row("b", date(2024, 1, 15), date(2024, 1, 20), 88)
        assert route(pred, succ, START, 10, ROW_HEIGHT) is None


def _routed(schedule: Schedule, collapsed: set[str] | None = None):
    rows = layout_rows(flatten(schedule, collapsed or set()), ROW_HEIGHT)
    return list(route_dependencies(rows, build_task_index(rows), START, 10, ROW_HEIGHT))


class TestRouteDependencies:
    """Test routing across a whole schedule."""

    def test_chained_schedule(self, chained_schedule: Schedule) -> None:
        """One clear arrow inside phase-1, one detour into phase-2."""
        arrows = _routed(chained_schedule)
        assert [(a.predecessor_id, a.successor_id, a.route.kind) for a in arrows] == [
            ("task-1-1", "task-1-2", RouteKind.CLEAR),
            ("task-1-2", "task-2-1", RouteKind.DETOUR),
        ]
        assert arrows[0].route.path_d() == "M 100 66 H 110 V 110 H 140"
        assert arrows[1].route.path_d() == "M 200 110 H 210 V 136 H 200 V 198 H 210"

    def test_collapsed_phase_drops_its_arrows(self, chained_schedule: Schedule) -> None:
        """Collapsing phase-1 hides both ends of one edge and one end of the other."""
        assert _routed(chained_schedule, {"phase-1"}) == []

    def test_collapsing_successor_phase(self, chained_schedule: Schedule) -> None:
        """Only the edge into the hidden task disappears."""
        arrows = _routed(chained_schedule, {"phase-2"})
        assert [(a.predecessor_id, a.successor_id) for a in arrows] == [("task-1-1", "task-1-2")]

    def test_unknown_dependency_skipped(self) -> None:
        """Dangling ids produce no arrow and no error."""
        schedule = make_schedule(
            [group("phase-1", [task("task-1-1", "2024-01-01", "2024-01-05", "ghost")])]
        )
        assert _routed(schedule) == []

    def test_duplicate_ids_attach_to_last(self) -> None:
        """With repeated ids the arrow starts at the later row."""
        schedule = make_schedule(
            [
                group(
                    "phase-1",
                    [
                        task("dup", "2024-01-01", "2024-01-02"),
                        task("dup", "2024-01-01", "2024-01-04"),
                        task("next", "2024-01-20", "2024-01-22", "dup"),
                    ],
                )
            ]
        )
        arrows = _routed(schedule)
        assert len(arrows) == 1
        assert arrows[0].route.path_d() == "M 40 110 H 50 V 154 H 190"

    def test_self_dependency_does_not_crash(self) -> None:
        """A task depending on itself detours around its own row."""
        schedule = make_schedule(
            [group("phase-1", [task("loop", "2024-01-01", "2024-01-05", "loop")])]
        )
        arrows = _routed(schedule)
        assert len(arrows) == 1
        assert arrows[0].route.kind is RouteKind.DETOUR
