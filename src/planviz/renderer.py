"""Diagram renderer: schedule + collapsed phases + viewport width -> diagram.

Every render pass rebuilds the whole visual tree from the current state.
There is no incremental update: the only state carried between passes is
the immutable schedule and the set of collapsed phase ids.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING
from xml.etree import ElementTree as ET

from .config import (
    MIN_BAR_WIDTH,
    PHASE_BAR_INSET,
    ROW_HEIGHT,
    TASK_BAR_INSET,
    TIMELINE_HEADER_HEIGHT,
)
from .logger import get_logger
from .models import Schedule, format_display_date
from .routing import RoutedArrow, route_dependencies
from .rows import Row, RowKind, build_task_index, display_task_id, flatten, layout_rows
from .svg import el, svg_root
from .timeline import Tick, compute_day_width, date_to_x, generate_ticks, total_days

if TYPE_CHECKING:
    from collections.abc import Collection

FONT_FAMILY = '-apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif'

# Palette
HEADER_BG = "#f1f5f9"
HEADER_TICK = "#cbd5e1"
HEADER_TEXT = "#64748b"
GRID_LINE = "#e2e8f0"
ROW_SEPARATOR = "#f1f5f9"
ZEBRA_FILL = "rgba(241, 245, 249, 0.5)"
PHASE_FILL = "rgba(99, 102, 241, 0.12)"
PHASE_STROKE = "#6366f1"
TASK_GRADIENT = ("#6366f1", "#818cf8")
ARROW_COLOR = "#94a3b8"

TASK_GRADIENT_ID = "taskGrad"
ARROWHEAD_ID = "arrowhead"


@dataclass(frozen=True)
class BarGeometry:
    """Placed bar for one visible row."""

    row_id: str
    row_index: int
    kind: RowKind
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class LeftRow:
    """Label-panel view of one row (hidden rows included)."""

    row_id: str
    kind: RowKind
    group_id: str
    label_id: str  # Empty for phase rows, which show a toggle instead
    name: str
    start: str
    end: str
    effort: str
    visible: bool
    collapsed: bool


@dataclass(frozen=True)
class RenderedDiagram:
    """Result of one render pass."""

    title: str
    date_range: str
    width: float
    day_width: float
    project_start: date
    project_end: date
    ticks: list[Tick]
    rows: list[Row]
    left_rows: list[LeftRow]
    bars: list[BarGeometry]
    arrows: list[RoutedArrow]
    left_panel: ET.Element
    header_svg: ET.Element
    body_svg: ET.Element
    body_height: float
    collapsed: frozenset[str] = field(default_factory=frozenset)

    @property
    def visible_rows(self) -> list[Row]:
        return [row for row in self.rows if row.visible]

    def bar_for(self, row_id: str) -> BarGeometry | None:
        """Bar of the last visible row with this id."""
        found: BarGeometry | None = None
        for bar in self.bars:
            if bar.row_id == row_id:
                found = bar
        return found

    def to_html(self) -> str:
        """Standalone HTML page for this diagram."""
        from .page import build_page  # noqa: PLC0415 - page imports this module

        return build_page(self)


def _display(value: date | None, raw: str) -> str:
    if value is not None:
        return format_display_date(value)
    return raw


def bar_geometry(row: Row, project_start: date, day_width: float) -> BarGeometry | None:
    """Bar rectangle for a placed row, or None when it cannot be drawn."""
    source = row.source
    if row.y is None or source.start is None or source.end is None:
        return None

    x = date_to_x(source.start, project_start, day_width)
    end_x = date_to_x(source.end, project_start, day_width) + day_width
    inset = PHASE_BAR_INSET if row.is_phase else TASK_BAR_INSET
    return BarGeometry(
        row_id=row.id,
        row_index=row.index,
        kind=row.kind,
        x=x,
        y=row.y + inset,
        width=max(end_x - x, MIN_BAR_WIDTH),
        height=ROW_HEIGHT - 2 * inset,
    )


def build_left_rows(rows: Sequence[Row]) -> list[LeftRow]:
    """Label-panel view models, one per flattened row."""
    left: list[LeftRow] = []
    for row in rows:
        source = row.source
        left.append(
            LeftRow(
                row_id=row.id,
                kind=row.kind,
                group_id=row.group_id,
                label_id="" if row.is_phase else display_task_id(row.id),
                name=source.name,
                start=_display(source.start, source.raw_start),
                end=_display(source.end, source.raw_end),
                effort=source.effort,
                visible=row.visible,
                collapsed=row.collapsed,
            )
        )
    return left


def _toggle_icon(parent: ET.Element, collapsed: bool) -> None:
    classes = "row-toggle collapsed" if collapsed else "row-toggle"
    toggle = el("span", {"class": classes}, parent=parent)
    icon = el(
        "svg",
        {
            "width": 16,
            "height": 16,
            "viewBox": "0 0 24 24",
            "fill": "none",
            "stroke": "currentColor",
            "stroke-width": 2.5,
        },
        parent=toggle,
    )
    el("polyline", {"points": "6 9 12 15 18 9"}, parent=icon)


def build_left_panel(left_rows: Sequence[LeftRow], *, toggles: bool = True) -> ET.Element:
    """Markup for the label panel.

    Hidden rows are kept with an ``is-collapsed`` class so both panels are
    produced from the same row order.

    Args:
        left_rows: Row view models in display order
        toggles: Draw the collapse/expand chevron on phase rows
    """
    container = el("div", {"id": "gantt-left-rows", "class": "gantt-left-rows"})
    for left in left_rows:
        classes = ["gantt-row", "is-phase" if left.kind is RowKind.PHASE else "is-task"]
        if not left.visible:
            classes.append("is-collapsed")
        row_el = el(
            "div",
            {"class": " ".join(classes), "data-row-id": left.row_id},
            parent=container,
        )
        if left.kind is RowKind.PHASE:
            row_el.set("data-group-id", left.group_id)
            if toggles:
                _toggle_icon(row_el, left.collapsed)
        el("div", {"class": "row-id"}, parent=row_el, text=left.label_id)
        el("div", {"class": "row-name"}, parent=row_el, text=left.name)
        el("div", {"class": "row-start"}, parent=row_el, text=left.start)
        el("div", {"class": "row-end"}, parent=row_el, text=left.end)
        el("div", {"class": "row-effort"}, parent=row_el, text=left.effort)
    return container


def build_header_svg(
    ticks: Sequence[Tick], project_start: date, day_width: float, width: float
) -> ET.Element:
    """Fixed-height strip with one gridline and label per tick."""
    height = TIMELINE_HEADER_HEIGHT
    svg = svg_root(width, height)
    el("rect", {"x": 0, "y": 0, "width": width, "height": height, "fill": HEADER_BG}, parent=svg)

    for tick in ticks:
        x = max(0.0, date_to_x(tick.date, project_start, day_width))
        el(
            "line",
            {"x1": x, "y1": 0, "x2": x, "y2": height, "stroke": HEADER_TICK, "stroke-width": 1},
            parent=svg,
        )
        el(
            "text",
            {
                "x": x + 6,
                "y": height / 2 + 4,
                "fill": HEADER_TEXT,
                "font-size": "11",
                "font-family": FONT_FAMILY,
                "font-weight": "500",
            },
            parent=svg,
            text=tick.label,
        )

    el(
        "line",
        {
            "x1": 0,
            "y1": height - 1,
            "x2": width,
            "y2": height - 1,
            "stroke": GRID_LINE,
            "stroke-width": 1,
        },
        parent=svg,
    )
    return svg


def _build_defs(svg: ET.Element) -> None:
    defs = el("defs", parent=svg)
    gradient = el(
        "linearGradient",
        {"id": TASK_GRADIENT_ID, "x1": "0%", "y1": "0%", "x2": "100%", "y2": "0%"},
        parent=defs,
    )
    el("stop", {"offset": "0%", "stop-color": TASK_GRADIENT[0]}, parent=gradient)
    el("stop", {"offset": "100%", "stop-color": TASK_GRADIENT[1]}, parent=gradient)

    marker = el(
        "marker",
        {
            "id": ARROWHEAD_ID,
            "markerWidth": "8",
            "markerHeight": "6",
            "refX": "8",
            "refY": "3",
            "orient": "auto",
        },
        parent=defs,
    )
    el("polygon", {"points": "0 0, 8 3, 0 6", "fill": ARROW_COLOR}, parent=marker)


def _bar_element(parent: ET.Element, bar: BarGeometry) -> None:
    group = el("g", {"class": f"bar bar-{bar.kind.value}", "data-row-id": bar.row_id}, parent=parent)
    attrs: dict[str, str | float] = {
        "x": bar.x,
        "y": bar.y,
        "width": bar.width,
        "height": bar.height,
        "rx": 4,
    }
    if bar.kind is RowKind.PHASE:
        attrs.update({"fill": PHASE_FILL, "stroke": PHASE_STROKE, "stroke-width": 1.5})
    else:
        attrs["fill"] = f"url(#{TASK_GRADIENT_ID})"
    el("rect", attrs, parent=group)


def build_body_svg(
    rows: Sequence[Row],
    bars: Sequence[BarGeometry],
    arrows: Sequence[RoutedArrow],
    ticks: Sequence[Tick],
    project_start: date,
    day_width: float,
    width: float,
) -> ET.Element:
    """Timeline body: gridlines, row shading, bars, then arrows on top."""
    placed = [row for row in rows if row.y is not None]
    height = len(placed) * ROW_HEIGHT
    svg = svg_root(width, height, id="gantt-svg")
    _build_defs(svg)

    grid = el("g", {"class": "grid"}, parent=svg)
    for tick in ticks:
        x = max(0.0, date_to_x(tick.date, project_start, day_width))
        el(
            "line",
            {"x1": x, "y1": 0, "x2": x, "y2": height, "stroke": GRID_LINE, "stroke-width": 1},
            parent=grid,
        )

    bars_by_row = {bar.row_index: bar for bar in bars}
    bars_group = el("g", {"class": "bars"}, parent=svg)
    for row in placed:
        assert row.y is not None and row.visible_index is not None
        if row.is_task and row.visible_index % 2 == 1:
            el(
                "rect",
                {"x": 0, "y": row.y, "width": width, "height": ROW_HEIGHT, "fill": ZEBRA_FILL},
                parent=bars_group,
            )
        el(
            "line",
            {
                "x1": 0,
                "y1": row.y + ROW_HEIGHT,
                "x2": width,
                "y2": row.y + ROW_HEIGHT,
                "stroke": ROW_SEPARATOR,
                "stroke-width": 1,
            },
            parent=bars_group,
        )
        bar = bars_by_row.get(row.index)
        if bar is not None:
            _bar_element(bars_group, bar)

    deps_group = el("g", {"class": "dependencies"}, parent=svg)
    for arrow in arrows:
        el(
            "path",
            {
                "d": arrow.route.path_d(),
                "fill": "none",
                "stroke": ARROW_COLOR,
                "stroke-width": 1.5,
                "marker-end": f"url(#{ARROWHEAD_ID})",
                "data-from": arrow.predecessor_id,
                "data-to": arrow.successor_id,
            },
            parent=deps_group,
        )
    return svg


def render_schedule(
    schedule: Schedule, collapsed: Collection[str], available_width: float
) -> RenderedDiagram:
    """Run one full render pass.

    A pure function of its arguments: the same schedule, collapsed set and
    width always produce the same rows and coordinates.

    Args:
        schedule: The loaded schedule
        collapsed: Ids of collapsed phases
        available_width: Pixel width of the timeline panel

    Returns:
        The rendered diagram
    """
    logger = get_logger()

    project_start, project_end = schedule.date_span()
    day_width = compute_day_width(available_width, total_days(project_start, project_end))

    rows = layout_rows(flatten(schedule, collapsed), ROW_HEIGHT)
    task_index = build_task_index(rows)

    bars: list[BarGeometry] = []
    for row in rows:
        if not row.visible:
            continue
        bar = bar_geometry(row, project_start, day_width)
        if bar is None:
            logger.checks(f"No bar for {row.kind.value} '{row.id}': missing or invalid dates")
            continue
        logger.debug(
            f"{row.kind.value} {row.id}: x={bar.x:.2f} y={bar.y:.2f} width={bar.width:.2f}"
        )
        bars.append(bar)

    arrows = list(route_dependencies(rows, task_index, project_start, day_width, ROW_HEIGHT))
    ticks = generate_ticks(project_start, project_end, day_width)
    left_rows = build_left_rows(rows)

    project = schedule.project
    diagram = RenderedDiagram(
        title=project.name,
        date_range=f"{format_display_date(project_start)} - {format_display_date(project_end)}",
        width=available_width,
        day_width=day_width,
        project_start=project_start,
        project_end=project_end,
        ticks=ticks,
        rows=rows,
        left_rows=left_rows,
        bars=bars,
        arrows=arrows,
        left_panel=build_left_panel(left_rows),
        header_svg=build_header_svg(ticks, project_start, day_width, available_width),
        body_svg=build_body_svg(
            rows, bars, arrows, ticks, project_start, day_width, available_width
        ),
        body_height=sum(1 for row in rows if row.visible) * ROW_HEIGHT,
        collapsed=frozenset(collapsed),
    )
    logger.changes(
        f"Rendered '{project.name}': {len(diagram.visible_rows)}/{len(rows)} rows visible, "
        f"{len(bars)} bars, {len(arrows)} arrows, day width {day_width:.2f}px"
    )
    return diagram


class GanttDiagram:
    """An interactive diagram instance.

    Owns the loaded schedule and the collapsed-phase set. Collapsing or
    expanding a phase is the only mutation, and it triggers a full render.
    """

    def __init__(self, schedule: Schedule | None = None):
        """Initialize the diagram, optionally with a schedule to display."""
        self._schedule = schedule
        self._collapsed: set[str] = set()

    @property
    def schedule(self) -> Schedule | None:
        return self._schedule

    @property
    def collapsed(self) -> frozenset[str]:
        """Ids of currently collapsed phases."""
        return frozenset(self._collapsed)

    def load(self, schedule: Schedule) -> None:
        """Replace the schedule and expand every phase."""
        self._schedule = schedule
        self._collapsed = set()
        get_logger().changes(
            f"Loaded project '{schedule.project.name}' with {len(schedule.groups)} phases"
        )

    def is_collapsed(self, group_id: str) -> bool:
        return group_id in self._collapsed

    def set_collapsed(self, group_ids: Collection[str]) -> None:
        """Collapse exactly the given phases (used for initial state)."""
        self._collapsed = set(group_ids)

    def toggle_group(self, group_id: str, available_width: float) -> RenderedDiagram:
        """Flip a phase between collapsed and expanded, then re-render."""
        if group_id in self._collapsed:
            self._collapsed.discard(group_id)
            get_logger().changes(f"Expanded phase '{group_id}'")
        else:
            self._collapsed.add(group_id)
            get_logger().changes(f"Collapsed phase '{group_id}'")
        return self.render(available_width)

    def render(self, available_width: float) -> RenderedDiagram:
        """Render the current schedule at the given panel width.

        Raises:
            RuntimeError: If no schedule has been loaded
        """
        if self._schedule is None:
            raise RuntimeError("No schedule loaded")
        return render_schedule(self._schedule, self._collapsed, available_width)

