"""Command-line interface for planviz."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from . import config as config_module
from .config import RenderConfig, discover_render_config
from .exceptions import PlanvizError
from .loader import extract_schedule_blocks, load_schedule
from .logger import setup_logger
from .page import build_page
from .renderer import GanttDiagram, RenderedDiagram
from .svg import fmt_num

app = typer.Typer(
    name="planviz",
    help="Render project schedules as split-panel Gantt diagrams",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to render config file (default: planviz_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for planviz commands."""
    setup_logger(verbose)
    config_module.set_config_path(config)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _render_from_file(
    file: Path, width: float | None, collapse: list[str] | None
) -> tuple[RenderedDiagram, RenderConfig]:
    """Load, apply config defaults and render once."""
    try:
        render_config = discover_render_config(file)
        schedule = load_schedule(file)
    except PlanvizError as e:
        raise _fail(str(e)) from None

    effective_width = width if width is not None else render_config.width
    diagram = GanttDiagram()
    diagram.load(schedule)
    diagram.set_collapsed(collapse if collapse else render_config.collapsed)
    return diagram.render(effective_width), render_config


@app.command()
def render(
    file: Annotated[Path, typer.Argument(help="Path to the schedule JSON or YAML file")],
    *,
    width: Annotated[
        float | None,
        typer.Option("--width", "-w", help="Timeline panel width in pixels"),
    ] = None,
    collapse: Annotated[
        list[str] | None,
        typer.Option("--collapse", help="Phase id to show collapsed (repeatable)"),
    ] = None,
    title: Annotated[
        str | None, typer.Option("--title", "-t", help="Heading to show instead of project name")
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Render a schedule as a standalone HTML page."""
    rendered, render_config = _render_from_file(file, width, collapse)
    page = build_page(rendered, title=title if title is not None else render_config.title)

    if output:
        output.write_text(page, encoding="utf-8")
        typer.echo(f"Diagram written to {output}")
    else:
        typer.echo(page)


@app.command()
def layout(
    file: Annotated[Path, typer.Argument(help="Path to the schedule JSON or YAML file")],
    *,
    width: Annotated[
        float | None,
        typer.Option("--width", "-w", help="Timeline panel width in pixels"),
    ] = None,
    collapse: Annotated[
        list[str] | None,
        typer.Option("--collapse", help="Phase id to show collapsed (repeatable)"),
    ] = None,
) -> None:
    """Print the computed layout: ticks, rows, bars and arrows."""
    rendered, _ = _render_from_file(file, width, collapse)

    typer.echo(f"{rendered.title} ({rendered.date_range})")
    typer.echo(f"Width: {fmt_num(rendered.width)}px  Day width: {fmt_num(rendered.day_width)}px")
    typer.echo("")
    typer.echo("Ticks:")
    for tick in rendered.ticks:
        typer.echo(f"  {tick.date.isoformat()}  {tick.label}")

    typer.echo("")
    typer.echo("Rows:")
    bars = {bar.row_index: bar for bar in rendered.bars}
    for row in rendered.rows:
        marker = "-" if row.is_phase else " "
        if not row.visible:
            typer.echo(f"  {marker} {row.id}  (hidden)")
            continue
        bar = bars.get(row.index)
        geometry = (
            f"x={fmt_num(bar.x)} y={fmt_num(bar.y)} width={fmt_num(bar.width)}"
            if bar
            else "no bar"
        )
        typer.echo(f"  {marker} {row.id}  {geometry}")

    typer.echo("")
    typer.echo("Arrows:")
    for arrow in rendered.arrows:
        typer.echo(
            f"  {arrow.predecessor_id} -> {arrow.successor_id}  "
            f"[{arrow.route.kind.value}] {arrow.route.path_d()}"
        )


@app.command()
def extract(
    transcript: Annotated[Path, typer.Argument(help="Text file containing agent output")],
    *,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output JSON path")] = None,
) -> None:
    """Extract the last gantt-json block from agent output."""
    try:
        text = transcript.read_text(encoding="utf-8")
    except OSError as e:
        raise _fail(f"Cannot read {transcript}: {e}") from None

    result = extract_schedule_blocks(text)
    if result.data is None:
        raise _fail("No valid gantt-json block found")

    payload = json.dumps(result.data, indent=2, ensure_ascii=False) + "\n"
    if output:
        output.write_text(payload, encoding="utf-8")
        typer.echo(f"Schedule written to {output}")
    else:
        typer.echo(payload, nl=False)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
