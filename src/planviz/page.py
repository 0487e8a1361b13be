"""Standalone HTML page for a rendered diagram."""

from __future__ import annotations

import html
import re
from typing import TYPE_CHECKING

from .config import ROW_HEIGHT, TIMELINE_HEADER_HEIGHT
from .renderer import build_left_panel
from .svg import to_markup

if TYPE_CHECKING:
    from .renderer import RenderedDiagram

PAGE_SHELL = r"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width, initial-scale=1" />
<title>__TITLE__</title>
<style>
__CSS_BLOCK__
</style>
</head>
<body>
__BODY_MARKUP__
<script>
__JS_BLOCK__
</script>
</body>
</html>
"""

CSS_BLOCK = """
:root { --row-h: __ROW_H__px; --timeline-header-h: __HEADER_H__px; --left-w: 560px; }
* { box-sizing: border-box; }
body { margin: 0; font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
       color: #0f172a; background: #ffffff; }
.project-header { display: flex; align-items: baseline; gap: 16px; padding: 16px 24px;
                  border-bottom: 1px solid #e2e8f0; }
.project-header h1 { font-size: 18px; margin: 0; }
.project-header .dates { color: #64748b; font-size: 13px; }
.gantt-container { display: flex; height: calc(100vh - 64px); }
.gantt-left { width: var(--left-w); flex: none; display: flex; flex-direction: column;
              border-right: 1px solid #e2e8f0; }
.gantt-left-header { height: var(--timeline-header-h); flex: none; display: flex; align-items: center;
                     background: #f1f5f9; font-size: 11px; font-weight: 600; color: #64748b;
                     text-transform: uppercase; border-bottom: 1px solid #e2e8f0; }
.gantt-left-rows { flex: 1; overflow-y: auto; overflow-x: hidden; }
.gantt-row { height: var(--row-h); display: flex; align-items: center; font-size: 13px;
             border-bottom: 1px solid #f1f5f9; }
.gantt-row.is-phase { font-weight: 600; background: #f8fafc; }
.gantt-row.is-collapsed { display: none; }
.row-id { width: 40px; color: #94a3b8; padding-left: 8px; }
.gantt-row.is-phase .row-id { width: 16px; }
.row-name { flex: 1; overflow: hidden; white-space: nowrap; text-overflow: ellipsis; }
.row-start, .row-end { width: 96px; color: #475569; }
.row-effort { width: 64px; color: #475569; text-align: right; padding-right: 12px; }
.gantt-right { flex: 1; min-width: 0; display: flex; flex-direction: column; }
.gantt-timeline-header { height: var(--timeline-header-h); flex: none; overflow: hidden; }
.gantt-timeline-body { flex: 1; overflow: auto; }
.empty-state { display: flex; align-items: center; justify-content: center; height: 100vh;
               color: #64748b; }
"""

# Browser side of the scroll coordinator: one in-flight flag guards both directions
JS_BLOCK = """
(function () {
    const leftRows = document.getElementById('gantt-left-rows');
    const rightBody = document.getElementById('gantt-timeline-body');
    const rightHeader = document.getElementById('gantt-timeline-header');
    if (!leftRows || !rightBody || !rightHeader) return;

    let syncing = false;

    leftRows.addEventListener('scroll', () => {
        if (syncing) return;
        syncing = true;
        rightBody.scrollTop = leftRows.scrollTop;
        syncing = false;
    });

    rightBody.addEventListener('scroll', () => {
        if (syncing) return;
        syncing = true;
        leftRows.scrollTop = rightBody.scrollTop;
        rightHeader.scrollLeft = rightBody.scrollLeft;
        syncing = false;
    });
})();
"""

LEFT_HEADER_MARKUP = """<div class="gantt-left-header">
      <div class="row-id">ID</div>
      <div class="row-name">Name</div>
      <div class="row-start">Start</div>
      <div class="row-end">End</div>
      <div class="row-effort">Effort</div>
    </div>"""

BODY_MARKUP = """<header class="project-header">
  <h1 id="project-title">__PROJECT_TITLE__</h1>
  <span class="dates" id="project-dates">__PROJECT_DATES__</span>
</header>
<div class="gantt-container" id="gantt-container">
  <div class="gantt-left">
    __LEFT_HEADER__
    __LEFT_ROWS__
  </div>
  <div class="gantt-right" id="gantt-right">
    <div class="gantt-timeline-header" id="gantt-timeline-header">__HEADER_SVG__</div>
    <div class="gantt-timeline-body" id="gantt-timeline-body">__BODY_SVG__</div>
  </div>
</div>"""

EMPTY_MARKUP = """<div class="empty-state" id="empty-state">
  <p>No project loaded yet.</p>
</div>"""


PLACEHOLDER = re.compile(r"__([A-Z_]+)__")


def _fill(template: str, values: dict[str, str]) -> str:
    # Single pass so inserted text is never scanned for placeholders
    return PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def _assemble(title: str, body: str, script: str) -> str:
    css = _fill(CSS_BLOCK, {"ROW_H": str(ROW_HEIGHT), "HEADER_H": str(TIMELINE_HEADER_HEIGHT)})
    return _fill(
        PAGE_SHELL,
        {
            "TITLE": html.escape(title),
            "CSS_BLOCK": css,
            "BODY_MARKUP": body,
            "JS_BLOCK": script,
        },
    )


def build_page(rendered: RenderedDiagram, title: str | None = None) -> str:
    """Build the full HTML document for a rendered diagram.

    The page is a static snapshot of one render pass: phase rows carry no
    collapse toggle, and the script only mirrors scrolling between panels.

    Args:
        rendered: Output of a render pass
        title: Optional heading to show instead of the project name
    """
    heading = title if title is not None else rendered.title
    body = _fill(
        BODY_MARKUP,
        {
            "PROJECT_TITLE": html.escape(heading),
            "PROJECT_DATES": html.escape(rendered.date_range),
            "LEFT_HEADER": LEFT_HEADER_MARKUP,
            "LEFT_ROWS": to_markup(build_left_panel(rendered.left_rows, toggles=False)),
            "HEADER_SVG": to_markup(rendered.header_svg),
            "BODY_SVG": to_markup(rendered.body_svg),
        },
    )
    return _assemble(heading or "Project Schedule", body, JS_BLOCK)


def build_empty_page() -> str:
    """Page shown before any schedule is loaded."""
    return _assemble("Project Schedule", EMPTY_MARKUP, "")
