"""Schedule loading from files, parsed objects and agent text."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ScheduleLoadError
from .logger import get_logger
from .models import Schedule
from .schemas import ScheduleSchema

YAML_SUFFIXES = {".yaml", ".yml"}

# Fenced ```gantt-json blocks emitted by the planning agent
GANTT_BLOCK_PATTERN = re.compile(r"```gantt-json\s*([\s\S]*?)```")
GANTT_BLOCK_PLACEHOLDER = "[Gantt chart plan generated ✓]"


@dataclass(frozen=True)
class ExtractionResult:
    """Agent text split into what to show and the schedule it carried."""

    display_text: str
    data: dict[str, Any] | None


def schedule_from_dict(data: Any) -> Schedule:
    """Build a schedule from an already-parsed JSON/YAML object.

    Only the overall shape is checked; field values are rendered best-effort.

    Raises:
        ScheduleLoadError: If the object is not a schedule-shaped mapping
    """
    if not isinstance(data, dict):
        raise ScheduleLoadError(f"Schedule must be an object, got {type(data).__name__}")
    try:
        schema = ScheduleSchema.model_validate(data)
    except PydanticValidationError as e:
        raise ScheduleLoadError(f"Schedule has an invalid structure: {e}") from e

    schedule = Schedule.from_schema(schema)
    duplicates = schedule.duplicate_task_ids()
    if duplicates:
        get_logger().warning(
            f"Duplicate task ids {', '.join(duplicates)}: arrows attach to the last occurrence"
        )
    return schedule


def load_schedule(path: Path | str) -> Schedule:
    """Load a schedule from a .json, .yaml or .yml file.

    Raises:
        ScheduleLoadError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ScheduleLoadError(f"Cannot read {path}: {e}") from e

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ScheduleLoadError(f"Cannot parse {path}: {e}") from e

    return schedule_from_dict(data)


def extract_schedule_blocks(text: str) -> ExtractionResult:
    """Pull the schedule out of agent output.

    Every ```gantt-json block is replaced by a placeholder in the display
    text. The last block that parses as a JSON object becomes ``data``;
    malformed blocks are skipped.
    """
    logger = get_logger()
    data: dict[str, Any] | None = None
    for match in GANTT_BLOCK_PATTERN.finditer(text):
        try:
            parsed = json.loads(match.group(1).strip())
        except json.JSONDecodeError as e:
            logger.checks(f"Skipping malformed gantt-json block: {e}")
            continue
        if isinstance(parsed, dict):
            data = parsed
        else:
            logger.checks("Skipping gantt-json block that is not an object")

    display_text = GANTT_BLOCK_PATTERN.sub(GANTT_BLOCK_PLACEHOLDER, text).strip()
    return ExtractionResult(display_text=display_text, data=data)
