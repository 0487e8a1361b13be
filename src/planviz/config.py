"""Layout constants and the render configuration file.

Layout constants are fixed for every diagram. The optional
``planviz_config.yaml`` only carries per-invocation defaults for the CLI
(viewport width, title override, phases collapsed on first render).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigError

ROW_HEIGHT = 44  # px per row, left panel and SVG body alike
TIMELINE_HEADER_HEIGHT = 48  # px
ELBOW = 10  # px an arrow extends right before its first turn
DETOUR_OFFSET = 4  # px beyond the predecessor row edge for detour arrows
MIN_TICK_SPACING = 40  # px a tick interval must span to be used
RESIZE_DEBOUNCE_MS = 150
MIN_BAR_WIDTH = 4  # px

PHASE_BAR_INSET = 8
TASK_BAR_INSET = 10

DEFAULT_WIDTH = 900.0
CONFIG_FILENAME = "planviz_config.yaml"


class RenderConfig(BaseModel):
    """Defaults for a render invocation."""

    width: float = DEFAULT_WIDTH
    title: str | None = None  # Overrides the project name in the page header
    collapsed: list[str] = Field(default_factory=list)  # Phase ids collapsed initially

    @field_validator("collapsed", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Accept a single id or a list of ids."""
        if v is None:
            return []
        if isinstance(v, list):
            return [str(item) for item in v]  # type: ignore[misc]
        return [str(v)]


class _ConfigState:
    """Config path chosen on the command line, shared with loaders."""

    def __init__(self) -> None:
        self.path: Path | None = None


_state = _ConfigState()


def get_config_path() -> Path | None:
    """Get the config path set via ``--config``."""
    return _state.path


def set_config_path(path: Path | None) -> None:
    """Set the config path (``None`` restores discovery)."""
    _state.path = path


def load_render_config(path: Path | str) -> RenderConfig:
    """Load a render config from YAML.

    Raises:
        ConfigError: If the file is not valid YAML or fails validation
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if data is None:
        return RenderConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    try:
        return RenderConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e


def discover_render_config(schedule_path: Path | None = None) -> RenderConfig:
    """Find and load the render config, or return defaults.

    Search order:
    1. Path set via ``set_config_path`` (CLI ``--config``); must exist
    2. Schedule directory / planviz_config.yaml
    3. Current directory / planviz_config.yaml
    """
    explicit = get_config_path()
    if explicit is not None:
        if not explicit.exists():
            raise ConfigError(f"Config file not found: {explicit}")
        return load_render_config(explicit)

    if schedule_path is not None:
        candidate = Path(schedule_path).parent / CONFIG_FILENAME
        if candidate.exists():
            return load_render_config(candidate)

    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_render_config(cwd_config)

    return RenderConfig()
