"""Custom exceptions for planviz."""


class PlanvizError(Exception):
    """Base exception for all planviz errors."""

    pass


class ScheduleLoadError(PlanvizError):
    """Raised when a schedule document cannot be read or has the wrong shape."""

    pass


class ConfigError(PlanvizError):
    """Raised when the render configuration file is invalid."""

    pass
