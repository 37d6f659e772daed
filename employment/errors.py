"""Exception types raised by the assignment solver."""

from __future__ import annotations


class ProblemShapeError(ValueError):
    """Raised when preference or availability data is malformed."""


class ConfigError(ValueError):
    """Raised when a :class:`~employment.config.SolverConfig` value is invalid."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class EngineUnavailableError(RuntimeError):
    """Raised when the requested optimisation engine cannot be created."""


__all__ = ["ConfigError", "EngineUnavailableError", "ProblemShapeError"]
