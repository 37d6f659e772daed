"""Solver settings for the assignment model."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError


MAX_HOURS = 20
REL_WEIGHT_PROF = 0.75
REL_WEIGHT_STUD = 0.25
TIE_BREAK_SCALE = 0.1

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class SolverConfig:
    """Weights, limits and engine selection for a solve.

    ``backend`` names a registered backend (``"ortools"`` or ``"pulp"``) and
    ``engine`` the concrete MIP engine inside it, e.g. ``"SCIP"`` or ``"CBC"``
    for OR-Tools and ``"cbc"`` or ``"highs"`` for PuLP.  ``time_limit`` and
    ``mip_gap`` are handed to the engine untouched.
    """

    max_hours: float = MAX_HOURS
    prof_weight: float = REL_WEIGHT_PROF
    stud_weight: float = REL_WEIGHT_STUD
    backend: Optional[str] = None
    engine: Optional[str] = None
    time_limit: Optional[float] = None
    mip_gap: float = 0.0
    tie_break: bool = True
    tie_break_scale: float = TIE_BREAK_SCALE
    log_solver_output: bool = False

    def __post_init__(self) -> None:
        if self.max_hours < 0:
            raise ConfigError("max_hours", "must be non-negative")
        if self.prof_weight < 0:
            raise ConfigError("prof_weight", "must be non-negative")
        if self.stud_weight < 0:
            raise ConfigError("stud_weight", "must be non-negative")
        if self.prof_weight == 0 and self.stud_weight == 0:
            raise ConfigError("prof_weight", "prof_weight and stud_weight cannot both be zero")
        if self.time_limit is not None and self.time_limit <= 0:
            raise ConfigError("time_limit", "must be positive")
        if not 0 <= self.mip_gap <= 1:
            raise ConfigError("mip_gap", "must be in the range [0, 1]")
        if not 0 <= self.tie_break_scale < 1:
            raise ConfigError("tie_break_scale", "must be in the range [0, 1)")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SolverConfig":
        """Parse settings from a mapping of raw (often string) values.

        Blank values fall back to the defaults and unknown keys are ignored.
        """

        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            raw = data[f.name]
            if isinstance(raw, str):
                raw = raw.strip()
                if raw == "":
                    continue
            if raw is None:
                continue
            kwargs[f.name] = _parse_field(f.name, raw)
        return cls(**kwargs)


def _parse_field(name: str, raw: Any) -> Any:
    if name in ("backend", "engine"):
        return str(raw)
    if name in ("tie_break", "log_solver_output"):
        if isinstance(raw, bool):
            return raw
        text = str(raw).lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ConfigError(name, f"expected a boolean, got {raw!r}")
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ConfigError(name, f"expected a number, got {raw!r}") from None


__all__ = [
    "MAX_HOURS",
    "REL_WEIGHT_PROF",
    "REL_WEIGHT_STUD",
    "SolverConfig",
    "TIE_BREAK_SCALE",
]
