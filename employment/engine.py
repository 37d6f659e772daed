"""Capability interface every optimisation backend implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from .api import SolverStatus


class Engine(ABC):
    """Narrow view of a MIP engine used by the model builder.

    Variables and constraints are opaque handles owned by the engine.  Calling
    :meth:`set_objective_coefficient` twice on the same variable replaces the
    earlier coefficient, so callers must combine terms before setting them.
    """

    name: str = ""

    @abstractmethod
    def new_binary_var(self, name: str) -> Any:
        """Create a ``{0, 1}`` integer variable."""

    @abstractmethod
    def add_range_constraint(
        self,
        terms: Sequence[Tuple[Any, float]],
        lower: float,
        upper: float,
        name: str,
    ) -> Any:
        """Add ``lower <= sum(coef * var) <= upper``."""

    @abstractmethod
    def set_objective_coefficient(self, var: Any, coefficient: float) -> None:
        """Set the objective coefficient of ``var``."""

    @abstractmethod
    def maximize(self) -> None:
        """Set the objective direction to maximisation."""

    @abstractmethod
    def solve(self, time_limit: Optional[float] = None) -> Tuple["SolverStatus", str]:
        """Run the engine once and return the mapped and raw status."""

    @abstractmethod
    def value(self, var: Any) -> Optional[float]:
        """Return the resolved value of ``var`` or ``None`` if unavailable."""

    @abstractmethod
    def objective_value(self) -> Optional[float]:
        """Return the attained objective value."""

    @abstractmethod
    def num_variables(self) -> int:
        ...

    @abstractmethod
    def num_constraints(self) -> int:
        ...


__all__ = ["Engine"]
