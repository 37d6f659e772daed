"""Mixed-integer programming backend implemented with OR-Tools ``pywraplp``."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Tuple

from ortools.linear_solver import pywraplp

from .api import SolverStatus
from .engine import Engine as _EngineBase
from .errors import EngineUnavailableError


logger = logging.getLogger(__name__)

DEFAULT_ENGINE = "SCIP"

_STATUS_MAP = {
    pywraplp.Solver.OPTIMAL: (SolverStatus.OPTIMAL, "OPTIMAL"),
    pywraplp.Solver.FEASIBLE: (SolverStatus.FEASIBLE, "FEASIBLE"),
    pywraplp.Solver.INFEASIBLE: (SolverStatus.INFEASIBLE, "INFEASIBLE"),
    pywraplp.Solver.UNBOUNDED: (SolverStatus.MODEL_INVALID, "UNBOUNDED"),
    pywraplp.Solver.ABNORMAL: (SolverStatus.UNKNOWN, "ABNORMAL"),
    pywraplp.Solver.MODEL_INVALID: (SolverStatus.MODEL_INVALID, "MODEL_INVALID"),
    pywraplp.Solver.NOT_SOLVED: (SolverStatus.UNKNOWN, "NOT_SOLVED"),
}


class OrToolsEngine(_EngineBase):
    """:class:`~employment.engine.Engine` over an OR-Tools ``MPSolver``."""

    def __init__(
        self,
        engine: Optional[str] = None,
        mip_gap: float = 0.0,
        log_output: bool = False,
    ):
        engine_name = engine or DEFAULT_ENGINE
        solver = pywraplp.Solver.CreateSolver(engine_name)
        if solver is None:
            raise EngineUnavailableError(f"Could not create solver {engine_name}")
        if log_output:
            solver.EnableOutput()
        self.name = f"ortools/{engine_name}"
        self._solver = solver
        self._objective = solver.Objective()
        self._mip_gap = mip_gap

    def new_binary_var(self, name: str) -> Any:
        return self._solver.IntVar(0.0, 1.0, name)

    def add_range_constraint(
        self,
        terms: Sequence[Tuple[Any, float]],
        lower: float,
        upper: float,
        name: str,
    ) -> Any:
        constraint = self._solver.Constraint(lower, upper, name)
        for var, coefficient in terms:
            constraint.SetCoefficient(var, coefficient)
        return constraint

    def set_objective_coefficient(self, var: Any, coefficient: float) -> None:
        self._objective.SetCoefficient(var, coefficient)

    def maximize(self) -> None:
        self._objective.SetMaximization()

    def solve(self, time_limit: Optional[float] = None) -> Tuple[SolverStatus, str]:
        if time_limit is not None:
            self._solver.SetTimeLimit(int(time_limit * 1000))
        params = pywraplp.MPSolverParameters()
        params.SetDoubleParam(pywraplp.MPSolverParameters.RELATIVE_MIP_GAP, self._mip_gap)
        code = self._solver.Solve(params)
        status, raw = _STATUS_MAP.get(code, (SolverStatus.UNKNOWN, str(code)))
        logger.debug("%s returned %s", self.name, raw)
        return status, raw

    def value(self, var: Any) -> Optional[float]:
        return float(var.solution_value())

    def objective_value(self) -> Optional[float]:
        return float(self._objective.Value())

    def num_variables(self) -> int:
        return self._solver.NumVariables()

    def num_constraints(self) -> int:
        return self._solver.NumConstraints()


Engine = OrToolsEngine


__all__ = ["DEFAULT_ENGINE", "Engine", "OrToolsEngine"]
