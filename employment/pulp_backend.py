"""Mixed-integer linear programming backend implemented with PuLP (CBC/HiGHS)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Tuple

import pulp

from .api import SolverStatus
from .engine import Engine as _EngineBase
from .errors import EngineUnavailableError


logger = logging.getLogger(__name__)

DEFAULT_ENGINE = "cbc"

_STATUS_MAP = {
    "Optimal": SolverStatus.OPTIMAL,
    "Feasible": SolverStatus.FEASIBLE,
    "Integer Feasible": SolverStatus.FEASIBLE,
    "Infeasible": SolverStatus.INFEASIBLE,
    "Unbounded": SolverStatus.MODEL_INVALID,
    "Undefined": SolverStatus.UNKNOWN,
    "Not Solved": SolverStatus.UNKNOWN,
}


def _make_solver(engine: str, mip_gap: float, msg: bool) -> pulp.apis.core.LpSolver:
    key = engine.lower()
    if key == "cbc":
        solver = pulp.apis.PULP_CBC_CMD(msg=msg, gapRel=mip_gap)
        if not solver.available():
            raise EngineUnavailableError("CBC solver is not available")
        return solver
    if key == "highs":
        solver_cmd = pulp.apis.HiGHS_CMD(msg=msg, gapRel=mip_gap)
        if solver_cmd.available():
            return solver_cmd
        solver = pulp.apis.HiGHS(msg=msg, gapRel=mip_gap)
        if not solver.available():
            raise EngineUnavailableError("HiGHS solver is not available")
        return solver
    raise EngineUnavailableError(f"Unknown PuLP engine '{engine}'. Available options: cbc, highs.")


class PulpEngine(_EngineBase):
    """:class:`~employment.engine.Engine` over a ``pulp.LpProblem``."""

    def __init__(
        self,
        engine: Optional[str] = None,
        mip_gap: float = 0.0,
        log_output: bool = False,
    ):
        engine_name = (engine or DEFAULT_ENGINE).lower()
        self._solver = _make_solver(engine_name, mip_gap, log_output)
        self.name = f"pulp/{engine_name}"
        self._problem = pulp.LpProblem("student_employment_assignment", pulp.LpMinimize)
        self._variables: Dict[str, pulp.LpVariable] = {}
        self._objective: Dict[str, Tuple[pulp.LpVariable, float]] = {}
        self._num_constraints = 0

    def new_binary_var(self, name: str) -> pulp.LpVariable:
        var = pulp.LpVariable(name, lowBound=0, upBound=1, cat=pulp.LpBinary)
        self._variables[name] = var
        return var

    def add_range_constraint(
        self,
        terms: Sequence[Tuple[Any, float]],
        lower: float,
        upper: float,
        name: str,
    ) -> pulp.LpAffineExpression:
        expr = pulp.lpSum(coefficient * var for var, coefficient in terms)
        self._problem += (expr <= upper, f"{name}_max")
        self._problem += (expr >= lower, f"{name}_min")
        self._num_constraints += 1
        return expr

    def set_objective_coefficient(self, var: pulp.LpVariable, coefficient: float) -> None:
        self._objective[var.name] = (var, coefficient)

    def maximize(self) -> None:
        self._problem.sense = pulp.LpMaximize

    def solve(self, time_limit: Optional[float] = None) -> Tuple[SolverStatus, str]:
        self._problem.setObjective(
            pulp.lpSum(coefficient * var for var, coefficient in self._objective.values())
        )
        self._solver.timeLimit = time_limit
        self._problem.solve(self._solver)
        raw = pulp.LpStatus.get(self._problem.status, "Undefined")
        status = _STATUS_MAP.get(raw, SolverStatus.UNKNOWN)
        if (
            status in (SolverStatus.OPTIMAL, SolverStatus.UNKNOWN)
            and self._problem.sol_status == pulp.LpSolutionIntegerFeasible
        ):
            # Stopped early (e.g. time limit) with an integer solution in hand.
            status, raw = SolverStatus.FEASIBLE, f"{raw} (time limit reached)"
        logger.debug("%s returned %s", self.name, raw)
        return status, raw

    def value(self, var: pulp.LpVariable) -> Optional[float]:
        value = var.varValue
        if value is None:
            return None
        return float(value)

    def objective_value(self) -> Optional[float]:
        value = pulp.value(self._problem.objective)
        if value is None:
            return None
        return float(value)

    def num_variables(self) -> int:
        return len(self._variables)

    def num_constraints(self) -> int:
        return self._num_constraints


Engine = PulpEngine


__all__ = ["DEFAULT_ENGINE", "Engine", "PulpEngine"]
