import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from employment.api import SolverStatus
from employment.engine import Engine


class RecordingEngine(Engine):
    """In-memory engine that records every call made by the model builder."""

    def __init__(self, values: Optional[Dict[str, float]] = None, status=SolverStatus.OPTIMAL):
        self.name = "recording"
        self.variables: List[str] = []
        self.constraints: List[Tuple[str, List[Tuple[str, float]], float, float]] = []
        self.objective: Dict[str, float] = {}
        self.set_calls: List[Tuple[str, float]] = []
        self.maximized = False
        self.solve_calls: List[Optional[float]] = []
        self.values = values or {}
        self.status = status

    def new_binary_var(self, name: str) -> Any:
        self.variables.append(name)
        return name

    def add_range_constraint(self, terms, lower, upper, name):
        self.constraints.append((name, list(terms), lower, upper))
        return name

    def set_objective_coefficient(self, var, coefficient):
        self.set_calls.append((var, coefficient))
        self.objective[var] = coefficient

    def maximize(self):
        self.maximized = True

    def solve(self, time_limit=None):
        self.solve_calls.append(time_limit)
        return self.status, self.status.value

    def value(self, var):
        return self.values.get(var, 0.0)

    def objective_value(self):
        return sum(self.objective.get(var, 0.0) * value for var, value in self.values.items())

    def num_variables(self):
        return len(self.variables)

    def num_constraints(self):
        return len(self.constraints)


@pytest.fixture
def recording_engine():
    return RecordingEngine()
