"""Public abstractions for building and solving assignment models."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from importlib import import_module
from types import ModuleType
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .config import SolverConfig
from .engine import Engine
from .model import AssignmentModel, build_assignment_model
from .problem import AssignmentProblem
from .solution import extract_solution, preference_score


logger = logging.getLogger(__name__)


class SolverStatus(str, Enum):
    """Enum representing the high-level result of a solver invocation."""

    OPTIMAL = "OPTIMAL"
    FEASIBLE = "FEASIBLE"
    INFEASIBLE = "INFEASIBLE"
    UNKNOWN = "UNKNOWN"
    MODEL_INVALID = "MODEL_INVALID"


_USABLE_STATUSES = (SolverStatus.OPTIMAL, SolverStatus.FEASIBLE)


@dataclass(frozen=True)
class Assignment:
    """A single student working a single class."""

    student: int
    class_index: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.student, self.class_index)


@dataclass(frozen=True)
class AssignmentResult:
    """Container encapsulating solver outputs and auxiliary metadata.

    ``objective_value`` is the preference score of the chosen pairs, while
    ``engine_objective`` is what the engine reported (including any tie-break
    bonus).  Both are ``None`` when no usable solution was found.
    """

    status: SolverStatus
    num_students: int
    num_classes: int
    selected: Tuple[Tuple[bool, ...], ...]
    assignments: Tuple[Assignment, ...]
    objective_value: Optional[float]
    engine_objective: Optional[float]
    progress: Tuple[str, ...]
    backend: str
    raw_status: str = ""

    @property
    def found(self) -> bool:
        return self.status in _USABLE_STATUSES

    def as_matrix(self) -> List[List[int]]:
        """Return the ``[student][class]`` assignment as a 0/1 grid."""

        if not self.found:
            return [[0] * self.num_classes for _ in range(self.num_students)]
        return [[1 if chosen else 0 for chosen in row] for row in self.selected]

    def by_student(self) -> Dict[int, List[int]]:
        """Map every student to the classes they work, possibly none."""

        matrix: Dict[int, List[int]] = {s: [] for s in range(self.num_students)}
        for assignment in self.assignments:
            matrix[assignment.student].append(assignment.class_index)
        return matrix

    def unassigned_students(self) -> List[int]:
        return [s for s, classes in self.by_student().items() if not classes]

    def hours_by_student(self, hours_per_class: Sequence[int]) -> Dict[int, int]:
        return {
            s: sum(hours_per_class[c] for c in classes)
            for s, classes in self.by_student().items()
        }


_BACKEND_REGISTRY: Dict[str, str] = {}
_DEFAULT_BACKEND = "ortools"


def register_backend(identifier: str, module_path: str) -> None:
    """Register a solver backend import path under ``identifier``."""

    _BACKEND_REGISTRY[identifier.lower()] = module_path


def available_backends() -> List[str]:
    """Return the list of registered backend identifiers."""

    return sorted(_BACKEND_REGISTRY)


def _resolve_backend_name(identifier: Optional[str]) -> str:
    key = (identifier or _DEFAULT_BACKEND).lower()
    if key not in _BACKEND_REGISTRY:
        available = ", ".join(available_backends()) or "none"
        name = identifier if identifier is not None else _DEFAULT_BACKEND
        raise ValueError(f"Unknown solver backend '{name}'. Available options: {available}.")
    return key


def get_backend(identifier: Optional[str] = None) -> ModuleType:
    """Return the module implementing the requested solver backend."""

    key = _resolve_backend_name(identifier)
    return import_module(_BACKEND_REGISTRY[key])


def create_engine(identifier: Optional[str] = None, config: Optional[SolverConfig] = None) -> Engine:
    """Instantiate the engine exposed by the requested backend."""

    config = config or SolverConfig()
    backend_module = get_backend(identifier)
    engine_cls = getattr(backend_module, "Engine", None)
    if engine_cls is None:
        name = identifier if identifier is not None else _DEFAULT_BACKEND
        raise ValueError(f"Backend '{name}' does not expose an Engine class.")
    return engine_cls(
        engine=config.engine,
        mip_gap=config.mip_gap,
        log_output=config.log_solver_output,
    )


def build_model(
    problem: AssignmentProblem,
    config: Optional[SolverConfig] = None,
    *,
    backend: Optional[str] = None,
) -> AssignmentModel:
    """Build a fresh model for ``problem`` on the selected backend."""

    config = config or SolverConfig()
    engine = create_engine(backend or config.backend, config)
    return build_assignment_model(engine, problem, config)


def solve_model(
    model: AssignmentModel,
    *,
    time_limit: Optional[float] = None,
    progress_callback: Optional[Callable[[str], None]] = None,
) -> AssignmentResult:
    """Solve an already-built model and return an :class:`AssignmentResult`."""

    engine = model.engine
    problem = model.problem
    if time_limit is None:
        time_limit = model.config.time_limit

    progress: List[str] = []

    def report(message: str) -> None:
        progress.append(message)
        if progress_callback is not None:
            progress_callback(message)

    report(
        f"Solving with {engine.name}: {engine.num_variables()} variables, "
        f"{engine.num_constraints()} constraints"
    )
    status, raw_status = engine.solve(time_limit)

    if status not in _USABLE_STATUSES:
        logger.warning("No solution found (status=%s, raw=%s)", status.value, raw_status)
        report(f"{engine.name} finished without a solution: status={raw_status}")
        empty = tuple(tuple(False for _ in problem.classes()) for _ in problem.students())
        return AssignmentResult(
            status=status,
            num_students=problem.num_students,
            num_classes=problem.num_classes,
            selected=empty,
            assignments=(),
            objective_value=None,
            engine_objective=None,
            progress=tuple(progress),
            backend=engine.name,
            raw_status=raw_status,
        )

    selected = extract_solution(model)
    assignments = tuple(
        Assignment(s, c)
        for s, row in enumerate(selected)
        for c, chosen in enumerate(row)
        if chosen
    )
    score = preference_score(model, selected)
    engine_objective = engine.objective_value()
    if engine_objective is None:
        engine_objective = 0.0
    logger.info(
        "Solved on %s: status=%s, satisfaction=%.2f, %d assignments",
        engine.name,
        status.value,
        score,
        len(assignments),
    )
    report(f"{engine.name} solution: status={raw_status}, objective={engine_objective:.2f}")

    return AssignmentResult(
        status=status,
        num_students=problem.num_students,
        num_classes=problem.num_classes,
        selected=selected,
        assignments=assignments,
        objective_value=score,
        engine_objective=engine_objective,
        progress=tuple(progress),
        backend=engine.name,
        raw_status=raw_status,
    )


def solve_assignment(
    problem: AssignmentProblem,
    config: Optional[SolverConfig] = None,
    *,
    backend: Optional[str] = None,
    time_limit: Optional[float] = None,
    progress_callback: Optional[Callable[[str], None]] = None,
) -> AssignmentResult:
    """High-level helper that builds and solves an assignment model."""

    model = build_model(problem, config, backend=backend)
    return solve_model(model, time_limit=time_limit, progress_callback=progress_callback)


register_backend("ortools", "employment.ortools_backend")
register_backend("pulp", "employment.pulp_backend")


__all__ = [
    "Assignment",
    "AssignmentResult",
    "SolverStatus",
    "available_backends",
    "build_model",
    "create_engine",
    "get_backend",
    "register_backend",
    "solve_assignment",
    "solve_model",
]
