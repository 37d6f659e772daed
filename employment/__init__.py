"""Student employment assignment via binary integer programming.

Classes are assigned to students so that each class has at most one student,
weekly hours stay under a cap and schedules do not clash, while maximising a
weighted mix of professor and student preferences.  Models are solved by an
exact MIP engine chosen by name (OR-Tools or PuLP).
"""

from .api import (
    Assignment,
    AssignmentResult,
    SolverStatus,
    available_backends,
    build_model,
    create_engine,
    get_backend,
    register_backend,
    solve_assignment,
    solve_model,
)
from .config import MAX_HOURS, REL_WEIGHT_PROF, REL_WEIGHT_STUD, SolverConfig
from .errors import ConfigError, EngineUnavailableError, ProblemShapeError
from .problem import WEEKDAYS, AssignmentProblem
from .solution import format_report, print_report

__all__ = [
    "Assignment",
    "AssignmentProblem",
    "AssignmentResult",
    "ConfigError",
    "EngineUnavailableError",
    "MAX_HOURS",
    "ProblemShapeError",
    "REL_WEIGHT_PROF",
    "REL_WEIGHT_STUD",
    "SolverConfig",
    "SolverStatus",
    "WEEKDAYS",
    "available_backends",
    "build_model",
    "create_engine",
    "format_report",
    "get_backend",
    "print_report",
    "register_backend",
    "solve_assignment",
    "solve_model",
]
