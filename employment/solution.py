"""Turn resolved engine values into a readable assignment."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, List, Optional, Sequence, TextIO, Tuple

from .model import AssignmentModel

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from .api import AssignmentResult


ASSIGNED_THRESHOLD = 0.5

BoolGrid = Tuple[Tuple[bool, ...], ...]


def threshold_values(
    values: Sequence[Sequence[Optional[float]]], threshold: float = ASSIGNED_THRESHOLD
) -> BoolGrid:
    """Round near-binary engine values to booleans.

    Missing values (``None``) are treated as not assigned.
    """

    return tuple(
        tuple(value is not None and value > threshold for value in row) for row in values
    )


def read_values(model: AssignmentModel) -> Tuple[Tuple[Optional[float], ...], ...]:
    engine = model.engine
    return tuple(tuple(engine.value(var) for var in row) for row in model.variables)


def extract_solution(model: AssignmentModel) -> BoolGrid:
    """Return the ``[student][class]`` grid of chosen pairs."""

    return threshold_values(read_values(model))


def preference_score(model: AssignmentModel, selected: BoolGrid) -> float:
    """Sum the preference coefficients of the chosen pairs."""

    total = 0.0
    for coeff_row, selected_row in zip(model.coefficients, selected):
        for coefficient, chosen in zip(coeff_row, selected_row):
            if chosen and coefficient is not None:
                total += coefficient
    return total


def format_report(result: "AssignmentResult") -> List[str]:
    """Return the per-student report lines for ``result``."""

    if not result.found:
        return ["No solution found."]
    lines = [f"Total satisfaction: {result.objective_value}", ""]
    for student, classes in sorted(result.by_student().items()):
        if not classes:
            lines.append(f"Student {student} was not assigned.")
            continue
        for class_index in classes:
            lines.append(f"Student {student} was assigned to class {class_index}.")
    return lines


def print_report(result: "AssignmentResult", file: Optional[TextIO] = None) -> None:
    """Print the report; without ``file`` a failure notice goes to stderr."""

    if file is None:
        file = sys.stdout if result.found else sys.stderr
    for line in format_report(result):
        print(line, file=file)


__all__ = [
    "ASSIGNED_THRESHOLD",
    "extract_solution",
    "format_report",
    "preference_score",
    "print_report",
    "read_values",
    "threshold_values",
]
