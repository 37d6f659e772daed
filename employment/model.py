"""Formulation of the student employment assignment as a binary program.

The build runs in a fixed order: variables, the per-class constraint, the
per-student hours cap and finally the objective.  Every call works on a fresh
:class:`~employment.engine.Engine`, so nothing is shared between solves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fractions import Fraction
from math import gcd
from typing import Any, Dict, List, Optional, Tuple

from .config import SolverConfig
from .eligibility import conflicting_days, is_eligible
from .engine import Engine
from .problem import AssignmentProblem


logger = logging.getLogger(__name__)

VarGrid = Tuple[Tuple[Any, ...], ...]
CoefficientGrid = Tuple[Tuple[Optional[float], ...], ...]

# Weights are matched to fractions with at most this denominator.
WEIGHT_DENOMINATOR_LIMIT = 10_000
WEIGHT_TOLERANCE = 1e-9


@dataclass(frozen=True)
class AssignmentModel:
    """A built model ready to be handed to its engine.

    ``coefficients`` holds the preference score of each pair (``None`` for
    ineligible pairs); it excludes the tie-break bonus.
    """

    problem: AssignmentProblem
    config: SolverConfig
    engine: Engine
    variables: VarGrid
    coefficients: CoefficientGrid
    class_constraints: int
    hours_constraints: int

    @property
    def num_variables(self) -> int:
        return sum(len(row) for row in self.variables)


def create_variables(engine: Engine, problem: AssignmentProblem) -> VarGrid:
    """Create one binary variable per (student, class) pair."""

    return tuple(
        tuple(engine.new_binary_var(f"assign_s{s}_c{c}") for c in problem.classes())
        for s in problem.students()
    )


def add_one_student_per_class(
    engine: Engine, problem: AssignmentProblem, variables: VarGrid
) -> int:
    """Allow at most one student on every class.

    The bound is ``[0, 1]``: a class may legitimately stay unfilled.
    """

    for c in problem.classes():
        engine.add_range_constraint(
            [(variables[s][c], 1.0) for s in problem.students()],
            0.0,
            1.0,
            f"one_student_class_{c}",
        )
    return problem.num_classes


def add_max_hours_per_student(
    engine: Engine, problem: AssignmentProblem, variables: VarGrid, max_hours: float
) -> int:
    """Cap the weekly hours of the classes assigned to each student."""

    if not problem.tracks_hours:
        return 0
    hours = problem.hours_per_class
    for s in problem.students():
        engine.add_range_constraint(
            [(variables[s][c], float(hours[c])) for c in problem.classes()],
            0.0,
            float(max_hours),
            f"max_hours_student_{s}",
        )
    return problem.num_students


def preference_coefficient(
    problem: AssignmentProblem, student: int, class_index: int, config: SolverConfig
) -> Optional[float]:
    """Return the objective weight of a pair, or ``None`` if it is ineligible."""

    if not is_eligible(problem, student, class_index):
        return None
    prof = problem.prof_preferences[student][class_index]
    if not problem.weighted:
        return float(prof)
    stud = problem.stud_preferences[student][class_index]
    total = 0.0
    total += prof * config.prof_weight
    total += stud * config.stud_weight
    return total


def _weight_fraction(weight: float) -> Optional[Fraction]:
    approx = Fraction(weight).limit_denominator(WEIGHT_DENOMINATOR_LIMIT)
    if abs(float(approx) - weight) > WEIGHT_TOLERANCE * max(1.0, abs(weight)):
        return None
    return approx


def coefficient_resolution(problem: AssignmentProblem, config: SolverConfig) -> Optional[float]:
    """Return the smallest nonzero gap between two preference scores.

    Preferences are integers, so every score is an integer combination of the
    weights and any two scores differ by a multiple of the weights' common
    divisor.  ``None`` means the weights have no such divisor worth using.
    """

    if not problem.weighted:
        return 1.0
    fractions = [_weight_fraction(w) for w in (config.prof_weight, config.stud_weight)]
    if any(f is None for f in fractions):
        return None
    numerator, denominator = 0, 1
    for f in fractions:
        if f == 0:
            continue
        numerator = gcd(numerator * f.denominator, f.numerator * denominator)
        denominator *= f.denominator
    if numerator == 0:
        return None
    return float(Fraction(numerator, denominator))


def tie_break_bonus(
    problem: AssignmentProblem, student: int, class_index: int, scale: float
) -> float:
    # At most num_classes pairs are chosen, so the bonuses sum to <= scale.
    rank = student * problem.num_classes + class_index
    return scale / (rank + 1) / problem.num_classes


def tie_break_scale(problem: AssignmentProblem, config: SolverConfig) -> float:
    """Return the total bonus budget, kept below one score resolution step."""

    if not config.tie_break:
        return 0.0
    resolution = coefficient_resolution(problem, config)
    if resolution is None:
        logger.debug(
            "Tie-break disabled: weights %r and %r have no common resolution",
            config.prof_weight,
            config.stud_weight,
        )
        return 0.0
    return config.tie_break_scale * resolution


def compose_objective(
    engine: Engine, problem: AssignmentProblem, variables: VarGrid, config: SolverConfig
) -> CoefficientGrid:
    """Set one accumulated objective coefficient per eligible variable."""

    bonus_scale = tie_break_scale(problem, config)
    coefficients: List[Tuple[Optional[float], ...]] = []
    objective: Dict[Tuple[int, int], float] = {}
    for s in problem.students():
        row: List[Optional[float]] = []
        for c in problem.classes():
            coefficient = preference_coefficient(problem, s, c, config)
            row.append(coefficient)
            if coefficient is None:
                days = conflicting_days(problem, s, c)
                if days:
                    logger.debug("Student %d conflicts with class %d on weekdays %s", s, c, days)
                else:
                    logger.debug("Student %d and class %d are not mutually interested", s, c)
                continue
            weight = coefficient
            if bonus_scale and coefficient > 0:
                weight += tie_break_bonus(problem, s, c, bonus_scale)
            objective[(s, c)] = weight
        coefficients.append(tuple(row))

    for (s, c), weight in objective.items():
        engine.set_objective_coefficient(variables[s][c], weight)
    engine.maximize()
    return tuple(coefficients)


def build_assignment_model(
    engine: Engine, problem: AssignmentProblem, config: Optional[SolverConfig] = None
) -> AssignmentModel:
    """Populate ``engine`` with the full assignment model."""

    config = config or SolverConfig()
    variables = create_variables(engine, problem)
    class_constraints = add_one_student_per_class(engine, problem, variables)
    hours_constraints = add_max_hours_per_student(engine, problem, variables, config.max_hours)
    coefficients = compose_objective(engine, problem, variables, config)
    logger.debug(
        "Built assignment model on %s: %d variables, %d constraints",
        engine.name,
        engine.num_variables(),
        engine.num_constraints(),
    )
    return AssignmentModel(
        problem=problem,
        config=config,
        engine=engine,
        variables=variables,
        coefficients=coefficients,
        class_constraints=class_constraints,
        hours_constraints=hours_constraints,
    )


__all__ = [
    "AssignmentModel",
    "add_max_hours_per_student",
    "add_one_student_per_class",
    "build_assignment_model",
    "coefficient_resolution",
    "compose_objective",
    "create_variables",
    "preference_coefficient",
    "tie_break_bonus",
    "tie_break_scale",
]
