"""Eligibility checks for a (student, class) pairing.

Each check is a pure lookup on an :class:`~employment.problem.AssignmentProblem`.
A pair that fails keeps its 0/1 variable in the model but receives no
objective coefficient.
"""

from __future__ import annotations

from typing import List

from .problem import WEEKDAYS, AssignmentProblem


def prof_wants_student(problem: AssignmentProblem, student: int, class_index: int) -> bool:
    return problem.prof_preferences[student][class_index] > 0


def stud_wants_class(problem: AssignmentProblem, student: int, class_index: int) -> bool:
    # Single-matrix problems carry one shared preference grid.
    grid = problem.stud_preferences if problem.weighted else problem.prof_preferences
    return grid[student][class_index] > 0


def conflicting_days(problem: AssignmentProblem, student: int, class_index: int) -> List[int]:
    """Return the weekdays on which the class meets in a slot the student has taken."""

    if not problem.checks_slots:
        return []
    days = []
    for day in range(WEEKDAYS):
        slot = problem.class_slots[class_index][day]
        if slot == 0:
            continue
        if slot in problem.registered_on(student, day):
            days.append(day)
    return days


def is_student_slot_free(problem: AssignmentProblem, student: int, class_index: int) -> bool:
    return not conflicting_days(problem, student, class_index)


def is_eligible(problem: AssignmentProblem, student: int, class_index: int) -> bool:
    """Return ``True`` if the pair may contribute to the objective.

    Weighted problems need mutual interest and a free schedule.  The
    single-matrix variant scores every pair and only drops slot conflicts.
    """

    if not is_student_slot_free(problem, student, class_index):
        return False
    if not problem.weighted:
        return True
    return prof_wants_student(problem, student, class_index) and stud_wants_class(
        problem, student, class_index
    )


__all__ = [
    "conflicting_days",
    "is_eligible",
    "is_student_slot_free",
    "prof_wants_student",
    "stud_wants_class",
]
