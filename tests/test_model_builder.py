"""Tests for the model builder and objective composer against a fake engine."""

import math

import pytest

from employment.config import SolverConfig
from employment.model import (
    build_assignment_model,
    coefficient_resolution,
    preference_coefficient,
    tie_break_bonus,
    tie_break_scale,
)
from employment.problem import AssignmentProblem


NO_TIE_BREAK = SolverConfig(tie_break=False)


def _weighted(prof, stud, hours=None, **extra):
    return AssignmentProblem(
        prof_preferences=prof,
        stud_preferences=stud,
        hours_per_class=hours,
        **extra,
    )


def test_one_variable_per_student_class_pair(recording_engine):
    problem = _weighted([[1, 2, 3], [1, 2, 3]], [[1, 1, 1], [1, 1, 1]], hours=[5, 5, 5])

    model = build_assignment_model(recording_engine, problem)

    assert model.num_variables == 6
    assert len(recording_engine.variables) == 6
    assert len(set(recording_engine.variables)) == 6
    assert model.variables[1][2] == "assign_s1_c2"


def test_class_constraint_is_at_most_one(recording_engine):
    problem = _weighted([[1, 2], [2, 1], [1, 1]], [[1, 1], [1, 1], [1, 1]])

    model = build_assignment_model(recording_engine, problem)

    class_constraints = [c for c in recording_engine.constraints if c[0].startswith("one_student")]
    assert model.class_constraints == 2
    assert len(class_constraints) == 2
    for name, terms, lower, upper in class_constraints:
        assert (lower, upper) == (0.0, 1.0)
        assert [coef for _, coef in terms] == [1.0, 1.0, 1.0]
    _, terms, _, _ = class_constraints[1]
    assert [var for var, _ in terms] == ["assign_s0_c1", "assign_s1_c1", "assign_s2_c1"]


def test_hours_constraint_weights_each_class(recording_engine):
    problem = _weighted([[1, 1, 1], [1, 1, 1]], [[1, 1, 1], [1, 1, 1]], hours=[10, 4, 0])

    model = build_assignment_model(recording_engine, problem, SolverConfig(max_hours=12))

    hours = [c for c in recording_engine.constraints if c[0].startswith("max_hours")]
    assert model.hours_constraints == 2
    assert [c[0] for c in hours] == ["max_hours_student_0", "max_hours_student_1"]
    name, terms, lower, upper = hours[0]
    assert (lower, upper) == (0.0, 12.0)
    assert terms == [("assign_s0_c0", 10.0), ("assign_s0_c1", 4.0), ("assign_s0_c2", 0.0)]


def test_hours_constraint_skipped_without_hours(recording_engine):
    problem = AssignmentProblem.from_preferences([[1, 2], [2, 1]])

    model = build_assignment_model(recording_engine, problem)

    assert model.hours_constraints == 0
    assert all(not c[0].startswith("max_hours") for c in recording_engine.constraints)


def test_weighted_terms_are_accumulated_not_overwritten(recording_engine):
    problem = _weighted([[4]], [[2]])

    build_assignment_model(recording_engine, problem, NO_TIE_BREAK)

    # One set call holding both terms: 4 * 0.75 + 2 * 0.25.
    assert recording_engine.set_calls == [("assign_s0_c0", pytest.approx(3.5))]
    assert recording_engine.maximized


def test_custom_weights_flow_into_coefficients():
    problem = _weighted([[4]], [[2]])
    config = SolverConfig(prof_weight=0.5, stud_weight=0.5)

    assert preference_coefficient(problem, 0, 0, config) == pytest.approx(3.0)


def test_ineligible_pairs_get_no_coefficient(recording_engine):
    problem = _weighted([[2, 2], [2, 2], [1, 1]], [[0, 0], [0, 1], [2, 1]], hours=[10, 10])

    model = build_assignment_model(recording_engine, problem, NO_TIE_BREAK)

    assert model.coefficients == (
        (None, None),
        (None, pytest.approx(1.75)),
        (pytest.approx(1.25), pytest.approx(1.0)),
    )
    assert set(recording_engine.objective) == {"assign_s1_c1", "assign_s2_c0", "assign_s2_c1"}


def test_single_matrix_uses_raw_preference(recording_engine):
    problem = AssignmentProblem.from_preferences([[0, 3]])

    model = build_assignment_model(recording_engine, problem, NO_TIE_BREAK)

    assert model.coefficients == ((0.0, 3.0),)
    assert recording_engine.objective == {"assign_s0_c0": 0.0, "assign_s0_c1": 3.0}


def test_slot_conflicts_never_receive_positive_weight(recording_engine):
    problem = _weighted(
        [[3, 3], [3, 3]],
        [[3, 3], [3, 3]],
        hours=[5, 5],
        registered_slots=[{0: {1}}, {}],
        class_slots=[[1, 0, 0, 0, 0], [0, 2, 0, 0, 0]],
    )

    model = build_assignment_model(recording_engine, problem)

    assert model.coefficients[0][0] is None
    assert "assign_s0_c0" not in recording_engine.objective
    assert recording_engine.objective["assign_s1_c0"] > 0


def test_tie_break_prefers_earlier_pairs_and_stays_small(recording_engine):
    problem = _weighted([[2, 2], [2, 2]], [[2, 2], [2, 2]])
    config = SolverConfig()

    build_assignment_model(recording_engine, problem, config)

    weights = recording_engine.objective
    assert weights["assign_s0_c0"] > weights["assign_s0_c1"] > weights["assign_s1_c0"]
    total_bonus = sum(w - 2.0 for w in weights.values())
    assert 0 < total_bonus
    # Only num_classes pairs can be chosen at once.
    best_two = sorted((w - 2.0 for w in weights.values()), reverse=True)[:2]
    assert sum(best_two) <= config.tie_break_scale * 0.25


def test_tie_break_skips_zero_coefficients(recording_engine):
    problem = AssignmentProblem.from_preferences([[0, 1]])
    config = SolverConfig()

    build_assignment_model(recording_engine, problem, config)

    assert recording_engine.objective["assign_s0_c0"] == 0.0
    assert recording_engine.objective["assign_s0_c1"] == pytest.approx(
        1.0 + tie_break_bonus(problem, 0, 1, tie_break_scale(problem, config))
    )


@pytest.mark.parametrize(
    "prof_weight, stud_weight, expected",
    [
        (0.75, 0.25, 0.25),
        (0.5, 0.5, 0.5),
        (0.001, 0.001, 0.001),
        (0.6, 0.4, 0.2),
        (1.0, 0.0, 1.0),
    ],
)
def test_coefficient_resolution_follows_weights(prof_weight, stud_weight, expected):
    problem = _weighted([[1]], [[1]])
    config = SolverConfig(prof_weight=prof_weight, stud_weight=stud_weight)

    assert coefficient_resolution(problem, config) == pytest.approx(expected)


def test_single_matrix_resolution_is_one():
    problem = AssignmentProblem.from_preferences([[1, 2]])

    assert coefficient_resolution(problem, SolverConfig(prof_weight=0.001)) == 1.0


def test_tie_break_disabled_for_weights_without_resolution(recording_engine):
    problem = _weighted([[1, 2]], [[1, 2]])
    config = SolverConfig(prof_weight=math.pi, stud_weight=1.0)

    model = build_assignment_model(recording_engine, problem, config)

    assert coefficient_resolution(problem, config) is None
    assert tie_break_scale(problem, config) == 0.0
    assert recording_engine.objective == {
        "assign_s0_c0": pytest.approx(model.coefficients[0][0]),
        "assign_s0_c1": pytest.approx(model.coefficients[0][1]),
    }


@pytest.mark.parametrize(
    "prof_weight, stud_weight",
    [(0.001, 0.001), (0.75, 0.25), (0.3, 0.0), (0.02, 0.07)],
)
def test_tie_break_never_outweighs_a_preference_step(recording_engine, prof_weight, stud_weight):
    problem = _weighted([[1, 1], [2, 2]], [[1, 1], [2, 2]])
    config = SolverConfig(prof_weight=prof_weight, stud_weight=stud_weight, tie_break_scale=0.99)

    model = build_assignment_model(recording_engine, problem, config)

    bonuses = [
        recording_engine.objective[f"assign_s{s}_c{c}"] - model.coefficients[s][c]
        for s in problem.students()
        for c in problem.classes()
    ]
    best_two = sorted(bonuses, reverse=True)[:2]
    smallest_gap = min(
        abs(a - b)
        for row in model.coefficients
        for a in row
        for other in model.coefficients
        for b in other
        if abs(a - b) > 1e-12
    )
    assert sum(best_two) < smallest_gap


def test_small_weights_keep_the_better_student(recording_engine):
    problem = _weighted([[1], [2]], [[1], [2]])
    config = SolverConfig(prof_weight=0.001, stud_weight=0.001)

    build_assignment_model(recording_engine, problem, config)

    weights = recording_engine.objective
    assert weights["assign_s1_c0"] > weights["assign_s0_c0"]
    assert weights["assign_s1_c0"] == pytest.approx(0.004, abs=1e-3)


def test_each_variable_set_at_most_once(recording_engine):
    problem = _weighted([[1, 2], [3, 4]], [[4, 3], [2, 1]])

    build_assignment_model(recording_engine, problem)

    names = [name for name, _ in recording_engine.set_calls]
    assert len(names) == len(set(names)) == 4
