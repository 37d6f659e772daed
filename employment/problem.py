"""Input record describing one student employment assignment problem.

All grids are normalised to tuples on construction so an
:class:`AssignmentProblem` can be shared between solves without any risk of
the caller mutating it mid-build.  Shape problems are reported immediately via
:class:`~employment.errors.ProblemShapeError`.
"""

from __future__ import annotations

from collections import abc
from dataclasses import dataclass
from numbers import Integral
from typing import Any, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .errors import ProblemShapeError


WEEKDAYS = 5

Grid = Tuple[Tuple[int, ...], ...]
# One frozenset of occupied slots per weekday.
DaySlots = Tuple[FrozenSet[int], ...]


def _as_int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise ProblemShapeError(f"{where} must be an integer, got {value!r}")
    return int(value)


def _normalize_grid(rows: Sequence[Sequence[Any]], label: str) -> Grid:
    if not rows:
        raise ProblemShapeError(f"{label} must contain at least one row")
    grid = []
    width: Optional[int] = None
    for s, row in enumerate(rows):
        values = tuple(_as_int(v, f"{label}[{s}][{c}]") for c, v in enumerate(row))
        if width is None:
            width = len(values)
        elif len(values) != width:
            raise ProblemShapeError(
                f"{label} is ragged: row {s} has {len(values)} columns, expected {width}"
            )
        grid.append(values)
    if not width:
        raise ProblemShapeError(f"{label} must contain at least one column")
    return tuple(grid)


def _normalize_day_slots(entry: Any, student: int) -> DaySlots:
    where = f"registered_slots[{student}]"
    days: List[FrozenSet[int]] = [frozenset()] * WEEKDAYS
    if entry is None:
        return tuple(days)
    if isinstance(entry, abc.Mapping):
        items: Iterable[Tuple[Any, Any]] = entry.items()
    elif isinstance(entry, abc.Sequence) and not isinstance(entry, (str, bytes)):
        if len(entry) > WEEKDAYS:
            raise ProblemShapeError(
                f"{where} has {len(entry)} days, expected at most {WEEKDAYS}"
            )
        items = enumerate(entry)
    else:
        raise ProblemShapeError(
            f"{where} must map weekdays to slot collections, got {type(entry).__name__}"
        )
    for day, slots in items:
        day = _as_int(day, f"{where} weekday")
        if not 0 <= day < WEEKDAYS:
            raise ProblemShapeError(f"{where} weekday {day} is outside 0..{WEEKDAYS - 1}")
        if slots is None:
            continue
        if isinstance(slots, (str, bytes)) or not isinstance(slots, abc.Iterable):
            raise ProblemShapeError(
                f"{where}[{day}] must be a collection of slot ids, got {slots!r}"
            )
        days[day] = frozenset(_as_int(slot, f"{where}[{day}]") for slot in slots)
    return tuple(days)


@dataclass(frozen=True)
class AssignmentProblem:
    """Preference, hours and availability data for a single solve.

    Args:
        prof_preferences: ``[student][class]`` grid of professor preferences.
        stud_preferences: ``[student][class]`` grid of student preferences.
            ``None`` selects the single-preference-matrix variant.
        hours_per_class: Required weekly hours per class.  ``None`` disables
            the per-student hours cap.
        registered_slots: Per student, the occupied slots for each weekday,
            as a mapping or a sequence of at most 5 days.  Stored as a
            5-tuple of frozensets.
        class_slots: Per class, the assigned slot for each of the 5 weekdays
            (``0`` meaning no meeting that day).
    """

    prof_preferences: Grid
    stud_preferences: Optional[Grid] = None
    hours_per_class: Optional[Tuple[int, ...]] = None
    registered_slots: Optional[Tuple[DaySlots, ...]] = None
    class_slots: Optional[Grid] = None

    def __post_init__(self) -> None:
        prof = _normalize_grid(self.prof_preferences, "prof_preferences")
        object.__setattr__(self, "prof_preferences", prof)
        num_students, num_classes = len(prof), len(prof[0])

        if self.stud_preferences is not None:
            stud = _normalize_grid(self.stud_preferences, "stud_preferences")
            if (len(stud), len(stud[0])) != (num_students, num_classes):
                raise ProblemShapeError(
                    "stud_preferences must match prof_preferences: "
                    f"expected {num_students}x{num_classes}, got {len(stud)}x{len(stud[0])}"
                )
            object.__setattr__(self, "stud_preferences", stud)

        if self.hours_per_class is not None:
            hours = tuple(
                _as_int(h, f"hours_per_class[{c}]") for c, h in enumerate(self.hours_per_class)
            )
            if len(hours) != num_classes:
                raise ProblemShapeError(
                    f"hours_per_class has {len(hours)} entries but there are {num_classes} classes"
                )
            negative = [c for c, h in enumerate(hours) if h < 0]
            if negative:
                raise ProblemShapeError(f"hours_per_class must be non-negative (classes {negative})")
            object.__setattr__(self, "hours_per_class", hours)

        if (self.registered_slots is None) != (self.class_slots is None):
            raise ProblemShapeError(
                "registered_slots and class_slots must be provided together"
            )
        if self.class_slots is not None:
            class_slots = _normalize_grid(self.class_slots, "class_slots")
            if len(class_slots) != num_classes or len(class_slots[0]) != WEEKDAYS:
                raise ProblemShapeError(
                    f"class_slots must be {num_classes}x{WEEKDAYS}, "
                    f"got {len(class_slots)}x{len(class_slots[0])}"
                )
            if not isinstance(self.registered_slots, abc.Iterable):
                raise ProblemShapeError(
                    f"registered_slots must be a sequence, got {type(self.registered_slots).__name__}"
                )
            registered = tuple(
                _normalize_day_slots(entry, s) for s, entry in enumerate(self.registered_slots)
            )
            if len(registered) != num_students:
                raise ProblemShapeError(
                    f"registered_slots has {len(registered)} students, expected {num_students}"
                )
            object.__setattr__(self, "class_slots", class_slots)
            object.__setattr__(self, "registered_slots", registered)

    @classmethod
    def from_preferences(
        cls,
        preferences: Sequence[Sequence[int]],
        hours_per_class: Optional[Sequence[int]] = None,
    ) -> "AssignmentProblem":
        """Build the single-preference-matrix variant."""

        return cls(prof_preferences=preferences, hours_per_class=hours_per_class)

    @property
    def num_students(self) -> int:
        return len(self.prof_preferences)

    @property
    def num_classes(self) -> int:
        return len(self.prof_preferences[0])

    @property
    def weighted(self) -> bool:
        return self.stud_preferences is not None

    @property
    def tracks_hours(self) -> bool:
        return self.hours_per_class is not None

    @property
    def checks_slots(self) -> bool:
        return self.class_slots is not None

    def students(self) -> range:
        return range(self.num_students)

    def classes(self) -> range:
        return range(self.num_classes)

    def registered_on(self, student: int, day: int) -> FrozenSet[int]:
        """Return the slots ``student`` already occupies on ``day``."""

        if self.registered_slots is None:
            return frozenset()
        return self.registered_slots[student][day]


__all__ = ["AssignmentProblem", "WEEKDAYS"]
