"""
Program assembly and workout editing.

Templates are copied into slots once; the resulting slots are then the
program's own state and evolve independently of the template.
"""

from collections.abc import Mapping, Sequence
from dataclasses import replace

from .config import INITIAL_DAY_INDEX, INITIAL_GROUP_SLOT
from .models import Program, ProgramExerciseSlot, WorkoutTemplate, new_id
from .partitioner import groups_for_day, slots_for_day

# Starting weight goals keyed by exercise id
Weights = Mapping[str, float]


def slots_from_template(
    program_id: str,
    template: WorkoutTemplate,
    day_index: int,
    first_order: int,
    weights: Weights | None = None,
) -> list[ProgramExerciseSlot]:
    """
    Copy a template's exercises into new slots.

    rep_goal starts at the top of the range; weight_goal comes from
    weights (0.0 when absent).

    Args:
        program_id: Owning program
        template: Template to copy
        day_index: Target day (1-based)
        first_order: Order value for the first new slot

    Returns:
        New slots with consecutive order values
    """
    weights = weights or {}
    slots = []
    for offset, te in enumerate(template.ordered_exercises()):
        weight = weights.get(te.exercise_id, 0.0) if te.exercise_id else 0.0
        slots.append(
            ProgramExerciseSlot(
                id=new_id(),
                program_id=program_id,
                day_index=day_index,
                order=first_order + offset,
                group_label=template.name,
                exercise_id=te.exercise_id,
                sets=te.sets,
                rep_min=te.rep_min,
                rep_max=te.rep_max,
                rep_goal=te.rep_max,
                weight_goal=float(weight),
                consecutive_misses=0,
            )
        )
    return slots


def assemble_program(
    name: str,
    days: Sequence[Sequence[WorkoutTemplate]],
    weights: Weights | None = None,
) -> tuple[Program, list[ProgramExerciseSlot]]:
    """
    Build a new program from templates.

    Args:
        name: Program name
        days: For each day in cycle order, the templates performed that day
        weights: Starting weight goals keyed by exercise id

    Returns:
        (program, slots); the program starts at day 1, first group
    """
    if not days:
        raise ValueError("a program needs at least one day")

    program = Program(
        id=new_id(),
        name=name,
        current_day_index=INITIAL_DAY_INDEX,
        current_group_slot=INITIAL_GROUP_SLOT,
    )
    slots: list[ProgramExerciseSlot] = []
    for day_index, templates in enumerate(days, start=1):
        order = 0
        for template in templates:
            new = slots_from_template(program.id, template, day_index, order, weights)
            slots.extend(new)
            order += len(new)
    return program, slots


def add_workout(
    program: Program,
    slots: Sequence[ProgramExerciseSlot],
    template: WorkoutTemplate,
    day_index: int,
    weights: Weights | None = None,
) -> tuple[Program, list[ProgramExerciseSlot]]:
    """
    Append a template's exercises to the end of a day.

    day_index may be one past the current last day, which lengthens the
    cycle.  The program's group pointer goes back to the first workout of
    its current day; the day pointer is kept.

    Returns:
        (program with the reset pointer, only the newly created slots)
    """
    last_day = max((s.day_index for s in slots), default=0)
    if day_index < 1 or day_index > last_day + 1:
        raise ValueError(f"day_index must be between 1 and {last_day + 1}, got {day_index}")

    existing = slots_for_day(slots, day_index)
    next_order = existing[-1].order + 1 if existing else 0
    new_slots = slots_from_template(program.id, template, day_index, next_order, weights)
    return replace(program, current_group_slot=INITIAL_GROUP_SLOT), new_slots


def _renumber(groups: list[list[ProgramExerciseSlot]]) -> list[ProgramExerciseSlot]:
    """Flatten groups and assign order 0..n-1 in sequence."""
    flat = [s for group in groups for s in group]
    return [replace(s, order=i) for i, s in enumerate(flat)]


def remove_workout(
    slots: Sequence[ProgramExerciseSlot], day_index: int, position: int
) -> tuple[list[ProgramExerciseSlot], list[str]]:
    """
    Remove the group at a position within a day.

    Args:
        slots: All slots of the program
        day_index: Day holding the group
        position: Group index within the day (0-based)

    Returns:
        (renumbered remaining slots of that day, ids of removed slots)

    Raises:
        IndexError: If the day has no group at that position
    """
    groups = groups_for_day(slots, day_index)
    if position < 0 or position >= len(groups):
        raise IndexError(
            f"Day {day_index} has no workout #{position + 1} ({len(groups)} workouts)"
        )
    removed = groups.pop(position)
    return _renumber([g.slots for g in groups]), removed.slot_ids


def move_workout(
    slots: Sequence[ProgramExerciseSlot], day_index: int, source: int, destination: int
) -> list[ProgramExerciseSlot]:
    """
    Move a group within its day and renumber the day's order values.

    Returns:
        All slots of the day, renumbered

    Raises:
        IndexError: If source or destination is out of range
    """
    groups = [g.slots for g in groups_for_day(slots, day_index)]
    for name, idx in (("source", source), ("destination", destination)):
        if idx < 0 or idx >= len(groups):
            raise IndexError(f"{name} {idx + 1} out of range (1-{len(groups)})")
    groups.insert(destination, groups.pop(source))
    return _renumber(groups)
