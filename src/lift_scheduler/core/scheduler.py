"""
Scheduler: which group is due, and how the pointer moves after a session.

State is the program's (current_day_index, current_group_slot).  The cycle
length is recomputed from the slots on every call, so adding or removing
days changes it immediately.  There is no terminal state.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace

from .config import INITIAL_DAY_INDEX, INITIAL_GROUP_SLOT
from .models import Group, Program, ProgramExerciseSlot
from .partitioner import groups_for_day

logger = logging.getLogger(__name__)


def max_day_index(slots: Sequence[ProgramExerciseSlot], fallback: int) -> int:
    """Highest day_index across all slots, or fallback if there are none."""
    return max((s.day_index for s in slots), default=fallback)


def group_count(slots: Sequence[ProgramExerciseSlot], day: int) -> int:
    """Number of groups on the given day."""
    return len(groups_for_day(slots, day))


def clamp_group_slot(group_slot: int, count: int) -> int:
    """Clamp a possibly stale pointer into [0, count-1] (0 when count is 0)."""
    return max(0, min(group_slot, count - 1))


def due_group(program: Program, slots: Sequence[ProgramExerciseSlot]) -> Group | None:
    """
    Return the group currently due, or None if the current day has no slots.

    A group slot pointer beyond the day's group count is clamped to the
    last group rather than wrapped.
    """
    groups = groups_for_day(slots, program.current_day_index)
    if not groups:
        return None
    return groups[clamp_group_slot(program.current_group_slot, len(groups))]


def advance(program: Program, slots: Sequence[ProgramExerciseSlot]) -> Program:
    """
    Return a copy of the program with the pointer moved past the due group.

    Cycles through the day's groups first, then moves to the next day,
    wrapping to day 1 after the highest day present.

    Args:
        program: Program whose pointer should advance (not modified)
        slots: All slots of the program

    Returns:
        New Program with updated current_day_index / current_group_slot
    """
    count = group_count(slots, program.current_day_index)
    max_day = max_day_index(slots, fallback=program.current_day_index)

    if program.current_group_slot < count - 1:
        day, group_slot = program.current_day_index, program.current_group_slot + 1
    else:
        group_slot = INITIAL_GROUP_SLOT
        if program.current_day_index >= max_day:
            day = INITIAL_DAY_INDEX
        else:
            day = program.current_day_index + 1

    logger.debug(
        "advance program %s: (%d, %d) -> (%d, %d)",
        program.id,
        program.current_day_index,
        program.current_group_slot,
        day,
        group_slot,
    )
    return replace(program, current_day_index=day, current_group_slot=group_slot)
