"""
Group partitioner: split a day's slots into contiguous workout groups.

A new group starts whenever the label changes from the previous slot.
Labels are not assumed unique: a label that reappears after a different
one starts a second, distinct group with the same display name.
"""

from collections.abc import Iterable

from .config import DEFAULT_GROUP_LABEL
from .models import Group, ProgramExerciseSlot


def slot_label(slot: ProgramExerciseSlot) -> str:
    """Return the slot's group label, defaulting missing labels to "Workout"."""
    return slot.group_label or DEFAULT_GROUP_LABEL


def slots_for_day(
    slots: Iterable[ProgramExerciseSlot], day: int
) -> list[ProgramExerciseSlot]:
    """Slots on the given day sorted by order."""
    return sorted((s for s in slots if s.day_index == day), key=lambda s: s.order)


def groups_for_day(slots: Iterable[ProgramExerciseSlot], day: int) -> list[Group]:
    """
    Partition the day's slots into groups in first-seen order.

    Args:
        slots: All slots of a program (any day, any order)
        day: 1-based day index

    Returns:
        Groups for the day; empty if the day has no slots
    """
    groups: list[Group] = []
    for slot in slots_for_day(slots, day):
        label = slot_label(slot)
        if not groups or groups[-1].label != label:
            groups.append(Group(label=label, day_index=day, position=len(groups)))
        groups[-1].slots.append(slot)
    return groups


def group_labels(slots: Iterable[ProgramExerciseSlot], day: int) -> list[str]:
    """Display names of the day's groups, one per contiguous run."""
    return [g.label for g in groups_for_day(slots, day)]


def day_indices(slots: Iterable[ProgramExerciseSlot]) -> list[int]:
    """Distinct day indices present, ascending."""
    return sorted({s.day_index for s in slots})
