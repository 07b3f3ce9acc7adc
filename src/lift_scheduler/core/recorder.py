"""
Session recorder: turn raw per-set text into per-exercise results.

Unparsable or blank input is not an error: the set is assumed to have been
performed at the slot's goal, so an incomplete form never registers as an
automatic miss.
"""

import math
from collections.abc import Mapping, Sequence

from .models import Group, PerSetEntry, ProgramExerciseSlot, SessionResult


def parse_weight(text: str | None, default: float) -> float:
    """
    Parse a weight entry.

    Args:
        text: Raw text, may be None or blank
        default: Value used when text is blank, not a number, or not finite

    Returns:
        Parsed weight or default
    """
    if text is None:
        return default
    try:
        value = float(text.strip())
    except ValueError:
        return default
    if not math.isfinite(value):
        return default
    return value


def parse_reps(text: str | None, default: int) -> int:
    """Parse a whole-number reps entry, falling back to default when blank or not an integer."""
    if text is None:
        return default
    try:
        return int(text.strip())
    except ValueError:
        return default


def fit_entries(
    entries: Sequence[PerSetEntry] | None, sets: int
) -> list[PerSetEntry]:
    """Clip or pad entries with blank sets so there is exactly one per set."""
    fitted = list(entries or [])[:sets]
    fitted.extend(PerSetEntry() for _ in range(sets - len(fitted)))
    return fitted


def record_exercise(
    slot: ProgramExerciseSlot, entries: Sequence[PerSetEntry] | None
) -> SessionResult:
    """
    Summarize one exercise's sets against its goal.

    actual_volume = sum(weight_i * reps_i) over the slot's sets
    goal_volume   = sets * weight_goal * rep_goal

    Args:
        slot: Slot whose goals apply
        entries: Raw per-set text; missing sets count as blank

    Returns:
        SessionResult for the slot
    """
    weights: list[float] = []
    reps: list[int] = []
    for entry in fit_entries(entries, slot.sets):
        weights.append(parse_weight(entry.weight_text, slot.weight_goal))
        reps.append(parse_reps(entry.reps_text, slot.rep_goal))

    actual = sum(w * r for w, r in zip(weights, reps))

    return SessionResult(
        actual_volume=actual,
        goal_volume=slot.goal_volume,
        last_weight=weights[-1],
        last_reps=reps[-1],
        set_weights=weights,
        set_reps=reps,
    )


def record_session(
    group: Group, entries: Mapping[str, Sequence[PerSetEntry]]
) -> dict[str, SessionResult]:
    """
    Record every slot of the group.

    Args:
        group: The group being finalized
        entries: Raw entries keyed by slot id; absent slots count as all blank

    Returns:
        SessionResult keyed by slot id, in group order
    """
    return {slot.id: record_exercise(slot, entries.get(slot.id)) for slot in group.slots}
