"""
Progression engine: evolve a slot's targets from one session's result.

Decision order:

1. Miss (actual volume < goal volume): count the miss; on the third
   consecutive miss deload weight_goal by 15% and reset the counter.
2. Hit with last set at or above rep_goal: reset the counter, then climb
   the rep ladder; at the top of the range add weight and restart the
   ladder at rep_min.
3. Hit with last set short of rep_goal: reset the counter only; targets
   hold.

Case 3 produces neither progression nor penalty.  Volume was met through
the earlier sets, so the exercise stays where it is.
"""

import logging
import math
from dataclasses import replace

from .config import DEFAULT_PROGRESSION, ProgressionConfig
from .models import ProgramExerciseSlot, SessionResult

logger = logging.getLogger(__name__)


def progress(
    slot: ProgramExerciseSlot,
    result: SessionResult,
    config: ProgressionConfig = DEFAULT_PROGRESSION,
) -> ProgramExerciseSlot:
    """
    Compute the slot's next target state.

    Pure: the input slot is not modified; the caller applies the returned
    copy.

    Args:
        slot: Current target state
        result: Recorded performance for this slot
        config: Weight increment, deload factor and miss threshold

    Returns:
        New ProgramExerciseSlot with updated rep_goal, weight_goal and
        consecutive_misses
    """
    if result.actual_volume < result.goal_volume:
        misses = slot.consecutive_misses + 1
        weight = slot.weight_goal
        if misses >= config.misses_before_deload:
            weight = slot.weight_goal * config.deload_factor
            misses = 0
            logger.debug(
                "slot %s deload: weight %.2f -> %.2f", slot.id, slot.weight_goal, weight
            )
        else:
            logger.debug("slot %s miss %d", slot.id, misses)
        return replace(slot, consecutive_misses=misses, weight_goal=weight)

    if result.last_reps >= slot.rep_goal:
        if slot.rep_goal < slot.rep_max:
            logger.debug("slot %s rep goal %d -> %d", slot.id, slot.rep_goal, slot.rep_goal + 1)
            return replace(slot, consecutive_misses=0, rep_goal=slot.rep_goal + 1)
        weight = slot.weight_goal + config.weight_increment_kg
        logger.debug(
            "slot %s weight step %.2f -> %.2f, reps reset to %d",
            slot.id,
            slot.weight_goal,
            weight,
            slot.rep_min,
        )
        return replace(
            slot, consecutive_misses=0, weight_goal=weight, rep_goal=slot.rep_min
        )

    logger.debug("slot %s hold: last set %d < goal %d", slot.id, result.last_reps, slot.rep_goal)
    return replace(slot, consecutive_misses=0)


def progress_all(
    slots: list[ProgramExerciseSlot],
    results: dict[str, SessionResult],
    config: ProgressionConfig = DEFAULT_PROGRESSION,
) -> list[ProgramExerciseSlot]:
    """Progress every slot that has a result; slots without one are returned unchanged."""
    return [
        progress(s, results[s.id], config) if s.id in results else s for s in slots
    ]


def sessions_to_target(
    current_weight: float,
    target_weight: float,
    increment: float = DEFAULT_PROGRESSION.weight_increment_kg,
) -> int | None:
    """
    Number of weight steps needed to reach target_weight.

    Assumes one successful weight step per session.  Returns None when
    the target is not above the current weight goal.
    """
    if target_weight <= current_weight or increment <= 0:
        return None
    return math.ceil((target_weight - current_weight) / increment)
