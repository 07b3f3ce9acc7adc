"""
Configuration constants for the progression and scheduling engine.

All adjustable parameters are centralized here.  The YAML loader in
``core/engine/config_loader.py`` can override the progression constants;
the scheduling constants are fixed.
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# PROGRESSION
# =============================================================================

WEIGHT_INCREMENT_KG: Final[float] = 2.5  # Added after topping the rep range
DELOAD_FACTOR: Final[float] = 0.85  # weight_goal multiplier on deload
MISSES_BEFORE_DELOAD: Final[int] = 3  # Consecutive volume misses that trigger a deload

# =============================================================================
# SCHEDULING
# =============================================================================

DEFAULT_GROUP_LABEL: Final[str] = "Workout"  # Label for slots with no group label
INITIAL_DAY_INDEX: Final[int] = 1
INITIAL_GROUP_SLOT: Final[int] = 0

# =============================================================================
# STORAGE
# =============================================================================

DATA_DIR_ENV: Final[str] = "LIFT_SCHEDULER_HOME"
DEFAULT_DATA_DIR_NAME: Final[str] = ".lift-scheduler"
STORE_FILE_NAME: Final[str] = "program_store.json"
DRAFTS_FILE_NAME: Final[str] = "drafts.json"


@dataclass(frozen=True)
class ProgressionConfig:
    """Constants consumed by the progression engine."""

    weight_increment_kg: float = WEIGHT_INCREMENT_KG
    deload_factor: float = DELOAD_FACTOR
    misses_before_deload: int = MISSES_BEFORE_DELOAD

    def __post_init__(self) -> None:
        if self.weight_increment_kg < 0:
            raise ValueError("weight_increment_kg must be non-negative")
        if not 0 < self.deload_factor <= 1:
            raise ValueError("deload_factor must be in (0, 1]")
        if self.misses_before_deload < 1:
            raise ValueError("misses_before_deload must be at least 1")


DEFAULT_PROGRESSION: Final[ProgressionConfig] = ProgressionConfig()
