"""
Data models for lift-scheduler.

All core dataclasses representing the exercise catalog, programs, their
per-exercise target state, and finalized session history.

Relationships are expressed as explicit id fields rather than object
references: a slot points at its program and exercise by id, a session
points at its program by id and embeds its exercise records.
"""

import uuid
from dataclasses import dataclass, field


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


@dataclass
class ExerciseRef:
    """
    A catalog exercise as seen by the engine.

    Owned by the catalog; the engine only reads it.
    """

    id: str
    name: str
    notes: str = ""

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("exercise name must be non-empty")


@dataclass
class TemplateExercise:
    """One exercise entry of a workout template."""

    exercise_id: str | None
    sets: int
    rep_min: int
    rep_max: int
    order: int = 0

    def __post_init__(self) -> None:
        if self.sets < 1:
            raise ValueError("sets must be at least 1")
        if self.rep_min < 1:
            raise ValueError("rep_min must be at least 1")
        if self.rep_min > self.rep_max:
            raise ValueError(
                f"rep_min ({self.rep_min}) must not exceed rep_max ({self.rep_max})"
            )


@dataclass
class WorkoutTemplate:
    """
    A named, reusable list of exercises (e.g. "Upper", "Squat & Quads").

    Templates are copied into program slots when a program is assembled or
    a workout is added to a day; later template edits never touch programs.
    """

    id: str
    name: str
    exercises: list[TemplateExercise] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("template name must be non-empty")

    def ordered_exercises(self) -> list[TemplateExercise]:
        """Template entries sorted by their order value."""
        return sorted(self.exercises, key=lambda te: te.order)


@dataclass
class ProgramExerciseSlot:
    """
    One exercise's target state within a program.

    Slots sharing a group_label on the same day must occupy a contiguous
    run when sorted by order.  With the default configuration
    consecutive_misses is never observed at 3: the third miss triggers a
    deload and resets it to 0.
    """

    id: str
    program_id: str
    day_index: int
    order: int
    group_label: str | None
    exercise_id: str | None
    sets: int
    rep_min: int
    rep_max: int
    rep_goal: int
    weight_goal: float = 0.0
    consecutive_misses: int = 0

    def __post_init__(self) -> None:
        """Validate slot data."""
        if self.day_index < 1:
            raise ValueError("day_index must be at least 1")
        if self.order < 0:
            raise ValueError("order must be non-negative")
        if self.sets < 1:
            raise ValueError("sets must be at least 1")
        if self.rep_min > self.rep_max:
            raise ValueError(
                f"rep_min ({self.rep_min}) must not exceed rep_max ({self.rep_max})"
            )
        if not self.rep_min <= self.rep_goal <= self.rep_max:
            raise ValueError(
                f"rep_goal ({self.rep_goal}) must be within "
                f"[{self.rep_min}, {self.rep_max}]"
            )
        if self.weight_goal < 0:
            raise ValueError("weight_goal must be non-negative")
        if self.consecutive_misses < 0:
            raise ValueError("consecutive_misses must be non-negative")

    @property
    def goal_volume(self) -> float:
        """sets x weight_goal x rep_goal."""
        return self.sets * self.weight_goal * self.rep_goal


@dataclass
class Program:
    """
    A repeating cycle of workout days.

    (current_day_index, current_group_slot) is the scheduler pointer; a new
    program starts at (1, 0).  Slots reference the program by id.
    """

    id: str
    name: str
    current_day_index: int = 1
    current_group_slot: int = 0

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("program name must be non-empty")
        if self.current_day_index < 1:
            raise ValueError("current_day_index must be at least 1")
        if self.current_group_slot < 0:
            raise ValueError("current_group_slot must be non-negative")


@dataclass
class Group:
    """
    A contiguous run of slots on one day sharing a workout label.

    position is the group's index among the day's groups (first-seen order).
    """

    label: str
    day_index: int
    position: int
    slots: list[ProgramExerciseSlot] = field(default_factory=list)

    @property
    def slot_ids(self) -> list[str]:
        return [s.id for s in self.slots]


@dataclass
class PerSetEntry:
    """Raw text the user typed for one set; parsed leniently by the recorder."""

    weight_text: str = ""
    reps_text: str = ""


@dataclass
class SessionResult:
    """
    Per-exercise performance summary for one session.

    last_weight / last_reps come from the final set regardless of whether
    that set met its own goal.
    """

    actual_volume: float
    goal_volume: float
    last_weight: float
    last_reps: int
    set_weights: list[float] = field(default_factory=list)
    set_reps: list[int] = field(default_factory=list)

    @property
    def missed(self) -> bool:
        """True if the volume goal was not reached."""
        return self.actual_volume < self.goal_volume


@dataclass
class SessionExerciseRecord:
    """
    Durable history of one exercise within a finalized session.

    Goals are those in force at session time.  Only the last set's
    performance is retained.
    """

    exercise_id: str | None
    sets: int
    rep_goal: int
    weight_goal: float
    reps_performed: int
    weight_performed: float

    @property
    def volume(self) -> float:
        return self.weight_performed * self.reps_performed

    @property
    def goal_met(self) -> bool:
        """Last set reached both goals."""
        return (
            self.weight_performed >= self.weight_goal
            and self.reps_performed >= self.rep_goal
        )


@dataclass
class WorkoutSession:
    """A finalized session; immutable once committed."""

    id: str
    program_id: str
    date: str  # ISO format: YYYY-MM-DD
    day_index: int = 1
    group_label: str = "Workout"
    records: list[SessionExerciseRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate session data."""
        self._validate_date(self.date)

    @staticmethod
    def _validate_date(date_str: str) -> None:
        """Validate date string is ISO format YYYY-MM-DD."""
        import re

        if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
            raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

        from datetime import datetime

        try:
            datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError as e:
            raise ValueError(f"Invalid date: {date_str}") from e

    @property
    def total_volume(self) -> float:
        """Sum of last-set volume over all records."""
        return sum(r.volume for r in self.records)


@dataclass
class SummaryEntry:
    """What the user did for one exercise, for the post-session summary."""

    slot_id: str
    exercise_name: str
    set_weights: list[float]
    set_reps: list[int]
    total_volume: float


@dataclass
class SessionSummary:
    """Returned by a successful finalize."""

    program_id: str
    session_id: str
    date: str
    day_index: int
    group_label: str
    entries: list[SummaryEntry] = field(default_factory=list)

    @property
    def total_volume(self) -> float:
        return sum(e.total_volume for e in self.entries)
