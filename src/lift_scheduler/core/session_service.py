"""
Training service: the operations a front end calls.

- todays_group: which workout is due
- start_draft / save_draft / cancel_draft: the unsaved entry buffer
- finalize_session: record -> progress -> advance -> commit, atomically

The service holds no state between calls.  Storage and the draft buffer
are injected, so tests can substitute in-memory or failing doubles.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import date as date_cls
from typing import Protocol

from .config import DEFAULT_PROGRESSION, ProgressionConfig
from .models import (
    Group,
    PerSetEntry,
    Program,
    SessionExerciseRecord,
    SessionSummary,
    SummaryEntry,
    WorkoutSession,
    new_id,
)
from .progression import progress
from .recorder import fit_entries, record_session
from .repository import ChangeSet, Repository, StorageError
from .scheduler import advance, due_group

logger = logging.getLogger(__name__)

Draft = dict[str, list[PerSetEntry]]


class NoExercisesScheduled(Exception):
    """The program's current day has no exercises to perform."""

    def __init__(self, program: Program):
        self.program = program
        super().__init__(
            f"No exercises scheduled for day {program.current_day_index} "
            f"of '{program.name}'"
        )


class DraftCache(Protocol):
    """Engine-external buffer for unsaved entries."""

    def save_draft(self, program_id: str, day_index: int, group_slot: int, draft: Draft) -> None: ...

    def load_draft(self, program_id: str, day_index: int, group_slot: int) -> Draft | None: ...

    def clear_draft(self, program_id: str, day_index: int, group_slot: int) -> None: ...


def prefill_entries(group: Group) -> Draft:
    """Entries pre-filled with each slot's goals ("50.0" kg, "10" reps)."""
    return {
        slot.id: [
            PerSetEntry(weight_text=f"{slot.weight_goal:.1f}", reps_text=str(slot.rep_goal))
            for _ in range(slot.sets)
        ]
        for slot in group.slots
    }


class TrainingService:
    """
    Front-end facing operations over one repository.

    Args:
        repository: Storage collaborator (fetch / atomic save)
        drafts: Optional draft buffer; without it drafts are not kept
        config: Progression constants
        today: Returns the session date as YYYY-MM-DD
    """

    def __init__(
        self,
        repository: Repository,
        drafts: DraftCache | None = None,
        config: ProgressionConfig = DEFAULT_PROGRESSION,
        today: Callable[[], str] | None = None,
    ):
        self.repository = repository
        self.drafts = drafts
        self.config = config
        self.today = today or (lambda: date_cls.today().isoformat())

    def _slots(self, program: Program):
        return self.repository.fetch(
            "slot",
            lambda s: s.program_id == program.id,
            order=lambda s: (s.day_index, s.order),
        )

    def todays_group(self, program: Program) -> Group | None:
        """The group currently due, or None if the day has no exercises."""
        return due_group(program, self._slots(program))

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    def _draft_args(self, program: Program) -> tuple[str, int, int]:
        return program.id, program.current_day_index, program.current_group_slot

    def start_draft(self, program: Program) -> Draft:
        """
        Entries to show when a session is opened.

        A saved draft is restored (clipped or padded with blanks to each
        slot's current set count); otherwise entries are pre-filled with
        the goals.  Slots added since the draft was saved get goals too.
        """
        group = self.todays_group(program)
        if group is None:
            return {}
        entries = prefill_entries(group)
        saved = self.drafts.load_draft(*self._draft_args(program)) if self.drafts else None
        if saved:
            for slot in group.slots:
                if slot.id in saved:
                    entries[slot.id] = fit_entries(saved[slot.id], slot.sets)
        return entries

    def save_draft(self, program: Program, entries: Mapping[str, Sequence[PerSetEntry]]) -> None:
        """Keep unsaved entries for the current workout."""
        if self.drafts is None:
            return
        self.drafts.save_draft(
            *self._draft_args(program), {k: list(v) for k, v in entries.items()}
        )

    def cancel_draft(self, program: Program) -> None:
        """Discard the unsaved entries for the current workout; no domain change."""
        if self.drafts is not None:
            self.drafts.clear_draft(*self._draft_args(program))

    # ------------------------------------------------------------------
    # Finalize
    # ------------------------------------------------------------------

    def finalize_session(
        self,
        program: Program,
        entries: Mapping[str, Sequence[PerSetEntry]],
        session_date: str | None = None,
    ) -> SessionSummary:
        """
        Record the due group, progress its slots, advance the program and
        commit everything as one change set.

        Nothing passed in is modified.  If the commit fails the store is
        unchanged and the error propagates, so the caller can retry with
        the same entries.

        Args:
            program: Program as last loaded from the repository
            entries: Raw per-set entries keyed by slot id
            session_date: YYYY-MM-DD, default today

        Returns:
            SessionSummary of what was performed

        Raises:
            NoExercisesScheduled: If the current day has no slots
            StorageError: If the commit failed
        """
        slots = self._slots(program)
        group = due_group(program, slots)
        if group is None:
            raise NoExercisesScheduled(program)

        results = record_session(group, entries)
        progressed = [progress(slot, results[slot.id], self.config) for slot in group.slots]
        next_program = advance(program, slots)

        names = {e.id: e.name for e in self.repository.fetch("exercise")}
        session = WorkoutSession(
            id=new_id(),
            program_id=program.id,
            date=session_date or self.today(),
            day_index=group.day_index,
            group_label=group.label,
        )
        summary = SessionSummary(
            program_id=program.id,
            session_id=session.id,
            date=session.date,
            day_index=group.day_index,
            group_label=group.label,
        )
        for slot in group.slots:
            result = results[slot.id]
            session.records.append(
                SessionExerciseRecord(
                    exercise_id=slot.exercise_id,
                    sets=slot.sets,
                    rep_goal=slot.rep_goal,
                    weight_goal=slot.weight_goal,
                    reps_performed=result.last_reps,
                    weight_performed=result.last_weight,
                )
            )
            summary.entries.append(
                SummaryEntry(
                    slot_id=slot.id,
                    exercise_name=names.get(slot.exercise_id, "Exercise"),
                    set_weights=result.set_weights,
                    set_reps=result.set_reps,
                    total_volume=result.actual_volume,
                )
            )

        self.repository.save(
            ChangeSet(programs=[next_program], slots=progressed, sessions=[session])
        )
        logger.debug(
            "finalized %s day %d '%s' (%d exercises)",
            program.id,
            group.day_index,
            group.label,
            len(group.slots),
        )

        if self.drafts is not None:
            try:
                self.drafts.clear_draft(*self._draft_args(program))
            except StorageError as e:
                logger.warning("session saved but draft not cleared: %s", e)
        return summary
