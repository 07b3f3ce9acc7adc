"""
Persistence interface consumed by the training service.

The service never touches storage directly: it reads through ``fetch`` and
commits one ``ChangeSet`` per operation through ``save``.  An
implementation must apply a change set atomically (all of it or none of it)
and enforce the cascade rules:

- deleting a program deletes its slots and sessions
- deleting an exercise nullifies references to it in slots, template
  entries and session records
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from .models import ExerciseRef, Program, ProgramExerciseSlot, WorkoutSession, WorkoutTemplate

EntityKind = Literal["exercise", "template", "program", "slot", "session"]


class StorageError(Exception):
    """A read or commit against the store failed; nothing was applied."""

    pass


@dataclass
class ChangeSet:
    """Upserts and deletions to be committed together."""

    exercises: list[ExerciseRef] = field(default_factory=list)
    templates: list[WorkoutTemplate] = field(default_factory=list)
    programs: list[Program] = field(default_factory=list)
    slots: list[ProgramExerciseSlot] = field(default_factory=list)
    sessions: list[WorkoutSession] = field(default_factory=list)
    deleted_exercises: list[str] = field(default_factory=list)
    deleted_templates: list[str] = field(default_factory=list)
    deleted_programs: list[str] = field(default_factory=list)
    deleted_slots: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in self.__dataclass_fields__)


class Repository(Protocol):
    """Read entities and commit change sets."""

    def fetch(
        self,
        kind: EntityKind,
        predicate: Callable[[Any], bool] | None = None,
        order: Callable[[Any], Any] | None = None,
    ) -> list[Any]:
        """
        Return copies of all entities of a kind, filtered and sorted.

        Raises:
            StorageError: If the store cannot be read
        """
        ...

    def save(self, changes: ChangeSet) -> None:
        """
        Commit a change set atomically.

        Raises:
            StorageError: If the commit failed; the store is unchanged
        """
        ...
