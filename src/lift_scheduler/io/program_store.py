"""
JSON-file storage for the catalog, programs and session history.

Everything lives in one document (``program_store.json``) so that a commit
is a single atomic file replace.
"""

import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..core.models import Program, ProgramExerciseSlot, WorkoutSession
from ..core.repository import ChangeSet, EntityKind, StorageError
from .serializers import (
    ValidationError,
    dict_to_exercise,
    dict_to_program,
    dict_to_session,
    dict_to_slot,
    dict_to_template,
    exercise_to_dict,
    program_to_dict,
    session_to_dict,
    slot_to_dict,
    template_to_dict,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# entity kind -> (document key, decoder, encoder)
_CODECS: dict[str, tuple[str, Callable, Callable]] = {
    "exercise": ("exercises", dict_to_exercise, exercise_to_dict),
    "template": ("templates", dict_to_template, template_to_dict),
    "program": ("programs", dict_to_program, program_to_dict),
    "slot": ("slots", dict_to_slot, slot_to_dict),
    "session": ("sessions", dict_to_session, session_to_dict),
}


def _empty_document() -> dict[str, Any]:
    doc: dict[str, Any] = {"version": SCHEMA_VERSION}
    for key, _, _ in _CODECS.values():
        doc[key] = []
    return doc


class ProgramStore:
    """
    Repository backed by a single JSON document.

    Reads return freshly decoded objects, so callers can modify what they
    fetch without affecting stored state until they commit it.
    """

    def __init__(self, store_path: str | Path):
        """
        Initialize the store.

        Args:
            store_path: Path to the JSON document
        """
        self.store_path = Path(store_path)

    def exists(self) -> bool:
        """Check if the store file exists."""
        return self.store_path.exists()

    def init(self) -> None:
        """
        Create an empty store if it doesn't exist.

        Creates parent directories if needed.
        """
        try:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create {self.store_path.parent}: {e}") from e
        if not self.store_path.exists():
            self._write(_empty_document())

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _read(self) -> dict[str, Any]:
        if not self.store_path.exists():
            raise StorageError(f"Store not found: {self.store_path}. Run 'init' first.")
        try:
            with open(self.store_path, "r", encoding="utf-8") as f:
                doc = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read {self.store_path}: {e}") from e
        if not isinstance(doc, dict):
            raise StorageError(f"Corrupt store {self.store_path}: expected an object")
        for key, _, _ in _CODECS.values():
            doc.setdefault(key, [])
        return doc

    def fetch(
        self,
        kind: EntityKind,
        predicate: Callable[[Any], bool] | None = None,
        order: Callable[[Any], Any] | None = None,
    ) -> list[Any]:
        """
        Return all entities of a kind, optionally filtered and sorted.

        Args:
            kind: "exercise", "template", "program", "slot" or "session"
            predicate: Keep only entities for which this returns True
            order: Sort key

        Raises:
            StorageError: If the store is missing or unreadable
        """
        if kind not in _CODECS:
            raise ValueError(f"Unknown entity kind: {kind!r}")
        key, decode, _ = _CODECS[kind]
        doc = self._read()
        try:
            items = [decode(d) for d in doc[key]]
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Corrupt {key} in {self.store_path}: {e}") from e
        if predicate is not None:
            items = [i for i in items if predicate(i)]
        if order is not None:
            items.sort(key=order)
        return items

    def get_program(self, program_id: str) -> Program | None:
        found = self.fetch("program", lambda p: p.id == program_id)
        return found[0] if found else None

    def find_program(self, ref: str) -> Program | None:
        """Look up a program by id, then by exact name (case-insensitive)."""
        programs = self.fetch("program")
        for p in programs:
            if p.id == ref:
                return p
        for p in programs:
            if p.name.lower() == ref.lower():
                return p
        return None

    def slots_for(self, program_id: str) -> list[ProgramExerciseSlot]:
        return self.fetch(
            "slot",
            lambda s: s.program_id == program_id,
            order=lambda s: (s.day_index, s.order),
        )

    def sessions_for(self, program_id: str) -> list[WorkoutSession]:
        """Sessions of a program, newest first."""
        return self.fetch(
            "session",
            lambda s: s.program_id == program_id,
            order=lambda s: s.date,
        )[::-1]

    def exercise_names(self) -> dict[str, str]:
        """Exercise id -> display name."""
        return {e.id: e.name for e in self.fetch("exercise")}

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def save(self, changes: ChangeSet) -> None:
        """
        Apply a change set and commit it with one atomic file replace.

        Upserts are matched by id.  Deletions cascade:
        programs take their slots and sessions with them, exercises are
        nullified wherever they are referenced.

        Raises:
            StorageError: If the commit failed; the file is left untouched
        """
        if changes.is_empty():
            return
        doc = self._read()
        try:
            self._apply(doc, changes)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Cannot encode change set: {e}") from e
        self._write(doc)
        logger.debug(
            "committed %s: %d program(s), %d slot(s), %d session(s)",
            self.store_path,
            len(changes.programs),
            len(changes.slots),
            len(changes.sessions),
        )

    @staticmethod
    def _upsert(rows: list[dict[str, Any]], items: list[Any], encode: Callable) -> None:
        index = {row["id"]: i for i, row in enumerate(rows)}
        for item in items:
            row = encode(item)
            if row["id"] in index:
                rows[index[row["id"]]] = row
            else:
                index[row["id"]] = len(rows)
                rows.append(row)

    def _apply(self, doc: dict[str, Any], changes: ChangeSet) -> None:
        for kind, items in (
            ("exercise", changes.exercises),
            ("template", changes.templates),
            ("program", changes.programs),
            ("slot", changes.slots),
            ("session", changes.sessions),
        ):
            key, _, encode = _CODECS[kind]
            self._upsert(doc[key], items, encode)

        if changes.deleted_slots:
            gone = set(changes.deleted_slots)
            doc["slots"] = [s for s in doc["slots"] if s["id"] not in gone]

        if changes.deleted_templates:
            gone = set(changes.deleted_templates)
            doc["templates"] = [t for t in doc["templates"] if t["id"] not in gone]

        if changes.deleted_programs:
            gone = set(changes.deleted_programs)
            doc["programs"] = [p for p in doc["programs"] if p["id"] not in gone]
            doc["slots"] = [s for s in doc["slots"] if s["program_id"] not in gone]
            doc["sessions"] = [s for s in doc["sessions"] if s["program_id"] not in gone]

        if changes.deleted_exercises:
            gone = set(changes.deleted_exercises)
            doc["exercises"] = [e for e in doc["exercises"] if e["id"] not in gone]
            for slot in doc["slots"]:
                if slot.get("exercise_id") in gone:
                    slot["exercise_id"] = None
            for template in doc["templates"]:
                for te in template.get("exercises", []):
                    if te.get("exercise_id") in gone:
                        te["exercise_id"] = None
            for session in doc["sessions"]:
                for record in session.get("records", []):
                    if record.get("exercise_id") in gone:
                        record["exercise_id"] = None

    def _write(self, doc: dict[str, Any]) -> None:
        """Write the document to a temp file and atomically replace the store."""
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=".program_store.", suffix=".tmp", dir=self.store_path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.store_path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            logger.warning("commit to %s failed: %s", self.store_path, e)
            raise StorageError(f"Cannot write {self.store_path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

