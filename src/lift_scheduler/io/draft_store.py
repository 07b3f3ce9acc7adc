"""
Draft buffer for unsaved set entries.

Lets a half-entered session survive leaving and re-running the command.
Drafts are keyed by (program, day, group slot) so a draft never leaks into
a different workout.  The buffer is not domain state: it is discarded when
a session is finalized or cancelled, and a corrupt drafts file is treated
as empty.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from ..core.models import PerSetEntry
from ..core.repository import StorageError
from .serializers import ValidationError, entries_to_list, list_to_entries

logger = logging.getLogger(__name__)

Draft = dict[str, list[PerSetEntry]]


def draft_key(program_id: str, day_index: int, group_slot: int) -> str:
    return f"{program_id}:{day_index}:{group_slot}"


class DraftStore:
    """Drafts kept in a small JSON file next to the program store."""

    def __init__(self, drafts_path: str | Path):
        self.drafts_path = Path(drafts_path)

    def _load_all(self) -> dict[str, Any]:
        if not self.drafts_path.exists():
            return {}
        try:
            with open(self.drafts_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("ignoring unreadable drafts file %s: %s", self.drafts_path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save_all(self, data: dict[str, Any]) -> None:
        tmp_name: str | None = None
        try:
            self.drafts_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=".drafts.", suffix=".tmp", dir=self.drafts_path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.drafts_path)
            tmp_name = None
        except OSError as e:
            raise StorageError(f"Cannot write drafts {self.drafts_path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def save_draft(
        self, program_id: str, day_index: int, group_slot: int, draft: Draft
    ) -> None:
        """Store entries for one workout, replacing any previous draft."""
        data = self._load_all()
        data[draft_key(program_id, day_index, group_slot)] = {
            slot_id: entries_to_list(entries) for slot_id, entries in draft.items()
        }
        self._save_all(data)

    def load_draft(self, program_id: str, day_index: int, group_slot: int) -> Draft | None:
        """
        Load the draft for one workout.

        Returns:
            Entries keyed by slot id, or None if there is no usable draft
        """
        raw = self._load_all().get(draft_key(program_id, day_index, group_slot))
        if not isinstance(raw, dict):
            return None
        try:
            return {slot_id: list_to_entries(items) for slot_id, items in raw.items()}
        except (ValidationError, TypeError) as e:
            logger.warning("ignoring malformed draft for program %s: %s", program_id, e)
            return None

    def clear_draft(self, program_id: str, day_index: int, group_slot: int) -> None:
        """Discard the draft for one workout, if any."""
        data = self._load_all()
        if data.pop(draft_key(program_id, day_index, group_slot), None) is not None:
            self._save_all(data)

    def clear_program(self, program_id: str) -> None:
        """Discard every draft of a program (used when the program is deleted)."""
        data = self._load_all()
        prefix = f"{program_id}:"
        kept = {k: v for k, v in data.items() if not k.startswith(prefix)}
        if len(kept) != len(data):
            self._save_all(kept)
