"""
Tests for the JSON program store, the draft store and the training
service that ties them together.
"""

import json
import os
import tempfile
from pathlib import Path

import pytest

from lift_scheduler.core.assembly import assemble_program
from lift_scheduler.core.models import (
    ExerciseRef,
    PerSetEntry,
    TemplateExercise,
    WorkoutSession,
    WorkoutTemplate,
)
from lift_scheduler.core.repository import ChangeSet, StorageError
from lift_scheduler.core.session_service import NoExercisesScheduled, TrainingService
from lift_scheduler.io.draft_store import DraftStore
from lift_scheduler.io.program_store import ProgramStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir):
    s = ProgramStore(temp_dir / "program_store.json")
    s.init()
    return s


@pytest.fixture
def drafts(temp_dir):
    return DraftStore(temp_dir / "drafts.json")


def _seed(store: ProgramStore, weight: float = 100.0):
    """Two exercises, two templates, a two-day program: day 1 = Squat, Core; day 2 = Bench."""
    squat = ExerciseRef(id="squat", name="Back Squat")
    plank = ExerciseRef(id="plank", name="Plank")
    t_squat = WorkoutTemplate(
        id="t1",
        name="Squat",
        exercises=[TemplateExercise(exercise_id="squat", sets=3, rep_min=8, rep_max=12)],
    )
    t_core = WorkoutTemplate(
        id="t2",
        name="Core",
        exercises=[TemplateExercise(exercise_id="plank", sets=2, rep_min=10, rep_max=10)],
    )
    program, slots = assemble_program(
        "Strong", [[t_squat, t_core], [t_squat]], {"squat": weight, "plank": 0.0}
    )
    store.save(
        ChangeSet(
            exercises=[squat, plank],
            templates=[t_squat, t_core],
            programs=[program],
            slots=slots,
        )
    )
    return program, slots


def _service(store, drafts=None) -> TrainingService:
    return TrainingService(store, drafts, today=lambda: "2026-03-01")


def _sets(*pairs):
    return [PerSetEntry(weight_text=w, reps_text=r) for w, r in pairs]


# ---------------------------------------------------------------------------
# ProgramStore
# ---------------------------------------------------------------------------


class TestProgramStore:
    def test_init_creates_empty_document(self, store):
        doc = json.loads(store.store_path.read_text())
        assert doc["version"] == 1
        assert doc["programs"] == [] and doc["slots"] == []

    def test_init_keeps_existing(self, store):
        _seed(store)
        store.init()
        assert len(store.fetch("program")) == 1

    def test_fetch_missing_store_raises(self, temp_dir):
        with pytest.raises(StorageError):
            ProgramStore(temp_dir / "nope.json").fetch("program")

    def test_fetch_corrupt_store_raises(self, temp_dir):
        path = temp_dir / "program_store.json"
        path.write_text("{ not json")
        with pytest.raises(StorageError):
            ProgramStore(path).fetch("program")

    def test_fetch_filter_and_order(self, store):
        program, _ = _seed(store)
        slots = store.fetch(
            "slot", lambda s: s.day_index == 1, order=lambda s: -s.order
        )
        assert [s.order for s in slots] == [1, 0]

    def test_fetch_returns_copies(self, store):
        program, _ = _seed(store)
        fetched = store.get_program(program.id)
        fetched.current_day_index = 2
        assert store.get_program(program.id).current_day_index == 1

    def test_upsert_replaces_by_id(self, store):
        program, _ = _seed(store)
        program.current_group_slot = 1
        store.save(ChangeSet(programs=[program]))
        programs = store.fetch("program")
        assert len(programs) == 1
        assert programs[0].current_group_slot == 1

    def test_find_program_by_id_and_name(self, store):
        program, _ = _seed(store)
        assert store.find_program(program.id).id == program.id
        assert store.find_program("strong").id == program.id
        assert store.find_program("weak") is None

    def test_delete_program_cascades(self, store):
        program, _ = _seed(store)
        session = WorkoutSession(id="w1", program_id=program.id, date="2026-01-01")
        store.save(ChangeSet(sessions=[session]))
        store.save(ChangeSet(deleted_programs=[program.id]))
        assert store.fetch("program") == []
        assert store.fetch("slot") == []
        assert store.fetch("session") == []
        assert len(store.fetch("exercise")) == 2

    def test_delete_exercise_nullifies_references(self, store):
        program, _ = _seed(store)
        _service(store).finalize_session(program, {})
        store.save(ChangeSet(deleted_exercises=["squat"]))

        squat_slots = [s for s in store.fetch("slot") if s.group_label == "Squat"]
        assert squat_slots and all(s.exercise_id is None for s in squat_slots)
        template = [t for t in store.fetch("template") if t.id == "t1"][0]
        assert template.exercises[0].exercise_id is None
        record = store.fetch("session")[0].records[0]
        assert record.exercise_id is None
        assert record.weight_goal == 100.0

    def test_failed_write_leaves_store_unchanged(self, store, monkeypatch):
        program, _ = _seed(store)
        before = store.store_path.read_bytes()

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", boom)
        with pytest.raises(StorageError):
            store.save(ChangeSet(deleted_programs=[program.id]))
        assert store.store_path.read_bytes() == before
        assert [p.name for p in store.store_path.parent.iterdir()] == ["program_store.json"]

    def test_sessions_newest_first(self, store):
        program, _ = _seed(store)
        store.save(
            ChangeSet(
                sessions=[
                    WorkoutSession(id="a", program_id=program.id, date="2026-01-01"),
                    WorkoutSession(id="b", program_id=program.id, date="2026-02-01"),
                ]
            )
        )
        assert [s.id for s in store.sessions_for(program.id)] == ["b", "a"]


# ---------------------------------------------------------------------------
# DraftStore
# ---------------------------------------------------------------------------


class TestDraftStore:
    def test_save_load_clear(self, drafts):
        draft = {"s1": _sets(("50", "10"), ("", "9"))}
        drafts.save_draft("p1", 1, 0, draft)
        assert drafts.load_draft("p1", 1, 0) == draft
        assert drafts.load_draft("p1", 1, 1) is None
        drafts.clear_draft("p1", 1, 0)
        assert drafts.load_draft("p1", 1, 0) is None

    def test_corrupt_file_is_empty(self, drafts):
        drafts.drafts_path.write_text("garbage")
        assert drafts.load_draft("p1", 1, 0) is None

    def test_clear_program(self, drafts):
        drafts.save_draft("p1", 1, 0, {"s1": _sets(("1", "1"))})
        drafts.save_draft("p1", 2, 0, {"s2": _sets(("1", "1"))})
        drafts.save_draft("p2", 1, 0, {"s3": _sets(("1", "1"))})
        drafts.clear_program("p1")
        assert drafts.load_draft("p1", 2, 0) is None
        assert drafts.load_draft("p2", 1, 0) is not None


# ---------------------------------------------------------------------------
# TrainingService
# ---------------------------------------------------------------------------


class TestTrainingService:
    def test_todays_group(self, store):
        program, _ = _seed(store)
        group = _service(store).todays_group(program)
        assert group.label == "Squat"
        assert group.day_index == 1

    def test_start_draft_prefills_goals(self, store):
        program, _ = _seed(store)
        entries = _service(store).start_draft(program)
        (slot_id,) = entries
        assert entries[slot_id] == _sets(("100.0", "12"), ("100.0", "12"), ("100.0", "12"))

    def test_draft_restored_and_fitted(self, store, drafts):
        program, _ = _seed(store)
        service = _service(store, drafts)
        slot_id = next(iter(service.start_draft(program)))
        service.save_draft(program, {slot_id: _sets(("90", "8"))})

        restored = service.start_draft(program)
        assert restored[slot_id] == _sets(("90", "8"), ("", ""), ("", ""))

    def test_cancel_draft(self, store, drafts):
        program, _ = _seed(store)
        service = _service(store, drafts)
        slot_id = next(iter(service.start_draft(program)))
        service.save_draft(program, {slot_id: _sets(("90", "8"))})
        service.cancel_draft(program)
        assert service.start_draft(program)[slot_id][0].weight_text == "100.0"

    def test_finalize_at_goal_climbs_and_advances(self, store, drafts):
        program, _ = _seed(store)
        service = _service(store, drafts)
        summary = service.finalize_session(program, {})

        assert summary.group_label == "Squat"
        assert summary.date == "2026-03-01"
        assert summary.entries[0].exercise_name == "Back Squat"
        assert summary.total_volume == pytest.approx(3600.0)

        saved = store.get_program(program.id)
        assert (saved.current_day_index, saved.current_group_slot) == (1, 1)
        squat = [s for s in store.slots_for(program.id) if s.day_index == 1][0]
        assert squat.weight_goal == pytest.approx(102.5)
        assert squat.rep_goal == 8

        (session,) = store.sessions_for(program.id)
        assert session.group_label == "Squat"
        assert session.records[0].weight_goal == 100.0
        assert session.records[0].rep_goal == 12
        assert session.records[0].reps_performed == 12

    def test_finalize_miss_counts(self, store):
        program, _ = _seed(store)
        service = _service(store)
        slot_id = next(iter(service.start_draft(program)))
        service.finalize_session(
            program, {slot_id: _sets(("100", "5"), ("100", "5"), ("100", "5"))}
        )
        squat = store.fetch("slot", lambda s: s.id == slot_id)[0]
        assert squat.consecutive_misses == 1
        assert squat.weight_goal == 100.0

    def test_three_missed_sessions_deload(self, store):
        """100 kg, three misses in a row: 85 kg and the counter back at 0."""
        template = WorkoutTemplate(
            id="t1",
            name="Squat",
            exercises=[TemplateExercise(exercise_id="squat", sets=3, rep_min=8, rep_max=12)],
        )
        program, slots = assemble_program("Solo", [[template]], {"squat": 100.0})
        store.save(ChangeSet(programs=[program], slots=slots))
        (slot_id,) = [s.id for s in slots]
        service = _service(store)

        for _ in range(3):
            program = store.get_program(program.id)
            service.finalize_session(
                program, {slot_id: _sets(("100", "5"), ("100", "5"), ("100", "5"))}
            )

        squat = store.fetch("slot", lambda s: s.id == slot_id)[0]
        assert squat.weight_goal == pytest.approx(85.0)
        assert squat.consecutive_misses == 0
        assert len(store.sessions_for(program.id)) == 3

    def test_finalize_only_touches_due_group(self, store):
        program, slots = _seed(store)
        _service(store).finalize_session(program, {})
        after = {s.id: s for s in store.slots_for(program.id)}
        for slot in slots:
            if slot.group_label != "Squat" or slot.day_index != 1:
                assert after[slot.id] == slot

    def test_three_sessions_cycle(self, store):
        program, _ = _seed(store)
        service = _service(store)
        labels = []
        for _ in range(3):
            program = store.get_program(program.id)
            labels.append(service.finalize_session(program, {}).group_label)
        assert labels == ["Squat", "Core", "Squat"]
        program = store.get_program(program.id)
        assert (program.current_day_index, program.current_group_slot) == (1, 0)

    def test_empty_day_raises(self, store):
        program, slots = _seed(store)
        store.save(ChangeSet(deleted_slots=[s.id for s in slots if s.day_index == 1]))
        with pytest.raises(NoExercisesScheduled):
            _service(store).finalize_session(program, {})

    def test_failed_commit_changes_nothing(self, store, drafts, monkeypatch):
        program, _ = _seed(store)
        service = _service(store, drafts)
        slot_id = next(iter(service.start_draft(program)))
        entries = {slot_id: _sets(("100", "5"), ("", ""), ("", ""))}
        service.save_draft(program, entries)
        before = store.store_path.read_bytes()

        def fail_write(doc):
            raise StorageError("disk full")

        monkeypatch.setattr(store, "_write", fail_write)
        with pytest.raises(StorageError):
            service.finalize_session(program, entries)

        assert store.store_path.read_bytes() == before
        assert drafts.load_draft(program.id, 1, 0) == entries
        assert entries[slot_id][0].weight_text == "100"

    def test_successful_commit_clears_draft(self, store, drafts):
        program, _ = _seed(store)
        service = _service(store, drafts)
        slot_id = next(iter(service.start_draft(program)))
        service.save_draft(program, {slot_id: _sets(("100", "12"))})
        service.finalize_session(program, {})
        assert drafts.load_draft(program.id, 1, 0) is None

    def test_finalize_does_not_mutate_program(self, store):
        program, _ = _seed(store)
        _service(store).finalize_session(program, {})
        assert (program.current_day_index, program.current_group_slot) == (1, 0)
