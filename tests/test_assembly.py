"""Tests for program assembly and workout editing."""

import pytest

from lift_scheduler.core.assembly import (
    add_workout,
    assemble_program,
    move_workout,
    remove_workout,
    slots_from_template,
)
from lift_scheduler.core.models import TemplateExercise, WorkoutTemplate
from lift_scheduler.core.partitioner import group_labels, groups_for_day


def _template(name: str, *exercise_ids: str, sets: int = 3) -> WorkoutTemplate:
    return WorkoutTemplate(
        id=f"t-{name}",
        name=name,
        exercises=[
            TemplateExercise(exercise_id=ex, sets=sets, rep_min=8, rep_max=12, order=i)
            for i, ex in enumerate(exercise_ids)
        ],
    )


SQUAT = _template("Squat", "squat", "lunge")
CORE = _template("Core", "plank")
BENCH = _template("Bench", "bench", "fly")


class TestSlotsFromTemplate:
    def test_copies_template(self):
        slots = slots_from_template("p1", SQUAT, day_index=2, first_order=5, weights={"squat": 100.0})
        assert [s.exercise_id for s in slots] == ["squat", "lunge"]
        assert [s.order for s in slots] == [5, 6]
        assert all(s.day_index == 2 and s.group_label == "Squat" for s in slots)
        assert all(s.rep_goal == 12 and s.consecutive_misses == 0 for s in slots)
        assert slots[0].weight_goal == 100.0
        assert slots[1].weight_goal == 0.0

    def test_uses_template_order_field(self):
        template = WorkoutTemplate(
            id="t",
            name="T",
            exercises=[
                TemplateExercise(exercise_id="b", sets=1, rep_min=5, rep_max=5, order=1),
                TemplateExercise(exercise_id="a", sets=1, rep_min=5, rep_max=5, order=0),
            ],
        )
        assert [s.exercise_id for s in slots_from_template("p", template, 1, 0)] == ["a", "b"]


class TestAssembleProgram:
    def test_days_and_groups(self):
        program, slots = assemble_program("P", [[SQUAT, CORE], [BENCH]])
        assert (program.current_day_index, program.current_group_slot) == (1, 0)
        assert all(s.program_id == program.id for s in slots)
        assert group_labels(slots, 1) == ["Squat", "Core"]
        assert group_labels(slots, 2) == ["Bench"]
        assert [s.order for s in slots if s.day_index == 1] == [0, 1, 2]

    def test_needs_a_day(self):
        with pytest.raises(ValueError):
            assemble_program("P", [])

    def test_slot_ids_unique(self):
        _, slots = assemble_program("P", [[SQUAT, SQUAT]])
        assert len({s.id for s in slots}) == 4


class TestEditWorkouts:
    def _program(self):
        return assemble_program("P", [[SQUAT, CORE, BENCH]])

    def test_add_to_existing_day_appends(self):
        program, slots = self._program()
        _, new = add_workout(program, slots, CORE, day_index=1)
        assert [s.order for s in new] == [5]
        assert group_labels(slots + new, 1) == ["Squat", "Core", "Bench", "Core"]

    def test_add_new_day(self):
        program, slots = self._program()
        _, new = add_workout(program, slots, BENCH, day_index=2)
        assert all(s.day_index == 2 for s in new)
        assert [s.order for s in new] == [0, 1]

    def test_add_resets_group_pointer(self):
        program, slots = self._program()
        program.current_group_slot = 1
        updated, _ = add_workout(program, slots, CORE, day_index=1)
        assert (updated.current_day_index, updated.current_group_slot) == (1, 0)
        assert program.current_group_slot == 1

    @pytest.mark.parametrize("day", [0, 3])
    def test_add_rejects_out_of_range_day(self, day):
        program, slots = self._program()
        with pytest.raises(ValueError):
            add_workout(program, slots, CORE, day_index=day)

    def test_remove_renumbers(self):
        _, slots = self._program()
        remaining, removed = remove_workout(slots, 1, 1)
        assert len(removed) == 1
        assert [s.order for s in remaining] == [0, 1, 2, 3]
        assert group_labels(remaining, 1) == ["Squat", "Bench"]

    def test_remove_bad_position(self):
        _, slots = self._program()
        with pytest.raises(IndexError):
            remove_workout(slots, 1, 3)

    def test_move_keeps_runs_contiguous(self):
        _, slots = self._program()
        moved = move_workout(slots, 1, 2, 0)
        assert group_labels(moved, 1) == ["Bench", "Squat", "Core"]
        assert [s.order for s in moved] == list(range(5))
        assert groups_for_day(moved, 1)[0].slots[0].exercise_id == "bench"

    def test_move_bad_destination(self):
        _, slots = self._program()
        with pytest.raises(IndexError):
            move_workout(slots, 1, 0, 5)
