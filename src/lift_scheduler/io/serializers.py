"""
JSON serialization for program and history models.

Handles conversion between dataclasses and JSON-compatible dicts, and
parsing of the YAML template / starting-weight files used by the CLI.
"""

import re
from datetime import datetime
from typing import Any

from ..core.models import (
    ExerciseRef,
    PerSetEntry,
    Program,
    ProgramExerciseSlot,
    SessionExerciseRecord,
    TemplateExercise,
    WorkoutSession,
    WorkoutTemplate,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate date string is ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        The same YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Raises:
        ValidationError: If value is not positive
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def _require(data: dict[str, Any], key: str, kind: str) -> Any:
    if key not in data:
        raise ValidationError(f"{kind} record missing field '{key}'")
    return data[key]


def _build(factory, kind: str, **kwargs):
    """Construct a model, turning its ValueError into ValidationError."""
    try:
        return factory(**kwargs)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {kind}: {e}") from e


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


def exercise_to_dict(exercise: ExerciseRef) -> dict[str, Any]:
    return {"id": exercise.id, "name": exercise.name, "notes": exercise.notes}


def dict_to_exercise(data: dict[str, Any]) -> ExerciseRef:
    return _build(
        ExerciseRef,
        "exercise",
        id=str(_require(data, "id", "exercise")),
        name=str(_require(data, "name", "exercise")),
        notes=str(data.get("notes") or ""),
    )


def template_exercise_to_dict(te: TemplateExercise) -> dict[str, Any]:
    return {
        "exercise_id": te.exercise_id,
        "sets": te.sets,
        "rep_min": te.rep_min,
        "rep_max": te.rep_max,
        "order": te.order,
    }


def dict_to_template_exercise(data: dict[str, Any]) -> TemplateExercise:
    return _build(
        TemplateExercise,
        "template exercise",
        exercise_id=data.get("exercise_id"),
        sets=int(_require(data, "sets", "template exercise")),
        rep_min=int(_require(data, "rep_min", "template exercise")),
        rep_max=int(_require(data, "rep_max", "template exercise")),
        order=int(data.get("order", 0)),
    )


def template_to_dict(template: WorkoutTemplate) -> dict[str, Any]:
    return {
        "id": template.id,
        "name": template.name,
        "exercises": [template_exercise_to_dict(te) for te in template.exercises],
    }


def dict_to_template(data: dict[str, Any]) -> WorkoutTemplate:
    return _build(
        WorkoutTemplate,
        "template",
        id=str(_require(data, "id", "template")),
        name=str(_require(data, "name", "template")),
        exercises=[dict_to_template_exercise(d) for d in data.get("exercises", [])],
    )


# ---------------------------------------------------------------------------
# Programs
# ---------------------------------------------------------------------------


def program_to_dict(program: Program) -> dict[str, Any]:
    return {
        "id": program.id,
        "name": program.name,
        "current_day_index": program.current_day_index,
        "current_group_slot": program.current_group_slot,
    }


def dict_to_program(data: dict[str, Any]) -> Program:
    return _build(
        Program,
        "program",
        id=str(_require(data, "id", "program")),
        name=str(_require(data, "name", "program")),
        current_day_index=int(data.get("current_day_index", 1)),
        current_group_slot=int(data.get("current_group_slot", 0)),
    )


def slot_to_dict(slot: ProgramExerciseSlot) -> dict[str, Any]:
    """
    Convert a ProgramExerciseSlot to a JSON-compatible dict.

    Args:
        slot: Slot to convert

    Returns:
        Dict representation
    """
    return {
        "id": slot.id,
        "program_id": slot.program_id,
        "day_index": slot.day_index,
        "order": slot.order,
        "group_label": slot.group_label,
        "exercise_id": slot.exercise_id,
        "sets": slot.sets,
        "rep_min": slot.rep_min,
        "rep_max": slot.rep_max,
        "rep_goal": slot.rep_goal,
        "weight_goal": slot.weight_goal,
        "consecutive_misses": slot.consecutive_misses,
    }


def dict_to_slot(data: dict[str, Any]) -> ProgramExerciseSlot:
    """
    Convert dict to ProgramExerciseSlot.

    Older records without a group label keep None; the partitioner shows
    them as "Workout".

    Raises:
        ValidationError: If data is invalid
    """
    kind = "slot"
    validate_non_negative(data.get("weight_goal", 0.0), "weight_goal")
    return _build(
        ProgramExerciseSlot,
        kind,
        id=str(_require(data, "id", kind)),
        program_id=str(_require(data, "program_id", kind)),
        day_index=int(_require(data, "day_index", kind)),
        order=int(_require(data, "order", kind)),
        group_label=data.get("group_label"),
        exercise_id=data.get("exercise_id"),
        sets=int(_require(data, "sets", kind)),
        rep_min=int(_require(data, "rep_min", kind)),
        rep_max=int(_require(data, "rep_max", kind)),
        rep_goal=int(_require(data, "rep_goal", kind)),
        weight_goal=float(data.get("weight_goal", 0.0)),
        consecutive_misses=int(data.get("consecutive_misses", 0)),
    )


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


def record_to_dict(record: SessionExerciseRecord) -> dict[str, Any]:
    return {
        "exercise_id": record.exercise_id,
        "sets": record.sets,
        "rep_goal": record.rep_goal,
        "weight_goal": record.weight_goal,
        "reps_performed": record.reps_performed,
        "weight_performed": record.weight_performed,
    }


def dict_to_record(data: dict[str, Any]) -> SessionExerciseRecord:
    kind = "session exercise"
    return SessionExerciseRecord(
        exercise_id=data.get("exercise_id"),
        sets=int(_require(data, "sets", kind)),
        rep_goal=int(_require(data, "rep_goal", kind)),
        weight_goal=float(_require(data, "weight_goal", kind)),
        reps_performed=int(_require(data, "reps_performed", kind)),
        weight_performed=float(_require(data, "weight_performed", kind)),
    )


def session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    return {
        "id": session.id,
        "program_id": session.program_id,
        "date": session.date,
        "day_index": session.day_index,
        "group_label": session.group_label,
        "records": [record_to_dict(r) for r in session.records],
    }


def dict_to_session(data: dict[str, Any]) -> WorkoutSession:
    """
    Convert dict to WorkoutSession.

    Raises:
        ValidationError: If data is invalid
    """
    validate_date(_require(data, "date", "session"))
    return _build(
        WorkoutSession,
        "session",
        id=str(_require(data, "id", "session")),
        program_id=str(_require(data, "program_id", "session")),
        date=data["date"],
        day_index=int(data.get("day_index", 1)),
        group_label=str(data.get("group_label") or "Workout"),
        records=[dict_to_record(r) for r in data.get("records", [])],
    )


# ---------------------------------------------------------------------------
# Draft entries
# ---------------------------------------------------------------------------


def entries_to_list(entries: list[PerSetEntry]) -> list[list[str]]:
    """Serialize per-set entries as [weight_text, reps_text] pairs."""
    return [[e.weight_text, e.reps_text] for e in entries]


def list_to_entries(data: list[Any]) -> list[PerSetEntry]:
    """
    Deserialize [weight_text, reps_text] pairs.

    Raises:
        ValidationError: If an item is not a two-element list
    """
    entries = []
    for item in data:
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise ValidationError(f"Invalid draft set entry: {item!r}")
        entries.append(PerSetEntry(weight_text=str(item[0]), reps_text=str(item[1])))
    return entries


# ---------------------------------------------------------------------------
# Set entry strings (CLI)
# ---------------------------------------------------------------------------


def parse_sets_string(s: str) -> list[PerSetEntry]:
    """
    Parse a per-exercise sets string into raw entries.

    Format: comma-separated ``weight@reps`` items, e.g. ``"50@10,50@10,50@9"``.
    Either side may be left blank (``"@10"``, ``"50@"``) to mean "goal".
    A bare item without ``@`` is taken as the weight.  Text is kept raw;
    the recorder decides how to read it.

    Args:
        s: Sets string

    Returns:
        One PerSetEntry per item

    Raises:
        ValidationError: If the string is empty
    """
    if not s or not s.strip():
        raise ValidationError("Sets string must not be empty")

    entries = []
    for item in s.split(","):
        item = item.strip()
        weight, _, reps = item.partition("@")
        entries.append(PerSetEntry(weight_text=weight.strip(), reps_text=reps.strip()))
    return entries


def parse_template_yaml(data: Any, exercise_ids: dict[str, str]) -> tuple[str, list[TemplateExercise]]:
    """
    Read a template definition loaded from YAML.

    Expected shape::

        name: Upper
        exercises:
          - {exercise: Overhead Press, sets: 4, rep_min: 6, rep_max: 8}
          - {exercise: Pull Up, sets: 4, rep_min: 7, rep_max: 10}

    Args:
        data: Parsed YAML document
        exercise_ids: Catalog lookup, lower-cased exercise name -> id

    Returns:
        (template name, ordered template exercises)

    Raises:
        ValidationError: If the document is malformed or names an unknown exercise
    """
    if not isinstance(data, dict):
        raise ValidationError("Template file must contain a mapping")
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Template file needs a non-empty 'name'")
    raw = data.get("exercises")
    if not isinstance(raw, list) or not raw:
        raise ValidationError("Template file needs a non-empty 'exercises' list")

    exercises = []
    for order, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationError(f"Template exercise #{order + 1} must be a mapping")
        ex_name = str(item.get("exercise", "")).strip()
        ex_id = exercise_ids.get(ex_name.lower())
        if ex_id is None:
            raise ValidationError(f"Unknown exercise '{ex_name}'. Add it with 'add-exercise' first.")
        try:
            sets = int(item["sets"])
            rep_min = int(item["rep_min"])
            rep_max = int(item["rep_max"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(
                f"Template exercise '{ex_name}' needs integer sets, rep_min, rep_max"
            ) from e
        validate_positive(sets, f"sets for '{ex_name}'")
        exercises.append(
            _build(
                TemplateExercise,
                "template exercise",
                exercise_id=ex_id,
                sets=sets,
                rep_min=rep_min,
                rep_max=rep_max,
                order=order,
            )
        )
    return name.strip(), exercises


def parse_weights_yaml(data: Any, exercise_ids: dict[str, str]) -> dict[str, float]:
    """
    Read a starting-weights mapping (exercise name -> kg) loaded from YAML.

    Raises:
        ValidationError: On unknown exercises or negative / non-numeric weights
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Weights file must contain a mapping of exercise name to kg")
    weights: dict[str, float] = {}
    for ex_name, kg in data.items():
        ex_id = exercise_ids.get(str(ex_name).strip().lower())
        if ex_id is None:
            raise ValidationError(f"Unknown exercise '{ex_name}' in weights file")
        try:
            value = float(kg)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Weight for '{ex_name}' must be a number") from e
        weights[ex_id] = validate_non_negative(value, f"weight for '{ex_name}'")
    return weights
