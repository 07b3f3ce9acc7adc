"""Session commands: today, log-session, cancel-draft, history."""

import json
from dataclasses import asdict
from typing import Annotated, Optional

import typer

from ...core.models import Group, PerSetEntry, ProgramExerciseSlot, SessionSummary
from ...core.repository import StorageError
from ...core.session_service import NoExercisesScheduled, TrainingService
from ...io.serializers import ValidationError, parse_sets_string
from .. import views
from ..app import DataDirOption, ProgramOption, app, fail, get_service, require_store, resolve_program

Draft = dict[str, list[PerSetEntry]]


def parse_set_options(group: Group, names: dict[str, str], options: list[str]) -> Draft:
    """
    Turn ``--set`` values into draft entries.

    Each value is ``KEY=SETS`` where KEY is the exercise's 1-based position
    in the workout or its name, and SETS is ``weight@reps,...``.

    An exercise that appears more than once in the workout must be given
    by position.

    Raises:
        ValidationError: On an unknown or ambiguous key, or a malformed value
    """
    by_name: dict[str, list[ProgramExerciseSlot]] = {}
    for s in group.slots:
        if s.exercise_id:
            by_name.setdefault(names.get(s.exercise_id, "").lower(), []).append(s)
    entries: Draft = {}
    for raw in options:
        key, sep, sets = raw.partition("=")
        if not sep:
            raise ValidationError(f"Expected KEY=weight@reps,... but got {raw!r}")
        key = key.strip()
        if key.isdigit():
            pos = int(key)
            if not 1 <= pos <= len(group.slots):
                raise ValidationError(
                    f"Exercise #{pos} out of range (workout has {len(group.slots)})"
                )
            slot = group.slots[pos - 1]
        else:
            matches = by_name.get(key.lower(), [])
            if not matches:
                raise ValidationError(f"'{key}' is not part of {group.label}")
            if len(matches) > 1:
                positions = ", ".join(str(group.slots.index(m) + 1) for m in matches)
                raise ValidationError(
                    f"'{key}' appears more than once in {group.label}; "
                    f"use its number instead ({positions})"
                )
            slot = matches[0]
        entries[slot.id] = parse_sets_string(sets)
    return entries


def _interactive_entries(
    service: TrainingService, program, group: Group, names: dict[str, str]
) -> Draft:
    """
    Prompt for every set, starting from the saved draft or the goals.

    Enter keeps the shown value.  The draft is saved after each exercise,
    and on Ctrl-C / end of input before exiting.
    """
    draft = service.start_draft(program)
    views.console.print("[dim]Enter keeps the value in brackets. Ctrl-C saves a draft.[/dim]")
    try:
        for i, slot in enumerate(group.slots, 1):
            ex_name = names.get(slot.exercise_id, views.UNKNOWN_EXERCISE)
            views.console.print()
            views.console.print(
                f"[bold]{i}. {ex_name}[/bold]  goal {slot.weight_goal:.1f} kg × {slot.rep_goal}"
            )
            entries = draft[slot.id]
            for n, entry in enumerate(entries, 1):
                w = views.console.input(f"  Set {n} kg \\[{entry.weight_text}]: ").strip()
                r = views.console.input(f"  Set {n} reps \\[{entry.reps_text}]: ").strip()
                entries[n - 1] = PerSetEntry(
                    weight_text=w or entry.weight_text,
                    reps_text=r or entry.reps_text,
                )
            service.save_draft(program, draft)
    except (KeyboardInterrupt, EOFError):
        service.save_draft(program, draft)
        views.console.print()
        views.print_info("Draft saved. Run 'log-session' again to continue.")
        raise typer.Exit(1)
    return draft


def _summary_to_json(summary: SessionSummary) -> str:
    data = asdict(summary)
    data["total_volume"] = summary.total_volume
    return json.dumps(data, indent=2)


@app.command("today")
def today(
    program_ref: ProgramOption = None,
    json_out: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for machine processing")
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """Show the workout that is due next."""
    store = require_store(data_dir)
    program = resolve_program(store, program_ref)
    service = get_service(data_dir)
    try:
        group = service.todays_group(program)
        names = store.exercise_names()
    except StorageError as e:
        fail(e)

    if group is None:
        views.print_warning(
            f"No exercises scheduled for day {program.current_day_index} of {program.name}"
        )
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({
            "program": program.name,
            "day_index": group.day_index,
            "workout": group.label,
            "exercises": [
                {
                    "slot_id": s.id,
                    "exercise": names.get(s.exercise_id),
                    "sets": s.sets,
                    "rep_goal": s.rep_goal,
                    "weight_goal": s.weight_goal,
                    "rep_min": s.rep_min,
                    "rep_max": s.rep_max,
                    "consecutive_misses": s.consecutive_misses,
                }
                for s in group.slots
            ],
        }, indent=2))
        return

    views.print_group(group, names, service.config.misses_before_deload)


@app.command("log-session")
def log_session(
    sets: Annotated[
        Optional[list[str]],
        typer.Option(
            "--set",
            "-s",
            help="KEY=weight@reps,... with KEY the exercise number or name; "
            "blank weight or reps means 'as planned'. Repeat per exercise.",
        ),
    ] = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Session date (YYYY-MM-DD, default: today)"),
    ] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Save without asking")] = False,
    json_out: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for machine processing")
    ] = False,
    program_ref: ProgramOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log the due workout and update every exercise's goals.

    Run without --set for interactive entry.  Or give every exercise on the
    command line; exercises you leave out count as performed at goal:

      lift-scheduler log-session --set "1=100@5,100@5,100@4" --set "Leg Press=@10"
    """
    store = require_store(data_dir)
    program = resolve_program(store, program_ref)
    service = get_service(data_dir)

    try:
        group = service.todays_group(program)
        names = store.exercise_names()
    except StorageError as e:
        fail(e)
    if group is None:
        views.print_warning(
            f"No exercises scheduled for day {program.current_day_index} of {program.name}"
        )
        raise typer.Exit(1)

    if sets:
        try:
            entries = parse_set_options(group, names, sets)
        except ValidationError as e:
            fail(e)
    else:
        if not json_out:
            views.print_group(group, names, service.config.misses_before_deload)
        entries = _interactive_entries(service, program, group, names)
        if not yes:
            answer = views.console.input("\nSave session? \\[Y/n]: ").strip().lower()
            if answer not in ("", "y", "yes"):
                views.print_info("Not saved. Your entries are kept as a draft.")
                return

    try:
        summary = service.finalize_session(program, entries, session_date=date)
    except (NoExercisesScheduled, StorageError, ValueError) as e:
        fail(e)

    if json_out:
        print(_summary_to_json(summary))
        return
    views.print_summary(summary)


@app.command("cancel-draft")
def cancel_draft(program_ref: ProgramOption = None, data_dir: DataDirOption = None) -> None:
    """Discard unsaved entries for the due workout."""
    store = require_store(data_dir)
    program = resolve_program(store, program_ref)
    try:
        get_service(data_dir).cancel_draft(program)
    except StorageError as e:
        fail(e)
    views.print_success("Draft discarded.")


@app.command("history")
def history(
    program_ref: ProgramOption = None,
    limit: Annotated[
        Optional[int], typer.Option("--limit", "-n", help="Show only the N most recent sessions")
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Show finalized sessions, newest first."""
    store = require_store(data_dir)
    program = resolve_program(store, program_ref)
    try:
        sessions = store.sessions_for(program.id)
        names = store.exercise_names()
    except StorageError as e:
        fail(e)
    if limit is not None:
        sessions = sessions[:limit]
    views.print_history(sessions, names)
