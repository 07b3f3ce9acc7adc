"""Program commands: create, inspect, edit workouts, delete, goal projection."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.assembly import add_workout as add_workout_slots
from ...core.assembly import assemble_program, move_workout as move_workout_slots
from ...core.assembly import remove_workout as remove_workout_slots
from ...core.models import WorkoutTemplate
from ...core.progression import sessions_to_target
from ...core.repository import ChangeSet, StorageError
from ...io.program_store import ProgramStore
from ...io.serializers import ValidationError, parse_weights_yaml
from .. import views
from ..app import (
    DataDirOption,
    ProgramOption,
    app,
    exercise_lookup,
    fail,
    get_drafts,
    get_service,
    load_yaml_file,
    require_store,
    resolve_program,
)

WeightsOption = Annotated[
    Optional[Path],
    typer.Option("--weights", "-w", help="YAML mapping of exercise name to starting kg"),
]


def _templates_by_name(store: ProgramStore) -> dict[str, WorkoutTemplate]:
    return {t.name.lower(): t for t in store.fetch("template")}


def _load_weights(store: ProgramStore, weights_file: Path | None) -> dict[str, float]:
    if weights_file is None:
        return {}
    return parse_weights_yaml(load_yaml_file(weights_file), exercise_lookup(store))


@app.command("create-program")
def create_program(
    name: Annotated[str, typer.Argument(help="Program name")],
    day: Annotated[
        Optional[list[str]],
        typer.Option(
            "--day",
            "-d",
            help="Templates for the next day, comma-separated; repeat once per day",
        ),
    ] = None,
    weights_file: WeightsOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Assemble a program from templates.

    Each --day adds one day to the cycle, in order:

      lift-scheduler create-program "Getting strong" \\
        --day "Squat & Quads" --day "Bench,Core" --weights start.yaml
    """
    store = require_store(data_dir)
    if not day:
        views.print_error("Give at least one --day")
        raise typer.Exit(1)

    try:
        if store.find_program(name) is not None:
            views.print_error(f"Program already exists: {name}")
            raise typer.Exit(1)
        templates = _templates_by_name(store)
        days: list[list[WorkoutTemplate]] = []
        for i, day_names in enumerate(day, 1):
            names = [n.strip() for n in day_names.split(",") if n.strip()]
            if not names:
                views.print_error(f"Day {i} names no templates")
                raise typer.Exit(1)
            missing = [n for n in names if n.lower() not in templates]
            if missing:
                views.print_error(f"Unknown template(s) on day {i}: {', '.join(missing)}")
                raise typer.Exit(1)
            days.append([templates[n.lower()] for n in names])

        weights = _load_weights(store, weights_file)
        program, slots = assemble_program(name, days, weights)
        store.save(ChangeSet(programs=[program], slots=slots))
    except (StorageError, ValidationError, ValueError) as e:
        fail(e)

    views.print_success(
        f"Created program {program.name}: {len(days)} day(s), {len(slots)} exercise slot(s)"
    )


@app.command("list-programs")
def list_programs(data_dir: DataDirOption = None) -> None:
    """List programs and where each one is in its cycle."""
    store = require_store(data_dir)
    try:
        programs = store.fetch("program", order=lambda p: p.name.lower())
    except StorageError as e:
        fail(e)
    if not programs:
        views.console.print("[yellow]No programs yet. Create one with 'create-program'.[/yellow]")
        return
    views.console.print(views.format_programs_table(programs))


@app.command("show-program")
def show_program(program_ref: ProgramOption = None, data_dir: DataDirOption = None) -> None:
    """Show every day and workout of a program with current goals."""
    store = require_store(data_dir)
    program = resolve_program(store, program_ref)
    service = get_service(data_dir)
    try:
        slots = store.slots_for(program.id)
        names = store.exercise_names()
    except StorageError as e:
        fail(e)
    views.print_program(program, slots, names, service.config.misses_before_deload)


@app.command("delete-program")
def delete_program(
    program_ref: ProgramOption = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
    data_dir: DataDirOption = None,
) -> None:
    """Delete a program together with its slots and session history."""
    store = require_store(data_dir)
    program = resolve_program(store, program_ref)
    if not yes and not views.confirm_action(
        f"Delete {program.name} and all of its history?"
    ):
        views.print_info("Cancelled.")
        return
    try:
        store.save(ChangeSet(deleted_programs=[program.id]))
        get_drafts(data_dir).clear_program(program.id)
    except StorageError as e:
        fail(e)
    views.print_success(f"Deleted program {program.name}")


@app.command("add-workout")
def add_workout(
    template_name: Annotated[str, typer.Argument(help="Template to add")],
    day: Annotated[
        Optional[int],
        typer.Option("--day", "-d", help="Day to add to (default: a new last day)"),
    ] = None,
    weights_file: WeightsOption = None,
    program_ref: ProgramOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Append a template's exercises to a day, or to a new day."""
    store = require_store(data_dir)
    program = resolve_program(store, program_ref)
    try:
        template = _templates_by_name(store).get(template_name.strip().lower())
        if template is None:
            views.print_error(f"Template not found: {template_name}")
            raise typer.Exit(1)
        slots = store.slots_for(program.id)
        target_day = day if day is not None else max((s.day_index for s in slots), default=0) + 1
        updated, new_slots = add_workout_slots(
            program, slots, template, target_day, _load_weights(store, weights_file)
        )
        store.save(ChangeSet(programs=[updated], slots=new_slots))
    except (StorageError, ValidationError, ValueError) as e:
        fail(e)
    views.print_success(f"Added {template.name} to day {target_day} of {program.name}")


@app.command("remove-workout")
def remove_workout(
    day: Annotated[int, typer.Option("--day", "-d", help="Day holding the workout")],
    workout: Annotated[int, typer.Option("--workout", "-k", help="Workout number within the day (1-based)")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
    program_ref: ProgramOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Remove one workout from a day; the day's remaining exercises are renumbered."""
    store = require_store(data_dir)
    program = resolve_program(store, program_ref)
    try:
        remaining, removed = remove_workout_slots(store.slots_for(program.id), day, workout - 1)
    except IndexError as e:
        fail(e)
    if not yes and not views.confirm_action(
        f"Remove workout {workout} ({len(removed)} exercises) from day {day}?"
    ):
        views.print_info("Cancelled.")
        return
    try:
        store.save(ChangeSet(slots=remaining, deleted_slots=removed))
    except StorageError as e:
        fail(e)
    views.print_success(f"Removed workout {workout} from day {day}")


@app.command("move-workout")
def move_workout(
    day: Annotated[int, typer.Option("--day", "-d", help="Day holding the workout")],
    source: Annotated[int, typer.Option("--from", help="Current position (1-based)")],
    destination: Annotated[int, typer.Option("--to", help="New position (1-based)")],
    program_ref: ProgramOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Reorder the workouts within a day."""
    store = require_store(data_dir)
    program = resolve_program(store, program_ref)
    try:
        reordered = move_workout_slots(
            store.slots_for(program.id), day, source - 1, destination - 1
        )
        store.save(ChangeSet(slots=reordered))
    except (IndexError, StorageError) as e:
        fail(e)
    views.print_success(f"Moved workout {source} to position {destination} on day {day}")


@app.command("goal")
def goal(
    exercise: Annotated[str, typer.Argument(help="Exercise name")],
    target_kg: Annotated[float, typer.Argument(help="Target weight in kg")],
    program_ref: ProgramOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Estimate how many successful weight steps it takes to reach a target.

    Assumes one weight step per session and one session per week.
    """
    store = require_store(data_dir)
    program = resolve_program(store, program_ref)
    service = get_service(data_dir)
    try:
        ex_id = exercise_lookup(store).get(exercise.strip().lower())
        slots = [s for s in store.slots_for(program.id) if ex_id and s.exercise_id == ex_id]
    except StorageError as e:
        fail(e)
    if not slots:
        views.print_error(f"{exercise} is not part of {program.name}")
        raise typer.Exit(1)

    current = max(s.weight_goal for s in slots)
    steps = sessions_to_target(current, target_kg, service.config.weight_increment_kg)
    if steps is None:
        views.print_success(
            f"Current goal {current:.1f} kg already meets {target_kg:.1f} kg"
        )
        return
    views.console.print(
        f"{exercise}: {current:.1f} kg → {target_kg:.1f} kg in about "
        f"[bold]{steps}[/bold] session(s) (~{steps} week(s))"
    )
