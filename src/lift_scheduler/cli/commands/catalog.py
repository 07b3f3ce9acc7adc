"""Catalog commands: init, exercises and workout templates."""

from pathlib import Path
from typing import Annotated

import typer

from ...core.models import ExerciseRef, WorkoutTemplate, new_id
from ...core.repository import ChangeSet, StorageError
from ...io.serializers import ValidationError, parse_template_yaml
from .. import views
from ..app import DataDirOption, app, exercise_lookup, fail, get_store, load_yaml_file, require_store


@app.command("init")
def init(data_dir: DataDirOption = None) -> None:
    """
    Create the data directory and an empty program store.

    Safe to run again: an existing store is left as it is.
    """
    store = get_store(data_dir)
    existed = store.exists()
    try:
        store.init()
    except StorageError as e:
        fail(e)
    if existed:
        views.print_info(f"Store already exists: {store.store_path}")
    else:
        views.print_success(f"Created {store.store_path}")


@app.command("add-exercise")
def add_exercise(
    name: Annotated[str, typer.Argument(help="Exercise name, e.g. 'Back Squat'")],
    notes: Annotated[str, typer.Option("--notes", "-n", help="Free-text cues")] = "",
    data_dir: DataDirOption = None,
) -> None:
    """Add an exercise to the catalog."""
    store = require_store(data_dir)
    try:
        if name.strip().lower() in exercise_lookup(store):
            views.print_error(f"Exercise already exists: {name}")
            raise typer.Exit(1)
        exercise = ExerciseRef(id=new_id(), name=name.strip(), notes=notes)
        store.save(ChangeSet(exercises=[exercise]))
    except (StorageError, ValueError) as e:
        fail(e)
    views.print_success(f"Added exercise {exercise.name}")


@app.command("list-exercises")
def list_exercises(data_dir: DataDirOption = None) -> None:
    """List catalog exercises."""
    store = require_store(data_dir)
    try:
        exercises = store.fetch("exercise", order=lambda e: e.name.lower())
    except StorageError as e:
        fail(e)
    if not exercises:
        views.console.print("[yellow]No exercises yet. Add one with 'add-exercise'.[/yellow]")
        return
    views.console.print(views.format_exercises_table(exercises))


@app.command("delete-exercise")
def delete_exercise(
    name: Annotated[str, typer.Argument(help="Exercise name")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete an exercise from the catalog.

    Program slots, templates and history that used it are kept; they show
    the exercise as deleted.
    """
    store = require_store(data_dir)
    try:
        ex_id = exercise_lookup(store).get(name.strip().lower())
        if ex_id is None:
            views.print_error(f"Exercise not found: {name}")
            raise typer.Exit(1)
        if not yes and not views.confirm_action(f"Delete exercise {name}?"):
            views.print_info("Cancelled.")
            return
        store.save(ChangeSet(deleted_exercises=[ex_id]))
    except StorageError as e:
        fail(e)
    views.print_success(f"Deleted exercise {name}")


@app.command("add-template")
def add_template(
    template_file: Annotated[Path, typer.Argument(help="YAML file describing the workout")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Add a workout template from a YAML file.

    \b
      name: Upper
      exercises:
        - {exercise: Overhead Press, sets: 4, rep_min: 6, rep_max: 8}
        - {exercise: Row, sets: 4, rep_min: 8, rep_max: 12}
    """
    store = require_store(data_dir)
    data = load_yaml_file(template_file)
    try:
        name, exercises = parse_template_yaml(data, exercise_lookup(store))
        existing = {t.name.lower() for t in store.fetch("template")}
        if name.lower() in existing:
            views.print_error(f"Template already exists: {name}")
            raise typer.Exit(1)
        template = WorkoutTemplate(id=new_id(), name=name, exercises=exercises)
        store.save(ChangeSet(templates=[template]))
    except (ValidationError, StorageError) as e:
        fail(e)
    views.print_success(f"Added template {name} ({len(exercises)} exercises)")


@app.command("list-templates")
def list_templates(data_dir: DataDirOption = None) -> None:
    """List workout templates."""
    store = require_store(data_dir)
    try:
        templates = store.fetch("template", order=lambda t: t.name.lower())
        names = store.exercise_names()
    except StorageError as e:
        fail(e)
    if not templates:
        views.console.print("[yellow]No templates yet. Add one with 'add-template'.[/yellow]")
        return
    views.console.print(views.format_templates_table(templates, names))
