"""Shared Typer app object, shared option types, and store utilities."""

from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
import yaml

from ..core.config import DRAFTS_FILE_NAME, STORE_FILE_NAME
from ..core.engine.config_loader import get_default_data_dir, load_progression_config
from ..core.models import Program
from ..core.repository import StorageError
from ..core.session_service import TrainingService
from ..io.draft_store import DraftStore
from ..io.program_store import ProgramStore
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option(
        "--data-dir",
        "-D",
        help="Data directory (default: $LIFT_SCHEDULER_HOME or ~/.lift-scheduler)",
    ),
]

# Shared --program option; may be omitted when only one program exists
ProgramOption = Annotated[
    Optional[str],
    typer.Option("--program", "-p", help="Program name or id (default: the only program)"),
]

app = typer.Typer(
    name="lift-scheduler",
    help="Strength-training program tracker with automatic load progression.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def resolve_data_dir(data_dir: Path | None) -> Path:
    return data_dir if data_dir is not None else get_default_data_dir()


def get_store(data_dir: Path | None) -> ProgramStore:
    """Get the program store in the given or default data directory."""
    return ProgramStore(resolve_data_dir(data_dir) / STORE_FILE_NAME)


def get_drafts(data_dir: Path | None) -> DraftStore:
    return DraftStore(resolve_data_dir(data_dir) / DRAFTS_FILE_NAME)


def get_service(data_dir: Path | None) -> TrainingService:
    """Build a TrainingService wired to the on-disk store, drafts and config."""
    directory = resolve_data_dir(data_dir)
    try:
        config = load_progression_config(directory)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    return TrainingService(get_store(data_dir), get_drafts(data_dir), config=config)


def require_store(data_dir: Path | None) -> ProgramStore:
    """Return the store, exiting with an error if it has not been initialized."""
    store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"Store not found: {store.store_path}")
        views.print_info("Run 'init' first.")
        raise typer.Exit(1)
    return store


def resolve_program(store: ProgramStore, ref: str | None) -> Program:
    """
    Find the program named by ref, or the only program when ref is None.

    Exits with an error message if it cannot be determined.
    """
    try:
        if ref is not None:
            program = store.find_program(ref)
            if program is None:
                views.print_error(f"Program not found: {ref}")
                raise typer.Exit(1)
            return program

        programs = store.fetch("program", order=lambda p: p.name.lower())
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not programs:
        views.print_error("No programs yet. Create one with 'create-program'.")
        raise typer.Exit(1)
    if len(programs) > 1:
        names = ", ".join(p.name for p in programs)
        views.print_error(f"Several programs exist ({names}); choose one with --program.")
        raise typer.Exit(1)
    return programs[0]


def load_yaml_file(path: Path):
    """Read a YAML document, exiting with an error message if it cannot be parsed."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return yaml.safe_load(fh)
    except OSError as e:
        views.print_error(f"Cannot read {path}: {e}")
        raise typer.Exit(1)
    except yaml.YAMLError as e:
        views.print_error(f"Invalid YAML in {path}: {e}")
        raise typer.Exit(1)


def exercise_lookup(store: ProgramStore) -> dict[str, str]:
    """Lower-cased exercise name -> id."""
    return {e.name.lower(): e.id for e in store.fetch("exercise")}


def fail(error: Exception) -> NoReturn:
    """Print a domain, validation or storage error and exit 1."""
    views.print_error(str(error))
    if isinstance(error, StorageError):
        views.print_info("Nothing was changed. You can retry.")
    raise typer.Exit(1)

