"""
CLI entry point using Typer.

Provides commands for running a strength-training program:
- init: Create the data directory and store
- add-exercise / add-template: Build the catalog
- create-program / show-program: Assemble and inspect programs
- today: Show the workout that is due
- log-session: Record it and update the goals
- history: Show finalized sessions
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from . import views
from .app import app
from .commands import catalog, programs, sessions


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log engine decisions to stderr")
    ] = False,
) -> None:
    """
    Strength-training program tracker. Run without a command for a menu.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s",
            handlers=[RichHandler(show_time=False, show_path=False)],
        )

    if ctx.invoked_subcommand is not None:
        return

    views.console.print()
    views.console.print("[bold cyan]lift-scheduler[/bold cyan] · strength-training program tracker")
    views.console.print()

    menu = {
        "1": ("today", "Show today's workout", sessions.today),
        "2": ("log-session", "Log today's workout", sessions.log_session),
        "3": ("history", "Show history", sessions.history),
        "4": ("show-program", "Show the program", programs.show_program),
        "5": ("list-programs", "List programs", programs.list_programs),
        "6": ("list-templates", "List templates", catalog.list_templates),
        "0": ("quit", "Quit", None),
    }

    for key, (_, desc, _) in menu.items():
        views.console.print(f"  \\[{key}] {desc}")

    views.console.print()
    choice = views.console.input("Choose [1]: ").strip() or "1"

    if choice not in menu:
        views.print_error(f"Unknown choice: {choice}")
        raise typer.Exit(1)

    command = menu[choice][2]
    if command is None:
        raise typer.Exit(0)
    ctx.invoke(command)


if __name__ == "__main__":
    app()
