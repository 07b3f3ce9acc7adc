"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of programs, workouts and history.
"""

from rich.console import Console
from rich.table import Table

from ..core.config import MISSES_BEFORE_DELOAD
from ..core.models import (
    ExerciseRef,
    Group,
    Program,
    ProgramExerciseSlot,
    SessionSummary,
    WorkoutSession,
    WorkoutTemplate,
)
from ..core.partitioner import day_indices, groups_for_day
from ..core.scheduler import clamp_group_slot

console = Console()

UNKNOWN_EXERCISE = "(deleted exercise)"


def _name(names: dict[str, str], exercise_id: str | None) -> str:
    if exercise_id is None:
        return UNKNOWN_EXERCISE
    return names.get(exercise_id, UNKNOWN_EXERCISE)


def _kg(value: float) -> str:
    return f"{value:.1f}"


def deload_imminent(slot: ProgramExerciseSlot, misses_before_deload: int) -> bool:
    """True when one more missed session deloads the slot."""
    return slot.consecutive_misses >= misses_before_deload - 1


def misses_text(slot: ProgramExerciseSlot, misses_before_deload: int) -> str:
    if deload_imminent(slot, misses_before_deload):
        return f"[red]{slot.consecutive_misses} · Deload imminent[/red]"
    if slot.consecutive_misses:
        return f"[yellow]{slot.consecutive_misses}[/yellow]"
    return ""


def format_group_table(
    group: Group,
    names: dict[str, str],
    misses_before_deload: int = MISSES_BEFORE_DELOAD,
) -> Table:
    """
    Create a table of one workout's exercises and their goals.

    Args:
        group: Workout group
        names: Exercise id -> display name
        misses_before_deload: Threshold used to flag an imminent deload

    Returns:
        Rich Table
    """
    table = Table(title=f"Day {group.day_index} · {group.label}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Exercise", style="bold")
    table.add_column("Sets", justify="right")
    table.add_column("Goal", justify="right")
    table.add_column("Range", justify="right")
    table.add_column("Misses", justify="right")

    for i, slot in enumerate(group.slots, 1):
        table.add_row(
            str(i),
            _name(names, slot.exercise_id),
            str(slot.sets),
            f"{_kg(slot.weight_goal)} kg × {slot.rep_goal}",
            f"{slot.rep_min}–{slot.rep_max}",
            misses_text(slot, misses_before_deload),
        )
    return table


def print_group(
    group: Group, names: dict[str, str], misses_before_deload: int = MISSES_BEFORE_DELOAD
) -> None:
    console.print()
    console.print(format_group_table(group, names, misses_before_deload))
    console.print()


def print_program(
    program: Program,
    slots: list[ProgramExerciseSlot],
    names: dict[str, str],
    misses_before_deload: int = MISSES_BEFORE_DELOAD,
) -> None:
    """Print every day and workout of a program, marking the one that is due."""
    console.print()
    console.print(f"[bold cyan]{program.name}[/bold cyan]  [dim]{program.id}[/dim]")

    days = day_indices(slots)
    if not days:
        console.print("[yellow]No workouts yet. Add one with 'add-workout'.[/yellow]")
        return

    for day in days:
        groups = groups_for_day(slots, day)
        due_pos = (
            clamp_group_slot(program.current_group_slot, len(groups))
            if day == program.current_day_index
            else None
        )
        console.print()
        console.print(f"[bold]Day {day}[/bold]")
        for group in groups:
            marker = " [green]← next[/green]" if group.position == due_pos else ""
            console.print(f"  {group.position + 1}. {group.label}{marker}")
            for slot in group.slots:
                console.print(
                    f"      {_name(names, slot.exercise_id)}: "
                    f"{slot.sets} sets, reps {slot.rep_min}–{slot.rep_max}, "
                    f"goal {_kg(slot.weight_goal)} kg × {slot.rep_goal}"
                )
                if deload_imminent(slot, misses_before_deload):
                    console.print("        [red]Deload imminent[/red]")
    console.print()


def format_programs_table(programs: list[Program]) -> Table:
    table = Table(title="Programs")
    table.add_column("Name", style="bold")
    table.add_column("Next", justify="right")
    table.add_column("Id", style="dim")
    for p in programs:
        table.add_row(
            p.name,
            f"day {p.current_day_index}, workout {p.current_group_slot + 1}",
            p.id,
        )
    return table


def format_exercises_table(exercises: list[ExerciseRef]) -> Table:
    table = Table(title="Exercises")
    table.add_column("Name", style="bold")
    table.add_column("Notes")
    table.add_column("Id", style="dim")
    for e in exercises:
        table.add_row(e.name, e.notes, e.id)
    return table


def format_templates_table(templates: list[WorkoutTemplate], names: dict[str, str]) -> Table:
    table = Table(title="Templates")
    table.add_column("Name", style="bold")
    table.add_column("Exercises")
    for t in templates:
        lines = [
            f"{_name(names, te.exercise_id)} {te.sets}×{te.rep_min}–{te.rep_max}"
            for te in t.ordered_exercises()
        ]
        table.add_row(t.name, "\n".join(lines))
    return table


def print_summary(summary: SessionSummary) -> None:
    """Print what was performed in a finalized session."""
    table = Table(title=f"Session saved · Day {summary.day_index} · {summary.group_label}")
    table.add_column("Exercise", style="bold")
    table.add_column("Sets")
    table.add_column("Volume", justify="right")

    for entry in summary.entries:
        sets = ", ".join(
            f"{_kg(w)}×{r}" for w, r in zip(entry.set_weights, entry.set_reps)
        )
        table.add_row(entry.exercise_name, sets, f"{entry.total_volume:.1f}")

    console.print()
    console.print(table)
    console.print(f"Total volume: [bold]{summary.total_volume:.1f}[/bold] kg")
    console.print()


def format_history_table(sessions: list[WorkoutSession], names: dict[str, str]) -> Table:
    """
    Create a table of finalized sessions.

    Performance columns show the last set only; that is all history keeps.
    """
    table = Table(title="History")
    table.add_column("Date", style="cyan")
    table.add_column("Workout")
    table.add_column("Exercise")
    table.add_column("Goal", justify="right")
    table.add_column("Last set", justify="right")
    table.add_column("Volume", justify="right")

    for session in sessions:
        first = True
        for record in session.records:
            last = f"{_kg(record.weight_performed)} × {record.reps_performed}"
            if record.goal_met:
                last = f"[green]{last}[/green]"
            table.add_row(
                session.date if first else "",
                f"D{session.day_index} {session.group_label}" if first else "",
                _name(names, record.exercise_id),
                f"{_kg(record.weight_goal)} × {record.rep_goal}",
                last,
                f"{session.total_volume:.1f}" if first else "",
            )
            first = False
        if first:
            table.add_row(session.date, f"D{session.day_index} {session.group_label}", "", "", "", "0.0")
    return table


def print_history(sessions: list[WorkoutSession], names: dict[str, str]) -> None:
    """Print sessions, or a hint if there are none."""
    if not sessions:
        console.print("[yellow]No sessions recorded yet.[/yellow]")
        return
    console.print(format_history_table(sessions, names))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} \\[y/N]: ")
    return response.lower() in ("y", "yes")
