#!/usr/bin/env python3
"""CLI for the student roster.

Commands:
    init-db     Create or reset the database
    add         Register a student
    list        List students, most recent first
    search      Search students by CUI, names or program
    show        Show one student by CUI
    update      Change a student's fields
    delete      Delete a student by id
    count       Count students
    status      Show database status
    theme       Show or change the light/dark theme
    serve       Start the Streamlit app
"""

import dataclasses
import subprocess
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from roster import __version__
from roster.config import get_settings
from roster.database import Database, Student
from roster.runtime import RosterRuntime

console = Console()

# Seconds to wait for the list subscription to deliver
LIST_TIMEOUT = 10.0


@contextmanager
def open_runtime(ctx: click.Context) -> Iterator[RosterRuntime]:
    runtime = RosterRuntime(ctx.obj["settings"])
    try:
        yield runtime
    finally:
        runtime.close()


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


def _students_table(title: str, students: Iterable[Student]) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("CUI")
    table.add_column("Nombres")
    table.add_column("Apellidos")
    table.add_column("Carrera profesional")
    for s in students:
        table.add_row(str(s.id), s.cui, s.nombres, s.apellidos, s.carrera_profesional)
    return table


def _validation_message(error: ValidationError) -> str:
    fields = ", ".join(str(e["loc"][0]) for e in error.errors() if e.get("loc"))
    return f"Invalid student data: {fields} must not be blank"


def _print_list(runtime: RosterRuntime, title: str) -> None:
    state = runtime.students.ui_state.wait_for(lambda s: not s.is_loading, timeout=LIST_TIMEOUT)
    if state.error_message:
        _fail(state.error_message)
    if not state.students:
        console.print(Panel("[yellow]No students found[/yellow]", title=title))
        return
    console.print(_students_table(title, state.students))
    console.print(f"\n[bold]Total: {len(state.students)}[/bold]")


@click.group()
@click.version_option(version=__version__, prog_name="roster")
@click.option(
    "--database",
    "database_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="SQLite file (default: ROSTER_DATABASE_PATH or ./student_database.db)",
)
@click.pass_context
def cli(ctx: click.Context, database_path: Optional[Path]):
    """Student roster - register, list and search students."""
    settings = get_settings()
    if database_path is not None:
        settings = dataclasses.replace(settings, database_path=database_path)
    ctx.obj = {"settings": settings}


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Drop and recreate the students table")
@click.pass_context
def init_db(ctx: click.Context, force: bool):
    """Initialize or reset the database."""
    settings = ctx.obj["settings"]
    if force and Path(settings.database_path).exists():
        if not click.confirm("This deletes every student. Continue?", default=False):
            console.print("[yellow]Aborted.[/yellow]")
            return

    with Database.from_settings(settings) as db:
        db.init_schema(force=force)
        info = db.verify()

    console.print("[green]✓ Database initialized[/green]")
    console.print(f"  Path: {info['path']}")
    console.print(f"  Tables: {', '.join(info.get('tables', []))}")


@cli.command()
@click.option("--cui", required=True, help="Unique student code")
@click.option("--nombres", required=True, help="Given names")
@click.option("--apellidos", required=True, help="Family names")
@click.option("--carrera", "carrera_profesional", required=True, help="Program of study")
@click.pass_context
def add(ctx: click.Context, cui: str, nombres: str, apellidos: str, carrera_profesional: str):
    """Register a student."""
    try:
        student = Student(cui=cui, nombres=nombres, apellidos=apellidos, carrera_profesional=carrera_profesional)
    except ValidationError as e:
        _fail(_validation_message(e))
        return

    with open_runtime(ctx) as runtime:
        result = runtime.students.add_student(student).result()

    if not result.success:
        _fail(result.message or "Could not save the student")
    console.print(f"[green]✓ Student saved with ID {result.student_id}[/green]")


@cli.command("list")
@click.pass_context
def list_students(ctx: click.Context):
    """List students, most recent first."""
    with open_runtime(ctx) as runtime:
        _print_list(runtime, "Students")


@cli.command()
@click.argument("query")
@click.pass_context
def search(ctx: click.Context, query: str):
    """Search students by CUI, names or program."""
    with open_runtime(ctx) as runtime:
        runtime.students.search_students(query)
        _print_list(runtime, f"Search: {query}")


@cli.command()
@click.argument("cui")
@click.pass_context
def show(ctx: click.Context, cui: str):
    """Show one student by CUI."""
    with open_runtime(ctx) as runtime:
        student = runtime.repository.get_student_by_cui(cui)

    if student is None:
        _fail(f"Student not found: {cui}")
        return
    console.print(
        Panel(
            f"[bold]{student.full_name}[/bold]\n"
            f"CUI: {student.cui}\n"
            f"Carrera profesional: {student.carrera_profesional}",
            title=f"Student #{student.id}",
        )
    )


@cli.command()
@click.argument("student_id", type=int)
@click.option("--cui", help="New unique code")
@click.option("--nombres", help="New given names")
@click.option("--apellidos", help="New family names")
@click.option("--carrera", "carrera_profesional", help="New program of study")
@click.pass_context
def update(ctx: click.Context, student_id: int, **changes: Optional[str]):
    """Change a student's fields."""
    changes = {field: value for field, value in changes.items() if value is not None}
    if not changes:
        _fail("Nothing to update: pass at least one of --cui, --nombres, --apellidos, --carrera")

    with open_runtime(ctx) as runtime:
        current = runtime.repository.get_student_by_id(student_id)
        if current is None:
            _fail(f"Student not found: {student_id}")
            return
        try:
            updated = Student(**{**current.model_dump(), **changes})
        except ValidationError as e:
            _fail(_validation_message(e))
            return
        result = runtime.students.update_student(updated).result()

    if not result.success:
        _fail(result.message or "Could not update the student")
    console.print(f"[green]✓ Student {student_id} updated[/green]")


@cli.command()
@click.argument("student_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, student_id: int, yes: bool):
    """Delete a student by id."""
    with open_runtime(ctx) as runtime:
        student = runtime.repository.get_student_by_id(student_id)
        if student is None:
            _fail(f"Student not found: {student_id}")
            return
        if not yes and not click.confirm(f"Delete {student.full_name} ({student.cui})?", default=False):
            console.print("[yellow]Aborted.[/yellow]")
            return
        result = runtime.students.delete_student(student).result()

    if not result.success:
        _fail(result.message or "Could not delete the student")
    console.print(f"[green]✓ Student {student_id} deleted[/green]")


@cli.command()
@click.pass_context
def count(ctx: click.Context):
    """Count students."""
    with open_runtime(ctx) as runtime:
        total = runtime.students.get_student_count().result()
    console.print(f"{total} student{'s' if total != 1 else ''}")


@cli.command()
@click.pass_context
def status(ctx: click.Context):
    """Show database status."""
    settings = ctx.obj["settings"]
    with Database.from_settings(settings) as db:
        info = db.verify()

    if not info.get("exists"):
        _fail(f"{info.get('error')} ({info.get('path')}). Run 'roster init-db' first.")

    table = Table(show_header=False, title="Database Status")
    table.add_column("Item", style="cyan")
    table.add_column("Value")
    table.add_row("Path", info["path"])
    table.add_row("Schema version", str(info["schema_version"]))
    table.add_row("Indexes", ", ".join(info["indexes"]) or "-")
    for name, rows in info["row_counts"].items():
        table.add_row(name.title(), str(rows))
    console.print(table)


@cli.command()
@click.argument("action", type=click.Choice(["show", "toggle", "dark", "light"]), default="show")
@click.pass_context
def theme(ctx: click.Context, action: str):
    """Show or change the light/dark theme."""
    with open_runtime(ctx) as runtime:
        vm = runtime.theme
        if action == "toggle":
            vm.toggle_theme().result()
        elif action in ("dark", "light"):
            vm.set_theme(action == "dark").result()
        is_dark = vm.is_dark_theme.value

    console.print(f"Theme: [bold]{'dark' if is_dark else 'light'}[/bold]")


@cli.command()
@click.option("--port", type=int, default=8501, show_default=True, help="Port to listen on")
def serve(port: int):
    """Start the Streamlit app."""
    app_path = Path(__file__).resolve().parent.parent / "ui" / "app.py"
    console.print(f"[blue]Starting Student Roster on port {port}...[/blue]")
    try:
        subprocess.run(
            [sys.executable, "-m", "streamlit", "run", str(app_path), "--server.port", str(port)],
            check=True,
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped.[/yellow]")
    except subprocess.CalledProcessError as e:
        _fail(f"Server exited with status {e.returncode}")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
