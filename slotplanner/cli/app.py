"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.api_client import ExpertApiClient
from ..adapters.mock_api_client import MockApiClient
from ..config import AppConfig, get_default_config_path
from ..domain import session as lifecycle
from ..domain.exceptions import SchedulingError
from ..domain.models import DayKey, parse_date, resolve_timezone
from ..domain.scheduler import Scheduler
from ..domain.session import Review, Session, SessionQuery
from ..domain.slot_calculator import BookableSlotCalculator
from ..services.availability_service import AvailabilityService, Command
from ..services.session_service import SessionService

app = typer.Typer(
    name="slotplanner",
    help="Manage an expert's weekly availability and booked sessions",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use the local mock store instead of the backend.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]


def _load_config(config_file: Optional[Path], mock: bool, verbose: bool = False) -> AppConfig:
    """Load config; mock mode works without a config file."""
    config_path = config_file or get_default_config_path()
    try:
        if mock and not config_path.exists():
            config = AppConfig()
        else:
            config = AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    return config


def _build_store(config: AppConfig, mock: bool):
    if mock:
        return MockApiClient(data_file=config.get_mock_data_file())
    return ExpertApiClient(
        base_url=config.api.base_url,
        token=config.api.token,
        timeout=config.api.timeout_seconds,
    )


def _fail(message: str):
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def _start_date(value: Optional[str], config: AppConfig) -> pendulum.Date:
    """The given date, or today in the configured zone."""
    if value:
        return parse_date(value)
    return pendulum.today(resolve_timezone(config.timezone)).date()


def _print_schedule(scheduler: Scheduler) -> None:
    table = Table(
        title=f"Weekly availability ({scheduler.config.summary()})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Slot")

    for day, slots in scheduler.weekly.items():
        if not slots:
            table.add_row(day.label, "", "[dim]Unavailable[/dim]")
            continue
        for index, slot in enumerate(slots):
            table.add_row(day.label if index == 0 else "", str(index), slot.format_display())

    console.print()
    console.print(table)

    if len(scheduler.breaks):
        console.print("\n[bold]Blocked dates:[/bold]")
        for index, entry in enumerate(scheduler.breaks):
            console.print(f"  {index}. {entry}")
    console.print()


def _run_command(config_file: Optional[Path], mock: bool, verbose: bool, command: Command, done: str) -> None:
    """Load the snapshot, apply one command, save, and show the result."""
    config = _load_config(config_file, mock, verbose)
    service = AvailabilityService(_build_store(config, mock), defaults=config.defaults)

    async def run():
        committed = await service.load()
        return await service.apply(committed, command)

    try:
        outcome = asyncio.run(run())
    except SchedulingError as e:
        _fail(e.message)

    if not outcome.ok:
        _fail(outcome.error.message)

    console.print(f"[green]✓ {done}[/green]")
    _print_schedule(outcome.value)


@app.command()
def show(config_file: ConfigOption = None, mock: MockOption = False, verbose: VerboseOption = False):
    """
    Show the weekly availability and blocked dates.
    """
    config = _load_config(config_file, mock, verbose)
    service = AvailabilityService(_build_store(config, mock), defaults=config.defaults)
    try:
        scheduler = asyncio.run(service.load())
    except SchedulingError as e:
        _fail(e.message)
    _print_schedule(scheduler)


@app.command()
def add_slot(
    day: Annotated[DayKey, typer.Argument(help="Day key, e.g. mon")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Add a 09:00 slot to a day (turns the day on).
    """
    _run_command(config_file, mock, verbose, lambda s: s.add_slot(day), f"Slot added on {day.label}")


@app.command()
def set_start(
    day: Annotated[DayKey, typer.Argument(help="Day key, e.g. mon")],
    index: Annotated[int, typer.Argument(help="Slot number as shown by 'show'")],
    start: Annotated[str, typer.Argument(help="New start time (HH:MM, 24-hour)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Move a slot; its end follows from the session duration.
    """
    _run_command(
        config_file, mock, verbose,
        lambda s: s.update_slot_start(day, index, start),
        f"Slot {index} on {day.label} now starts at {start}",
    )


@app.command()
def remove_slot(
    day: Annotated[DayKey, typer.Argument(help="Day key, e.g. mon")],
    index: Annotated[int, typer.Argument(help="Slot number as shown by 'show'")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Remove one slot from a day.
    """
    _run_command(config_file, mock, verbose, lambda s: s.remove_slot(day, index), f"Slot {index} removed from {day.label}")


@app.command()
def clear_day(
    day: Annotated[DayKey, typer.Argument(help="Day key, e.g. mon")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Mark a day unavailable by removing all of its slots.
    """
    _run_command(config_file, mock, verbose, lambda s: s.clear_day(day), f"{day.label} is now unavailable")


@app.command()
def copy_day(
    source: Annotated[DayKey, typer.Argument(help="Day whose slots are copied to every other day")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")] = False,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Copy one day's schedule to all other days.
    """
    if not yes and not typer.confirm(f"Copy schedule from {source.label} to all other days?"):
        raise typer.Exit(0)
    _run_command(config_file, mock, verbose, lambda s: s.copy_day_schedule(source), "Schedule copied to all days")


@app.command()
def set_duration(
    minutes: Annotated[int, typer.Argument(help="Session length: 30, 60 or 90")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Change the session duration (existing slots keep their end times).
    """
    _run_command(config_file, mock, verbose, lambda s: s.set_session_duration(minutes), f"Session duration set to {minutes} minutes")


@app.command()
def set_max(
    count: Annotated[int, typer.Argument(help="Maximum sessions per day (1-20)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Change the maximum number of sessions per day.
    """
    _run_command(config_file, mock, verbose, lambda s: s.set_max_slots_per_day(count), f"Daily limit set to {count}")


@app.command()
def block_date(
    date: Annotated[str, typer.Argument(help="Date to block (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Block a calendar date.
    """
    _run_command(config_file, mock, verbose, lambda s: s.add_break_date(date), f"{date} blocked")


@app.command()
def unblock_date(
    index: Annotated[int, typer.Argument(help="Blocked date number as shown by 'show'")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Remove a blocked date.
    """
    _run_command(config_file, mock, verbose, lambda s: s.remove_break_date(index), "Blocked date removed")


@app.command()
def slots(
    date: Annotated[Optional[str], typer.Argument(help="First date (YYYY-MM-DD). Defaults to today.")] = None,
    days: Annotated[int, typer.Option("--days", "-d", help="Number of days to list")] = 1,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    List the bookable session windows candidates would see.
    """
    config = _load_config(config_file, mock, verbose)
    store = _build_store(config, mock)
    availability = AvailabilityService(store, defaults=config.defaults)
    sessions = SessionService(store, user_id=config.expert_id, timezone=config.timezone)

    async def run():
        return await availability.load(), await sessions.list_sessions()

    try:
        start = _start_date(date, config)
        scheduler, booked = asyncio.run(run())
    except SchedulingError as e:
        _fail(e.message)

    calculator = BookableSlotCalculator(scheduler, timezone=config.timezone)
    windows = calculator.slots_between(start, start.add(days=max(days, 1) - 1), booked)

    console.print()
    if not windows:
        console.print("[yellow]⚠ No bookable slots in this period.[/yellow]\n")
        return

    console.print(f"[bold green]✓ {len(windows)} slot(s):[/bold green]\n")
    for window in windows:
        style = "" if window.available else "[dim]"
        console.print(f"  {style}{window.format_display()}")
    console.print()


@app.command()
def sessions(
    search: Annotated[str, typer.Option("--search", "-s", help="Match id, candidate name or topic")] = "",
    status: Annotated[str, typer.Option("--status", help="Stored status to show, or 'all'")] = "all",
    page: Annotated[int, typer.Option("--page", "-p", help="Page number")] = 1,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    List booked sessions with their live state.
    """
    config = _load_config(config_file, mock, verbose)
    service = SessionService(_build_store(config, mock), user_id=config.expert_id, timezone=config.timezone)

    try:
        found = asyncio.run(service.list_sessions(SessionQuery(search=search, status=status)))
    except SchedulingError as e:
        _fail(e.message)

    if not found:
        console.print("[yellow]No sessions found.[/yellow]")
        return

    now = pendulum.now()
    pages = SessionQuery.page_count(found)
    table = Table(
        title=f"Sessions (page {min(page, pages)}/{pages})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Session", style="bold yellow")
    table.add_column("Candidate")
    table.add_column("Start")
    table.add_column("State")
    table.add_column("Timer", style="dim")

    for session in SessionQuery.page(found, min(page, pages)):
        table.add_row(
            session.id,
            session.candidate_name or "-",
            session.start_time.format("DD.MM.YYYY HH:mm"),
            lifecycle.state_at(session, now).value,
            lifecycle.timer_display(now, session.start_time, session.end_time),
        )

    console.print()
    console.print(table)
    console.print()


def _require_session(service: SessionService, session_id: str) -> Session:
    try:
        session = asyncio.run(service.find_session(session_id))
    except SchedulingError as e:
        _fail(e.message)
    if session is None:
        _fail(f"Session not found: {session_id}")
    return session


@app.command()
def join(
    session_id: Annotated[str, typer.Argument(help="Session id")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Join a session (opens 10 minutes before the start).
    """
    config = _load_config(config_file, mock, verbose)
    service = SessionService(_build_store(config, mock), user_id=config.expert_id, timezone=config.timezone)
    session = _require_session(service, session_id)

    outcome = asyncio.run(service.join(session))
    if not outcome.ok:
        _fail(outcome.error.message)

    console.print(f"[green]✓ Joined {session.id}[/green] meeting: [bold]{outcome.value.meeting_id}[/bold]")


@app.command()
def review(
    session_id: Annotated[str, typer.Argument(help="Session id")],
    overall: Annotated[int, typer.Option("--overall", help="Overall rating 1-5")] = 5,
    technical: Annotated[Optional[int], typer.Option("--technical", help="Technical rating 1-5")] = None,
    communication: Annotated[Optional[int], typer.Option("--communication", help="Communication rating 1-5")] = None,
    feedback: Annotated[str, typer.Option("--feedback", help="Written feedback")] = "",
    strengths: Annotated[str, typer.Option("--strengths", help="Comma separated strengths")] = "",
    weaknesses: Annotated[str, typer.Option("--weaknesses", help="Comma separated areas to improve")] = "",
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Review a session after it has ended.
    """
    config = _load_config(config_file, mock, verbose)
    service = SessionService(_build_store(config, mock), user_id=config.expert_id, timezone=config.timezone)

    try:
        entry = Review.from_form(overall, technical, communication, feedback, strengths, weaknesses)
    except SchedulingError as e:
        _fail(e.message)

    session = _require_session(service, session_id)
    outcome = asyncio.run(service.submit_review(session, entry))
    if not outcome.ok:
        _fail(outcome.error.message)

    console.print("[green]✓ Review submitted successfully![/green]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotplanner[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
