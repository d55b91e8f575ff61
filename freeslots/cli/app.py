"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.gemini_responder import GeminiResponder
from ..adapters.google_calendar_client import GoogleCalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..adapters.token_store import AccessTokenStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import FreeSlotsError
from ..domain.formatting import format_free_slots_message
from ..domain.models import TimeSlot, WorkWindow
from ..schemas import ConversationTurn
from ..services.free_slot_finder import FreeSlotFinderService
from ..services.scheduling_assistant import SchedulingAssistant

app = typer.Typer(
    name="freeslots",
    help="Find common free meeting time across Google calendars",
    add_completion=False
)

console = Console()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _determine_time_range(
    *,
    tz: str,
    search_days: int,
    this_week: bool,
    next_week: bool,
    start_option: Optional[str],
    end_option: Optional[str]
):
    """
    Resolve the desired date range based on shortcut flags or explicit dates.
    Returns (start_date, end_date).
    """
    if this_week and next_week:
        raise ValueError("--this-week and --next-week cannot be combined.")

    now = pendulum.now(tz)

    if this_week:
        return now, now.end_of("week")

    if next_week:
        next_monday = now.next(pendulum.MONDAY).start_of("day")
        return next_monday, next_monday.add(days=6).end_of("day")

    if start_option:
        start_date = pendulum.from_format(start_option, "YYYY-MM-DD", tz=tz).start_of("day")
    else:
        start_date = now.start_of("day")

    if end_option:
        end_date = pendulum.from_format(end_option, "YYYY-MM-DD", tz=tz).end_of("day")
    else:
        end_date = start_date.add(days=search_days).end_of("day")

    if end_date < start_date:
        raise ValueError("End date must not be before start date.")

    return start_date, end_date


def _resolve_participants(config: AppConfig, identifiers: Optional[List[str]]) -> List[str]:
    if identifiers:
        return config.resolve_participants(identifiers)
    if not config.participants:
        raise ValueError("No participants given and none configured.")
    return [p.email.lower() for p in config.participants]


def _build_finder(
    config: AppConfig, participants: List[str], *, mock: bool, window: WorkWindow
) -> FreeSlotFinderService:
    calendar_ids = {email: config.calendar_id_for(email) for email in participants}
    if mock:
        client = MockCalendarClient(calendar_ids=calendar_ids)
    else:
        token = AccessTokenStore().get_access_token()
        client = GoogleCalendarClient(access_token=token, calendar_ids=calendar_ids)
    return FreeSlotFinderService(calendar_client=client, window=window)


def _load_history(history_file: Optional[Path]) -> List[ConversationTurn]:
    if history_file is None:
        return []
    try:
        raw = json.loads(history_file.read_text(encoding="utf-8"))
        return TypeAdapter(List[ConversationTurn]).validate_python(raw)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ValueError(f"Invalid conversation history in {history_file}: {exc}") from exc


@app.command()
def find(
    participants: Annotated[Optional[List[str]], typer.Argument(help="Participant names or emails. Defaults to everyone configured.")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Minimum free time in minutes")] = None,
    include_weekends: Annotated[bool, typer.Option("--include-weekends", help="Also search Saturdays and Sundays.")] = False,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock calendars and skip authentication.")] = False,
    this_week: Annotated[bool, typer.Option("--this-week", help="Search from now until the end of this week.")] = False,
    next_week: Annotated[bool, typer.Option("--next-week", help="Search next week (Monday to Sunday).")] = False,
):
    """
    Find free time shared by all participants.

    Examples:

        freeslots find kuroda kanta --start 2025-05-15 --end 2025-05-16

        freeslots find --next-week --duration 60

        freeslots find kuroda kanta --mock --start 2025-05-15 --end 2025-05-15
    """
    try:
        config = _load_config(config_file)
        window = config.work_window(
            duration_minutes=duration,
            exclude_weekends=False if include_weekends else None,
        )
        start_date, end_date = _determine_time_range(
            tz=config.timezone,
            search_days=config.defaults.search_days,
            this_week=this_week,
            next_week=next_week,
            start_option=start,
            end_option=end,
        )
        participant_emails = _resolve_participants(config, participants)

        if mock:
            console.print("[yellow]⚠  Mock mode: using sample calendars[/yellow]\n")

        console.print("[bold cyan]Summary:[/bold cyan]")
        console.print(f"   Participants: {', '.join(participant_emails)}")
        console.print(f"   Period: {start_date.format('DD.MM.YYYY')} - {end_date.format('DD.MM.YYYY')}")
        console.print(f"   Minimum duration: {window.min_duration_minutes} minutes")
        console.print(f"   Working hours: {window.start_hour}:00 - {window.end_hour}:00 ({window.timezone})")
        console.print()

        finder = _build_finder(config, participant_emails, mock=mock, window=window)
        intervals = asyncio.run(
            finder.find_slots(
                participants=participant_emails,
                start_date=start_date,
                end_date=end_date,
            )
        )

        if not intervals:
            console.print(
                "[yellow]⚠ No free time found.[/yellow]\n"
                "Try a longer period or a shorter minimum duration."
            )
        else:
            console.print(f"[bold green]✓ {len(intervals)} free slot(s) found:[/bold green]\n")
            for interval in intervals:
                slot = TimeSlot(interval=interval, participants=participant_emails)
                console.print(f"  {slot.format_display()}")

        console.print()

    except (FreeSlotsError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def ask(
    question: Annotated[str, typer.Argument(help="Question about the schedule, in plain language.")],
    with_participants: Annotated[Optional[List[str]], typer.Option("--with", "-w", help="Participant name or email (repeatable).")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    history_file: Annotated[Optional[Path], typer.Option("--history", help="JSON file with previous turns [{role, content}].")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock calendars and skip authentication.")] = False,
):
    """
    Ask the assistant about free time; the answer is based on computed slots.
    """
    try:
        config = _load_config(config_file)
        window = config.work_window()
        start_date, end_date = _determine_time_range(
            tz=config.timezone,
            search_days=config.defaults.search_days,
            this_week=False,
            next_week=False,
            start_option=start,
            end_option=end,
        )
        participant_emails = _resolve_participants(config, with_participants)
        history = _load_history(history_file)

        responder = GeminiResponder.from_api_key(
            os.environ.get(config.gemini.api_key_env, ""),
            window,
            model_name=config.gemini.model,
            temperature=config.gemini.temperature,
        )
        assistant = SchedulingAssistant(
            finder=_build_finder(config, participant_emails, mock=mock, window=window),
            responder=responder,
        )

        answer = asyncio.run(
            assistant.ask(
                question,
                participants=participant_emails,
                start_date=start_date,
                end_date=end_date,
                history=history,
            )
        )

        console.print(format_free_slots_message(answer.slots))
        console.print()
        console.print(answer.text, markup=False)

    except (FreeSlotsError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def list_participants(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    List all configured participants.
    """
    try:
        config = _load_config(config_file)

        if not config.participants:
            console.print("[yellow]No participants defined in the config file.[/yellow]")
            return

        table = Table(
            title="Configured participants",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Name (alias)", style="bold yellow")
        table.add_column("E-mail", style="dim")
        table.add_column("Calendar", style="dim")

        for participant in config.participants:
            table.add_row(
                participant.name,
                participant.email,
                config.calendar_id_for(participant.email),
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def set_token(
    token: Annotated[str, typer.Option(prompt=True, hide_input=True, help="Google OAuth access token")],
):
    """
    Store the calendar access token in the OS keyring.
    """
    try:
        AccessTokenStore().save_access_token(token)
        console.print("\n[green]✓ Access token stored.[/green]\n")
    except FreeSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def clear_token():
    """
    Remove the stored calendar access token.
    """
    AccessTokenStore().clear()
    console.print("\n[green]✓ Access token removed.[/green]")
    console.print("You will need to provide a new token before the next query.\n")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]freeslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
