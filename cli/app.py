from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    render_facilities,
    render_history,
    render_reading,
    render_readings,
    render_vote,
)


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the crowd temperature dashboard.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, request_timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("facilities")
def facilities_command(
    ctx: typer.Context,
    fahrenheit: bool = typer.Option(False, "--fahrenheit", "-f", help="Show °F instead of °C."),
) -> None:
    """List facilities with their crowd-weighted temperatures."""
    state = _get_state(ctx)
    render_facilities(state.client.list_facilities(), fahrenheit=fahrenheit)


@app.command("readings")
def readings_command(
    ctx: typer.Context,
    facility_id: int = typer.Argument(..., help="Facility identifier."),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=0, help="Number of readings."),
    fahrenheit: bool = typer.Option(False, "--fahrenheit", "-f", help="Show °F instead of °C."),
) -> None:
    """Show the newest crowd readings for a facility."""
    state = _get_state(ctx)
    render_readings(state.client.recent_readings(facility_id, limit), fahrenheit=fahrenheit)


@app.command("submit")
def submit_command(
    ctx: typer.Context,
    facility_id: int = typer.Argument(..., help="Facility identifier."),
    temperature: float = typer.Argument(..., help="Observed temperature."),
    unit: str = typer.Option("celsius", "--unit", "-u", help="celsius or fahrenheit."),
    name: Optional[str] = typer.Option(None, "--name", help="Display name of the submitter."),
) -> None:
    """Submit a temperature reading."""
    state = _get_state(ctx)
    reading = state.client.submit_reading(facility_id, temperature, unit=unit, submitted_by=name)
    render_reading(reading)


@app.command("vote")
def vote_command(
    ctx: typer.Context,
    reading_id: int = typer.Argument(..., help="Reading identifier."),
    up: bool = typer.Option(True, "--up/--down", help="Vote direction."),
) -> None:
    """Up- or down-vote a reading."""
    state = _get_state(ctx)
    render_vote(state.client.cast_vote(reading_id, up))


@app.command("history")
def history_command(
    ctx: typer.Context,
    facility_id: int = typer.Argument(..., help="Facility identifier."),
    hours: Optional[int] = typer.Option(None, "--hours", min=1, help="Window size in hours."),
    fahrenheit: bool = typer.Option(False, "--fahrenheit", "-f", help="Show °F instead of °C."),
) -> None:
    """Print the raw temperature series for a facility."""
    state = _get_state(ctx)
    render_history(state.client.history(facility_id, hours), fahrenheit=fahrenheit)
