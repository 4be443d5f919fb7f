from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import typer

from services.units import to_fahrenheit


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_temperature(celsius: Optional[float], fahrenheit: bool = False) -> str:
    if celsius is None:
        return "n/a"
    if fahrenheit:
        return f"{to_fahrenheit(celsius):.1f}°F"
    return f"{celsius:.1f}°C"


def render_facilities(facilities: List[Dict[str, Any]], fahrenheit: bool = False) -> None:
    echo_heading("Facilities")
    if not facilities:
        typer.echo("No facilities configured.")
        return
    for facility in facilities:
        temp = format_temperature(facility.get("current_temp"), fahrenheit)
        low = format_temperature(facility.get("min_temp"), fahrenheit)
        high = format_temperature(facility.get("max_temp"), fahrenheit)
        color = typer.colors.GREEN if facility.get("in_range", True) else typer.colors.RED
        typer.secho(
            f"[{facility.get('id')}] {facility.get('name')}: {temp} (range {low} - {high})",
            fg=color,
        )
        typer.echo(
            f"    satisfaction {facility.get('satisfaction_percent', 0)}% "
            f"from {facility.get('total_votes', 0)} ratings, "
            f"{len(facility.get('recent_readings') or [])} recent readings"
        )


def render_readings(readings: List[Dict[str, Any]], fahrenheit: bool = False) -> None:
    echo_heading("Recent readings")
    if not readings:
        typer.echo("No readings submitted yet.")
        return
    for reading in readings:
        typer.echo(
            f"  - #{reading.get('id')} {format_temperature(reading.get('temperature_celsius'), fahrenheit)}"
            f" by {reading.get('submitted_by')} ({reading.get('time_since_submission')})"
            f" +{reading.get('upvote_count')}/-{reading.get('downvote_count')}"
            f" score={reading.get('weighted_score')}"
        )


def render_reading(reading: Dict[str, Any]) -> None:
    echo_heading("Reading recorded")
    echo_key_values(
        [
            ("id", reading.get("id")),
            ("facility_id", reading.get("facility_id")),
            ("submitted_by", reading.get("submitted_by")),
            ("temperature", format_temperature(reading.get("temperature_celsius"))),
            ("submitted_at", reading.get("submitted_at")),
        ]
    )


def render_vote(vote: Dict[str, Any]) -> None:
    direction = "up" if vote.get("is_upvote") else "down"
    typer.secho(
        f"Vote {vote.get('id')} recorded: {direction} on reading {vote.get('reading_id')}",
        fg=typer.colors.GREEN,
    )


def render_history(points: List[Dict[str, Any]], fahrenheit: bool = False) -> None:
    echo_heading("Temperature history")
    if not points:
        typer.echo("No history in the requested window.")
        return
    for point in points:
        typer.echo(
            f"  {point.get('recorded_at')}  {format_temperature(point.get('temperature'), fahrenheit)}"
        )
