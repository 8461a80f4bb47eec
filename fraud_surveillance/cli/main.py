"""Analyst CLI for the fraud surveillance core using Typer and Rich."""

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fraud_surveillance import __version__
from fraud_surveillance.config.logging import get_logger
from fraud_surveillance.config.settings import settings
from fraud_surveillance.data_management import EntityStore
from fraud_surveillance.data_management.schemas import (
    AnnouncementEvidence,
    EntityKind,
    MarketContext,
    TipEvidence,
)
from fraud_surveillance.exceptions import SurveillanceError
from fraud_surveillance.scoring import (
    ScoreBreakdown,
    StatusClassifier,
    credibility_band,
    explain_announcement_score,
    explain_tip_score,
    risk_band,
)
from fraud_surveillance.workflow import VerificationController

# Initialize CLI app
app = typer.Typer(
    help="Fraud surveillance CLI - score announcements and tips, inspect evidence history",
    add_completion=False,
)

console = Console()

logger = get_logger("cli")


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]✗[/red] Cannot read {path}: {escape(str(e))}")
        raise typer.Exit(1)
    if not isinstance(data, dict):
        console.print(f"[red]✗[/red] {path} must contain a JSON object")
        raise typer.Exit(1)
    return data


def _print_breakdown(title: str, breakdown: ScoreBreakdown, status: str, band: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Rule", style="cyan")
    table.add_column("Points", justify="right", style="yellow")

    table.add_row("baseline", str(breakdown.baseline))
    for rule, points in breakdown.contributions.items():
        table.add_row(rule, f"{points:+d}")
    console.print(table)

    clamp_note = f" (raw {breakdown.raw_total}, clamped)" if breakdown.clamped else ""
    console.print(f"[bold]Score:[/bold] {breakdown.score}{clamp_note}")
    console.print(f"[bold]Status:[/bold] {status}")
    console.print(f"[bold]Band:[/bold] {band}")


@app.command("score-announcement")
def score_announcement_cmd(
    evidence_file: Path = typer.Argument(..., help="JSON file with an announcement evidence snapshot"),
) -> None:
    """
    Score an announcement evidence snapshot and show the rule breakdown.
    """
    data = _read_json(evidence_file)
    try:
        evidence = AnnouncementEvidence.model_validate(data)
    except ValidationError as e:
        console.print(f"[red]✗[/red] Invalid announcement evidence: {escape(str(e))}")
        raise typer.Exit(1)

    breakdown = explain_announcement_score(evidence)
    status = StatusClassifier.from_settings(settings).classify_announcement(breakdown.score)
    logger.info(f"Scored announcement evidence from {evidence_file}", score=breakdown.score)
    _print_breakdown(
        "Announcement Credibility",
        breakdown,
        status.value,
        credibility_band(breakdown.score).value,
    )


@app.command("score-tip")
def score_tip_cmd(
    evidence_file: Path = typer.Argument(
        ..., help="JSON file with tip evidence and an optional market_context object"
    ),
) -> None:
    """
    Score a social-media tip and show the rule breakdown.
    """
    data = _read_json(evidence_file)
    market_data = data.pop("market_context", None)
    try:
        evidence = TipEvidence.model_validate(data)
        market_context = MarketContext.model_validate(market_data) if market_data else None
    except ValidationError as e:
        console.print(f"[red]✗[/red] Invalid tip evidence: {escape(str(e))}")
        raise typer.Exit(1)

    breakdown = explain_tip_score(evidence, market_context)
    status = StatusClassifier.from_settings(settings).classify_tip(breakdown.score)
    logger.info(f"Scored tip evidence from {evidence_file}", score=breakdown.score)
    _print_breakdown(
        "Tip Suspicion",
        breakdown,
        status.value,
        risk_band(breakdown.score).value,
    )


@app.command()
def history(
    entity_id: str = typer.Argument(..., help="Announcement or tip id"),
    store: Path = typer.Option(..., "--store", help="JSON file written by EntityStore"),
) -> None:
    """
    Display the evidence history of an announcement or tip.
    """
    controller = VerificationController(EntityStore(persistence_path=str(store)))
    try:
        events = asyncio.run(controller.get_history(entity_id))
    except SurveillanceError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if not events:
        console.print(f"[yellow]No evidence recorded for {entity_id}[/yellow]")
        return

    table = Table(title=f"Evidence History: {entity_id}", show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right")
    table.add_column("Time", style="dim")
    table.add_column("Method", style="cyan")
    table.add_column("Score", justify="right", style="yellow")
    table.add_column("Status", style="green")
    table.add_column("Notes")

    for index, event in enumerate(events, start=1):
        status = f"{event.status} (override)" if event.status_overridden else event.status
        table.add_row(
            str(index),
            event.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            event.method.value,
            "-" if event.score is None else str(event.score),
            status,
            escape(event.notes),
        )
    console.print(table)


@app.command()
def stats(
    store: Path = typer.Option(..., "--store", help="JSON file written by EntityStore"),
) -> None:
    """
    Display entity counts by status from a persisted store.
    """
    entity_store = EntityStore(persistence_path=str(store))

    table = Table(title="Surveillance Stats", show_header=True, header_style="bold magenta")
    table.add_column("Kind", style="cyan")
    table.add_column("Total", justify="right", style="yellow")
    table.add_column("By status", style="green")

    async def collect() -> list[dict[str, Any]]:
        return [await entity_store.get_stats(kind) for kind in EntityKind]

    for kind_stats in asyncio.run(collect()):
        counts = kind_stats.get("status_counts", {})
        by_status = ", ".join(f"{status}: {count}" for status, count in sorted(counts.items()))
        table.add_row(kind_stats["kind"], str(kind_stats["total"]), by_status or "-")

    console.print(table)


@app.command()
def version() -> None:
    """Display version information."""
    console.print("[bold]Fraud Surveillance[/bold]")
    console.print(f"Version: {__version__}")


if __name__ == "__main__":
    app()
