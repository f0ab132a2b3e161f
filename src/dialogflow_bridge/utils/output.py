"""Rendering for bridge results.

Tables are drawn on stderr so stdout carries only JSON (``--output json``,
detection responses) and stays pipeable.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from enum import Enum
from typing import Any

from rich.console import Console
from rich.table import Table

from dialogflow_bridge.models.intents import ProviderIntent, SyncReport

console = Console(stderr=True)


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def print_json(data: Any) -> None:
    """Write ``data`` to stdout as indented JSON."""
    json.dump(data, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def render_detection(response: Mapping[str, Any]) -> None:
    """Print a detectIntent response exactly as the provider returned it."""
    print_json(dict(response))


def render_intents(intents: list[ProviderIntent], fmt: OutputFormat = OutputFormat.TABLE) -> None:
    if fmt == OutputFormat.JSON:
        print_json([i.model_dump(by_alias=True, exclude_none=True) for i in intents])
        return

    if not intents:
        console.print("[dim]The agent has no intents.[/dim]")
        return

    table = Table(title="Intents")
    table.add_column("Display name")
    table.add_column("Phrases", justify="right")
    table.add_column("Resource name", overflow="fold")
    for intent in intents:
        table.add_row(intent.display_name, str(len(intent.training_phrases)), intent.name or "")
    console.print(table)


def render_report(report: SyncReport, fmt: OutputFormat = OutputFormat.TABLE) -> None:
    """Show one row per remote call made during a sync, failures in red."""
    if fmt == OutputFormat.JSON:
        print_json(report.summary())
        return

    table = Table(title="Intent Sync Results")
    table.add_column("Action")
    table.add_column("Target", overflow="fold")
    table.add_column("Result")
    table.add_column("Error", overflow="fold")
    for outcome in report.outcomes:
        result = "[green]ok[/green]" if outcome.ok else "[red]failed[/red]"
        table.add_row(outcome.action, outcome.target, result, outcome.error or "")
    console.print(table)


def render_fields(fields: Mapping[str, Any], fmt: OutputFormat = OutputFormat.TABLE, title: str | None = None) -> None:
    """Key/value view for small status records."""
    if fmt == OutputFormat.JSON:
        print_json(dict(fields))
        return

    table = Table(title=title, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    for key, value in fields.items():
        table.add_row(key, str(value))
    console.print(table)
