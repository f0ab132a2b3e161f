"""CLI commands for listing and replacing agent intents."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from dialogflow_bridge.config import get_config
from dialogflow_bridge.services.intents import parse_intent_map
from dialogflow_bridge.session import BridgeSession
from dialogflow_bridge.utils.errors import BridgeError, handle_error
from dialogflow_bridge.utils.output import OutputFormat, render_intents, render_report

console = Console(stderr=True)
app = typer.Typer(name="intents", help="List and replace the agent's intents.")


def _build_session(verbose: bool = False) -> BridgeSession:
    return BridgeSession.from_config(get_config(), verbose=verbose)


@app.command("list")
def list_intents(
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """List the intents currently on the agent."""
    session = _build_session(verbose)

    try:
        render_intents(session.list_intents(), output)
    except BridgeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        session.close()


@app.command("sync")
def sync(
    file: Annotated[str, typer.Option("--file", "-f", help="JSON map of {id: {intent, training_utterances}}")],
    lenient: Annotated[bool, typer.Option("--lenient", help="Create new intents even if listing old ones fails")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be created without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Delete every intent on the agent, then create the ones in --file.

    Individual failures do not stop the run; they show up as failed rows.
    """
    try:
        with open(file) as f:
            intent_map = parse_intent_map(json.load(f))
    except (OSError, json.JSONDecodeError, ValidationError, AttributeError) as e:
        handle_error(RuntimeError(f"Could not read intents from {file}: {e}"))
        raise typer.Exit(1)

    if dry_run:
        console.print(f"[yellow]DRY RUN:[/yellow] Would replace all intents with {len(intent_map)} intents")
        for entry in intent_map.values():
            console.print(f"  {entry.intent} ({len(entry.training_utterances)} utterances)")
        return

    session = _build_session(verbose)

    try:
        report = session.sync_intents(intent_map, abort_on_list_failure=False if lenient else None)
    except BridgeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        session.close()

    render_report(report, output)
    if not report.ok:
        raise typer.Exit(1)
