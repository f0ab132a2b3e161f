"""CLI commands for intent detection."""

from __future__ import annotations

from typing import Annotated

import typer

from dialogflow_bridge.config import get_config
from dialogflow_bridge.session import BridgeSession
from dialogflow_bridge.utils.errors import BridgeError, handle_error
from dialogflow_bridge.utils.output import render_detection

app = typer.Typer(name="detect", help="Send utterances to the agent.")


@app.command("query")
def query(
    utterance: Annotated[str, typer.Argument(help="Text to send to the agent")],
    session_id: Annotated[str | None, typer.Option("--session", "-s", help="Session id (default: shared fixed session)")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Detect the intent of UTTERANCE and print the raw response JSON."""
    session = BridgeSession.from_config(get_config(), verbose=verbose)

    try:
        render_detection(session.detect(utterance, session_id=session_id))
    except BridgeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        session.close()
