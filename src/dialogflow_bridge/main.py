"""Dialogflow bridge CLI — entry point.

Acquire an OAuth token, replace agent intents, run detections, or serve the
HTTP bridge for the admin UI.
"""

from __future__ import annotations

import logging
from typing import Annotated

import typer

from dialogflow_bridge.commands.auth_cmd import app as auth_app
from dialogflow_bridge.commands.detect_cmd import app as detect_app
from dialogflow_bridge.commands.intents_cmd import app as intents_app
from dialogflow_bridge.config import get_config

app = typer.Typer(
    name="dialogflow-bridge",
    help="Bridge an admin UI to a Dialogflow agent: OAuth, intent sync and detection.",
    no_args_is_help=True,
)

# Register command groups
app.add_typer(auth_app, name="auth")
app.add_typer(intents_app, name="intents")
app.add_typer(detect_app, name="detect")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Dialogflow bridge — OAuth token lifecycle, intent sync and detection."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port")] = None,
) -> None:
    """Run the HTTP bridge (default 127.0.0.1:8008)."""
    import uvicorn

    from dialogflow_bridge.server import create_app

    settings = get_config().settings
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    uvicorn.run(create_app(), host=host or settings.host, port=port or settings.port)


if __name__ == "__main__":
    app()
