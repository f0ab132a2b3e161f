"""CLI commands for the OAuth token lifecycle."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from dialogflow_bridge.config import get_config
from dialogflow_bridge.session import BridgeSession
from dialogflow_bridge.utils.errors import BridgeError, handle_error
from dialogflow_bridge.utils.output import OutputFormat, render_fields

console = Console(stderr=True)
app = typer.Typer(name="auth", help="Acquire and check the Dialogflow access token.")


@app.command()
def url() -> None:
    """Print the consent URL. Open it, approve, then run `auth login --code`."""
    session = BridgeSession.from_config(get_config())
    try:
        typer.echo(session.get_authorization_url())
    except BridgeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        session.close()


@app.command()
def login(
    code: Annotated[str, typer.Option("--code", "-c", help="Authorization code from the redirect URI")],
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Exchange an authorization code for a token and persist it."""
    session = BridgeSession.from_config(get_config())

    try:
        console.print("Exchanging authorization code...", style="yellow")
        session.exchange_code(code)
        result = {
            "status": "authenticated",
            "token_path": str(session.store.token_path),
        }
        render_fields(result, output, title="Authentication")
    except BridgeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        session.close()


@app.command()
def status(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Show whether a token is persisted and whether Google still accepts it."""
    session = BridgeSession.from_config(get_config())

    token_status = session.token_status()
    result = {
        "has_token": token_status.has_token,
        "is_valid": token_status.is_valid,
        "state": token_status.state.value,
    }
    render_fields(result, output, title="Token Status")
    session.close()


@app.command()
def validate(
    token: Annotated[str | None, typer.Option("--token", "-t", help="Token to probe (default: persisted)")] = None,
) -> None:
    """Probe a token; exit 1 if it is not valid."""
    session = BridgeSession.from_config(get_config())

    try:
        if token is None:
            session.store.load_token()
        valid = session.is_token_valid(token)
    except BridgeError as e:
        handle_error(e)
        raise typer.Exit(1)
    finally:
        session.close()

    if not valid:
        console.print("[red]Token is not valid.[/red]")
        raise typer.Exit(1)
    console.print("[green]Token is valid.[/green]")
