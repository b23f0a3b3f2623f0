from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_groups, render_log, render_logs


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the sensor group logs service.",
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
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:5000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("groups")
def groups_command(ctx: typer.Context) -> None:
    """List known groups."""
    state = _get_state(ctx)
    render_groups(state.client.list_groups())


@app.command("create")
def create_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the group to create."),
) -> None:
    """Create an empty group."""
    state = _get_state(ctx)
    payload = state.client.create_group(name)
    typer.secho(payload.get("message", f"Group {name} created."), fg=typer.colors.GREEN)


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the group to delete."),
) -> None:
    """Delete a group and its readings."""
    state = _get_state(ctx)
    payload = state.client.delete_group(name)
    typer.secho(payload.get("message", f"Group {name} deleted."), fg=typer.colors.GREEN)


@app.command("send")
def send_command(
    ctx: typer.Context,
    group: str = typer.Argument(..., help="Group receiving the reading."),
    temperature: float = typer.Option(..., "--temperature", "-t", help="Temperature value."),
    humidity: float = typer.Option(..., "--humidity", "-u", help="Humidity value."),
) -> None:
    """Send one reading to a group, creating it if needed."""
    state = _get_state(ctx)
    payload = state.client.send_reading(group, temperature, humidity)
    typer.secho(payload.get("message", "Data received."), fg=typer.colors.GREEN)
    render_log(payload.get("log") or {})


@app.command("logs")
def logs_command(
    ctx: typer.Context,
    group: str = typer.Argument(..., help="Group to inspect."),
) -> None:
    """Show the retained readings of a group, oldest first."""
    state = _get_state(ctx)
    render_logs(group, state.client.get_logs(group))
