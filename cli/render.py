from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def render_log(entry: Dict[str, Any]) -> None:
    line = (
        f"{entry.get('date')}  "
        f"temperature={entry.get('temperature')}  "
        f"humidity={entry.get('humidity')}"
    )
    if entry.get("alert"):
        typer.secho(f"{line}  ALERT", fg=typer.colors.RED)
    else:
        typer.echo(line)


def render_logs(group: str, entries: Iterable[Dict[str, Any]]) -> None:
    entries = list(entries)
    echo_heading(f"Logs for {group} ({len(entries)})")
    if not entries:
        typer.echo("No readings recorded.")
        return
    for entry in entries:
        render_log(entry)


def render_groups(names: Iterable[str]) -> None:
    names = list(names)
    echo_heading(f"Groups ({len(names)})")
    if not names:
        typer.echo("No groups yet.")
        return
    for name in names:
        typer.echo(f"  - {name}")
