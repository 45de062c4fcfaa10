from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_value(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:.2f}"


def render_parameters(groups: List[Dict[str, Any]]) -> None:
    for index, group in enumerate(groups):
        if index:
            typer.echo()
        echo_heading(str(group.get("name")))
        for option in group.get("parameters") or []:
            typer.echo(f"  - {option.get('value')}: {option.get('label')}")


def render_series(payload: Dict[str, Any], limit: Optional[int] = None) -> None:
    echo_heading(str(payload.get("label") or payload.get("parameter")))
    echo_key_values(
        [
            ("parameter", payload.get("parameter")),
            ("system", payload.get("system")),
            ("start", payload.get("start")),
            ("end", payload.get("end")),
        ]
    )

    summary = payload.get("summary") or {}
    typer.echo()
    echo_heading("Summary")
    echo_key_values(
        [
            ("count", summary.get("count")),
            ("min_value", _format_value(summary.get("min_value"))),
            ("max_value", _format_value(summary.get("max_value"))),
            ("mean_value", _format_value(summary.get("mean_value"))),
        ]
    )

    points = payload.get("points") or []
    unit = payload.get("unit") or ""
    typer.echo()
    echo_heading("Points")
    if not points:
        typer.echo("No data available for this time range.")
        return
    shown = points if limit is None else points[-limit:]
    for point in shown:
        typer.echo(f"  {point.get('time')}  {_format_value(point.get('value'))} {unit}".rstrip())
    if len(shown) < len(points):
        typer.echo(f"  ... {len(points) - len(shown)} earlier points omitted")
