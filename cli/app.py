from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_parameters, render_series
from models.parameters import (
    MeasurementSystem,
    ParameterType,
    parameter_label,
    unit_abbreviation,
)
from models.records import RawReading
from services.aggregator import Aggregator
from services.formatter import format_for_visualization
from services.processor import process_parameter_data


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for browsing processed creek station series.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Creek monitor API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the API before giving up.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("parameters")
def parameters_command(
    ctx: typer.Context,
    system: Optional[MeasurementSystem] = typer.Option(None, "--system", "-s", help="SI or US."),
) -> None:
    """List chartable parameters by group."""
    state = _get_state(ctx)
    groups = state.client.list_parameters(system.value if system else None)
    render_parameters(groups)


@app.command("series")
def series_command(
    ctx: typer.Context,
    parameter: ParameterType = typer.Argument(..., help="Parameter to fetch, e.g. stage."),
    system: Optional[MeasurementSystem] = typer.Option(None, "--system", "-s", help="SI or US."),
    time_range: str = typer.Option("1day", "--range", "-r", help="1day, 3days, 6days or 12days."),
    remove_outliers: bool = typer.Option(
        False,
        "--remove-outliers/--keep-outliers",
        help="Drop points beyond three standard deviations.",
    ),
    limit: Optional[int] = typer.Option(20, "--limit", min=1, help="Show at most this many recent points."),
) -> None:
    """Fetch a processed series from the API and print it."""
    state = _get_state(ctx)
    payload = state.client.get_series(
        parameter.value,
        system=system.value if system else None,
        time_range=time_range,
        remove_outliers=remove_outliers,
    )
    render_series(payload, limit=limit)


def _load_observations(path: Path) -> List[RawReading]:
    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"Could not read observations from {path}: {exc}") from exc
    if isinstance(payload, dict):
        payload = payload.get("observations") or []
    if not isinstance(payload, list):
        raise typer.BadParameter("Expected a list of observations or an 'observations' array.")
    return [RawReading.from_payload(item) for item in payload if isinstance(item, dict)]


@app.command("process")
def process_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON observation dump."),
    parameter: ParameterType = typer.Option(..., "--parameter", "-p", help="Parameter the raw readings belong to."),
    system: MeasurementSystem = typer.Option(MeasurementSystem.SI, "--system", "-s", help="SI or US."),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Show at most this many recent points."),
) -> None:
    """Run the processing pipeline over a local observation dump."""
    readings = _load_observations(file)
    points = format_for_visualization(process_parameter_data(readings, parameter, system))
    summary = Aggregator().aggregate(points)
    payload: Dict[str, Any] = {
        "parameter": parameter.value,
        "system": system.value,
        "label": parameter_label(parameter, system),
        "unit": unit_abbreviation(parameter, system),
        "start": points[0].time.isoformat() if points else None,
        "end": points[-1].time.isoformat() if points else None,
        "points": [{"time": point.time.isoformat(), "value": point.value} for point in points],
        "summary": {
            "count": summary.count,
            "min_value": summary.min_value,
            "max_value": summary.max_value,
            "mean_value": summary.mean_value,
        },
    }
    render_series(payload, limit=limit)
