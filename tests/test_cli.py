from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from cli.app import app
from cli.config import load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.series_calls: List[Dict[str, Any]] = []
        self.parameter_calls: List[Optional[str]] = []
        self.series_payload: Dict[str, Any] = {
            "parameter": "stage",
            "system": "US",
            "label": "Stage [ft]",
            "unit": "ft",
            "start": "2024-01-01T00:00:00Z",
            "end": "2024-01-02T00:00:00Z",
            "points": [
                {"time": "2024-01-01T00:00:00Z", "value": 2.06036752},
                {"time": "2024-01-01T00:15:00Z", "value": None},
            ],
            "summary": {"count": 2, "min_value": 2.06036752, "max_value": 2.06036752, "mean_value": 2.06036752},
        }
        self.closed = False

    def list_parameters(self, system: Optional[str] = None) -> List[Dict[str, Any]]:
        self.parameter_calls.append(system)
        return [
            {"name": "Water Quantity", "parameters": [{"value": "stage", "label": "Stage [ft]", "unit": "ft"}]},
            {"name": "Weather", "parameters": [{"value": "humidity", "label": "Humidity [%RH]", "unit": "%RH"}]},
        ]

    def get_series(
        self,
        parameter: str,
        system: Optional[str] = None,
        time_range: str = "1day",
        remove_outliers: bool = False,
    ) -> Dict[str, Any]:
        self.series_calls.append(
            {
                "parameter": parameter,
                "system": system,
                "time_range": time_range,
                "remove_outliers": remove_outliers,
            }
        )
        return self.series_payload

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    client = StubClient(config=None)

    def factory(config):
        client.config = config
        return client

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return client


def test_parameters_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["parameters", "--system", "US"])

    assert result.exit_code == 0
    assert "Water Quantity" in result.stdout
    assert "stage: Stage [ft]" in result.stdout
    assert stub.parameter_calls == ["US"]
    assert stub.closed is True


def test_series_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["series", "stage", "--range", "3days", "--remove-outliers"])

    assert result.exit_code == 0
    assert "Stage [ft]" in result.stdout
    assert "2.06 ft" in result.stdout
    assert "mean_value: 2.06" in result.stdout
    assert stub.series_calls == [
        {"parameter": "stage", "system": None, "time_range": "3days", "remove_outliers": True}
    ]
    assert stub.closed is True


def test_series_command_rejects_unknown_parameter(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["series", "wind_speed"])

    assert result.exit_code != 0
    assert not stub.series_calls


def test_series_command_rejects_non_positive_limit(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["series", "stage", "--limit", "0"])

    assert result.exit_code != 0
    assert not stub.series_calls


def test_base_url_option_reaches_client(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://creek.example/", "parameters"])

    assert result.exit_code == 0
    assert stub.config.base_url == "http://creek.example"


def test_process_command_runs_pipeline_offline(runner: CliRunner, stub: StubClient, tmp_path) -> None:
    dump = tmp_path / "stage.json"
    dump.write_text(
        json.dumps(
            {
                "observations": [
                    {"timestamp": "2024-01-01T00:00:00Z", "value": 0.5},
                    {"timestamp": "broken", "value": 0.6},
                    {"datetime": "2024-01-01T00:15:00Z", "value": 0.6},
                ]
            }
        )
    )

    result = runner.invoke(app, ["process", str(dump), "--parameter", "stage", "--system", "SI"])

    assert result.exit_code == 0
    assert "Stage [m]" in result.stdout
    assert "0.63 m" in result.stdout
    assert "0.73 m" in result.stdout
    assert "count: 2" in result.stdout
    assert not stub.series_calls


def test_process_command_rejects_invalid_json(runner: CliRunner, stub: StubClient, tmp_path) -> None:
    dump = tmp_path / "broken.json"
    dump.write_text("{not json")

    result = runner.invoke(app, ["process", str(dump), "--parameter", "stage"])

    assert result.exit_code != 0


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env.example/api/")
    monkeypatch.setenv("CLI_TIMEOUT", "-3")

    config = load_config()

    assert config.base_url == "http://env.example/api"
    assert config.timeout == 30.0
