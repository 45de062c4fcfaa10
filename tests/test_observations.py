from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import List

import httpx
import pytest

from services.observations import ObservationClient, ObservationSourceError

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
END = datetime(2024, 1, 2, tzinfo=timezone.utc)


def _client(handler, api_key: str | None = "secret") -> ObservationClient:
    return ObservationClient(
        base_url="http://observations.test/api",
        api_key=api_key,
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


def _fetch(client: ObservationClient):
    return client.fetch_observations(
        instrument="argonaut",
        metric="velocity-z",
        medium="water",
        start_time=START,
        end_time=END,
        limit=500,
    )


def test_fetch_observations_sends_filters_and_parses_readings() -> None:
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "observations": [
                    {"timestamp": "2024-01-01T00:00:00Z", "value": 0.5, "unit": "m"},
                    {"datetime": "2024-01-01T00:05:00Z", "value": "0.52"},
                    {"timestamp": "2024-01-01T00:10:00Z", "value": None},
                ]
            },
        )

    client = _client(handler)
    try:
        readings = _fetch(client)
    finally:
        client.close()

    request = requests[0]
    assert request.url.path == "/api/observations"
    assert request.url.params["instrument"] == "argonaut"
    assert request.url.params["metric"] == "velocity-z"
    assert request.url.params["medium"] == "water"
    assert request.url.params["start_time"] == "2024-01-01T00:00:00Z"
    assert request.url.params["end_time"] == "2024-01-02T00:00:00Z"
    assert request.url.params["limit"] == "500"
    assert request.headers["X-API-Key"] == "secret"

    assert [reading.timestamp for reading in readings] == [
        "2024-01-01T00:00:00Z",
        "2024-01-01T00:05:00Z",
        "2024-01-01T00:10:00Z",
    ]
    assert readings[0].value == 0.5
    assert readings[0].unit == "m"
    assert readings[1].value == 0.52
    assert math.isnan(readings[2].value)


def test_fetch_observations_without_key_omits_header() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"observations": []})

    client = _client(handler, api_key=None)
    try:
        assert _fetch(client) == []
    finally:
        client.close()

    assert "X-API-Key" not in seen[0].headers


def test_fetch_observations_http_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"detail": "maintenance"})

    client = _client(handler)
    try:
        with pytest.raises(ObservationSourceError) as excinfo:
            _fetch(client)
    finally:
        client.close()

    assert excinfo.value.status_code == 503
    assert "maintenance" in str(excinfo.value)


def test_fetch_observations_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    try:
        with pytest.raises(ObservationSourceError) as excinfo:
            _fetch(client)
    finally:
        client.close()

    assert excinfo.value.status_code is None


def test_fetch_observations_rejects_unexpected_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"observations": "nope"})

    client = _client(handler)
    try:
        with pytest.raises(ObservationSourceError):
            _fetch(client)
    finally:
        client.close()
