from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Sequence

import pytest

from models.parameters import MeasurementSystem, ParameterType
from models.records import RawReading
from services.aggregator import Aggregator
from services.observations import ObservationSourceError
from services.processor import DEFAULT_CALIBRATION
from services.series import SeriesService, resolve_time_range

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
END = datetime(2024, 1, 2, tzinfo=timezone.utc)


class StubSource:
    def __init__(self, readings: Sequence[RawReading] = (), error: Exception | None = None) -> None:
        self.readings = list(readings)
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def fetch_observations(self, **kwargs: Any) -> List[RawReading]:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return list(self.readings)

    def close(self) -> None:
        self.closed = True


def _service(source: StubSource) -> SeriesService:
    return SeriesService(
        source=source,
        calibration=DEFAULT_CALIBRATION,
        aggregator=Aggregator(),
        fetch_limit=250,
    )


def test_load_stage_series_fetches_with_parameter_config() -> None:
    source = StubSource([RawReading(timestamp="2024-01-01T06:00:00Z", value=0.5)])

    series = _service(source).load_parameter_series(
        ParameterType.stage, MeasurementSystem.SI, START, END
    )

    assert source.calls == [
        {
            "instrument": "argonaut",
            "metric": "velocity-z",
            "medium": "water",
            "start_time": START,
            "end_time": END,
            "limit": 250,
        }
    ]
    assert series.label == "Stage [m]"
    assert series.unit == "m"
    assert len(series.points) == 1
    assert series.points[0].value == pytest.approx(0.628)
    assert series.summary.count == 1


def test_rating_curve_fetches_stage_data() -> None:
    source = StubSource([RawReading(timestamp="2024-01-01T06:00:00Z", value=0.5)])

    series = _service(source).load_parameter_series(
        ParameterType.flow_rate_rating_curve, MeasurementSystem.US, START, END
    )

    assert source.calls[0]["metric"] == "velocity-z"
    assert series.unit == "ft³/s"
    assert series.points[0].value == pytest.approx(1.27 * 0.628**4.19 * 35.3147)


def test_dropped_points_are_logged(caplog) -> None:
    source = StubSource(
        [
            RawReading(timestamp="garbage", value=1.0),
            RawReading(timestamp="2024-01-01T06:00:00Z", value=7.0),
        ]
    )

    with caplog.at_level(logging.WARNING, logger="services.series"):
        series = _service(source).load_parameter_series(
            ParameterType.ph, MeasurementSystem.US, START, END
        )

    assert [point.value for point in series.points] == [7.0]
    assert any(getattr(record, "dropped_count", None) == 1 for record in caplog.records)


def test_remove_outliers_option() -> None:
    readings = [
        RawReading(timestamp=(START + timedelta(minutes=index)).isoformat(), value=20.0)
        for index in range(20)
    ]
    readings.append(RawReading(timestamp=(START + timedelta(hours=2)).isoformat(), value=900.0))
    source = StubSource(readings)

    series = _service(source).load_parameter_series(
        ParameterType.water_temperature,
        MeasurementSystem.SI,
        START,
        END,
        remove_outliers_enabled=True,
    )

    assert len(series.points) == 20
    assert series.summary.max_value == 20.0


def test_start_must_precede_end() -> None:
    with pytest.raises(ValueError):
        _service(StubSource()).load_parameter_series(
            ParameterType.stage, MeasurementSystem.SI, END, START
        )


def test_source_errors_propagate() -> None:
    source = StubSource(error=ObservationSourceError("down", status_code=500))

    with pytest.raises(ObservationSourceError):
        _service(source).load_parameter_series(ParameterType.stage, MeasurementSystem.SI, START, END)


def test_shutdown_closes_source() -> None:
    source = StubSource()

    _service(source).shutdown()

    assert source.closed is True


@pytest.mark.parametrize("preset,days", [("1day", 1), ("3days", 3), ("6days", 6), ("12days", 12)])
def test_resolve_time_range_presets(preset: str, days: int) -> None:
    start, end = resolve_time_range(preset, now=END)

    assert end == END
    assert end - start == timedelta(days=days)


def test_resolve_time_range_unknown_preset() -> None:
    with pytest.raises(ValueError, match="Unknown time range"):
        resolve_time_range("1year", now=END)
