"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import ParameterGroupResponse, ParameterOption, SeriesResponse
from models.parameters import (
    MeasurementSystem,
    coerce_parameter,
    parameter_label,
    parameters_by_group,
    unit_abbreviation,
)
from services.observations import ObservationSourceError
from services.series import DEFAULT_TIME_RANGE, SeriesService, build_default_series_service, resolve_time_range
from settings import get_settings

router = APIRouter()


def get_series_service() -> SeriesService:
    return build_default_series_service()


def get_unit_system(
    system: Optional[MeasurementSystem] = Query(
        None, description="Unit system; defaults to DEFAULT_UNIT_SYSTEM."
    ),
) -> MeasurementSystem:
    if system is not None:
        return system
    return MeasurementSystem(get_settings().default_unit_system)


@router.get(
    "/parameters",
    response_model=List[ParameterGroupResponse],
    summary="List chartable parameters grouped as in the dashboard dropdowns.",
)
async def list_parameters(
    system: MeasurementSystem = Depends(get_unit_system),
) -> List[ParameterGroupResponse]:
    return [
        ParameterGroupResponse(
            name=group.value,
            parameters=[
                ParameterOption(
                    value=parameter,
                    label=parameter_label(parameter, system),
                    unit=unit_abbreviation(parameter, system),
                )
                for parameter in parameters
            ],
        )
        for group, parameters in parameters_by_group().items()
    ]


@router.get(
    "/series/{parameter}",
    response_model=SeriesResponse,
    summary="Fetch a processed, unit-converted series for one parameter.",
)
def get_series(
    parameter: str,
    system: MeasurementSystem = Depends(get_unit_system),
    time_range: str = Query(DEFAULT_TIME_RANGE, alias="range"),
    start: Optional[datetime] = Query(None, description="Overrides the range preset."),
    end: Optional[datetime] = Query(None, description="Defaults to now."),
    remove_outliers: bool = Query(False),
    service: SeriesService = Depends(get_series_service),
) -> SeriesResponse:
    parameter_type = coerce_parameter(parameter)
    if parameter_type is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown parameter {parameter!r}.",
        )

    try:
        range_start, range_end = resolve_time_range(time_range, now=end)
        series = service.load_parameter_series(
            parameter_type,
            system,
            start=start or range_start,
            end=range_end,
            remove_outliers_enabled=remove_outliers,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ObservationSourceError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc
    return SeriesResponse.from_series(series)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
