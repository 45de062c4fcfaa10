"""HTTP client for the remote observation API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional, Protocol

import httpx

from models.records import RawReading
from settings import get_settings

logger = logging.getLogger(__name__)


class ObservationSourceError(RuntimeError):
    """Raised when observations cannot be fetched from the remote API."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ObservationSource(Protocol):
    def fetch_observations(
        self,
        instrument: str,
        metric: str,
        medium: str,
        start_time: datetime,
        end_time: datetime,
        limit: int,
    ) -> List[RawReading]:
        ...


def isoformat_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class ObservationClient:
    """Fetches raw readings for one instrument/metric/medium over a time window."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["X-API-Key"] = api_key
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def fetch_observations(
        self,
        instrument: str,
        metric: str,
        medium: str,
        start_time: datetime,
        end_time: datetime,
        limit: int,
    ) -> List[RawReading]:
        params = {
            "instrument": instrument,
            "metric": metric,
            "medium": medium,
            "start_time": isoformat_utc(start_time),
            "end_time": isoformat_utc(end_time),
            "limit": limit,
        }
        try:
            response = self._client.get("/observations", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ObservationSourceError(
                f"Observation API returned {exc.response.status_code}: {self._detail(exc.response)}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ObservationSourceError(f"Observation API request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ObservationSourceError("Observation API returned invalid JSON.") from exc

        observations = self._observations(payload)
        readings = [RawReading.from_payload(item) for item in observations if isinstance(item, dict)]
        logger.info(
            "Fetched %s observations",
            len(readings),
            extra={"instrument": instrument, "point_count": len(readings)},
        )
        return readings

    @staticmethod
    def _observations(payload: Any) -> List[Any]:
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict):
            observations = payload.get("observations")
            if observations is None:
                return []
            if isinstance(observations, list):
                return observations
        raise ObservationSourceError("Unexpected observation payload shape.")

    @staticmethod
    def _detail(response: httpx.Response) -> str:
        try:
            data: Dict[str, Any] = response.json()
            detail = data.get("detail") or data.get("error")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = response.text.strip()
        return str(detail) if detail else "no detail provided."


@lru_cache
def build_default_client() -> ObservationClient:
    settings = get_settings()
    return ObservationClient(
        base_url=settings.api_base_url,
        api_key=settings.api_key,
        timeout=settings.api_timeout,
    )
