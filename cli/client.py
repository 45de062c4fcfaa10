from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the creek monitor API."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def list_parameters(self, system: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"system": system} if system else None
        response = self._get("/parameters", params=params)
        payload = response.json()
        if not isinstance(payload, list):
            raise typer.BadParameter("Unexpected response payload when listing parameters.")
        return payload

    def get_series(
        self,
        parameter: str,
        system: Optional[str] = None,
        time_range: str = "1day",
        remove_outliers: bool = False,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"range": time_range}
        if system:
            params["system"] = system
        if remove_outliers:
            params["remove_outliers"] = "true"
        response = self._get(f"/series/{parameter}", params=params)
        if response.status_code == 404:
            raise typer.BadParameter(f"Parameter {parameter} is not known to the service.")
        return response.json()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            response = self._client.get(path, params=params)
            if response.status_code == 404:
                return response
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.HTTPError as exc:
            typer.secho(f"Could not reach {self._config.base_url}: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc
        return response

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
