from __future__ import annotations

from typing import Any, List

import httpx
import typer

from app.schemas import ReadingPayload
from cli.config import CLIConfig
from models.records import Reading


class ApiClient:
    """Minimal HTTP client for the telemetry service; doubles as a reading source."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def fetch_recent(self, limit: int) -> List[Reading]:
        payload = self._get_json("/iot/latest", params={"limit": limit})
        return self._parse_readings(payload)

    def sensor_history(self, sensor_id: str, limit: int) -> List[Reading]:
        payload = self._get_json(f"/iot/sensors/{sensor_id}", params={"limit": limit})
        return self._parse_readings(payload)

    def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _parse_readings(payload: Any) -> List[Reading]:
        if not isinstance(payload, list):
            raise typer.BadParameter("Unexpected response payload when fetching readings.")
        return [ReadingPayload.model_validate(item).to_reading() for item in payload]

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
