from __future__ import annotations

from typing import Any, Dict, List, NoReturn, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the dashboard service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

    def close(self) -> None:
        self._client.close()

    def list_facilities(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/facilities")

    def recent_readings(self, facility_id: int, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {"limit": limit} if limit is not None else None
        return self._request("GET", f"/facilities/{facility_id}/readings", params=params)

    def submit_reading(
        self,
        facility_id: int,
        temperature: float,
        unit: str = "celsius",
        submitted_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"temperature": temperature, "unit": unit}
        if submitted_by:
            body["submitted_by"] = submitted_by
        return self._request("POST", f"/facilities/{facility_id}/readings", json=body)

    def cast_vote(self, reading_id: int, is_upvote: bool) -> Dict[str, Any]:
        return self._request(
            "POST", f"/readings/{reading_id}/votes", json={"is_upvote": is_upvote}
        )

    def history(self, facility_id: int, hours: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {"hours": hours} if hours is not None else None
        return self._request("GET", f"/facilities/{facility_id}/history", params=params)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}", fg=typer.colors.RED, err=True
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> NoReturn:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail") if isinstance(data, dict) else None
        except ValueError:
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
