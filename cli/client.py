from __future__ import annotations

from typing import Any, Dict, List
from urllib.parse import quote

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Thin HTTP client for the group logs service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def list_groups(self) -> List[str]:
        return self._request("GET", "/groups")

    def create_group(self, name: str) -> Dict[str, Any]:
        return self._request("POST", "/groups", json={"name": name})

    def delete_group(self, name: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/groups/{quote(name, safe='')}")

    def send_reading(self, group: str, temperature: float, humidity: float) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/data/{quote(group, safe='')}",
            json={"temperature": temperature, "humidity": humidity},
        )

    def get_logs(self, group: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/logs/{quote(group, safe='')}")

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
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
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except (ValueError, AttributeError):
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
