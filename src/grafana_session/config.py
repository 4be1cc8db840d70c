"""Configuration helpers for the Grafana session client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_TIMEOUT = 5.0


@dataclass(slots=True)
class ClientConfig:
    """Typed configuration for `GrafanaSession`."""

    base_url: str
    verify_ssl: bool | str = True
    timeout: float = DEFAULT_TIMEOUT
    default_headers: Mapping[str, str] | None = None

    def resolved_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.default_headers:
            headers.update(self.default_headers)
        return headers

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"
