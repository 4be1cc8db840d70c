"""Custom exception hierarchy for the Grafana session client."""
from __future__ import annotations


class GrafanaError(RuntimeError):
    """Base error for Grafana failures.

    ``code`` is the HTTP status returned by the service, or ``0`` when the
    request never produced a response.
    """

    def __init__(self, description: str, *, code: int = 0) -> None:
        self.code = code
        self.description = description
        super().__init__(self._format())

    def _format(self) -> str:
        if self.code != 0:
            return f"HTTP {self.code}: {self.description}"
        return f"ERROR: {self.description}"


class TransportError(GrafanaError):
    """Raised when a request cannot be dispatched (DNS, connection, TLS)."""

    def __init__(self, description: str) -> None:
        super().__init__(description, code=0)


class APIError(GrafanaError):
    """Raised when Grafana answers with a non-success status."""


class AuthenticationError(APIError):
    """Raised when Grafana rejects the login credentials."""
