"""High-level Grafana session client entrypoints."""
from .client import GrafanaClient
from .config import ClientConfig
from .exceptions import APIError, AuthenticationError, GrafanaError, TransportError
from .models import Dashboard, DashboardResult
from .session import GrafanaSession

__all__ = [
    "GrafanaSession",
    "GrafanaClient",
    "ClientConfig",
    "GrafanaError",
    "APIError",
    "AuthenticationError",
    "TransportError",
    "Dashboard",
    "DashboardResult",
]
