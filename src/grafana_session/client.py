"""High-level facade over :class:`GrafanaSession`."""

from __future__ import annotations

from typing import Any

from .session import GrafanaSession


class GrafanaClient:
    """Integration point for job/view oriented callers.

    The job and view types belong to the caller. How they map onto dashboards,
    rows and panels is not settled yet, so the three operations below only
    document the expected interface. Use ``client.session`` for working
    dashboard operations.
    """

    def __init__(self, user: str, password: str, base_url: str, **session_options: Any) -> None:
        self.session = GrafanaSession(user, password, base_url, **session_options)

    def __enter__(self) -> GrafanaClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        self.close()

    def close(self) -> None:
        self.session.close()

    def update_dashboard(self, job: Any, view: Any) -> str:
        """Publish ``view`` on the dashboard for ``job`` and return the panel URL."""
        raise NotImplementedError(
            "GrafanaClient.update_dashboard has no job/view mapping yet; "
            "use GrafanaClient.session.update_dashboard instead."
        )

    def delete_panel(self, job: Any, view: Any) -> None:
        raise NotImplementedError(
            "GrafanaClient.delete_panel has no job/view mapping yet; "
            "edit the dashboard through GrafanaClient.session instead."
        )

    def delete_dashboard(self, job: Any) -> None:
        raise NotImplementedError(
            "GrafanaClient.delete_dashboard has no job mapping yet; "
            "use GrafanaClient.session.delete_dashboard instead."
        )
