"""Cookie-authenticated Grafana session."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any
from urllib.parse import quote

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from . import models
from .config import DEFAULT_TIMEOUT, ClientConfig
from .exceptions import APIError, AuthenticationError, GrafanaError
from .http import HttpResponse
from .http import request as http_request
from .models import Dashboard, DashboardResult, DashboardUpload, UserInfo

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
DASHBOARDS_PATH = "/api/dashboards/db"


class GrafanaSession:
    """Hold one authenticated HTTP context against a Grafana server.

    Dashboards handed to or returned from the session are plain values; the
    session itself only tracks the cookie jar filled in by :meth:`login`.
    """

    def __init__(
        self,
        user: str,
        password: str,
        base_url: str,
        *,
        verify_ssl: bool | str = True,
        timeout: float = DEFAULT_TIMEOUT,
        default_headers: Mapping[str, str] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.user = user
        self.password = password
        self.config = ClientConfig(
            base_url=base_url.rstrip("/"),
            verify_ssl=verify_ssl,
            timeout=timeout,
            default_headers=default_headers,
        )
        self._suppress_insecure_warning_if_needed()
        self._session = session or requests.Session()
        self._authenticated = False

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> GrafanaSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        self.close()

    @property
    def authenticated(self) -> bool:
        """True once :meth:`login` succeeded and until :meth:`logout`."""
        return self._authenticated

    @property
    def cookies(self) -> requests.cookies.RequestsCookieJar:
        return self._session.cookies

    # Authentication ----------------------------------------------------------
    def login(self) -> None:
        payload = UserInfo(user=self.user, password=self.password).to_dict()
        try:
            self.request("POST", LOGIN_PATH, json_payload=payload)
        except APIError as exc:
            if exc.code in (401, 403):
                raise AuthenticationError(exc.description, code=exc.code) from exc
            raise
        self._authenticated = True
        logger.info("Logged in to Grafana at %s as %s", self.config.base_url, self.user)

    def logout(self) -> None:
        """Forget the server session cookie. Grafana is not contacted."""
        self._session.cookies.clear()
        self._authenticated = False

    # Local document helpers --------------------------------------------------
    def create_dashboard(self, title: str) -> Dashboard:
        return models.new_dashboard(title)

    def add_row_panel(self, dashboard: Dashboard, panel_title: str, query: str) -> Dashboard:
        return models.add_row(dashboard, panel_title, query)

    def add_templating(
        self,
        dashboard: Dashboard,
        tag_names: Iterable[str],
        measurement: str,
        datasource: str | None,
    ) -> Dashboard:
        return models.add_templating(dashboard, tag_names, measurement, datasource)

    # Dashboard API -----------------------------------------------------------
    def update_dashboard(self, dashboard: Dashboard, overwrite: bool = False) -> Any:
        """Create or replace ``dashboard`` on the server.

        With ``overwrite`` false Grafana refuses to replace a dashboard with the
        same title and answers with an error (usually HTTP 412).
        """
        upload = DashboardUpload(dashboard=dashboard, overwrite=overwrite)
        return self.request("POST", DASHBOARDS_PATH, json_payload=upload.to_dict())

    def get_dashboard(self, name: str) -> DashboardResult:
        payload = self.request("GET", f"{DASHBOARDS_PATH}/{quote(name, safe='')}")
        return DashboardResult.from_dict(payload or {})

    def delete_dashboard(self, name: str) -> Any:
        """Delete the dashboard known as ``name``.

        The delete endpoint is keyed by slug, so the dashboard is fetched first.
        Any error from that lookup is raised as-is and nothing is deleted. A
        lookup without a slug is refused rather than aimed at the collection URL.
        """
        result = self.get_dashboard(name)
        slug = result.meta.slug
        if not slug:
            raise GrafanaError(f"Dashboard lookup for '{name}' returned no slug")
        return self.request("DELETE", f"{DASHBOARDS_PATH}/{quote(slug, safe='')}")

    # Data sources ------------------------------------------------------------
    def create_datasource(self, *args: Any, **kwargs: Any) -> Any:  # pragma: no cover - stub
        raise NotImplementedError("Data source creation is not supported yet.")

    def delete_datasource(self, *args: Any, **kwargs: Any) -> Any:  # pragma: no cover - stub
        raise NotImplementedError("Data source deletion is not supported yet.")

    # Transport ---------------------------------------------------------------
    def request(
        self,
        method: str,
        path: str,
        *,
        json_payload: Mapping[str, Any] | None = None,
    ) -> Any:
        url = self.config.url_for(path)
        headers = self._prepare_headers()
        self._log_request(method, url)
        response = self._perform_request(method, url, headers=headers, json_payload=json_payload)
        return response.data

    def close(self) -> None:
        self._session.close()

    # Internal helpers -------------------------------------------------------
    def _prepare_headers(self) -> MutableMapping[str, str]:
        return self.config.resolved_headers()

    def _perform_request(
        self,
        method: str,
        url: str,
        *,
        headers: MutableMapping[str, str],
        json_payload: Mapping[str, Any] | None,
    ) -> HttpResponse:
        return http_request(
            self._session,
            method,
            url,
            headers=headers,
            json_payload=json_payload,
            timeout=self.config.timeout,
            verify=self.config.verify_ssl,
        )

    def _log_request(self, method: str, url: str) -> None:
        logger.info(
            "Grafana request %s %s (authenticated=%s)",
            method.upper(),
            url,
            self._authenticated,
        )

    def _suppress_insecure_warning_if_needed(self) -> None:
        if isinstance(self.config.verify_ssl, bool) and not self.config.verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)
