"""Command-line interface for building and publishing Grafana dashboards."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install grafana-session[cli]' to enable this command."
    ) from exc

from .exceptions import GrafanaError
from .models import Dashboard, DashboardResult, add_row, add_templating, new_dashboard
from .session import GrafanaSession

app = typer.Typer(help="Grafana dashboard CLI.", no_args_is_help=True)

dashboards_app = typer.Typer(help="Dashboard operations.")
app.add_typer(dashboards_app, name="dashboards")

console = Console(force_terminal=False, color_system=None)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every HTTP request."),
) -> None:
    """Grafana dashboard CLI."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def _build_session(
    base_url: str,
    user: str,
    password: str,
    verify_ssl: bool,
    cert_path: Path | None,
    timeout: float,
) -> GrafanaSession:
    verify_target: bool | str
    if cert_path:
        expanded_cert = cert_path.expanduser()
        if not expanded_cert.exists():
            raise typer.BadParameter("Certificate file not found for --cert option.")
        if not verify_ssl:
            raise typer.BadParameter("Cannot combine --cert with --no-verify.")
        verify_target = str(expanded_cert)
    else:
        verify_target = verify_ssl

    return GrafanaSession(
        user,
        password,
        base_url,
        verify_ssl=verify_target,
        timeout=timeout,
    )


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _handle_grafana_error(exc: GrafanaError) -> None:
    typer.secho(f"Request failed: {exc}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _build_dashboard(
    title: str,
    panel_title: str | None,
    query: str | None,
    tags: list[str],
    measurement: str | None,
    datasource: str | None,
) -> Dashboard:
    dashboard = new_dashboard(title)
    if query:
        dashboard = add_row(dashboard, panel_title or title, query)
    if tags:
        if not measurement:
            raise typer.BadParameter("--measurement is required when --tag is given.")
        dashboard = add_templating(dashboard, tags, measurement, datasource)
    return dashboard


def _render_meta(result: DashboardResult) -> None:
    table = Table(
        title=result.model.title,
        box=box.SIMPLE,
        show_lines=False,
        header_style="bold cyan",
    )
    table.add_column("Field")
    table.add_column("Value")
    meta = result.meta
    table.add_row("Slug", meta.slug)
    table.add_row("Created", meta.created)
    table.add_row("Expires", meta.expires)
    table.add_row("Starred", "yes" if meta.is_starred else "no")
    table.add_row("Home", "yes" if meta.is_home else "no")
    table.add_row("Snapshot", "yes" if meta.is_snapshot else "no")
    table.add_row("Version", str(result.model.version))
    table.add_row("Rows", str(len(result.model.rows)))
    table.add_row("Variables", ", ".join(t.name for t in result.model.templating.variables))
    console.print(table)


def _shared_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    # Accept common truthy/falsey representations for GRAFANA_VERIFY_SSL.
    env_verify = os.getenv("GRAFANA_VERIFY_SSL")
    default_verify = True
    if env_verify is not None and env_verify.strip().lower() in {"0", "false", "no", "off"}:
        default_verify = False

    return {
        "base_url": typer.Option(
            ..., "--base-url", envvar="GRAFANA_URL", help="Grafana base URL."
        ),
        "user": typer.Option(
            "admin", "--user", "-u", envvar="GRAFANA_USER", help="Grafana login name."
        ),
        "password": typer.Option(
            ...,
            "--password",
            "-p",
            envvar="GRAFANA_PASSWORD",
            help="Grafana password.",
            hide_input=True,
        ),
        "verify_ssl": typer.Option(
            default_verify,
            "--verify/--no-verify",
            envvar="GRAFANA_VERIFY_SSL",
            help="Enable or disable TLS certificate verification.",
            show_default=True,
        ),
        "cert_path": typer.Option(
            None,
            "--cert",
            envvar="GRAFANA_CA_CERT",
            help="Path to a custom CA bundle for TLS verification.",
        ),
        "timeout": typer.Option(5.0, help="Request timeout (seconds).", show_default=True),
    }


_SHARED_OPTIONS = _shared_options()


def _dashboard_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    return {
        "title": typer.Option(..., "--title", "-t", help="Dashboard title."),
        "panel_title": typer.Option(
            None, "--panel-title", help="Title of the graph panel (defaults to the dashboard title)."
        ),
        "query": typer.Option(None, "--query", "-q", help="Raw InfluxQL query for the panel."),
        "tags": typer.Option(
            [],
            "--tag",
            help="Tag name to expose as a templating variable (repeatable).",
            show_default=False,
        ),
        "measurement": typer.Option(
            None, "--measurement", help="Measurement the tag values are read from."
        ),
        "datasource": typer.Option(None, "--datasource", help="Datasource for template queries."),
    }


_DASHBOARD_OPTIONS = _dashboard_options()


@dashboards_app.command("render")
def dashboards_render(
    title: str = _DASHBOARD_OPTIONS["title"],
    panel_title: str | None = _DASHBOARD_OPTIONS["panel_title"],
    query: str | None = _DASHBOARD_OPTIONS["query"],
    tags: list[str] = _DASHBOARD_OPTIONS["tags"],
    measurement: str | None = _DASHBOARD_OPTIONS["measurement"],
    datasource: str | None = _DASHBOARD_OPTIONS["datasource"],
) -> None:
    """Build a dashboard locally and print its JSON without contacting Grafana."""

    dashboard = _build_dashboard(title, panel_title, query, tags, measurement, datasource)
    _echo_json(dashboard.to_dict())


@dashboards_app.command("push")
def dashboards_push(
    base_url: str = _SHARED_OPTIONS["base_url"],
    user: str = _SHARED_OPTIONS["user"],
    password: str = _SHARED_OPTIONS["password"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    title: str = _DASHBOARD_OPTIONS["title"],
    panel_title: str | None = _DASHBOARD_OPTIONS["panel_title"],
    query: str | None = _DASHBOARD_OPTIONS["query"],
    tags: list[str] = _DASHBOARD_OPTIONS["tags"],
    measurement: str | None = _DASHBOARD_OPTIONS["measurement"],
    datasource: str | None = _DASHBOARD_OPTIONS["datasource"],
    overwrite: bool = typer.Option(
        True,
        "--overwrite/--no-overwrite",
        help="Replace an existing dashboard with the same title.",
        show_default=True,
    ),
) -> None:
    """Build a dashboard and upload it to Grafana."""

    dashboard = _build_dashboard(title, panel_title, query, tags, measurement, datasource)
    with _build_session(base_url, user, password, verify_ssl, cert_path, timeout) as session:
        try:
            session.login()
            session.update_dashboard(dashboard, overwrite=overwrite)
        except GrafanaError as exc:
            _handle_grafana_error(exc)
            return
    typer.echo(f"Dashboard '{title}' saved.")


@dashboards_app.command("get")
def dashboards_get(
    name: str = typer.Argument(..., help="Dashboard slug as used in its URL."),
    base_url: str = _SHARED_OPTIONS["base_url"],
    user: str = _SHARED_OPTIONS["user"],
    password: str = _SHARED_OPTIONS["password"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = typer.Option(
        False, "--json", "-j", help="Return raw JSON instead of rendering a table."
    ),
) -> None:
    """Fetch a dashboard and show its metadata."""

    with _build_session(base_url, user, password, verify_ssl, cert_path, timeout) as session:
        try:
            session.login()
            result = session.get_dashboard(name)
        except GrafanaError as exc:
            _handle_grafana_error(exc)
            return
    if output_json:
        _echo_json(result.to_dict())
        return
    _render_meta(result)


@dashboards_app.command("delete")
def dashboards_delete(
    name: str = typer.Argument(..., help="Dashboard slug as used in its URL."),
    base_url: str = _SHARED_OPTIONS["base_url"],
    user: str = _SHARED_OPTIONS["user"],
    password: str = _SHARED_OPTIONS["password"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
) -> None:
    """Delete a dashboard."""

    with _build_session(base_url, user, password, verify_ssl, cert_path, timeout) as session:
        try:
            session.login()
            session.delete_dashboard(name)
        except GrafanaError as exc:
            _handle_grafana_error(exc)
            return
    typer.echo(f"Dashboard '{name}' deleted.")


if __name__ == "__main__":  # pragma: no cover
    app()
