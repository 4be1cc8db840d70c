import json

from typer.testing import CliRunner

from grafana_session.cli import app

runner = CliRunner()

BASE_URL = "http://grafana:3000"


def connection_args():
    return ["--base-url", BASE_URL, "--user", "admin", "--password", "secret"]


def test_render_prints_dashboard_json():
    result = runner.invoke(
        app,
        [
            "dashboards",
            "render",
            "--title",
            "demo",
            "--panel-title",
            "p1",
            "--query",
            "SELECT 1",
            "--tag",
            "host",
            "--measurement",
            "cpu",
            "--datasource",
            "influx",
        ],
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["title"] == "demo"
    assert payload["rows"][0]["panels"][0]["title"] == "p1"
    assert payload["rows"][0]["panels"][0]["targets"][0]["query"] == "SELECT 1"
    assert payload["templating"]["list"][0]["query"] == 'SHOW TAG VALUES FROM "cpu" WITH KEY = "host"'


def test_render_without_query_has_no_rows():
    result = runner.invoke(app, ["dashboards", "render", "--title", "empty"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["rows"] == []


def test_render_tag_requires_measurement():
    result = runner.invoke(app, ["dashboards", "render", "--title", "demo", "--tag", "host"])

    assert result.exit_code != 0


def test_push_logs_in_and_uploads(requests_mock):
    login = requests_mock.post(f"{BASE_URL}/login", json={"message": "Logged in"})
    upload = requests_mock.post(f"{BASE_URL}/api/dashboards/db", json={"status": "success"})

    result = runner.invoke(
        app,
        ["dashboards", "push", *connection_args(), "--title", "demo", "--query", "SELECT 1"],
    )

    assert result.exit_code == 0
    assert login.called_once
    body = upload.last_request.json()
    assert body["overwrite"] is True
    assert body["dashboard"]["rows"][0]["panels"][0]["title"] == "demo"
    assert "Dashboard 'demo' saved." in result.stdout


def test_push_reports_conflict(requests_mock):
    requests_mock.post(f"{BASE_URL}/login", json={"message": "Logged in"})
    requests_mock.post(
        f"{BASE_URL}/api/dashboards/db",
        status_code=412,
        json={"message": "A dashboard with the same name already exists"},
    )

    result = runner.invoke(
        app,
        ["dashboards", "push", *connection_args(), "--title", "demo", "--no-overwrite"],
    )

    assert result.exit_code == 1
    assert "HTTP 412: A dashboard with the same name already exists" in result.stderr


def test_get_json_output(requests_mock):
    requests_mock.post(f"{BASE_URL}/login", json={"message": "Logged in"})
    requests_mock.get(
        f"{BASE_URL}/api/dashboards/db/demo",
        json={"meta": {"slug": "demo", "isStarred": True}, "model": {"title": "demo", "version": 4}},
    )

    result = runner.invoke(app, ["dashboards", "get", "demo", *connection_args(), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["meta"]["slug"] == "demo"
    assert payload["meta"]["isStarred"] is True
    assert payload["model"]["version"] == 4


def test_get_renders_meta_table(requests_mock):
    requests_mock.post(f"{BASE_URL}/login", json={"message": "Logged in"})
    requests_mock.get(
        f"{BASE_URL}/api/dashboards/db/demo",
        json={"meta": {"slug": "demo-slug"}, "model": {"title": "demo"}},
    )

    result = runner.invoke(app, ["dashboards", "get", "demo", *connection_args()])

    assert result.exit_code == 0
    assert "demo-slug" in result.stdout


def test_delete_failed_lookup(requests_mock):
    requests_mock.post(f"{BASE_URL}/login", json={"message": "Logged in"})
    requests_mock.get(
        f"{BASE_URL}/api/dashboards/db/gone",
        status_code=404,
        json={"message": "Dashboard not found"},
    )
    delete = requests_mock.delete(f"{BASE_URL}/api/dashboards/db/gone", json={})

    result = runner.invoke(app, ["dashboards", "delete", "gone", *connection_args()])

    assert result.exit_code == 1
    assert "Dashboard not found" in result.stderr
    assert not delete.called


def test_login_failure_exits_nonzero(requests_mock):
    requests_mock.post(
        f"{BASE_URL}/login", status_code=401, json={"message": "Invalid username or password"}
    )

    result = runner.invoke(app, ["dashboards", "delete", "demo", *connection_args()])

    assert result.exit_code == 1
    assert "HTTP 401" in result.stderr


def test_cert_with_no_verify_rejected(tmp_path):
    cert = tmp_path / "ca.pem"
    cert.write_text("dummy", encoding="utf-8")

    result = runner.invoke(
        app,
        ["dashboards", "get", "demo", *connection_args()],
        env={"GRAFANA_CA_CERT": str(cert), "GRAFANA_VERIFY_SSL": "0"},
    )

    assert result.exit_code != 0
    assert "Cannot combine --cert with --no-verify" in result.stderr


def test_env_cert_is_used_for_verification(monkeypatch, tmp_path):
    cert = tmp_path / "ca.pem"
    cert.write_text("dummy", encoding="utf-8")
    captured: dict[str, object] = {}

    class DummySession:
        def __init__(self, user, password, base_url, **kwargs):
            captured.update(kwargs, user=user, base_url=base_url)

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def login(self):
            pass

        def delete_dashboard(self, name):
            captured["deleted"] = name

    monkeypatch.setattr("grafana_session.cli.GrafanaSession", DummySession)

    result = runner.invoke(
        app,
        ["dashboards", "delete", "demo", "--password", "secret"],
        env={"GRAFANA_URL": BASE_URL, "GRAFANA_CA_CERT": str(cert), "GRAFANA_VERIFY_SSL": "1"},
    )

    assert result.exit_code == 0
    assert captured["verify_ssl"] == str(cert)
    assert captured["base_url"] == BASE_URL
    assert captured["user"] == "admin"
    assert captured["deleted"] == "demo"
