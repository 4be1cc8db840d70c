import pytest

from grafana_session import GrafanaClient, GrafanaSession


def build_client():
    return GrafanaClient("admin", "secret", "http://grafana:3000", timeout=2.0)


def test_client_wraps_a_session():
    client = build_client()

    assert isinstance(client.session, GrafanaSession)
    assert client.session.config.timeout == 2.0
    assert client.session.config.base_url == "http://grafana:3000"


def test_client_session_operations_work(requests_mock):
    matcher = requests_mock.post("http://grafana:3000/api/dashboards/db", json={"status": "success"})
    client = build_client()
    dashboard = client.session.create_dashboard("demo")

    client.session.update_dashboard(dashboard, overwrite=True)

    assert matcher.last_request.json()["dashboard"]["title"] == "demo"


@pytest.mark.parametrize(
    ("method", "args"),
    [
        ("update_dashboard", ("job", "view")),
        ("delete_panel", ("job", "view")),
        ("delete_dashboard", ("job",)),
    ],
)
def test_job_view_operations_are_not_mapped_yet(method, args, requests_mock):
    client = build_client()

    with pytest.raises(NotImplementedError, match="GrafanaClient.session"):
        getattr(client, method)(*args)

    assert requests_mock.call_count == 0
