import json

import pytest

from grafana_session.models import (
    REFRESH_INTERVALS,
    Dashboard,
    DashboardResult,
    Template,
    Timepicker,
    add_row,
    add_templating,
    new_dashboard,
    new_panel,
    new_row,
    new_template,
    new_templating,
)


@pytest.mark.parametrize("title", ["demo", "", "cpu / load", "负载"])
def test_new_dashboard_keeps_title_and_starts_empty(title):
    dashboard = new_dashboard(title)

    assert dashboard.title == title
    assert dashboard.rows == []
    assert dashboard.templating.variables == []


def test_new_dashboard_defaults():
    payload = new_dashboard("demo").to_dict()

    assert payload["schemaVersion"] == 14
    assert payload["version"] == 1
    assert payload["style"] == "dark"
    assert payload["timezone"] == "browser"
    assert payload["editable"] is True
    assert payload["gnetId"] is None
    assert payload["time"] == {"from": "now-6h", "to": "now"}
    assert payload["timepicker"]["refresh_intervals"] == [
        "5s", "10s", "30s", "1m", "5m", "15m", "30m", "1h", "2h", "1d"
    ]
    assert payload["timepicker"]["time_options"] == [
        "5m", "15m", "1h", "6h", "12h", "24h", "2d", "4d", "7d", "30d"
    ]
    assert payload["templating"] == {"list": []}
    assert payload["links"] == [] and payload["tags"] == []


@pytest.mark.parametrize(
    ("panel_title", "query"),
    [("p1", "SELECT 1"), ("load", 'SELECT mean("value") FROM "cpu" WHERE $timeFilter')],
)
def test_new_row_holds_one_panel_for_query(panel_title, query):
    row = new_row(panel_title, query)

    assert len(row.panels) == 1
    panel = row.panels[0]
    assert panel.title == panel_title
    assert len(panel.targets) == 1
    assert panel.targets[0].query == query
    assert row.height == "250px"
    assert row.title_size == "h6"


def test_new_panel_graph_preset():
    payload = new_panel("p", "SELECT 1").to_dict()

    assert payload["type"] == "graph"
    assert payload["renderer"] == "flot"
    assert (payload["fill"], payload["linewidth"], payload["pointradius"], payload["span"]) == (
        1,
        1,
        5,
        12,
    )
    assert payload["legend"] == {
        "avg": False,
        "current": False,
        "max": False,
        "min": False,
        "show": True,
        "total": False,
        "values": False,
    }
    assert payload["tooltip"] == {"shared": True, "sort": 0, "value_type": "individual"}
    assert payload["xaxis"] == {"mode": "time", "name": None, "show": True, "values": []}
    assert payload["yaxes"] == [
        {"format": "short", "label": None, "logBase": 1, "max": None, "min": None, "show": True}
    ] * 2
    target = payload["targets"][0]
    assert target["refId"] == "A"
    assert target["rawQuery"] is True
    assert target["dsType"] == "influxdb"
    assert target["resultFormat"] == "time_series"


def test_default_yaxes_are_independent():
    panel = new_panel("p", "SELECT 1")

    panel.yaxes[0].format = "bytes"

    assert panel.yaxes[1].format == "short"


def test_add_row_appends_without_touching_input():
    original = add_row(new_dashboard("demo"), "first", "SELECT 1")
    first_row = original.rows[0]

    updated = add_row(original, "second", "SELECT 2")

    assert len(updated.rows) == len(original.rows) + 1
    assert updated.rows[0] is first_row
    assert updated.rows[1].panels[0].targets[0].query == "SELECT 2"
    assert len(original.rows) == 1
    assert updated.rows is not original.rows


def test_add_templating_replaces_previous_variables():
    dashboard = add_templating(new_dashboard("demo"), ["host", "region"], "cpu", "influx")

    dashboard = add_templating(dashboard, ["dc"], "mem", "influx")

    assert [template.name for template in dashboard.templating.variables] == ["dc"]


def test_add_templating_leaves_input_alone():
    original = new_dashboard("demo")

    add_templating(original, ["host"], "cpu", "influx")

    assert original.templating.variables == []


@pytest.mark.parametrize("tag", ["host", "region", "with space"])
def test_template_query_format(tag):
    template = new_template(tag, "cpu.load", "influx")

    assert template.query == f'SHOW TAG VALUES FROM "cpu.load" WITH KEY = "{tag}"'
    assert template.name == tag
    assert template.label == tag
    assert template.datasource == "influx"
    assert template.multi is True
    assert template.include_all is False
    assert template.type == "query"
    assert template.refresh == 1


def test_new_templating_preserves_tag_order():
    templating = new_templating(["b", "a", "c"], "m", "ds")

    assert [template.name for template in templating.variables] == ["b", "a", "c"]


def test_template_omits_empty_current_and_options():
    payload = new_template("host", "cpu", "influx").to_dict()

    assert "current" not in payload
    assert "options" not in payload


def test_template_keeps_evaluated_current_and_options():
    template = Template.from_dict(
        {
            "name": "host",
            "query": "SHOW TAG VALUES",
            "current": {"text": "web1", "value": ["web1"], "tags": []},
            "options": [{"selected": True, "text": "web1", "value": "web1"}],
        }
    )

    payload = template.to_dict()

    assert payload["current"]["text"] == "web1"
    assert payload["options"][0]["value"] == "web1"


def test_demo_dashboard_serialises_to_expected_json():
    dashboard = new_dashboard("demo")
    dashboard = add_row(dashboard, "p1", "SELECT 1")
    dashboard = add_templating(dashboard, ["host"], "cpu", "influx")

    text = json.dumps(dashboard.to_dict(), separators=(",", ":"))
    decoded = json.loads(text)

    assert '"title":"demo"' in text
    assert len(decoded["rows"]) == 1
    assert len(decoded["rows"][0]["panels"]) == 1
    assert decoded["rows"][0]["panels"][0]["targets"][0]["query"] == "SELECT 1"
    assert [item["name"] for item in decoded["templating"]["list"]] == ["host"]


def test_dashboard_from_dict_keeps_unknown_keys():
    payload = new_dashboard("demo").to_dict()
    payload["uid"] = "abc123"
    payload["annotations"] = {"list": []}

    dashboard = Dashboard.from_dict(payload)

    assert dashboard.extra == {"uid": "abc123", "annotations": {"list": []}}
    assert dashboard.to_dict() == payload


def test_fetched_dashboard_round_trips_nested_unknown_keys():
    dashboard = add_row(new_dashboard("demo"), "p1", "SELECT 1")
    model = add_templating(dashboard, ["host"], "cpu", "influx").to_dict()
    row = model["rows"][0]
    row["repeatDirection"] = "h"
    panel = row["panels"][0]
    panel["decimals"] = 2
    panel["legend"]["alignAsTable"] = True
    panel["targets"][0]["alias"] = "$tag_host"
    panel["yaxes"][0]["decimals"] = 1
    model["templating"]["list"][0]["allValue"] = ".*"

    result = DashboardResult.from_dict({"meta": {"slug": "demo"}, "model": model})

    assert result.model.rows[0].panels[0].extra == {"decimals": 2}
    assert result.model.rows[0].panels[0].targets[0].extra == {"alias": "$tag_host"}
    assert result.model.to_dict() == model


def test_timepicker_keeps_explicit_empty_lists():
    picker = Timepicker.from_dict({"refresh_intervals": [], "time_options": []})

    assert picker.refresh_intervals == []
    assert picker.time_options == []
    assert Timepicker.from_dict({}).refresh_intervals == list(REFRESH_INTERVALS)


def test_template_keeps_null_datasource():
    template = Template.from_dict({"name": "host", "query": "q", "datasource": None})

    assert template.datasource is None
    assert template.to_dict()["datasource"] is None


def test_dashboard_result_from_service_payload():
    model = add_row(new_dashboard("demo"), "p1", "SELECT 1").to_dict()
    model["id"] = 7
    model["version"] = 3

    result = DashboardResult.from_dict(
        {
            "meta": {
                "slug": "demo",
                "created": "2017-03-01T10:00:00Z",
                "expires": "0001-01-01T00:00:00Z",
                "isStarred": True,
            },
            "model": model,
        }
    )

    assert result.meta.slug == "demo"
    assert result.meta.is_starred is True
    assert result.meta.is_home is False
    assert result.model.id == 7
    assert result.model.version == 3
    assert result.model.rows[0].panels[0].targets[0].query == "SELECT 1"
