"""Dashboard document model and its default constructors.

Every type maps one-to-one onto a JSON object in Grafana's (schema version 14)
dashboard format. ``to_dict`` emits the exact wire keys and ``from_dict`` is
tolerant of missing keys, filling them with the values the matching
``new_*`` constructor would use.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

SCHEMA_VERSION = 14
DEFAULT_STYLE = "dark"
DEFAULT_TIMEZONE = "browser"
REFRESH_INTERVALS = ("5s", "10s", "30s", "1m", "5m", "15m", "30m", "1h", "2h", "1d")
TIME_OPTIONS = ("5m", "15m", "1h", "6h", "12h", "24h", "2d", "4d", "7d", "30d")
TAG_VALUES_QUERY = 'SHOW TAG VALUES FROM "{measurement}" WITH KEY = "{tag}"'


def _unknown_keys(payload: Mapping[str, Any], known: frozenset[str]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if key not in known}


def _with_extra(extra: Mapping[str, Any], payload: dict[str, Any]) -> dict[str, Any]:
    # Known keys win over a stale copy of the same key in ``extra``.
    merged = dict(extra)
    merged.update(payload)
    return merged


_LEGEND_KEYS = frozenset({"avg", "current", "max", "min", "show", "total", "values"})


@dataclass(slots=True)
class Legend:
    avg: bool = False
    current: bool = False
    max: bool = False
    min: bool = False
    show: bool = True
    total: bool = False
    values: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(
            self.extra,
            {
                "avg": self.avg,
                "current": self.current,
                "max": self.max,
                "min": self.min,
                "show": self.show,
                "total": self.total,
                "values": self.values,
            },
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Legend:
        return cls(
            **{key: payload[key] for key in _LEGEND_KEYS if key in payload},
            extra=_unknown_keys(payload, _LEGEND_KEYS),
        )


_TOOLTIP_KEYS = frozenset({"shared", "sort", "value_type"})


@dataclass(slots=True)
class Tooltip:
    shared: bool = True
    sort: int = 0
    value_type: str = "individual"
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(
            self.extra,
            {"shared": self.shared, "sort": self.sort, "value_type": self.value_type},
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Tooltip:
        return cls(
            shared=payload.get("shared", True),
            sort=payload.get("sort", 0),
            value_type=payload.get("value_type", "individual"),
            extra=_unknown_keys(payload, _TOOLTIP_KEYS),
        )


_XAXIS_KEYS = frozenset({"mode", "name", "show", "values"})


@dataclass(slots=True)
class XAxis:
    mode: str = "time"
    name: Any = None
    show: bool = True
    values: list[Any] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(
            self.extra,
            {
                "mode": self.mode,
                "name": self.name,
                "show": self.show,
                "values": list(self.values),
            },
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> XAxis:
        return cls(
            mode=payload.get("mode", "time"),
            name=payload.get("name"),
            show=payload.get("show", True),
            values=list(payload.get("values") or []),
            extra=_unknown_keys(payload, _XAXIS_KEYS),
        )


_YAXIS_KEYS = frozenset({"format", "label", "logBase", "max", "min", "show"})


@dataclass(slots=True)
class YAxis:
    format: str = "short"
    label: Any = None
    log_base: int = 1
    max: Any = None
    min: Any = None
    show: bool = True
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(
            self.extra,
            {
                "format": self.format,
                "label": self.label,
                "logBase": self.log_base,
                "max": self.max,
                "min": self.min,
                "show": self.show,
            },
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> YAxis:
        return cls(
            format=payload.get("format", "short"),
            label=payload.get("label"),
            log_base=payload.get("logBase", 1),
            max=payload.get("max"),
            min=payload.get("min"),
            show=payload.get("show", True),
            extra=_unknown_keys(payload, _YAXIS_KEYS),
        )


_TARGET_KEYS = frozenset(
    {
        "dsType",
        "groupBy",
        "measurement",
        "policy",
        "query",
        "rawQuery",
        "refId",
        "resultFormat",
        "select",
        "tags",
    }
)


@dataclass(slots=True)
class Target:
    """A single InfluxDB query attached to a panel."""

    query: str = ""
    ds_type: str = "influxdb"
    group_by: list[dict[str, Any]] = field(default_factory=list)
    measurement: str = ""
    policy: str = "default"
    raw_query: bool = True
    ref_id: str = "A"
    result_format: str = "time_series"
    select: list[list[dict[str, Any]]] = field(default_factory=list)
    tags: list[Any] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(
            self.extra,
            {
                "dsType": self.ds_type,
                "groupBy": [dict(item) for item in self.group_by],
                "measurement": self.measurement,
                "policy": self.policy,
                "query": self.query,
                "rawQuery": self.raw_query,
                "refId": self.ref_id,
                "resultFormat": self.result_format,
                "select": [[dict(part) for part in chain] for chain in self.select],
                "tags": list(self.tags),
            },
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Target:
        return cls(
            query=payload.get("query", ""),
            ds_type=payload.get("dsType", "influxdb"),
            group_by=list(payload.get("groupBy") or []),
            measurement=payload.get("measurement", ""),
            policy=payload.get("policy", "default"),
            raw_query=payload.get("rawQuery", True),
            ref_id=payload.get("refId", "A"),
            result_format=payload.get("resultFormat", "time_series"),
            select=list(payload.get("select") or []),
            tags=list(payload.get("tags") or []),
            extra=_unknown_keys(payload, _TARGET_KEYS),
        )


_PANEL_KEYS = frozenset(
    {
        "aliasColors",
        "bars",
        "datasource",
        "fill",
        "id",
        "legend",
        "lines",
        "linewidth",
        "links",
        "nullPointMode",
        "percentage",
        "pointradius",
        "points",
        "renderer",
        "seriesOverrides",
        "span",
        "stack",
        "steppedLine",
        "targets",
        "thresholds",
        "timeFrom",
        "timeShift",
        "title",
        "tooltip",
        "type",
        "xaxis",
        "yaxes",
    }
)


@dataclass(slots=True)
class Panel:
    """A graph panel; field defaults describe a plain line chart."""

    title: str = ""
    targets: list[Target] = field(default_factory=list)
    legend: Legend = field(default_factory=Legend)
    tooltip: Tooltip = field(default_factory=Tooltip)
    xaxis: XAxis = field(default_factory=XAxis)
    yaxes: list[YAxis] = field(default_factory=list)
    alias_colors: dict[str, Any] = field(default_factory=dict)
    bars: bool = False
    datasource: Any = None
    fill: int = 1
    id: int = 0
    lines: bool = True
    linewidth: int = 1
    links: list[Any] = field(default_factory=list)
    null_point_mode: str = "null"
    percentage: bool = False
    pointradius: int = 5
    points: bool = False
    renderer: str = "flot"
    series_overrides: list[Any] = field(default_factory=list)
    span: int = 12
    stack: bool = False
    stepped_line: bool = False
    thresholds: list[Any] = field(default_factory=list)
    time_from: Any = None
    time_shift: Any = None
    type: str = "graph"
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(
            self.extra,
            {
                "aliasColors": dict(self.alias_colors),
                "bars": self.bars,
                "datasource": self.datasource,
                "fill": self.fill,
                "id": self.id,
                "legend": self.legend.to_dict(),
                "lines": self.lines,
                "linewidth": self.linewidth,
                "links": list(self.links),
                "nullPointMode": self.null_point_mode,
                "percentage": self.percentage,
                "pointradius": self.pointradius,
                "points": self.points,
                "renderer": self.renderer,
                "seriesOverrides": list(self.series_overrides),
                "span": self.span,
                "stack": self.stack,
                "steppedLine": self.stepped_line,
                "targets": [target.to_dict() for target in self.targets],
                "thresholds": list(self.thresholds),
                "timeFrom": self.time_from,
                "timeShift": self.time_shift,
                "title": self.title,
                "tooltip": self.tooltip.to_dict(),
                "type": self.type,
                "xaxis": self.xaxis.to_dict(),
                "yaxes": [axis.to_dict() for axis in self.yaxes],
            },
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Panel:
        return cls(
            title=payload.get("title", ""),
            targets=[Target.from_dict(item) for item in payload.get("targets") or []],
            legend=Legend.from_dict(payload.get("legend") or {}),
            tooltip=Tooltip.from_dict(payload.get("tooltip") or {}),
            xaxis=XAxis.from_dict(payload.get("xaxis") or {}),
            yaxes=[YAxis.from_dict(item) for item in payload.get("yaxes") or []],
            alias_colors=dict(payload.get("aliasColors") or {}),
            bars=payload.get("bars", False),
            datasource=payload.get("datasource"),
            fill=payload.get("fill", 1),
            id=payload.get("id", 0),
            lines=payload.get("lines", True),
            linewidth=payload.get("linewidth", 1),
            links=list(payload.get("links") or []),
            null_point_mode=payload.get("nullPointMode", "null"),
            percentage=payload.get("percentage", False),
            pointradius=payload.get("pointradius", 5),
            points=payload.get("points", False),
            renderer=payload.get("renderer", "flot"),
            series_overrides=list(payload.get("seriesOverrides") or []),
            span=payload.get("span", 12),
            stack=payload.get("stack", False),
            stepped_line=payload.get("steppedLine", False),
            thresholds=list(payload.get("thresholds") or []),
            time_from=payload.get("timeFrom"),
            time_shift=payload.get("timeShift"),
            type=payload.get("type", "graph"),
            extra=_unknown_keys(payload, _PANEL_KEYS),
        )


_ROW_KEYS = frozenset(
    {
        "collapse",
        "height",
        "panels",
        "repeat",
        "repeatIteration",
        "repeatRowId",
        "showTitle",
        "title",
        "titleSize",
    }
)


@dataclass(slots=True)
class Row:
    panels: list[Panel] = field(default_factory=list)
    collapse: bool = False
    height: str = "250px"
    repeat: Any = None
    repeat_iteration: Any = None
    repeat_row_id: Any = None
    show_title: bool = False
    title: str = ""
    title_size: str = "h6"
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(
            self.extra,
            {
                "collapse": self.collapse,
                "height": self.height,
                "panels": [panel.to_dict() for panel in self.panels],
                "repeat": self.repeat,
                "repeatIteration": self.repeat_iteration,
                "repeatRowId": self.repeat_row_id,
                "showTitle": self.show_title,
                "title": self.title,
                "titleSize": self.title_size,
            },
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Row:
        return cls(
            panels=[Panel.from_dict(item) for item in payload.get("panels") or []],
            collapse=payload.get("collapse", False),
            height=payload.get("height", "250px"),
            repeat=payload.get("repeat"),
            repeat_iteration=payload.get("repeatIteration"),
            repeat_row_id=payload.get("repeatRowId"),
            show_title=payload.get("showTitle", False),
            title=payload.get("title", ""),
            title_size=payload.get("titleSize", "h6"),
            extra=_unknown_keys(payload, _ROW_KEYS),
        )


_TEMPLATE_KEYS = frozenset(
    {
        "current",
        "datasource",
        "hide",
        "includeAll",
        "label",
        "multi",
        "name",
        "options",
        "query",
        "refresh",
        "regex",
        "sort",
        "type",
        "useTags",
    }
)


@dataclass(slots=True)
class Template:
    """A dashboard variable populated from InfluxDB tag values.

    A ``datasource`` of ``None`` is written as ``null``, which Grafana reads as
    the default datasource.
    """

    name: str
    query: str
    datasource: str | None = None
    label: str = ""
    hide: int = 0
    include_all: bool = False
    multi: bool = True
    refresh: int = 1
    regex: str = ""
    sort: int = 0
    type: str = "query"
    use_tags: bool = False
    current: dict[str, Any] = field(default_factory=dict)
    options: list[dict[str, Any]] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = dict(self.extra)
        # Grafana fills these in once the variable has been evaluated.
        if self.current:
            payload["current"] = dict(self.current)
        payload.update(
            {
                "datasource": self.datasource,
                "hide": self.hide,
                "includeAll": self.include_all,
                "label": self.label,
                "multi": self.multi,
                "name": self.name,
            }
        )
        if self.options:
            payload["options"] = [dict(option) for option in self.options]
        payload.update(
            {
                "query": self.query,
                "refresh": self.refresh,
                "regex": self.regex,
                "sort": self.sort,
                "type": self.type,
                "useTags": self.use_tags,
            }
        )
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Template:
        return cls(
            name=payload.get("name", ""),
            query=payload.get("query", ""),
            datasource=payload.get("datasource"),
            label=payload.get("label") or "",
            hide=payload.get("hide", 0),
            include_all=payload.get("includeAll", False),
            multi=payload.get("multi", True),
            refresh=payload.get("refresh", 1),
            regex=payload.get("regex") or "",
            sort=payload.get("sort", 0),
            type=payload.get("type", "query"),
            use_tags=payload.get("useTags", False),
            current=dict(payload.get("current") or {}),
            options=list(payload.get("options") or []),
            extra=_unknown_keys(payload, _TEMPLATE_KEYS),
        )


_TEMPLATING_KEYS = frozenset({"list"})


@dataclass(slots=True)
class Templating:
    variables: list[Template] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(
            self.extra,
            {"list": [template.to_dict() for template in self.variables]},
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Templating:
        return cls(
            variables=[Template.from_dict(item) for item in payload.get("list") or []],
            extra=_unknown_keys(payload, _TEMPLATING_KEYS),
        )


_TIME_RANGE_KEYS = frozenset({"from", "to"})


@dataclass(slots=True)
class TimeRange:
    start: str = "now-6h"
    end: str = "now"
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(self.extra, {"from": self.start, "to": self.end})

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> TimeRange:
        return cls(
            start=payload.get("from", "now-6h"),
            end=payload.get("to", "now"),
            extra=_unknown_keys(payload, _TIME_RANGE_KEYS),
        )


_TIMEPICKER_KEYS = frozenset({"refresh_intervals", "time_options"})


@dataclass(slots=True)
class Timepicker:
    refresh_intervals: list[str] = field(default_factory=lambda: list(REFRESH_INTERVALS))
    time_options: list[str] = field(default_factory=lambda: list(TIME_OPTIONS))
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(
            self.extra,
            {
                "refresh_intervals": list(self.refresh_intervals),
                "time_options": list(self.time_options),
            },
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Timepicker:
        # An explicit empty list from the server is kept; only a missing key gets defaults.
        return cls(
            refresh_intervals=list(payload.get("refresh_intervals", REFRESH_INTERVALS)),
            time_options=list(payload.get("time_options", TIME_OPTIONS)),
            extra=_unknown_keys(payload, _TIMEPICKER_KEYS),
        )


_DASHBOARD_KEYS = frozenset(
    {
        "editable",
        "gnetId",
        "graphTooltip",
        "hideControls",
        "id",
        "links",
        "rows",
        "schemaVersion",
        "style",
        "tags",
        "templating",
        "time",
        "timepicker",
        "timezone",
        "title",
        "version",
    }
)


@dataclass(slots=True)
class Dashboard:
    """A Grafana dashboard document.

    ``links``, ``tags`` and ``gnet_id`` are never interpreted locally; they are
    carried so that a fetched dashboard can be pushed back unchanged. Keys the
    service returns that this model does not know about live in ``extra``, at
    this level and in every nested structure.
    """

    title: str
    rows: list[Row] = field(default_factory=list)
    templating: Templating = field(default_factory=Templating)
    time: TimeRange = field(default_factory=TimeRange)
    timepicker: Timepicker = field(default_factory=Timepicker)
    editable: bool = True
    gnet_id: Any = None
    graph_tooltip: int = 0
    hide_controls: bool = False
    id: int = 0
    links: list[Any] = field(default_factory=list)
    schema_version: int = SCHEMA_VERSION
    style: str = DEFAULT_STYLE
    tags: list[Any] = field(default_factory=list)
    timezone: str = DEFAULT_TIMEZONE
    version: int = 1
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra(
            self.extra,
            {
                "editable": self.editable,
                "gnetId": self.gnet_id,
                "graphTooltip": self.graph_tooltip,
                "hideControls": self.hide_controls,
                "id": self.id,
                "links": list(self.links),
                "rows": [row.to_dict() for row in self.rows],
                "schemaVersion": self.schema_version,
                "style": self.style,
                "tags": list(self.tags),
                "templating": self.templating.to_dict(),
                "time": self.time.to_dict(),
                "timepicker": self.timepicker.to_dict(),
                "timezone": self.timezone,
                "title": self.title,
                "version": self.version,
            },
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Dashboard:
        return cls(
            title=payload.get("title", ""),
            rows=[Row.from_dict(item) for item in payload.get("rows") or []],
            templating=Templating.from_dict(payload.get("templating") or {}),
            time=TimeRange.from_dict(payload.get("time") or {}),
            timepicker=Timepicker.from_dict(payload.get("timepicker") or {}),
            editable=payload.get("editable", True),
            gnet_id=payload.get("gnetId"),
            graph_tooltip=payload.get("graphTooltip", 0),
            hide_controls=payload.get("hideControls", False),
            id=payload.get("id") or 0,
            links=list(payload.get("links") or []),
            schema_version=payload.get("schemaVersion", SCHEMA_VERSION),
            style=payload.get("style", DEFAULT_STYLE),
            tags=list(payload.get("tags") or []),
            timezone=payload.get("timezone", DEFAULT_TIMEZONE),
            version=payload.get("version", 1),
            extra=_unknown_keys(payload, _DASHBOARD_KEYS),
        )

@dataclass(slots=True)
class Meta:
    """Service-assigned metadata returned alongside a dashboard."""

    slug: str = ""
    created: str = ""
    expires: str = ""
    is_home: bool = False
    is_snapshot: bool = False
    is_starred: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": self.created,
            "expires": self.expires,
            "isHome": self.is_home,
            "isSnapshot": self.is_snapshot,
            "isStarred": self.is_starred,
            "slug": self.slug,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Meta:
        return cls(
            slug=payload.get("slug", ""),
            created=payload.get("created", ""),
            expires=payload.get("expires", ""),
            is_home=payload.get("isHome", False),
            is_snapshot=payload.get("isSnapshot", False),
            is_starred=payload.get("isStarred", False),
        )


@dataclass(slots=True)
class DashboardResult:
    meta: Meta
    model: Dashboard

    def to_dict(self) -> dict[str, Any]:
        return {"meta": self.meta.to_dict(), "model": self.model.to_dict()}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> DashboardResult:
        return cls(
            meta=Meta.from_dict(payload.get("meta") or {}),
            model=Dashboard.from_dict(payload.get("model") or payload.get("dashboard") or {}),
        )


@dataclass(slots=True)
class UserInfo:
    """Login request body."""

    user: str
    password: str
    email: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"user": self.user, "email": self.email, "password": self.password}


@dataclass(slots=True)
class DashboardUpload:
    """Body of ``POST /api/dashboards/db``."""

    dashboard: Dashboard
    overwrite: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"dashboard": self.dashboard.to_dict(), "overwrite": self.overwrite}


# Default constructors -------------------------------------------------------
def new_dashboard(title: str) -> Dashboard:
    return Dashboard(title=title)


def new_row(panel_title: str, query: str) -> Row:
    """Return a row holding exactly one default graph panel for ``query``."""
    return Row(panels=[new_panel(panel_title, query)])


def new_panel(title: str, query: str) -> Panel:
    return Panel(
        title=title,
        targets=new_targets(query),
        legend=new_legend(),
        tooltip=new_tooltip(),
        xaxis=new_xaxis(),
        yaxes=new_yaxes(),
    )


def new_legend() -> Legend:
    return Legend()


def new_tooltip() -> Tooltip:
    return Tooltip()


def new_xaxis() -> XAxis:
    return XAxis()


def new_yaxes() -> list[YAxis]:
    # Left and right axes; separate instances so editing one leaves the other alone.
    return [YAxis(), YAxis()]


def new_targets(query: str) -> list[Target]:
    return [Target(query=query)]


def tag_values_query(measurement: str, tag_name: str) -> str:
    return TAG_VALUES_QUERY.format(measurement=measurement, tag=tag_name)


def new_template(tag_name: str, measurement: str, datasource: str | None) -> Template:
    return Template(
        name=tag_name,
        label=tag_name,
        query=tag_values_query(measurement, tag_name),
        datasource=datasource,
    )


def new_templating(
    tag_names: Iterable[str], measurement: str, datasource: str | None
) -> Templating:
    """Build one multi-select query variable per tag name, in order."""
    return Templating(variables=[new_template(name, measurement, datasource) for name in tag_names])


# Mutators -------------------------------------------------------------------
def add_row(dashboard: Dashboard, panel_title: str, query: str) -> Dashboard:
    """Return a copy of ``dashboard`` with one more row appended.

    The input keeps its own ``rows`` list; nested rows are shared, not cloned.
    """
    return dataclasses.replace(dashboard, rows=[*dashboard.rows, new_row(panel_title, query)])


def add_templating(
    dashboard: Dashboard,
    tag_names: Iterable[str],
    measurement: str,
    datasource: str | None,
) -> Dashboard:
    """Return a copy of ``dashboard`` whose templating block is replaced wholesale."""
    return dataclasses.replace(
        dashboard,
        templating=new_templating(tag_names, measurement, datasource),
    )


__all__ = [
    "Dashboard",
    "DashboardResult",
    "DashboardUpload",
    "Legend",
    "Meta",
    "Panel",
    "Row",
    "Target",
    "Template",
    "Templating",
    "TimeRange",
    "Timepicker",
    "Tooltip",
    "UserInfo",
    "XAxis",
    "YAxis",
    "add_row",
    "add_templating",
    "new_dashboard",
    "new_legend",
    "new_panel",
    "new_row",
    "new_targets",
    "new_template",
    "new_templating",
    "new_tooltip",
    "new_xaxis",
    "new_yaxes",
    "tag_values_query",
]
