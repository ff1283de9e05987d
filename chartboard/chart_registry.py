"""
Chart Registry: the catalogue of visualizations, their field roles, the
default column picks for a fresh dataset, and config validation.

A chart config is a plain dict  role -> column name  ("series" maps to a
list of column names).
"""

FIELD_LABELS = {
    "category": "Category",
    "value": "Value",
    "x": "X axis",
    "y": "Y axis",
    "size": "Size",
    "row": "Row",
    "col": "Column",
    "series": "Series",
    "date": "Date",
    "source": "Source",
    "target": "Target",
    "parent": "Parent",
    "child": "Child",
}

_CAT_VALUE = ("category", "value")
_STACKED = ("category", "series")
_FLOW = ("source", "target", "value")


CHART_CONFIG = {
    "cards": {
        "emoji": "🔢", "label": "Metric Cards", "fields": _CAT_VALUE,
        "description": "One card per row: category as title, value as the figure.",
    },
    "bar-chart": {
        "emoji": "📊", "label": "Bar Chart", "fields": _CAT_VALUE,
        "description": "Horizontal bars, one per category, scaled from zero.",
    },
    "treemap": {
        "emoji": "🧱", "label": "Treemap", "fields": _CAT_VALUE,
        "description": "Nested rectangles with area proportional to value.",
    },
    "stacked-bar-chart": {
        "emoji": "📚", "label": "Stacked Bar Chart", "fields": _STACKED,
        "description": "Series stacked on top of each other per category.",
    },
    "donut-chart": {
        "emoji": "🍩", "label": "Donut Chart", "fields": _CAT_VALUE,
        "description": "Share of total per category, ring shaped.",
    },
    "pie-chart": {
        "emoji": "🥧", "label": "Pie Chart", "fields": _CAT_VALUE,
        "description": "Share of total per category.",
    },
    "line-chart": {
        "emoji": "📈", "label": "Line Chart", "fields": _CAT_VALUE,
        "description": "Values joined in row order.",
    },
    "area-chart": {
        "emoji": "🏔️", "label": "Area Chart", "fields": _CAT_VALUE,
        "description": "Line chart filled down to zero.",
    },
    "scatter-plot": {
        "emoji": "✳️", "label": "Scatter Plot", "fields": ("x", "y"),
        "description": "One point per row on two numeric axes.",
        "config_error": "Select valid X and Y columns for the scatter plot.",
    },
    "bubble-chart": {
        "emoji": "🫧", "label": "Bubble Chart", "fields": ("x", "y", "size"),
        "description": "Scatter plot with a third numeric column as bubble size.",
        "config_error": "The bubble chart needs three numeric columns (X, Y and Size).",
    },
    "heatmap": {
        "emoji": "🟩", "label": "Heatmap", "fields": ("row", "col", "value"),
        "description": "Grid of row x column categories colored by value.",
        "config_error": ("The heatmap needs a row category, a column category "
                         "and a numeric value column."),
    },
    "radial-bar-chart": {
        "emoji": "🎯", "label": "Radial Bar Chart", "fields": _CAT_VALUE,
        "description": "Bars wrapped around a circle, sorted by value.",
    },
    "gauge-chart": {
        "emoji": "⏱️", "label": "Gauge", "fields": ("value",),
        "description": "The first row's value against the column maximum.",
        "config_error": "The gauge needs a numeric value column.",
    },
    "stacked-area-chart": {
        "emoji": "🌄", "label": "Stacked Area Chart", "fields": _STACKED,
        "description": "Series stacked as filled areas.",
    },
    "streamgraph": {
        "emoji": "🌊", "label": "Streamgraph", "fields": _STACKED,
        "description": "Stacked areas around a wiggling baseline.",
    },
    "box-plot": {
        "emoji": "📦", "label": "Box Plot", "fields": _CAT_VALUE,
        "description": "Quartiles and 1.5 IQR fences per category.",
    },
    "violin-plot": {
        "emoji": "🎻", "label": "Violin Plot", "fields": _CAT_VALUE,
        "description": "Kernel density of values per category.",
    },
    "parallel-coordinates": {
        "emoji": "🪜", "label": "Parallel Coordinates", "fields": ("series",),
        "min_series": 2,
        "description": "One polyline per row across numeric axes.",
        "config_error": "Parallel coordinates need at least two numeric series columns.",
    },
    "chord-diagram": {
        "emoji": "🕸️", "label": "Chord Diagram", "fields": _FLOW,
        "description": "Flows between entities as ribbons around a circle.",
        "config_error": "The chord diagram needs Source, Target and Value columns.",
    },
    "sankey-diagram": {
        "emoji": "🔀", "label": "Sankey Diagram", "fields": _FLOW,
        "description": "Flows between nodes as proportional bands.",
        "config_error": "The sankey diagram needs Source, Target and Value columns.",
    },
    "packed-circles": {
        "emoji": "🫧", "label": "Packed Circles", "fields": _CAT_VALUE,
        "description": "Circles with area proportional to value, packed together.",
    },
    "calendar-heatmap": {
        "emoji": "📅", "label": "Calendar Heatmap", "fields": ("date", "value"),
        "description": "Daily values laid out week by week, one block per year.",
        "config_error": "The calendar heatmap needs Date and Value columns.",
    },
    "dendrogram": {
        "emoji": "🌳", "label": "Dendrogram", "fields": ("parent", "child"),
        "description": "Tree built from parent/child rows.",
        "config_error": "The dendrogram needs valid Parent and Child columns.",
    },
    "force-directed-graph": {
        "emoji": "🧲", "label": "Force-Directed Graph", "fields": _FLOW,
        "optional": ("value",),
        "description": "Network of source/target links laid out by forces.",
        "config_error": "The force-directed graph needs Source and Target columns.",
    },
}


class ChartError(ValueError):
    """Base for errors that stop a chart from drawing. The message is user-facing."""


class ChartConfigError(ChartError):
    """Selected columns are missing or do not exist in the dataset."""


class ChartDataError(ChartError):
    """Columns exist but hold nothing the chart can draw."""


def chart_ids() -> list[str]:
    return list(CHART_CONFIG.keys())


def chart_label(chart_id: str) -> str:
    cfg = CHART_CONFIG.get(chart_id)
    return f"{cfg['emoji']}  {cfg['label']}" if cfg else chart_id


def config_error_message(chart_id: str) -> str:
    cfg = CHART_CONFIG[chart_id]
    if "config_error" in cfg:
        return cfg["config_error"]
    if "series" in cfg["fields"]:
        return (f"Select a category column and at least one series column "
                f"for the {cfg['label'].lower()}.")
    return f"Select valid category and value columns for the {cfg['label'].lower()}."


def default_config(chart_id: str, headers: list[str]) -> dict:
    """
    Initial column picks for a chart, positional on the header list:
    first column as the category-like role, the next ones as values.
    """
    if chart_id not in CHART_CONFIG or not headers:
        return {}

    h = list(headers)

    def at(i: int, fallback: int = 0) -> str:
        if i < len(h):
            return h[i]
        return h[fallback] if fallback < len(h) else h[0]

    fields = CHART_CONFIG[chart_id]["fields"]
    if fields == _CAT_VALUE:
        return {"category": h[0], "value": at(1)}
    if chart_id == "gauge-chart":
        return {"value": at(1)}
    if fields == _STACKED:
        return {"category": h[0], "series": h[1:]}
    if chart_id == "parallel-coordinates":
        return {"series": h[1:]}
    if chart_id in ("scatter-plot", "bubble-chart"):
        cfg = {"x": h[0], "y": at(1)}
        if chart_id == "bubble-chart":
            cfg["size"] = at(2, fallback=1)
        return cfg
    if chart_id == "heatmap":
        return {"row": h[0], "col": at(1), "value": at(2)}
    if chart_id == "calendar-heatmap":
        return {"date": h[0], "value": at(1)}
    if fields == _FLOW:
        return {"source": h[0], "target": at(1), "value": at(2, fallback=1)}
    if chart_id == "dendrogram":
        return {"parent": h[0], "child": at(1)}
    return {}


def validate_config(chart_id: str, config: dict, columns) -> None:
    """Raise ChartConfigError unless every required role names an existing column."""
    if chart_id not in CHART_CONFIG:
        raise ChartConfigError(f"Unknown chart type: {chart_id}")

    cfg = CHART_CONFIG[chart_id]
    known = set(columns)
    optional = set(cfg.get("optional", ()))
    config = config or {}

    for role in cfg["fields"]:
        selected = config.get(role)
        if role == "series":
            series = list(selected or [])
            if len(series) < cfg.get("min_series", 1) or not set(series) <= known:
                raise ChartConfigError(config_error_message(chart_id))
            continue
        if not selected:
            if role in optional:
                continue
            raise ChartConfigError(config_error_message(chart_id))
        if selected not in known:
            raise ChartConfigError(config_error_message(chart_id))
