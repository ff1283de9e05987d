"""
Visualizations: one Plotly figure per chart type.
The app calls `build_chart(chart_id, df, config)` and gets back the figure;
metric cards come back as plain dicts from `metric_cards(df, config)`.
"""
import html
import math

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from . import transforms as T
from .chart_registry import CHART_CONFIG, ChartConfigError, validate_config
from .graph_layout import arc_polygon, chord_layout, force_layout, ribbon_polygon
from .logger import get_logger

logger = get_logger(__name__)

# ── Color Palette ─────────────────────────────────────────────────────────────
COLORS = {
    "primary": "#4299e1",   # bar blue
    "gauge_bg": "#4a5568",  # slate track behind the gauge bar
    "card":    "#ffffff",   # white card surface
    "text":    "#1a2744",   # dark navy text
    "grid":    "#d1ddf0",   # soft blue-gray grid lines
    "link":    "#a0aec0",   # tree and graph edges
}

PALETTE = px.colors.qualitative.D3
WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
DEFAULT_HEIGHT = 460

LAYOUT_BASE = dict(
    paper_bgcolor=COLORS["card"],
    plot_bgcolor=COLORS["card"],
    font=dict(color=COLORS["text"], family="Inter, sans-serif", size=12),
    margin=dict(t=50, b=40, l=40, r=20),
)


def _color(i: int) -> str:
    return PALETTE[i % len(PALETTE)]


def _rgba(hex_color: str, alpha: float) -> str:
    h = hex_color.lstrip("#")
    r, g, b = (int(h[i:i + 2], 16) for i in (0, 2, 4))
    return f"rgba({r},{g},{b},{alpha})"


def _layout(title: str, **overrides) -> dict:
    return {**LAYOUT_BASE, "title_text": title, "title_font_size": 16, **overrides}


def _text(label) -> str:
    """Literal hover text: markup and %{...} placeholders in column names are escaped."""
    return html.escape(str(label), quote=False).replace("%", "&#37;")


def _hover(cfg: dict, name: str, value: str) -> str:
    """Tooltip in the form  <category>: <b>name</b>  /  <value>: <b>v</b>."""
    category, measure = _text(cfg["category"]), _text(cfg["value"])
    return f"{category}: <b>{name}</b><br>{measure}: <b>{value}</b><extra></extra>"


# ── Entry Points ──────────────────────────────────────────────────────────────

def build_chart(chart_id: str, df: pd.DataFrame, config: dict,
                height: int = DEFAULT_HEIGHT, seed: int = 42) -> go.Figure:
    """Validate the column picks and return the figure for chart_id."""
    validate_config(chart_id, config, df.columns)
    dispatch = {
        "bar-chart": bar_chart,
        "treemap": treemap_chart,
        "stacked-bar-chart": stacked_bar_chart,
        "donut-chart": lambda d, c: pie_chart(d, c, hole=0.6),
        "pie-chart": pie_chart,
        "line-chart": line_chart,
        "area-chart": lambda d, c: line_chart(d, c, filled=True),
        "scatter-plot": scatter_chart,
        "bubble-chart": bubble_chart,
        "heatmap": heatmap_chart,
        "radial-bar-chart": radial_bar_chart,
        "gauge-chart": gauge_chart,
        "stacked-area-chart": stacked_area_chart,
        "streamgraph": lambda d, c: stacked_area_chart(d, c, offset="wiggle"),
        "box-plot": box_chart,
        "violin-plot": violin_chart,
        "parallel-coordinates": parallel_chart,
        "chord-diagram": chord_chart,
        "sankey-diagram": sankey_chart,
        "packed-circles": packed_circles_chart,
        "calendar-heatmap": calendar_chart,
        "dendrogram": dendrogram_chart,
        "force-directed-graph": lambda d, c: force_graph_chart(d, c, seed=seed),
    }
    if chart_id not in dispatch:
        raise ChartConfigError(f"{CHART_CONFIG[chart_id]['label']} is not drawn as a figure.")

    fig = dispatch[chart_id](df, config)
    fig.update_layout(height=max(height, fig.layout.height or 0))
    logger.debug("Built %s with %d traces", chart_id, len(fig.data))
    return fig


def metric_cards(df: pd.DataFrame, config: dict) -> list[dict]:
    """Cards (title, value, caption) for every row."""
    validate_config("cards", config, df.columns)
    return T.metric_cards(df, config["category"], config["value"])


# ── Category / Value Charts ───────────────────────────────────────────────────

def bar_chart(df: pd.DataFrame, cfg: dict):
    """Horizontal bars in input order, scaled from zero."""
    agg = T.category_values(df, cfg["category"], cfg["value"])
    fig = go.Figure(go.Bar(
        y=agg["name"], x=agg["value"], orientation="h",
        marker_color=COLORS["primary"],
        hovertemplate=_hover(cfg, "%{y}", "%{x}"),
    ))
    fig.update_layout(**_layout(
        f"{cfg['value']} by {cfg['category']}",
        xaxis=dict(range=list(T.zero_domain(agg["value"])), title=cfg["value"]),
        yaxis=dict(type="category", autorange="reversed"),
    ))
    _apply_axis_style(fig)
    return fig


def treemap_chart(df: pd.DataFrame, cfg: dict):
    agg = T.positive_values(df, cfg["category"], cfg["value"], "treemap")
    fig = go.Figure(go.Treemap(
        labels=agg["name"], parents=[""] * len(agg), values=agg["value"],
        marker_colors=[_color(i) for i in range(len(agg))],
        textinfo="label+value",
        hovertemplate=_hover(cfg, "%{label}", "%{value}"),
    ))
    fig.update_layout(**_layout(f"{cfg['value']} by {cfg['category']}"))
    return fig


def pie_chart(df: pd.DataFrame, cfg: dict, hole: float = 0.0):
    """Pie (or donut with hole > 0); slices keep input order, labelled with their share."""
    slices = T.pie_slices(df, cfg["category"], cfg["value"])
    fig = go.Figure(go.Pie(
        labels=slices["name"], values=slices["value"],
        hole=hole, sort=False, direction="clockwise",
        marker_colors=[_color(i) for i in range(len(slices))],
        texttemplate="%{label} (%{percent:.1%})",
        hovertemplate=_hover(cfg, "%{label}", "%{value}"),
    ))
    fig.update_layout(**_layout(f"Share of {cfg['value']}", showlegend=False))
    return fig


def line_chart(df: pd.DataFrame, cfg: dict, filled: bool = False):
    agg = T.category_values(df, cfg["category"], cfg["value"])
    fig = go.Figure(go.Scatter(
        x=agg["name"], y=agg["value"], mode="lines+markers",
        line=dict(color=COLORS["primary"], width=2),
        fill="tozeroy" if filled else None,
        fillcolor=_rgba(COLORS["primary"], 0.25) if filled else None,
        hovertemplate=_hover(cfg, "%{x}", "%{y}"),
    ))
    fig.update_layout(**_layout(
        f"{cfg['value']} by {cfg['category']}",
        xaxis=dict(type="category"),
        yaxis=dict(rangemode="tozero", title=cfg["value"]),
    ))
    _apply_axis_style(fig)
    return fig


def radial_bar_chart(df: pd.DataFrame, cfg: dict):
    """Bars sorted ascending around the circle, starting at twelve o'clock."""
    bars = T.radial_bars(df, cfg["category"], cfg["value"])
    fig = go.Figure(go.Barpolar(
        r=bars["radius"] - T.RADIAL_INNER, base=T.RADIAL_INNER,
        theta=bars["theta"], width=bars["width"],
        marker_color=[_color(i) for i in range(len(bars))],
        text=bars["name"], customdata=bars["value"],
        hovertemplate=_hover(cfg, "%{text}", "%{customdata}"),
    ))
    fig.update_layout(**_layout(
        f"{cfg['value']} by {cfg['category']}",
        polar=dict(
            radialaxis=dict(range=[0, 1], visible=False),
            angularaxis=dict(rotation=90, direction="clockwise", showticklabels=False),
        ),
    ))
    return fig


def gauge_chart(df: pd.DataFrame, cfg: dict):
    g = T.gauge(df, cfg["value"])
    fig = go.Figure(go.Indicator(
        mode="gauge+number", value=g["value"],
        title=dict(text=g["label"]),
        gauge=dict(
            axis=dict(range=[0, g["max"]]),
            bar=dict(color=COLORS["primary"]),
            bgcolor=COLORS["gauge_bg"],
        ),
    ))
    fig.update_layout(**_layout(f"{g['label']} (first row)"))
    return fig


# ── Stacked Charts ────────────────────────────────────────────────────────────

def stacked_bar_chart(df: pd.DataFrame, cfg: dict):
    stack = T.stack_series(df, cfg["category"], cfg["series"])
    fig = go.Figure()
    for i, layer in enumerate(stack["layers"]):
        fig.add_trace(go.Bar(
            x=stack["categories"], y=layer["values"], base=layer["y0"],
            name=layer["key"], marker_color=_color(i),
            hovertemplate=f"{_text(layer['key'])}<br>%{{x}}: %{{y}}<extra></extra>",
        ))
    fig.update_layout(**_layout(
        f"{', '.join(cfg['series'])} by {cfg['category']}",
        barmode="overlay",
        xaxis=dict(type="category"),
        yaxis=dict(range=list(stack["domain"])),
        legend=dict(orientation="h", x=0, y=1.08),
    ))
    _apply_axis_style(fig)
    return fig


def stacked_area_chart(df: pd.DataFrame, cfg: dict, offset: str = "none"):
    """
    Each layer is a hidden baseline trace (y0) followed by its top edge (y1)
    filled down to it; the wiggle offset gives the streamgraph.
    """
    stack = T.stack_series(df, cfg["category"], cfg["series"], offset=offset)
    shape = "spline" if offset == "wiggle" else "linear"
    cats = stack["categories"]

    fig = go.Figure()
    for i, layer in enumerate(stack["layers"]):
        color = _color(i)
        fig.add_trace(go.Scatter(
            x=cats, y=layer["y0"], mode="lines", line=dict(width=0, shape=shape),
            showlegend=False, hoverinfo="skip", legendgroup=layer["key"],
        ))
        fig.add_trace(go.Scatter(
            x=cats, y=layer["y1"], mode="lines", name=layer["key"],
            legendgroup=layer["key"], fill="tonexty", fillcolor=_rgba(color, 0.8),
            line=dict(color=color, width=0.5, shape=shape),
            customdata=layer["values"],
            hovertemplate=f"{_text(layer['key'])}<br>%{{x}}: %{{customdata}}<extra></extra>",
        ))

    title = "Streamgraph" if offset == "wiggle" else "Stacked areas"
    fig.update_layout(**_layout(
        f"{title}: {', '.join(cfg['series'])}",
        xaxis=dict(type="category"),
        yaxis=dict(range=list(stack["domain"]), visible=offset != "wiggle"),
        legend=dict(orientation="h", x=0, y=1.08),
    ))
    _apply_axis_style(fig)
    return fig


# ── Numeric Points ────────────────────────────────────────────────────────────

def scatter_chart(df: pd.DataFrame, cfg: dict):
    x, y = cfg["x"], cfg["y"]
    pts = T.numeric_points(df, [x, y], "scatter plot")
    fig = go.Figure(go.Scatter(
        x=pts[x], y=pts[y], mode="markers",
        marker=dict(size=10, color=COLORS["primary"], opacity=0.8),
        hovertemplate=f"{_text(x)}: %{{x}}<br>{_text(y)}: %{{y}}<extra></extra>",
    ))
    fig.update_layout(**_layout(f"{y} vs {x}", xaxis=dict(title=x), yaxis=dict(title=y)))
    _apply_axis_style(fig)
    return fig


def bubble_chart(df: pd.DataFrame, cfg: dict):
    """Marker radius follows a square-root scale of the size column."""
    x, y, size = cfg["x"], cfg["y"], cfg["size"]
    pts = T.numeric_points(df, [x, y, size], "bubble chart")
    radii = T.bubble_radii(pts[size])
    fig = go.Figure(go.Scatter(
        x=pts[x], y=pts[y], mode="markers",
        marker=dict(size=[2 * r for r in radii], color=COLORS["primary"], opacity=0.6,
                    line=dict(color=COLORS["card"], width=1)),
        customdata=pts[size],
        hovertemplate=f"{_text(x)}: %{{x}}<br>{_text(y)}: %{{y}}<br>{_text(size)}: %{{customdata}}<extra></extra>",
    ))
    fig.update_layout(**_layout(f"{y} vs {x} (size: {size})", xaxis=dict(title=x), yaxis=dict(title=y)))
    _apply_axis_style(fig)
    return fig


def heatmap_chart(df: pd.DataFrame, cfg: dict):
    grid = T.heatmap_grid(df, cfg["row"], cfg["col"], cfg["value"])
    zmin, zmax = T.color_domain(grid["max"])
    fig = go.Figure(go.Heatmap(
        z=grid["z"], x=grid["cols"], y=grid["rows"],
        colorscale="Viridis", zmin=zmin, zmax=zmax, xgap=1, ygap=1,
        hovertemplate="%{y} / %{x}: %{z}<extra></extra>",
    ))
    fig.update_layout(**_layout(
        f"{cfg['value']} by {cfg['row']} and {cfg['col']}",
        xaxis=dict(type="category"),
        yaxis=dict(type="category", autorange="reversed"),
    ))
    return fig


# ── Distributions ─────────────────────────────────────────────────────────────

def box_chart(df: pd.DataFrame, cfg: dict):
    """Precomputed quartiles per category; whiskers end on the fences, outliers drawn as points."""
    box = T.box_plot(df, cfg["category"], cfg["value"])
    fig = go.Figure()
    for i, g in enumerate(box["groups"]):
        color = _color(i)
        fig.add_trace(go.Box(
            x=[g["key"]], q1=[g["q1"]], median=[g["median"]], q3=[g["q3"]],
            lowerfence=[g["lower_fence"]], upperfence=[g["upper_fence"]],
            name=g["key"], marker_color=color, fillcolor=_rgba(color, 0.5),
            boxpoints=False, showlegend=False,
        ))
        if g["outliers"]:
            fig.add_trace(go.Scatter(
                x=[g["key"]] * len(g["outliers"]), y=g["outliers"], mode="markers",
                marker=dict(color=color, symbol="circle-open", size=8), showlegend=False,
                hovertemplate=f"{_text(g['key'])} outlier: %{{y}}<extra></extra>",
            ))
    fig.update_layout(**_layout(
        f"Distribution of {cfg['value']} by {cfg['category']}",
        xaxis=dict(type="category"),
        yaxis=dict(range=list(box["domain"]), title=cfg["value"]),
    ))
    _apply_axis_style(fig)
    return fig


def violin_chart(df: pd.DataFrame, cfg: dict):
    """Mirrored density outlines, one per category slot, sharing a width scale."""
    violin = T.violin_plot(df, cfg["category"], cfg["value"])
    peak = violin["max_density"] or 1.0
    fig = go.Figure()
    for i, g in enumerate(violin["groups"]):
        ys = [x for x, _ in g["density"]]
        half = [0.45 * d / peak for _, d in g["density"]]
        xs = [i - w for w in half] + [i + w for w in reversed(half)]
        fig.add_trace(go.Scatter(
            x=xs, y=ys + ys[::-1], mode="lines", fill="toself",
            line=dict(color=_color(i), width=1, shape="spline"),
            fillcolor=_rgba(_color(i), 0.6), name=g["key"],
            hoveron="fills", showlegend=False,
        ))
    keys = [g["key"] for g in violin["groups"]]
    fig.update_layout(**_layout(
        f"Density of {cfg['value']} by {cfg['category']}",
        xaxis=dict(tickvals=list(range(len(keys))), ticktext=keys, showgrid=False),
        yaxis=dict(title=cfg["value"]),
    ))
    _apply_axis_style(fig)
    return fig


def parallel_chart(df: pd.DataFrame, cfg: dict):
    pc = T.parallel_coordinates(df, cfg["series"])
    rows = pc["rows"]
    fig = go.Figure(go.Parcoords(
        line=dict(color=COLORS["primary"]),
        dimensions=[dict(label=k, values=rows[k], range=list(pc["domains"][k])) for k in pc["axes"]],
    ))
    fig.update_layout(**_layout(f"{len(rows)} rows across {len(pc['axes'])} axes"))
    return fig


# ── Flows and Graphs ──────────────────────────────────────────────────────────

def chord_chart(df: pd.DataFrame, cfg: dict):
    """Group arcs on the rim and ribbons colored by their larger (source) side."""
    names, matrix = T.chord_matrix(df, cfg["source"], cfg["target"], cfg["value"])
    layout = chord_layout(matrix)
    inner, outer = 0.9, 1.0
    fig = go.Figure()

    for chord in layout["chords"]:
        s, t = chord["source"], chord["target"]
        xs, ys = ribbon_polygon(s, t, inner)
        color = _color(s["index"])
        label = (f"{names[s['index']]} → {names[s['subindex']]}: {T.format_value(s['value'])}")
        if t is not s and t["value"]:
            label += f"<br>{names[t['index']]} → {names[t['subindex']]}: {T.format_value(t['value'])}"
        fig.add_trace(go.Scatter(
            x=xs, y=ys, mode="lines", fill="toself", fillcolor=_rgba(color, 0.67),
            line=dict(color=color, width=0.5), name=label, hoveron="fills", showlegend=False,
        ))

    annotations = []
    for g in layout["groups"]:
        i = g["index"]
        xs, ys = arc_polygon(g["start_angle"], g["end_angle"], inner + 0.01, outer)
        fig.add_trace(go.Scatter(
            x=xs, y=ys, mode="lines", fill="toself", fillcolor=_color(i),
            line=dict(color=_color(i), width=0.5), hoveron="fills", showlegend=False,
            name=f"{names[i]}: {T.format_value(g['value'])}",
        ))
        mid = (g["start_angle"] + g["end_angle"]) / 2
        annotations.append(dict(
            x=1.1 * math.sin(mid), y=1.1 * math.cos(mid), text=names[i], showarrow=False,
            xanchor="left" if math.sin(mid) >= 0 else "right",
        ))

    fig.update_layout(**_layout(f"Flows of {cfg['value']}", annotations=annotations))
    _hide_axes(fig, span=1.35)
    return fig


def sankey_chart(df: pd.DataFrame, cfg: dict):
    graph = T.sankey_graph(df, cfg["source"], cfg["target"], cfg["value"])
    links = graph["links"]
    node_colors = [_color(i) for i in range(len(graph["nodes"]))]
    fig = go.Figure(go.Sankey(
        arrangement="snap",
        node=dict(
            label=graph["nodes"], pad=10, thickness=15, color=node_colors,
            customdata=graph["node_values"],
            hovertemplate="%{label}: %{customdata}<extra></extra>",
        ),
        link=dict(
            source=links["source"], target=links["target"], value=links["value"],
            color=[_rgba(node_colors[s], 0.4) for s in links["source"]],
            hovertemplate="%{source.label} → %{target.label}: %{value}<extra></extra>",
        ),
    ))
    fig.update_layout(**_layout(f"Flows of {cfg['value']}"))
    return fig


def force_graph_chart(df: pd.DataFrame, cfg: dict, seed: int = 42):
    """Spring layout; link width grows with the square root of the link value."""
    graph = T.force_graph(df, cfg["source"], cfg["target"], cfg.get("value"))
    links = graph["links"]
    pos = force_layout(graph["nodes"], zip(links["source"], links["target"]), seed=seed)

    fig = go.Figure()
    mid_x, mid_y, mid_text = [], [], []
    for s, t, v in links.itertuples(index=False):
        (x0, y0), (x1, y1) = pos[s], pos[t]
        fig.add_trace(go.Scatter(
            x=[x0, x1], y=[y0, y1], mode="lines", hoverinfo="skip", showlegend=False,
            line=dict(color=COLORS["link"], width=max(0.5, math.sqrt(max(v, 0.0)))),
        ))
        mid_x.append((x0 + x1) / 2)
        mid_y.append((y0 + y1) / 2)
        mid_text.append(f"{s} → {t}: {T.format_value(v)}")

    fig.add_trace(go.Scatter(
        x=mid_x, y=mid_y, mode="markers", text=mid_text, showlegend=False,
        marker=dict(size=8, opacity=0), hovertemplate="%{text}<extra></extra>",
    ))
    nodes = graph["nodes"]
    fig.add_trace(go.Scatter(
        x=[pos[n][0] for n in nodes], y=[pos[n][1] for n in nodes],
        mode="markers+text", text=nodes, textposition="top center", showlegend=False,
        marker=dict(size=14, color=[_color(i) for i in range(len(nodes))],
                    line=dict(color=COLORS["card"], width=1.5)),
        hovertemplate="%{text}<extra></extra>",
    ))
    fig.update_layout(**_layout(f"{cfg['source']} → {cfg['target']} network"))
    _hide_axes(fig)
    return fig


# ── Hierarchies ───────────────────────────────────────────────────────────────

def packed_circles_chart(df: pd.DataFrame, cfg: dict):
    circles = T.packed_circles(df, cfg["category"], cfg["value"])
    fig = go.Figure()
    for i, c in enumerate(circles.itertuples(index=False)):
        fig.add_shape(
            type="circle", x0=c.x - c.r, x1=c.x + c.r, y0=c.y - c.r, y1=c.y + c.r,
            fillcolor=_rgba(_color(i), 0.7), line=dict(color=_color(i)),
        )
    fig.add_trace(go.Scatter(
        x=circles["x"], y=circles["y"], mode="text", text=circles["name"],
        customdata=circles["value"], showlegend=False,
        hovertemplate=_hover(cfg, "%{text}", "%{customdata}"),
    ))
    fig.update_layout(**_layout(f"{cfg['value']} by {cfg['category']}"))
    _hide_axes(fig, span=None)
    fig.update_xaxes(range=[0, 1])
    fig.update_yaxes(range=[0, 1])
    return fig


def dendrogram_chart(df: pd.DataFrame, cfg: dict):
    """Root on the left, leaves aligned on the right, elbow links between levels."""
    dendro = T.dendrogram(df, cfg["parent"], cfg["child"])
    tree, pos = dendro["tree"], dendro["positions"]

    link_x, link_y = [], []
    for parent, child in tree.edges():
        (py, px_), (cy, cx) = pos[parent], pos[child]
        mid = (px_ + cx) / 2
        link_x += [px_, mid, mid, cx, None]
        link_y += [py, py, cy, cy, None]
    fig = go.Figure(go.Scatter(
        x=link_x, y=link_y, mode="lines", hoverinfo="skip", showlegend=False,
        line=dict(color=COLORS["link"], width=1.5),
    ))

    nodes = list(pos)
    leaf = [tree.out_degree(n) == 0 for n in nodes]
    fig.add_trace(go.Scatter(
        x=[pos[n][1] for n in nodes], y=[pos[n][0] for n in nodes],
        mode="markers+text", text=nodes, showlegend=False,
        textposition=["middle right" if is_leaf else "top left" for is_leaf in leaf],
        marker=dict(size=8, color=[COLORS["primary"] if is_leaf else COLORS["gauge_bg"] for is_leaf in leaf]),
        hovertemplate="%{text}<extra></extra>",
    ))
    fig.update_layout(**_layout(
        f"{cfg['child']} under {cfg['parent']}",
        xaxis=dict(visible=False, range=[-0.05, 1.25]),
        yaxis=dict(visible=False, autorange="reversed"),
    ))
    fig.update_layout(height=max(DEFAULT_HEIGHT, 22 * sum(leaf)))
    return fig


# ── Calendar ──────────────────────────────────────────────────────────────────

def calendar_chart(df: pd.DataFrame, cfg: dict):
    """One weekday x week grid per year, months marked on the x axis."""
    cal = T.calendar_cells(df, cfg["date"], cfg["value"])
    years = cal["years"]
    zmin, zmax = T.color_domain(cal["max"])
    fig = make_subplots(
        rows=len(years), cols=1, subplot_titles=[str(y) for y in years],
        vertical_spacing=min(0.1, 0.5 / len(years)),
    )
    for row, year in enumerate(years, start=1):
        grid = T.calendar_year_grid(cal["cells"], year)
        fig.add_trace(go.Heatmap(
            z=grid["z"], customdata=grid["labels"],
            x=list(range(T.CALENDAR_WEEKS)), y=WEEKDAYS,
            colorscale="Greens", zmin=zmin, zmax=zmax, xgap=2, ygap=2,
            showscale=row == 1,
            hovertemplate="%{customdata}: %{z}<extra></extra>",
        ), row=row, col=1)
        months = T.month_start_weeks(year)
        fig.update_xaxes(tickvals=[w for _, w in months], ticktext=[m for m, _ in months],
                         showgrid=False, row=row, col=1)
        fig.update_yaxes(autorange="reversed", showgrid=False, row=row, col=1)

    fig.update_layout(**_layout(f"Daily {cfg['value']}"))
    fig.update_layout(height=max(DEFAULT_HEIGHT, 200 * len(years)))
    return fig


# ── Helpers ───────────────────────────────────────────────────────────────────

def _apply_axis_style(fig):
    """Grid and tick colors on every cartesian axis in the figure."""
    fig.update_xaxes(gridcolor=COLORS["grid"], color=COLORS["text"])
    fig.update_yaxes(gridcolor=COLORS["grid"], color=COLORS["text"])


def _hide_axes(fig, span=1.1):
    """Equal-aspect canvas without axes, optionally fixed to [-span, span]."""
    fig.update_xaxes(visible=False, range=[-span, span] if span else None)
    fig.update_yaxes(visible=False, range=[-span, span] if span else None,
                     scaleanchor="x", scaleratio=1)
