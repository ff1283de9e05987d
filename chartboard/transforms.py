"""
Transforms: flat rows -> the data each chart draws.

Every function takes the parsed DataFrame plus the selected column names,
coerces numeric columns (non-numeric cells become NaN), drops rows the chart
cannot use and returns plain lists / DataFrames / dicts for the figure
builders in visualizations.py.  When nothing drawable remains they raise
ChartDataError with a message meant for the user.

Category labels are strings: 2024.0 is shown as "2024", missing as "".
Duplicate categories are summed in first-appearance order.
"""
import math
from datetime import date
from typing import Optional

import numpy as np
import pandas as pd

from .chart_registry import ChartDataError, config_error_message
from .hierarchy import cluster_layout, pack_circles, stratify_rows
from .logger import get_logger
from .stats import box_stats, epanechnikov, kernel_density, nice_ticks

logger = get_logger(__name__)

VIOLIN_BANDWIDTH = 9
VIOLIN_TICKS = 40
BUBBLE_RADIUS = (2.0, 20.0)
RADIAL_INNER = 0.25
GAUGE_HEADROOM = 1.2
GAUGE_DEFAULT_MAX = 100.0
DATE_FORMAT = "%Y-%m-%d"
CALENDAR_WEEKS = 54   # %U runs 0..53


# ── Helpers ───────────────────────────────────────────────────────────────────

def as_label(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (float, np.floating)):
        if math.isnan(value):
            return ""
        if float(value).is_integer():
            return str(int(value))
    return str(value).strip()


def numeric(series: pd.Series) -> pd.Series:
    """Float version of a column; text and infinities become NaN."""
    return pd.to_numeric(series, errors="coerce").astype(float).replace([np.inf, -np.inf], np.nan)


def format_value(value) -> str:
    if isinstance(value, (int, np.integer)):
        return f"{int(value):,}"
    if isinstance(value, (float, np.floating)):
        if math.isnan(value):
            return "n/a"
        return f"{int(value):,}" if float(value).is_integer() else f"{value:,.2f}"
    return "n/a" if value is None else str(value)


def zero_domain(values) -> tuple[float, float]:
    """[0, max] for positive data; stretches below zero when values are negative."""
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return 0.0, 0.0
    return min(0.0, float(np.nanmin(arr))), max(0.0, float(np.nanmax(arr)))


def color_domain(peak: float) -> tuple[float, float]:
    """[0, peak] for sequential color scales; values below zero take the lowest color."""
    return 0.0, peak if peak > 0 else 1.0


# ── Category / value charts ───────────────────────────────────────────────────

def category_values(df: pd.DataFrame, category: str, value: str) -> pd.DataFrame:
    """
    Columns  name, value  with one row per distinct category, summed,
    in first-appearance order.  Rows with a missing category or a
    non-numeric value are dropped.
    """
    frame = pd.DataFrame({"name": df[category].map(as_label), "value": numeric(df[value])})
    frame = frame[(frame["name"] != "") & frame["value"].notna()]
    if frame.empty:
        raise ChartDataError(f"Column '{value}' has no numeric values to plot.")
    return frame.groupby("name", sort=False, as_index=False)["value"].sum()


def positive_values(df: pd.DataFrame, category: str, value: str, chart: str) -> pd.DataFrame:
    """category_values restricted to strictly positive totals (area-encoded charts)."""
    agg = category_values(df, category, value)
    dropped = int((agg["value"] <= 0).sum())
    if dropped:
        logger.info("%s: dropping %d non-positive categories", chart, dropped)
    agg = agg[agg["value"] > 0].reset_index(drop=True)
    if agg.empty:
        raise ChartDataError(f"The {chart} needs positive values in column '{value}'.")
    return agg


def pie_slices(df: pd.DataFrame, category: str, value: str) -> pd.DataFrame:
    """Slices in input order with their share of the total (percent, 0-100)."""
    agg = category_values(df, category, value)
    if (agg["value"] < 0).any():
        raise ChartDataError("Pie and donut slices need non-negative values.")
    total = float(agg["value"].sum())
    if total <= 0:
        raise ChartDataError("The values add up to zero; there is nothing to divide into slices.")
    agg["percent"] = agg["value"] / total * 100
    return agg


def radial_bars(df: pd.DataFrame, category: str, value: str,
                inner: float = RADIAL_INNER, outer: float = 1.0) -> pd.DataFrame:
    """
    Bars sorted by ascending value around a full circle.

    theta is the band center in degrees (clockwise from twelve o'clock),
    width the band size; radius grows with the square root of the value so
    bar area, not length, tracks the data.
    """
    agg = category_values(df, category, value).sort_values("value", kind="stable").reset_index(drop=True)
    n = len(agg)
    step = 360.0 / n
    vmax = float(agg["value"].max())
    share = agg["value"].clip(lower=0) / vmax if vmax > 0 else agg["value"] * 0
    agg["radius"] = np.sqrt(inner ** 2 + (outer ** 2 - inner ** 2) * share)
    agg["theta"] = (np.arange(n) + 0.5) * step
    agg["width"] = step
    return agg


def gauge(df: pd.DataFrame, value: str) -> dict:
    """First row's value against 120% of the column maximum (100 when that is not positive)."""
    values = numeric(df[value])
    if values.empty or pd.isna(values.iloc[0]):
        raise ChartDataError(config_error_message("gauge-chart"))
    peak = float(values.max()) * GAUGE_HEADROOM
    return {
        "value": float(values.iloc[0]),
        "max": peak if peak > 0 else GAUGE_DEFAULT_MAX,
        "label": value,
    }


def metric_cards(df: pd.DataFrame, category: str, value: str) -> list[dict]:
    """One card per row: title from the category column, figure from the value column."""
    return [
        {"title": as_label(name), "value": format_value(v), "caption": value}
        for name, v in zip(df[category], df[value])
    ]


# ── Stacking ──────────────────────────────────────────────────────────────────

def inside_out_order(values: np.ndarray) -> list[int]:
    """
    Series order for streamgraphs: sorted by where each series peaks, then
    dealt alternately above and below so the heaviest sit in the middle.
    """
    n = values.shape[0]
    peaks = values.argmax(axis=1)
    sums = values.sum(axis=1)
    appearance = sorted(range(n), key=lambda i: peaks[i])
    top = bottom = 0.0
    tops, bottoms = [], []
    for i in appearance:
        if top < bottom:
            top += sums[i]
            tops.append(i)
        else:
            bottom += sums[i]
            bottoms.append(i)
    return bottoms[::-1] + tops


def wiggle_baseline(values: np.ndarray, order: list[int]) -> np.ndarray:
    """Baseline that minimises the weighted slope of the stacked layers."""
    m = values.shape[1]
    baseline = np.zeros(m)
    y = 0.0
    for j in range(1, m):
        s1 = s2 = 0.0
        for pos, i in enumerate(order):
            s3 = (values[i, j] - values[i, j - 1]) / 2
            for k in order[:pos]:
                s3 += values[k, j] - values[k, j - 1]
            s1 += values[i, j]
            s2 += s3 * values[i, j]
        baseline[j - 1] = y
        if s1:
            y -= s2 / s1
    if m:
        baseline[m - 1] = y
    return baseline


def stack_series(df: pd.DataFrame, category: str, series: list[str], offset: str = "none") -> dict:
    """
    Stack several numeric columns per category.

    offset="none": series in the given order on a zero baseline.
    offset="wiggle": inside-out order on a wiggle baseline (streamgraph).
    Non-numeric cells count as zero.  Returns categories, layers in drawing
    order (key, values, y0, y1) and the value domain.
    """
    keys = list(dict.fromkeys(series))
    raw = pd.DataFrame({k: numeric(df[k]) for k in keys})
    if raw.isna().all().all():
        raise ChartDataError("The series columns hold no numeric values.")
    names = df[category].map(as_label)
    raw = raw.fillna(0.0)[names != ""]
    if raw.empty:
        raise ChartDataError(f"Column '{category}' has no category labels.")
    grouped = raw.groupby(names[names != ""], sort=False)[keys].sum()

    values = grouped.to_numpy(dtype=float).T   # series x categories
    if offset == "wiggle":
        order = inside_out_order(values)
        base = wiggle_baseline(values, order)
    else:
        order = list(range(len(keys)))
        base = np.zeros(values.shape[1])

    layers = []
    for i in order:
        y0 = base.copy()
        base = base + values[i]
        layers.append({"key": keys[i], "values": values[i].tolist(),
                       "y0": y0.tolist(), "y1": base.tolist()})

    tops = [max(layer["y1"]) for layer in layers]
    if offset == "wiggle":
        lo = min(min(layer["y0"]) for layer in layers)
        domain = (lo, max(tops))
    else:
        domain = (0.0, max(0.0, max(tops)))
    return {"categories": list(grouped.index), "layers": layers, "domain": domain}


# ── Numeric points ────────────────────────────────────────────────────────────

def numeric_points(df: pd.DataFrame, columns: list[str], chart: str = "scatter plot") -> pd.DataFrame:
    """Rows where every selected column is numeric."""
    cols = list(dict.fromkeys(columns))
    frame = pd.DataFrame({c: numeric(df[c]) for c in cols}).dropna()
    if frame.empty:
        raise ChartDataError(f"Not enough numeric data for the {chart}.")
    return frame


def bubble_radii(sizes, radius_range: tuple[float, float] = BUBBLE_RADIUS) -> list[float]:
    """Square-root scale from [0, max size] onto the radius range."""
    rmin, rmax = radius_range
    arr = np.asarray(list(sizes), dtype=float)
    smax = float(arr.max()) if arr.size else 0.0
    if smax <= 0:
        return [rmin] * arr.size
    return (rmin + (rmax - rmin) * np.sqrt(np.clip(arr, 0, None) / smax)).tolist()


# ── Grids ─────────────────────────────────────────────────────────────────────

def heatmap_grid(df: pd.DataFrame, row: str, col: str, value: str) -> dict:
    """
    Row and column categories in first-appearance order and a z matrix
    (None where no numeric value was given).  A repeated cell keeps the
    last value.
    """
    frame = pd.DataFrame({
        "row": df[row].map(as_label),
        "col": df[col].map(as_label),
        "value": numeric(df[value]),
    })
    frame = frame[(frame["row"] != "") & (frame["col"] != "")]
    rows = list(dict.fromkeys(frame["row"]))
    cols = list(dict.fromkeys(frame["col"]))

    cells = frame.dropna(subset=["value"]).drop_duplicates(["row", "col"], keep="last")
    if cells.empty:
        raise ChartDataError(config_error_message("heatmap"))

    row_idx = {r: i for i, r in enumerate(rows)}
    col_idx = {c: i for i, c in enumerate(cols)}
    z: list[list[Optional[float]]] = [[None] * len(cols) for _ in rows]
    for r, c, v in cells.itertuples(index=False):
        z[row_idx[r]][col_idx[c]] = float(v)
    return {"rows": rows, "cols": cols, "z": z, "max": float(cells["value"].max())}


# ── Distributions ─────────────────────────────────────────────────────────────

def _grouped_numbers(df: pd.DataFrame, category: str, value: str) -> pd.DataFrame:
    frame = pd.DataFrame({"name": df[category].map(as_label), "value": numeric(df[value])})
    frame = frame[(frame["name"] != "") & frame["value"].notna()]
    if frame.empty:
        raise ChartDataError(f"Column '{value}' has no numeric values to plot.")
    return frame


def box_plot(df: pd.DataFrame, category: str, value: str) -> dict:
    """
    box_stats per category in first-appearance order.  The domain spans the
    fences and any outliers beyond them.
    """
    frame = _grouped_numbers(df, category, value)
    groups = []
    for key, values in frame.groupby("name", sort=False)["value"]:
        stats = box_stats(values.to_numpy())
        stats["key"] = key
        groups.append(stats)

    lo = min(min(g["lower_fence"], g["values"][0]) for g in groups)
    hi = max(max(g["upper_fence"], g["values"][-1]) for g in groups)
    return {"groups": groups, "domain": (lo, hi)}


def violin_plot(df: pd.DataFrame, category: str, value: str,
                bandwidth: float = VIOLIN_BANDWIDTH, ticks: int = VIOLIN_TICKS) -> dict:
    """
    Epanechnikov kernel density per category, evaluated on round-number
    ticks spanning the overall value range.  max_density is shared so every
    violin uses the same width scale.
    """
    frame = _grouped_numbers(df, category, value)
    lo, hi = float(frame["value"].min()), float(frame["value"].max())
    grid = nice_ticks(lo, hi, ticks) or [lo]
    kernel = epanechnikov(bandwidth)

    groups = [
        {"key": key, "density": kernel_density(values.to_numpy(), grid, kernel)}
        for key, values in frame.groupby("name", sort=False)["value"]
    ]
    max_density = max(d for g in groups for _, d in g["density"])
    return {"groups": groups, "grid": grid, "domain": (lo, hi), "max_density": max_density}


def parallel_coordinates(df: pd.DataFrame, series: list[str]) -> dict:
    """
    Numeric axes (a column qualifies when its first row is numeric), the
    rows complete on every axis, and each axis's extent.
    """
    if df.empty:
        raise ChartDataError(config_error_message("parallel-coordinates"))
    first = df.iloc[0]
    axes = [k for k in dict.fromkeys(series) if pd.notna(pd.to_numeric(first[k], errors="coerce"))]
    if len(axes) < 2:
        raise ChartDataError("Not enough numeric columns for parallel coordinates.")

    frame = pd.DataFrame({k: numeric(df[k]) for k in axes}).dropna()
    if frame.empty:
        raise ChartDataError("Not enough numeric columns for parallel coordinates.")
    domains = {k: (float(frame[k].min()), float(frame[k].max())) for k in axes}
    return {"axes": axes, "rows": frame, "domains": domains}


# ── Flows and graphs ──────────────────────────────────────────────────────────

def _flow_frame(df: pd.DataFrame, source: str, target: str, value: Optional[str]) -> pd.DataFrame:
    return pd.DataFrame({
        "source": df[source].map(as_label),
        "target": df[target].map(as_label),
        "value": numeric(df[value]) if value else pd.Series(1.0, index=df.index),
    })


def _appearance(frame: pd.DataFrame) -> list[str]:
    return list(dict.fromkeys(
        name for pair in zip(frame["source"], frame["target"]) for name in pair if name
    ))


def chord_matrix(df: pd.DataFrame, source: str, target: str, value: str) -> tuple[list[str], np.ndarray]:
    """
    Entity names (sources and targets, first-appearance order) and the
    square matrix of summed flows names[i] -> names[j].
    """
    frame = _flow_frame(df, source, target, value)
    names = _appearance(frame)
    index = {name: i for i, name in enumerate(names)}
    matrix = np.zeros((len(names), len(names)))

    valid = frame[(frame["source"] != "") & (frame["target"] != "") & frame["value"].notna()]
    if (valid["value"] < 0).any():
        raise ChartDataError("Chord diagram values must be non-negative.")
    for s, t, v in valid.itertuples(index=False):
        matrix[index[s], index[t]] += v

    if not matrix.sum() > 0:
        raise ChartDataError("No numeric flow values to draw.")
    return names, matrix


def sankey_graph(df: pd.DataFrame, source: str, target: str, value: str) -> dict:
    """
    Node names, links as index pairs with positive values, and per-node
    throughput (the larger of inflow and outflow).  Self-links are dropped.
    """
    frame = _flow_frame(df, source, target, value)
    names = _appearance(frame)
    links = frame[(frame["source"] != "") & (frame["target"] != "") & (frame["value"] > 0)]

    loops = links["source"] == links["target"]
    if loops.any():
        logger.info("Sankey: dropping %d self-links", int(loops.sum()))
        links = links[~loops]
    if links.empty:
        raise ChartDataError("No numeric flow values to draw.")

    index = {name: i for i, name in enumerate(names)}
    link_frame = pd.DataFrame({
        "source": links["source"].map(index).astype(int).to_numpy(),
        "target": links["target"].map(index).astype(int).to_numpy(),
        "value": links["value"].to_numpy(),
    })
    inflow = link_frame.groupby("target")["value"].sum()
    outflow = link_frame.groupby("source")["value"].sum()
    node_values = [max(inflow.get(i, 0.0), outflow.get(i, 0.0)) for i in range(len(names))]
    return {"nodes": names, "links": link_frame, "node_values": node_values}


def force_graph(df: pd.DataFrame, source: str, target: str, value: Optional[str] = None) -> dict:
    """Links (value defaults to 1 when no value column is chosen) and their nodes."""
    frame = _flow_frame(df, source, target, value)
    frame = frame[(frame["source"] != "") & (frame["target"] != "") & frame["value"].notna()]
    if frame.empty:
        raise ChartDataError("No links to draw for the force-directed graph.")
    return {"nodes": _appearance(frame), "links": frame.reset_index(drop=True)}


# ── Hierarchies ───────────────────────────────────────────────────────────────

def packed_circles(df: pd.DataFrame, category: str, value: str) -> pd.DataFrame:
    """positive_values plus circle centers and radii in the unit square."""
    agg = positive_values(df, category, value, "packed circles")
    circles = pack_circles(agg["value"].tolist())
    agg["x"] = [c[0] for c in circles]
    agg["y"] = [c[1] for c in circles]
    agg["r"] = [c[2] for c in circles]
    return agg


def dendrogram(df: pd.DataFrame, parent: str, child: str) -> dict:
    """Stratified tree plus cluster positions (breadth, depth) per node."""
    if df.empty:
        raise ChartDataError(config_error_message("dendrogram"))
    tree = stratify_rows(df, parent, child)
    return {"tree": tree, "root": tree.graph["root"], "positions": cluster_layout(tree)}


# ── Calendar ──────────────────────────────────────────────────────────────────

def calendar_cells(df: pd.DataFrame, date_col: str, value: str) -> dict:
    """
    Valid (date, value) pairs with their year, week of year (Sunday-start,
    0-53) and weekday (Sunday = 0).  Years keep first-appearance order; a
    repeated date keeps its last value.
    """
    dates = pd.to_datetime(df[date_col].map(as_label), format=DATE_FORMAT, errors="coerce")
    frame = pd.DataFrame({"date": dates, "value": numeric(df[value])}).dropna()
    if frame.empty:
        raise ChartDataError("No valid date/value pairs for the calendar heatmap.")

    frame = frame.drop_duplicates("date", keep="last").reset_index(drop=True)
    frame["year"] = frame["date"].dt.year
    frame["week"] = frame["date"].dt.strftime("%U").astype(int)
    frame["weekday"] = (frame["date"].dt.dayofweek + 1) % 7
    return {
        "cells": frame,
        "years": list(dict.fromkeys(frame["year"].tolist())),
        "max": float(frame["value"].max()),
    }


def calendar_year_grid(cells: pd.DataFrame, year: int) -> dict:
    """7 x 54 value grid (weekday x week) and matching date labels for one year."""
    z: list[list[Optional[float]]] = [[None] * CALENDAR_WEEKS for _ in range(7)]
    labels: list[list[str]] = [[""] * CALENDAR_WEEKS for _ in range(7)]
    for row in cells[cells["year"] == year].itertuples(index=False):
        z[row.weekday][row.week] = float(row.value)
        labels[row.weekday][row.week] = row.date.strftime(DATE_FORMAT)
    return {"z": z, "labels": labels}


def month_start_weeks(year: int) -> list[tuple[str, int]]:
    """(abbreviated month name, week of year of its first day) for all twelve months."""
    return [(date(year, m, 1).strftime("%b"), int(date(year, m, 1).strftime("%U"))) for m in range(1, 13)]
