"""
Graph Layout: geometry for the relationship charts.

Angles follow the clock: 0 at twelve o'clock, increasing clockwise, so a
point at angle a and radius r sits at (r sin a, r cos a).
"""
import math

import networkx as nx
import numpy as np

TAU = 2 * math.pi


# ── Chord ─────────────────────────────────────────────────────────────────────

def chord_layout(matrix, pad_angle: float = 0.05) -> dict:
    """
    Groups and chords for a square flow matrix.

    Each group i gets an arc proportional to its row total, arcs separated by
    pad_angle.  Within a group, subgroups (flows i -> j) are ordered by value,
    largest first.  A chord joins subgroup i -> j with subgroup j -> i; the
    larger of the two is the chord's source.
    """
    m = np.asarray(matrix, dtype=float)
    n = m.shape[0]
    group_sums = m.sum(axis=1)
    total = float(group_sums.sum())

    k = max(0.0, TAU - pad_angle * n) / total if total > 0 else 0.0
    dx = pad_angle if k else TAU / n if n else 0.0

    groups, subgroups = [], {}
    x = 0.0
    for i in range(n):
        x0 = x
        for j in sorted(range(n), key=lambda col: -m[i, col]):
            value = float(m[i, j])
            start = x
            x += value * k
            subgroups[(i, j)] = {
                "index": i, "subindex": j,
                "start_angle": start, "end_angle": x, "value": value,
            }
        groups.append({"index": i, "start_angle": x0, "end_angle": x, "value": float(group_sums[i])})
        x += dx

    chords = []
    for i in range(n):
        for j in range(i, n):
            source, target = subgroups[(i, j)], subgroups[(j, i)]
            if source["value"] or target["value"]:
                if source["value"] < target["value"]:
                    source, target = target, source
                chords.append({"source": source, "target": target})
    return {"groups": groups, "chords": chords}


def _arc_points(a0: float, a1: float, radius: float, steps: int) -> list[tuple[float, float]]:
    count = max(2, int(steps * abs(a1 - a0) / TAU) + 2)
    return [(radius * math.sin(a), radius * math.cos(a)) for a in np.linspace(a0, a1, count)]


def _quad_points(p0, p2, steps: int = 16) -> list[tuple[float, float]]:
    """Quadratic Bezier from p0 to p2 with the control point at the origin."""
    return [
        ((1 - t) ** 2 * p0[0] + t * t * p2[0], (1 - t) ** 2 * p0[1] + t * t * p2[1])
        for t in np.linspace(0, 1, steps)
    ]


def arc_polygon(a0: float, a1: float, inner: float, outer: float,
                steps: int = 120) -> tuple[list[float], list[float]]:
    """Closed outline of an annular sector, as x and y lists."""
    pts = _arc_points(a0, a1, outer, steps) + _arc_points(a1, a0, inner, steps)
    pts.append(pts[0])
    return [p[0] for p in pts], [p[1] for p in pts]


def ribbon_polygon(source: dict, target: dict, radius: float,
                   steps: int = 120) -> tuple[list[float], list[float]]:
    """Closed outline of a ribbon joining two subgroups through the center."""
    s = _arc_points(source["start_angle"], source["end_angle"], radius, steps)
    t = _arc_points(target["start_angle"], target["end_angle"], radius, steps)
    pts = s + _quad_points(s[-1], t[0]) + t + _quad_points(t[-1], s[0])
    return [p[0] for p in pts], [p[1] for p in pts]


# ── Force-directed ────────────────────────────────────────────────────────────

def force_layout(nodes, links, seed: int = 42) -> dict:
    """
    Node -> (x, y) in roughly [-1, 1], from a spring (Fruchterman-Reingold)
    simulation.  Every link pulls with the same strength; link values only
    drive the drawing, not the layout.
    """
    graph = nx.Graph()
    graph.add_nodes_from(nodes)
    graph.add_edges_from((s, t) for s, t in links)
    if graph.number_of_nodes() == 0:
        return {}
    positions = nx.spring_layout(graph, seed=seed)
    return {node: (float(p[0]), float(p[1])) for node, p in positions.items()}
