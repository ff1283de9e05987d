"""
Hierarchy: tree structures derived from flat rows.

  stratify_rows    parent/child rows -> single-rooted networkx.DiGraph
  cluster_layout   dendrogram positions (leaves aligned at the deepest level)
  pack_circles     sibling circle packing for the packed-circles chart

Tree shape for stratify_rows:

  ""  → A            A is a root (empty parent)
  A   → B            B hangs under A
  X   → C            X never appears as a child, so it becomes a root too
  ──────────────
  two roots → both re-parented under a synthetic "Dendrogram_Root"
"""
import math
import random
from typing import Optional

import networkx as nx
import pandas as pd

from .chart_registry import ChartDataError
from .logger import get_logger

logger = get_logger(__name__)

SYNTHETIC_ROOT = "Dendrogram_Root"


class HierarchyError(ChartDataError):
    """Parent/child rows do not form a tree."""


# ── Stratify ──────────────────────────────────────────────────────────────────

def node_id(value) -> str:
    """Canonical string id of a cell; missing cells become the empty string."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _synthetic_root_id(taken) -> str:
    candidate, counter = SYNTHETIC_ROOT, 0
    while candidate in taken:
        counter += 1
        candidate = f"{SYNTHETIC_ROOT}_{counter}"
    return candidate


def resolve_parents(pairs) -> dict[str, Optional[str]]:
    """
    Map each node id to its parent id (None for roots), in first-seen order.

    A child keeps the first parent it was given, except that a later non-empty
    parent replaces a missing one.  Parents that never show up as children are
    added as roots.
    """
    parents: dict[str, Optional[str]] = {}
    for parent_raw, child_raw in pairs:
        child = node_id(child_raw)
        parent = node_id(parent_raw)
        if not child:
            continue

        if child not in parents:
            parents[child] = parent or None
        elif parents[child] is None and parent:
            parents[child] = parent

        if parent and parent not in parents:
            parents[parent] = None
    return parents


def stratify_rows(df: pd.DataFrame, parent_col: str, child_col: str) -> nx.DiGraph:
    """
    Build a tree (edges parent -> child) from two columns.

    Several roots, or none at all, are tied together under a synthetic root;
    with no root every node hangs directly under it.  The root id is stored
    in  tree.graph["root"].  Raises HierarchyError for cycles or nodes that
    cannot be reached from the root.
    """
    parents = resolve_parents(zip(df[parent_col], df[child_col]))
    if not parents:
        raise HierarchyError("Could not build the dendrogram: no node ids in the child column.")

    roots = [n for n, p in parents.items() if p is None]
    if len(roots) != 1:
        root = _synthetic_root_id(parents)
        logger.info("Dendrogram has %d roots; adding synthetic root %s", len(roots), root)
        if roots:
            parents = {n: (root if p is None else p) for n, p in parents.items()}
        else:
            parents = {n: root for n in parents}
        parents = {root: None, **parents}
    else:
        root = roots[0]

    tree = nx.DiGraph(root=root)
    tree.add_nodes_from(parents)
    tree.add_edges_from((p, n) for n, p in parents.items() if p is not None)

    if not nx.is_arborescence(tree):
        try:
            cycle = nx.find_cycle(tree, source=None)
            detail = "cycle between " + " -> ".join(edge[0] for edge in cycle)
        except nx.NetworkXNoCycle:
            detail = "some nodes are not connected to the root"
        raise HierarchyError(
            f"Could not build the dendrogram: {detail}. Check that the parent/child "
            f"relations are valid and that there is a single root with an empty parent."
        )
    return tree


# ── Cluster layout ────────────────────────────────────────────────────────────

def _separation(tree: nx.DiGraph, a: str, b: str) -> float:
    pa = next(iter(tree.predecessors(a)), None)
    pb = next(iter(tree.predecessors(b)), None)
    return 1.0 if pa == pb else 2.0


def cluster_layout(tree: nx.DiGraph) -> dict[str, tuple[float, float]]:
    """
    Node -> (breadth, depth), both in [0, 1].

    Leaves are spread evenly along the breadth axis (siblings one step apart,
    cousins two) and all sit at depth 1; every parent is centered over its
    children one level above the deepest of them.  The root is at depth 0.
    """
    root = tree.graph["root"]
    breadth: dict[str, float] = {}
    height: dict[str, int] = {}
    leaves: list[str] = []
    x = 0.0

    for node in nx.dfs_postorder_nodes(tree, root):
        children = list(tree.successors(node))
        if children:
            breadth[node] = sum(breadth[c] for c in children) / len(children)
            height[node] = 1 + max(height[c] for c in children)
        else:
            if leaves:
                x += _separation(tree, node, leaves[-1])
            breadth[node] = x
            height[node] = 0
            leaves.append(node)

    left, right = leaves[0], leaves[-1]
    x0 = breadth[left] - _separation(tree, left, right) / 2
    x1 = breadth[right] + _separation(tree, right, left) / 2
    span = x1 - x0
    root_height = height[root]

    return {
        node: (
            (breadth[node] - x0) / span,
            (1 - height[node] / root_height) if root_height else 1.0,
        )
        for node in breadth
    }


# ── Circle packing ────────────────────────────────────────────────────────────

def _place(b: list, a: list, c: list) -> None:
    """Move circle c so it touches both a and b."""
    dx, dy = b[0] - a[0], b[1] - a[1]
    d2 = dx * dx + dy * dy
    if d2:
        a2 = (a[2] + c[2]) ** 2
        b2 = (b[2] + c[2]) ** 2
        if a2 > b2:
            x = (d2 + b2 - a2) / (2 * d2)
            y = math.sqrt(max(0.0, b2 / d2 - x * x))
            c[0] = b[0] - x * dx - y * dy
            c[1] = b[1] - x * dy + y * dx
        else:
            x = (d2 + a2 - b2) / (2 * d2)
            y = math.sqrt(max(0.0, a2 / d2 - x * x))
            c[0] = a[0] + x * dx - y * dy
            c[1] = a[1] + x * dy + y * dx
    else:
        c[0] = a[0] + c[2]
        c[1] = a[1]


def _intersects(a: list, b: list) -> bool:
    dr = a[2] + b[2] - 1e-6
    dx, dy = b[0] - a[0], b[1] - a[1]
    return dr > 0 and dr * dr > dx * dx + dy * dy


def _score(a: list, b: list) -> float:
    ab = a[2] + b[2]
    dx = (a[0] * b[2] + b[0] * a[2]) / ab
    dy = (a[1] * b[2] + b[1] * a[2]) / ab
    return dx * dx + dy * dy


def pack_siblings(radii) -> list[list[float]]:
    """
    Front-chain packing: each circle is placed tangent to two neighbours on
    the current front, closest to the origin without overlapping.
    Returns [x, y, r] per input radius, centered on the enclosing circle.
    """
    circles = [[0.0, 0.0, float(r)] for r in radii]
    n = len(circles)
    if n == 0:
        return circles
    if n == 1:
        return circles

    circles[0][0] = -circles[1][2]
    circles[1][0] = circles[0][2]
    if n > 2:
        _place(circles[1], circles[0], circles[2])

        # front chain as a circular doubly linked list over circle indices
        nxt = {0: 1, 1: 2, 2: 0}
        prv = {0: 2, 1: 0, 2: 1}
        a, b = 0, 1
        i = 3
        while i < n:
            c = i
            _place(circles[a], circles[b], circles[c])
            j, k = nxt[b], prv[a]
            sj, sk = circles[b][2], circles[a][2]
            retry = False
            while True:
                if sj <= sk:
                    if _intersects(circles[j], circles[c]):
                        b = j
                        nxt[a], prv[b] = b, a
                        retry = True
                        break
                    sj += circles[j][2]
                    j = nxt[j]
                else:
                    if _intersects(circles[k], circles[c]):
                        a = k
                        nxt[a], prv[b] = b, a
                        retry = True
                        break
                    sk += circles[k][2]
                    k = prv[k]
                if j == nxt[k]:
                    break
            if retry:
                continue

            prv[c], nxt[c] = a, b
            nxt[a] = c
            prv[b] = c
            b = c

            best, best_score = a, _score(circles[a], circles[nxt[a]])
            node = nxt[c]
            while node != b:
                s = _score(circles[node], circles[nxt[node]])
                if s < best_score:
                    best, best_score = node, s
                node = nxt[node]
            a = best
            b = nxt[a]
            i += 1

    cx, cy, _ = enclose(circles)
    for circle in circles:
        circle[0] -= cx
        circle[1] -= cy
    return circles


def _encloses_weak(a, b) -> bool:
    dr = a[2] - b[2] + max(a[2], b[2], 1.0) * 1e-9
    dx, dy = b[0] - a[0], b[1] - a[1]
    return dr > 0 and dr * dr > dx * dx + dy * dy


def _encloses_not(a, b) -> bool:
    dr = a[2] - b[2]
    dx, dy = b[0] - a[0], b[1] - a[1]
    return dr < 0 or dr * dr < dx * dx + dy * dy


def _encloses_all(a, basis) -> bool:
    return all(_encloses_weak(a, b) for b in basis)


def _circle_through_two(a, b) -> tuple[float, float, float]:
    """Smallest circle internally tangent to circles a and b."""
    x21, y21, r21 = b[0] - a[0], b[1] - a[1], b[2] - a[2]
    dist = math.hypot(x21, y21)
    if not dist:
        return a if a[2] >= b[2] else b
    return (
        (a[0] + b[0] + x21 / dist * r21) / 2,
        (a[1] + b[1] + y21 / dist * r21) / 2,
        (dist + a[2] + b[2]) / 2,
    )


def _circle_through_three(a, b, c) -> Optional[tuple[float, float, float]]:
    """Circle internally tangent to a, b and c (Apollonius); None for collinear centers."""
    x1, y1, r1 = a
    x2, y2, r2 = b
    x3, y3, r3 = c
    a2, a3 = x1 - x2, x1 - x3
    b2, b3 = y1 - y2, y1 - y3
    c2, c3 = r2 - r1, r3 - r1
    d1 = x1 * x1 + y1 * y1 - r1 * r1
    d2 = d1 - x2 * x2 - y2 * y2 + r2 * r2
    d3 = d1 - x3 * x3 - y3 * y3 + r3 * r3
    ab = a3 * b2 - a2 * b3
    if not ab:
        return None
    xa = (b2 * d3 - b3 * d2) / (ab * 2) - x1
    xb = (b3 * c2 - b2 * c3) / ab
    ya = (a3 * d2 - a2 * d3) / (ab * 2) - y1
    yb = (a2 * c3 - a3 * c2) / ab
    qa = xb * xb + yb * yb - 1
    qb = 2 * (r1 + xa * xb + ya * yb)
    qc = xa * xa + ya * ya - r1 * r1
    if abs(qa) > 1e-6:
        r = -(qb + math.sqrt(max(0.0, qb * qb - 4 * qa * qc))) / (2 * qa)
    else:
        r = -qc / qb
    return x1 + xa + xb * r, y1 + ya + yb * r, r


def _basis_circle(basis) -> tuple[float, float, float]:
    if len(basis) == 1:
        return basis[0]
    if len(basis) == 2:
        return _circle_through_two(*basis)
    return _circle_through_three(*basis)


def _extend_basis(basis: list, p) -> list:
    """Smallest set of support circles for basis plus p, with p on the boundary."""
    if _encloses_all(p, basis):
        return [p]

    for b in basis:
        if _encloses_not(p, b) and _encloses_all(_circle_through_two(b, p), basis):
            return [b, p]

    for i in range(len(basis) - 1):
        for j in range(i + 1, len(basis)):
            bi, bj = basis[i], basis[j]
            three = _circle_through_three(bi, bj, p)
            if (three is not None
                    and _encloses_not(_circle_through_two(bi, bj), p)
                    and _encloses_not(_circle_through_two(bi, p), bj)
                    and _encloses_not(_circle_through_two(bj, p), bi)
                    and _encloses_all(three, basis)):
                return [bi, bj, p]

    raise HierarchyError("Could not fit an enclosing circle around the packed circles.")


def enclose(circles) -> tuple[float, float, float]:
    """
    Smallest circle (x, y, r) containing every (x, y, r) circle, found with
    Welzl's move-to-front scheme over a shuffled copy of the input.
    """
    pending = [tuple(float(v) for v in c[:3]) for c in circles]
    if not pending:
        return 0.0, 0.0, 0.0
    random.Random(0).shuffle(pending)

    basis: list = []
    circle = None
    i = 0
    while i < len(pending):
        p = pending[i]
        if circle is not None and _encloses_weak(circle, p):
            i += 1
        else:
            basis = _extend_basis(basis, p)
            circle = _basis_circle(basis)
            i = 0
    return circle


def pack_circles(values) -> list[tuple[float, float, float]]:
    """
    Lay out one circle per value, area proportional to the value, inside the
    unit square: returns (x, y, r) in input order with the enclosing circle
    centered at (0.5, 0.5) with radius 0.5.  Values must be positive.
    """
    values = [float(v) for v in values]
    if not values:
        return []
    order = sorted(range(len(values)), key=lambda i: -values[i])
    packed = pack_siblings([math.sqrt(values[i]) for i in order])
    _, _, radius = enclose(packed)
    k = 0.5 / radius if radius else 0.0

    result: list[Optional[tuple[float, float, float]]] = [None] * len(values)
    for rank, idx in enumerate(order):
        x, y, r = packed[rank]
        result[idx] = (0.5 + x * k, 0.5 + y * k, r * k)
    return result
