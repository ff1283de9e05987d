"""Unit tests for parent/child stratification, dendrogram layout and circle packing."""

from __future__ import annotations

import math

import pandas as pd
import pytest

from chartboard.hierarchy import (
    SYNTHETIC_ROOT,
    HierarchyError,
    cluster_layout,
    enclose,
    node_id,
    pack_circles,
    pack_siblings,
    resolve_parents,
    stratify_rows,
)

pytestmark = pytest.mark.unit


def _tree(rows: list[tuple]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=["parent", "child"])


def test_node_id_normalises_cells() -> None:
    """Missing cells are empty ids; integral floats drop the decimal."""

    assert node_id(float("nan")) == ""
    assert node_id(None) == ""
    assert node_id(3.0) == "3"
    assert node_id(" x ") == "x"


def test_resolve_parents_first_parent_wins_unless_empty() -> None:
    """A later real parent replaces an empty one, never a real one."""

    parents = resolve_parents([("", "B"), ("A", "B"), ("C", "B")])

    assert parents == {"B": "A", "A": None, "C": None}


def test_stratify_single_root(tree_df: pd.DataFrame) -> None:
    """A table with one empty-parent row is rooted there."""

    tree = stratify_rows(tree_df, "Parent", "Child")

    assert tree.graph["root"] == "CEO"
    assert set(tree.successors("CTO")) == {"Platform", "Data"}
    assert tree.number_of_nodes() == 5


def test_stratify_adds_synthetic_root_for_several_roots() -> None:
    """Parents never seen as children become roots under a synthetic root."""

    tree = stratify_rows(_tree([("X", "a"), ("Y", "b")]), "parent", "child")

    assert tree.graph["root"] == SYNTHETIC_ROOT
    assert set(tree.successors(SYNTHETIC_ROOT)) == {"X", "Y"}


def test_stratify_synthetic_root_avoids_collisions() -> None:
    """An existing node named like the synthetic root gets a suffixed one."""

    tree = stratify_rows(_tree([("", SYNTHETIC_ROOT), ("", "other")]), "parent", "child")

    assert tree.graph["root"] == f"{SYNTHETIC_ROOT}_1"


def test_stratify_without_any_root_flattens_under_synthetic_root() -> None:
    """When no node lacks a parent, every node hangs directly under the synthetic root."""

    tree = stratify_rows(_tree([("a", "b"), ("b", "a")]), "parent", "child")

    assert tree.graph["root"] == SYNTHETIC_ROOT
    assert set(tree.successors(SYNTHETIC_ROOT)) == {"a", "b"}


def test_stratify_cycle_beside_a_root_is_rejected() -> None:
    """A cycle disconnected from the root cannot be drawn."""

    with pytest.raises(HierarchyError, match="Could not build the dendrogram"):
        stratify_rows(_tree([("", "r"), ("r", "a"), ("b", "c"), ("c", "b")]), "parent", "child")


def test_stratify_requires_child_ids() -> None:
    """An all-empty child column leaves nothing to draw."""

    with pytest.raises(HierarchyError, match="no node ids"):
        stratify_rows(_tree([("a", None)]), "parent", "child")


def test_cluster_layout_aligns_leaves(tree_df: pd.DataFrame) -> None:
    """Root at depth 0, every leaf at depth 1, parents centered over children."""

    positions = cluster_layout(stratify_rows(tree_df, "Parent", "Child"))

    assert positions["CEO"][1] == 0
    for leaf in ("CFO", "Platform", "Data"):
        assert positions[leaf][1] == 1
    assert positions["CTO"][0] == pytest.approx((positions["Platform"][0] + positions["Data"][0]) / 2)
    assert all(0 <= b <= 1 for b, _ in positions.values())


def test_pack_siblings_has_no_overlaps() -> None:
    """Packed circles touch at most; they never overlap."""

    circles = pack_siblings([5, 4, 3, 3, 2, 2, 1, 1])

    for i, a in enumerate(circles):
        for b in circles[i + 1:]:
            assert math.hypot(a[0] - b[0], a[1] - b[1]) >= a[2] + b[2] - 1e-4


def test_enclose_contains_every_circle() -> None:
    """The enclosing circle reaches past every packed circle."""

    circles = pack_siblings([3, 2, 2, 1])
    cx, cy, r = enclose(circles)

    for x, y, radius in circles:
        assert math.hypot(x - cx, y - cy) + radius <= r + 1e-6


def test_enclose_finds_the_smallest_circle() -> None:
    """Three equal circles on a triangle sit inside the circumcircle grown by their radius."""

    height = 10 * math.sqrt(3) / 2
    circles = [(0, 0, 1), (10, 0, 1), (5, height, 1)]

    cx, cy, r = enclose(circles)

    assert (cx, cy) == (pytest.approx(5), pytest.approx(height / 3))
    assert r == pytest.approx(10 / math.sqrt(3) + 1)


def test_enclose_two_and_nested_circles() -> None:
    """Two circles span their far edges; a nested circle adds nothing."""

    assert enclose([(0, 0, 1), (4, 0, 3)]) == pytest.approx((3, 0, 4))
    assert enclose([(1, 0, 1), (0, 0, 5)]) == pytest.approx((0, 0, 5))
    assert enclose([]) == (0.0, 0.0, 0.0)


def test_pack_circles_fits_unit_square_in_input_order() -> None:
    """Output follows input order, area tracks value, everything inside [0, 1]."""

    circles = pack_circles([1, 4, 9])

    radii = [r for _, _, r in circles]
    assert radii[1] / radii[0] == pytest.approx(2)
    assert radii[2] / radii[0] == pytest.approx(3)
    for x, y, r in circles:
        assert 0 <= x - r + 1e-9
        assert x + r <= 1 + 1e-9
        assert 0 <= y - r + 1e-9
        assert y + r <= 1 + 1e-9


def test_pack_circles_single_and_empty() -> None:
    """One value fills the square; no values give no circles."""

    assert pack_circles([5]) == [pytest.approx((0.5, 0.5, 0.5))]
    assert pack_circles([]) == []
