import json

import numpy as np
import pytest

from dactyl_csg.engines.csg_engine import geometry_engine as ge
from dactyl_csg.errors import DegenerateGeometryError
from dactyl_csg.shapes import (
    BooleanOp,
    Primitive,
    apply_matrix,
    as_dict,
    bounds,
    count_nodes,
    euler_matrix,
    is_empty,
    mirror_matrix,
    placement_matrix,
    vertices,
)


def test_euler_matrix_rotates_x_then_y_then_z():
    # x by 90 takes y onto z, then z by 90 leaves z alone
    m = euler_matrix((90, 0, 90))
    assert apply_matrix(m, [0, 1, 0])[0] == pytest.approx([0, 0, 1], abs=1e-9)
    # x onto y by z rotation only
    assert apply_matrix(m, [1, 0, 0])[0] == pytest.approx([0, 1, 0], abs=1e-9)


def test_mirror_matrix_flips_along_normal():
    m = mirror_matrix((2, 0, 0))
    assert apply_matrix(m, [3, 4, 5])[0] == pytest.approx([-3, 4, 5])


def test_placement_matrix_composes_outermost_last():
    node = ge.translate(ge.rotate(ge.box(1, 1, 1), (0, 0, 90)), (10, 0, 0))
    position = apply_matrix(placement_matrix(node), [1, 0, 0])[0]
    assert position == pytest.approx([10, 1, 0], abs=1e-9)


def test_box_bounds_are_centered():
    lower, upper = bounds(ge.box(2, 4, 6))
    assert lower == pytest.approx([-1, -2, -3])
    assert upper == pytest.approx([1, 2, 3])


def test_polygon_extrudes_from_zero():
    lower, upper = bounds(ge.polygon([[0, 0], [2, 0], [0, 3]], 1.5))
    assert lower == pytest.approx([0, 0, 0])
    assert upper == pytest.approx([2, 3, 1.5])


def test_projection_flattens_onto_ground():
    shape = ge.translate(ge.box(2, 2, 2), (0, 0, 20))
    lower, upper = bounds(ge.project(shape, 0.5))
    assert lower[2] == pytest.approx(0)
    assert upper[2] == pytest.approx(0.5)


def test_difference_bounded_by_initial_shape():
    shape = ge.difference(ge.box(2, 2, 2), [ge.box(10, 10, 10)])
    lower, upper = bounds(shape)
    assert upper == pytest.approx([1, 1, 1])


def test_empty_union_has_no_bounds():
    empty = ge.union([])
    assert is_empty(empty)
    assert len(vertices(empty)) == 0
    with pytest.raises(ValueError):
        bounds(empty)


def test_union_drops_empty_unions():
    box = ge.box(1, 1, 1)
    shape = ge.union([ge.union([]), box])
    assert shape == BooleanOp("union", (box,))
    assert not is_empty(shape)


def test_difference_without_subtractions_is_initial_shape():
    box = ge.box(1, 1, 1)
    assert ge.difference(box, []) is box


def test_hull_needs_two_shapes():
    with pytest.raises(DegenerateGeometryError):
        ge.convex_hull([ge.box(1, 1, 1)])


def test_intersection_needs_shapes():
    with pytest.raises(ValueError):
        ge.intersect([])


def test_trees_built_twice_compare_equal():
    def build():
        return ge.convex_hull([ge.translate(ge.cylinder(1, 2, 12), (1, 2, 3)), ge.sphere(2, 12)])

    assert build() == build()
    assert hash(build()) == hash(build())


def test_as_dict_is_json_ready():
    shape = ge.mirror(ge.project(ge.cone(2, 1, 3, 16), 1.0, cut=True), (1, 0, 0))
    described = json.loads(json.dumps(as_dict(shape)))
    assert described["transform"] == "mirror"
    assert described["child"]["projection"] == "cut"
    assert described["child"]["child"] == {"primitive": "cylinder", "size": [2.0, 1.0, 3.0], "segments": 16}


def test_count_nodes():
    shape = ge.union([ge.translate(ge.box(1, 1, 1), (1, 0, 0)), ge.sphere(1)])
    assert count_nodes(shape) == 4


def test_primitive_values_are_floats():
    assert ge.box(1, 2, 3) == Primitive("box", (1.0, 2.0, 3.0))
    assert isinstance(ge.box(1, 2, 3).size[0], float)
    assert np.allclose(vertices(ge.sphere(1)).max(axis=0), [1, 1, 1])
