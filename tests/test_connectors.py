import dataclasses
import logging

import pytest

from dactyl_csg.configuration import DEFAULT_CONFIG
from dactyl_csg.connectors import connectors, fan_hulls, hull, pinky_connectors, thumb_connectors, triangle_hulls
from dactyl_csg.engines.csg_engine import geometry_engine as ge
from dactyl_csg.shapes import BooleanOp, is_empty


def _markers(count):
    return [ge.translate(ge.box(1, 1, 1), (i, i * i, 0)) for i in range(count)]


@pytest.mark.parametrize("count", range(8))
def test_triangle_hulls_count(count):
    shapes = _markers(count)
    web = triangle_hulls(shapes)
    assert isinstance(web, BooleanOp) and web.kind == "union"
    assert len(web.children) == max(0, count - 3)
    for i, piece in enumerate(web.children):
        assert piece.kind == "hull"
        assert list(piece.children) == shapes[i:i + 4]


def test_triangle_hulls_too_few_shapes_is_empty():
    assert is_empty(triangle_hulls(_markers(3)))


def test_fan_hulls_share_the_first_shape():
    shapes = _markers(5)
    fan = fan_hulls(shapes)
    assert len(fan.children) == 4
    for piece, shape in zip(fan.children, shapes[1:]):
        assert piece.children == (shapes[0], shape)


def test_degenerate_hull_is_skipped(caplog):
    with caplog.at_level(logging.DEBUG):
        assert hull(_markers(1)) is None
    assert "skipping hull" in caplog.text
    assert is_empty(fan_hulls(_markers(1)))


def test_connectors_cover_every_neighbouring_pair():
    web = connectors(DEFAULT_CONFIG)
    # 21 row, 20 column and 16 diagonal webs, plus the two corners of the short last row
    assert len(web.children) == 21 + 20 + 16 + 2
    assert all(len(piece.children) == 1 for piece in web.children)


def test_pinky_connectors():
    assert len(pinky_connectors(DEFAULT_CONFIG).children) == DEFAULT_CONFIG.lastrow + DEFAULT_CONFIG.cornerrow
    assert is_empty(pinky_connectors(dataclasses.replace(DEFAULT_CONFIG, wide_pinky=False)))


def test_thumb_connectors_windows():
    web = thumb_connectors(DEFAULT_CONFIG)
    assert [len(piece.children) for piece in web.children] == [1, 1, 1, 5, 6, 12]


def test_thumb_seam_stops_at_a_one_column_short_row():
    config = dataclasses.replace(DEFAULT_CONFIG, columns=4)
    assert config.short_row_columns == (2,)
    web = thumb_connectors(config)
    assert [len(piece.children) for piece in web.children] == [1, 1, 1, 5, 6, 11]
