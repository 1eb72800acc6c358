import dataclasses

import numpy as np
import pytest

from dactyl_csg.configuration import DEFAULT_CONFIG
from dactyl_csg.peripherals import (
    pro_micro_holder,
    screw_insert_holes,
    screw_insert_outers,
    screw_insert_position,
    trrs_hole_position,
    usb_hole_position,
)
from dactyl_csg.placement import key_position, left_key_position
from dactyl_csg.shapes import bounds
from dactyl_csg.walls import wall_locate2, wall_locate3

C = DEFAULT_CONFIG


def _on_ground(position):
    return pytest.approx([position[0], position[1], 0.0])


def test_last_column_anchors_on_the_right_edge():
    for row in (0, 2, C.lastrow):
        expected = key_position(C, np.array(wall_locate2(C, 1, 0)) + [C.mount_width / 2, 0, 0], C.lastcol, row)
        assert screw_insert_position(C, C.lastcol, row) == _on_ground(expected)


def test_first_column_anchors_on_the_left_wall():
    for row in (0, 2, C.lastrow):
        expected = left_key_position(C, row, 0) + wall_locate3(C, -1, 0)
        assert screw_insert_position(C, 0, row) == _on_ground(expected)


def test_top_row_anchors_on_the_back_edge():
    expected = key_position(C, np.array(wall_locate2(C, 0, 1)) + [0, C.mount_height / 2, 0], 2, 0)
    assert screw_insert_position(C, 2, 0) == _on_ground(expected)


def test_last_row_anchors_on_the_front_edge():
    expected = key_position(C, np.array(wall_locate2(C, 0, -1)) - [0, C.mount_height / 2, 0], 1, C.lastrow)
    assert screw_insert_position(C, 1, C.lastrow) == _on_ground(expected)


def test_interior_keys_fall_back_to_the_right_edge():
    expected = key_position(C, np.array(wall_locate2(C, 1, 0)) + [C.mount_width / 2, 0, 0], 2, 2)
    assert screw_insert_position(C, 2, 2) == _on_ground(expected)


def test_every_insert_is_placed():
    holes = screw_insert_holes(C)
    assert len(holes.children) == len(C.screw_insert_locations)

    fewer = dataclasses.replace(C, screw_insert_locations=((0, 0, (0.0, 0.0)), (-1, -1, (0.0, 0.0))))
    assert len(screw_insert_holes(fewer).children) == 2


def test_inserts_stand_on_the_ground():
    for shapes in (screw_insert_holes(C), screw_insert_outers(C)):
        assert bounds(shapes)[0][2] == pytest.approx(0, abs=1e-9)


def test_insert_offset_moves_the_ground_position():
    anchored = screw_insert_position(C, 0, 0)
    moved = screw_insert_position(C, 0, 0, (11, 10))
    assert moved == pytest.approx(anchored + [11, 10, 0])
    assert moved[2] == 0


def test_insert_offset_is_applied():
    column, row, offset = C.screw_inserts[0]
    insert = screw_insert_holes(C).children[0]
    position = screw_insert_position(C, column, row, offset)
    assert offset != (0, 0)
    assert insert.vector == pytest.approx((position[0], position[1], C.screw_insert_height / 2))


def test_connector_positions():
    usb = usb_hole_position(C)
    assert usb[2] == pytest.approx(3.0)
    assert trrs_hole_position(C) == pytest.approx(usb + np.array(C.trrs_hole_offset))


def test_pro_micro_holder_is_hollow():
    holder = pro_micro_holder(C)
    assert holder.kind == "difference"
    assert len(holder.children) == 2
