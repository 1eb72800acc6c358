import logging
from typing import Callable

import numpy as np

from .configuration import KeyboardConfig
from .engines.csg_engine import geometry_engine
from .placement import key_position, left_key_position
from .shapes import ShapeNode
from .walls import wall_locate2, wall_locate3

ScrewShape = Callable[[KeyboardConfig, float, float, float], ShapeNode]

##################
## Screw Insert ##
##################

SCREW_HOLE_HEIGHT = 350
COUNTERSINK_SINK_HEIGHT = 1.7


def screw_insert_position(config: KeyboardConfig, column: int, row: int, offset=(0.0, 0.0)) -> np.ndarray:
    """
    Ground position of the screw insert anchored on key (column, row), moved by the xy `offset`.

    The last column anchors on the right edge of the mount, column 0 on the synthetic left key,
    otherwise row 0 on the top edge and the last row on the bottom edge. Anything else uses the right edge.
    """
    logging.debug("screw_insert_position()")
    shift_right = column == config.lastcol
    shift_left = column == 0
    shift_up = (not (shift_right or shift_left)) and (row == 0)
    shift_down = (not (shift_right or shift_left)) and (row >= config.lastrow)

    if shift_up:
        position = key_position(
            config,
            np.array(wall_locate2(config, 0, 1)) + np.array([0, (config.mount_height / 2), 0]),
            column,
            row,
        )
    elif shift_down:
        position = key_position(
            config,
            np.array(wall_locate2(config, 0, -1)) - np.array([0, (config.mount_height / 2), 0]),
            column,
            row,
        )
    elif shift_left:
        position = left_key_position(config, row, 0) + np.array(wall_locate3(config, -1, 0))
    else:
        position = key_position(
            config,
            np.array(wall_locate2(config, 1, 0)) + np.array([(config.mount_width / 2), 0, 0]),
            column,
            row,
        )

    return np.array([position[0] + offset[0], position[1] + offset[1], 0.0])


def screw_insert_shape(config: KeyboardConfig, bottom_radius: float, top_radius: float, height: float) -> ShapeNode:
    logging.debug("screw_insert_shape()")
    if bottom_radius == top_radius:
        base = geometry_engine.cylinder(radius=bottom_radius, height=height, segments=config.resolution)
    else:
        base = geometry_engine.cone(bottom_radius, top_radius, height, segments=config.resolution)

    shape = geometry_engine.union((
        base,
        geometry_engine.translate(geometry_engine.sphere(top_radius, segments=config.resolution), (0, 0, height / 2)),
    ))
    return shape


def screw_countersink_shape(config: KeyboardConfig, bottom_radius: float, top_radius: float, height: float) -> ShapeNode:
    """
    A cone narrowing from bottom_radius to top_radius, on top of a short bottom_radius shaft.
    """
    logging.debug("screw_countersink_shape()")
    sink_height = COUNTERSINK_SINK_HEIGHT
    sink = geometry_engine.cone(bottom_radius, top_radius, sink_height, segments=config.resolution)
    sink = geometry_engine.translate(sink, (0, 0, (height - sink_height) / 2))
    shaft = geometry_engine.cylinder(radius=bottom_radius, height=height - sink_height + 0.01, segments=config.resolution)
    shaft = geometry_engine.translate(shaft, (0, 0, -sink_height / 2))
    return geometry_engine.union((sink, shaft))


def screw_insert(
        config: KeyboardConfig,
        shape_fn: ScrewShape,
        column: int,
        row: int,
        bottom_radius: float,
        top_radius: float,
        height: float,
        offset,
) -> ShapeNode:
    logging.debug("screw_insert()")
    position = screw_insert_position(config, column, row, offset)
    shape = shape_fn(config, bottom_radius, top_radius, height)
    return geometry_engine.translate(shape, [position[0], position[1], height / 2])


def screw_insert_all_shapes(
        config: KeyboardConfig,
        shape_fn: ScrewShape,
        bottom_radius: float,
        top_radius: float,
        height: float,
) -> ShapeNode:
    logging.debug("screw_insert_all_shapes()")
    return geometry_engine.union([
        screw_insert(config, shape_fn, column, row, bottom_radius, top_radius, height, offset)
        for column, row, offset in config.screw_inserts
    ])


def screw_insert_holes(config: KeyboardConfig) -> ShapeNode:
    return screw_insert_all_shapes(
        config, screw_insert_shape,
        config.screw_insert_bottom_radius, config.screw_insert_top_radius, config.screw_insert_height,
    )


def screw_insert_outers(config: KeyboardConfig) -> ShapeNode:
    return screw_insert_all_shapes(
        config, screw_insert_shape,
        config.screw_insert_bottom_radius + config.screw_insert_wall,
        config.screw_insert_top_radius + config.screw_insert_wall,
        config.screw_insert_height + 1.5,
    )


def screw_insert_screw_holes(config: KeyboardConfig) -> ShapeNode:
    return screw_insert_all_shapes(
        config, screw_insert_shape, config.screw_hole_radius, config.screw_hole_radius, SCREW_HOLE_HEIGHT,
    )


def screw_insert_screw_countersinks(config: KeyboardConfig) -> ShapeNode:
    return screw_insert_all_shapes(
        config, screw_countersink_shape,
        config.screw_countersink_radius, config.screw_hole_radius, config.screw_countersink_height,
    )


#########
## USB ##
#########


def usb_hole_position(config: KeyboardConfig) -> np.ndarray:
    """
    Center of the USB jack, measured from the back wall above the top-left key.
    """
    reference = key_position(
        config,
        np.array(wall_locate2(config, 0, -1)) - np.array([0, config.mount_height / 2, 0]),
        0,
        0,
    )
    return np.array([
        reference[0] + config.usb_hole_offset[0],
        reference[1] + config.usb_hole_offset[1],
        3.0,
    ])


def usb_hole(config: KeyboardConfig) -> ShapeNode:
    logging.debug("usb_hole()")
    position = usb_hole_position(config)
    jack = geometry_engine.translate(geometry_engine.box(9.5, 20, 4), position + [0, 10, 3])
    board_groove = geometry_engine.translate(
        geometry_engine.box(26, 13, 2.1), position + [0, -config.wall_thickness - 0.5, 1]
    )
    return geometry_engine.union((jack, board_groove))


def usb_holder(config: KeyboardConfig) -> ShapeNode:
    logging.debug("usb_holder()")
    position = usb_hole_position(config)
    return geometry_engine.translate(geometry_engine.box(8, 15.5, 5), position + [0, -config.wall_thickness - 2, -0.5])


##########
## TRRS ##
##########

TRRS_HOLE_BOARD_SIZE = (2.25, 13.5, 20)
TRRS_HOLE_BOARD_SHIFT = (3.5, -1.75, -2)
TRRS_HOLE_JACKRECT_SIZE = (5.5, 13.5, 6.5)
TRRS_HOLE_JACKRECT_SHIFT = (0, -1.75, 0)
TRRS_HOLDER_SIZE = (2, 13, 5)
TRRS_HOLDER_SHIFT = (4.75, 0, 7)
TRRS_HOLDER_THICKNESS = 2
TRRS_JACK_RADIUS = 2.75
TRRS_JACK_LENGTH = 20


def trrs_hole_position(config: KeyboardConfig) -> np.ndarray:
    return usb_hole_position(config) + np.array(config.trrs_hole_offset)


def _trrs_cylinder_position(position) -> np.ndarray:
    return np.array([
        position[0],
        position[1] - TRRS_HOLDER_THICKNESS / 2,
        position[2] + 3 + (TRRS_HOLDER_SIZE[2] + TRRS_HOLDER_THICKNESS) / 2,
    ])


def _mirrored(shape: ShapeNode) -> ShapeNode:
    # the board sits on the inner side of the jack
    return geometry_engine.mirror(shape, (-1, 0, 0))


def trrs_hole(config: KeyboardConfig) -> ShapeNode:
    logging.debug("trrs_hole()")
    position = trrs_hole_position(config)
    cylinder_position = _trrs_cylinder_position(position)

    jack = geometry_engine.cylinder(radius=TRRS_JACK_RADIUS, height=TRRS_JACK_LENGTH, segments=config.resolution)
    jack = geometry_engine.rotate(jack, (90, 0, 0))
    jack = geometry_engine.translate(_mirrored(jack), cylinder_position)

    jack_groove = geometry_engine.translate(geometry_engine.box(*TRRS_HOLE_JACKRECT_SIZE), TRRS_HOLE_JACKRECT_SHIFT)
    jack_groove = geometry_engine.translate(_mirrored(jack_groove), cylinder_position)

    board_groove = geometry_engine.translate(geometry_engine.box(*TRRS_HOLE_BOARD_SIZE), TRRS_HOLE_BOARD_SHIFT)
    board_groove = geometry_engine.translate(_mirrored(board_groove), (
        position[0],
        position[1] - TRRS_HOLDER_THICKNESS / 2,
        position[2] + TRRS_HOLE_BOARD_SIZE[2] / 2 + TRRS_HOLDER_THICKNESS,
    ))

    return geometry_engine.union((jack, jack_groove, board_groove))


def trrs_holder(config: KeyboardConfig) -> ShapeNode:
    logging.debug("trrs_holder()")
    position = trrs_hole_position(config)
    shape = geometry_engine.box(
        TRRS_HOLDER_SIZE[0] + TRRS_HOLDER_THICKNESS,
        TRRS_HOLDER_SIZE[1] + 2 * TRRS_HOLDER_THICKNESS,
        TRRS_HOLDER_SIZE[2],
    )
    shape = geometry_engine.translate(shape, TRRS_HOLDER_SHIFT)
    return geometry_engine.translate(_mirrored(shape), (
        position[0],
        position[1] - config.wall_thickness - TRRS_HOLDER_THICKNESS,
        position[2] + (TRRS_HOLDER_SIZE[2] + TRRS_HOLDER_THICKNESS) / 2,
    ))


###############
## Pro Micro ##
###############

PRO_MICRO_SPACE_SIZE = (4, 10, 12)
PRO_MICRO_WALL_THICKNESS = 2


def pro_micro_position(config: KeyboardConfig) -> np.ndarray:
    return key_position(config, wall_locate3(config, -1, 0), 0, 1) + np.array([-6, 2, -15])


def pro_micro_holder(config: KeyboardConfig) -> ShapeNode:
    """
    Open-topped sleeve for the controller on the inside of the left wall.
    """
    logging.debug("pro_micro_holder()")
    position = pro_micro_position(config)
    space_width, space_depth, space_height = PRO_MICRO_SPACE_SIZE
    wall = PRO_MICRO_WALL_THICKNESS

    holder = geometry_engine.box(space_width + wall, space_depth + wall, space_height)
    holder = geometry_engine.translate(holder, position)

    space = geometry_engine.box(space_width, space_depth, space_height)
    space = geometry_engine.translate(space, (position[0] - wall / 2, position[1] - wall / 2, position[2]))

    return geometry_engine.difference(holder, [space])
