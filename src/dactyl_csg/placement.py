import logging
import math
from typing import Callable, Sequence, TypeVar

import numpy as np

from .configuration import KeyboardConfig
from .engines.csg_engine import geometry_engine
from .shapes import ShapeNode

T = TypeVar("T")

#########################
## Placement Functions ##
#########################


def rotate_around_x(position, angle):
    t_matrix = np.array(
        [
            [1, 0, 0],
            [0, math.cos(angle), -math.sin(angle)],
            [0, math.sin(angle), math.cos(angle)],
        ]
    )
    return np.matmul(t_matrix, position)


def rotate_around_y(position, angle):
    t_matrix = np.array(
        [
            [math.cos(angle), 0, math.sin(angle)],
            [0, 1, 0],
            [-math.sin(angle), 0, math.cos(angle)],
        ]
    )
    return np.matmul(t_matrix, position)


def translate_point(position, vector):
    return np.add(position, vector)


def row_angle(config: KeyboardConfig, row: int) -> float:
    return config.row_curvature * (config.center_row - row)


def column_angle(config: KeyboardConfig, column: int) -> float:
    return config.column_curvature * (config.center_col - column)


def _row_curve(config, shape, translate_fn, rotate_x_fn, row, pivot=0.0):
    # a flat axis has no arc to follow, keys are simply spaced by the pitch
    if config.row_radius is None:
        return translate_fn(shape, [0, config.row_pitch * (config.center_row - row), 0])

    radius = config.row_radius + pivot
    shape = translate_fn(shape, [0, 0, -radius])
    shape = rotate_x_fn(shape, row_angle(config, row))
    shape = translate_fn(shape, [0, 0, radius])
    return shape


def apply_key_geometry(
        config: KeyboardConfig,
        shape: T,
        translate_fn: Callable[[T, Sequence[float]], T],
        rotate_x_fn: Callable[[T, float], T],
        rotate_y_fn: Callable[[T, float], T],
        column: int,
        row: int,
) -> T:
    """
    Move a shape or point from the switch's local frame onto the curved key surface.

    The rotate functions take radians; the same sequence of steps serves both shapes and points,
    which keeps the two forms in agreement.
    """
    logging.debug("apply_key_geometry()")

    angle = column_angle(config, column)

    if config.wide_pinky and column == config.lastcol:
        shape = translate_fn(shape, [config.wide_pinky_offset, 0, 0])

    if config.column_style == "orthographic":
        shape = _row_curve(config, shape, translate_fn, rotate_x_fn, row)
        if config.column_radius is None:
            column_z_delta = 0.0
        else:
            column_z_delta = config.column_radius * (1 - math.cos(angle))
            shape = rotate_y_fn(shape, angle)
        shape = translate_fn(
            shape, [-(column - config.center_col) * config.column_x_delta, 0, column_z_delta]
        )
        shape = translate_fn(shape, config.column_offset(column))

    elif config.column_style == "fixed":
        fixed_z = config.fixed_z[column]
        shape = rotate_y_fn(shape, config.fixed_angles[column])
        shape = translate_fn(shape, [config.fixed_x[column], 0, fixed_z])
        shape = _row_curve(config, shape, translate_fn, rotate_x_fn, row, pivot=fixed_z)
        shape = rotate_y_fn(shape, config.fixed_tenting)
        shape = translate_fn(shape, [0, config.column_offset(column)[1], 0])

    else:
        shape = _row_curve(config, shape, translate_fn, rotate_x_fn, row)
        if config.column_radius is None:
            shape = translate_fn(shape, [-config.column_pitch * (config.center_col - column), 0, 0])
        else:
            shape = translate_fn(shape, [0, 0, -config.column_radius])
            shape = rotate_y_fn(shape, angle)
            shape = translate_fn(shape, [0, 0, config.column_radius])
        shape = translate_fn(shape, config.column_offset(column))

    shape = rotate_y_fn(shape, config.tenting_angle)
    shape = translate_fn(shape, [0, 0, config.z_offset])

    return shape


def x_rot(shape, angle):
    return geometry_engine.rotate(shape, [math.degrees(angle), 0, 0])


def y_rot(shape, angle):
    return geometry_engine.rotate(shape, [0, math.degrees(angle), 0])


def key_place(config: KeyboardConfig, shape: ShapeNode, column: int, row: int) -> ShapeNode:
    logging.debug("key_place()")
    return apply_key_geometry(config, shape, geometry_engine.translate, x_rot, y_rot, column, row)


def key_position(config: KeyboardConfig, position, column: int, row: int) -> np.ndarray:
    logging.debug("key_position()")
    return apply_key_geometry(
        config, np.asarray(position, dtype=float), translate_point, rotate_around_x, rotate_around_y, column, row
    )


def grid_points(config: KeyboardConfig):
    """
    Every (column, row) that holds a key, column by column.
    """
    return [
        (column, row)
        for column in range(config.columns)
        for row in range(config.rows)
        if config.has_key(column, row)
    ]


def left_key_position(config: KeyboardConfig, row: int, direction: float) -> np.ndarray:
    """
    Pose of the synthetic key just outside column 0 that the left wall hangs from.

    direction is 1 for the top corner of the row, -1 for the bottom corner and 0 for the middle.
    """
    logging.debug("left_key_position()")
    pos = key_position(config, [-config.mount_width * 0.5, direction * config.mount_height * 0.5, 0], 0, row)
    return pos - np.array([config.left_wall_x_offset, 0, config.left_wall_z_offset])


def left_key_place(config: KeyboardConfig, shape: ShapeNode, row: int, direction: float) -> ShapeNode:
    logging.debug("left_key_place()")
    return geometry_engine.translate(shape, left_key_position(config, row, direction))
