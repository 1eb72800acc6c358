import logging
from typing import Dict, Sequence, Tuple

import numpy as np

from .configuration import KeyboardConfig
from .engines.csg_engine import geometry_engine
from .parts import double_plate, sa_cap, single_plate, web_post
from .placement import key_position
from .shapes import ShapeNode, apply_matrix, euler_matrix

############
## Thumbs ##
############

# mount name -> (euler rotation in degrees, offset from the thumb origin)
THUMB_PLACEMENTS: Dict[str, Tuple[Tuple[float, float, float], Tuple[float, float, float]]] = {
    "tl": ((7.5, -18, 10), (-32.5, -14.5, -2.5)),
    "tr": ((10, -15, 10), (-12, -16, 3)),
    "mr": ((-6, -34, 48), (-29, -40, -13)),
    "ml": ((6, -34, 40), (-51, -25, -12)),
    "br": ((-16, -33, 54), (-37.8, -55.3, -25.3)),
    "bl": ((-4, -35, 52), (-56.3, -43.3, -23.5)),
}
THUMB_1X_MOUNTS = ("mr", "ml", "br", "bl")
THUMB_15X_MOUNTS = ("tl", "tr")


def thumb_origin(config: KeyboardConfig) -> np.ndarray:
    """
    Bottom-right corner of the last full-height inner key, moved by the thumb offset.
    """
    origin = key_position(
        config, [config.mount_width / 2, -(config.mount_height / 2), 0], config.reduced_inner_cols - 1, config.cornerrow
    )
    return origin + np.asarray(config.thumb_offset)


def thumb_place(config: KeyboardConfig, shape: ShapeNode, name: str) -> ShapeNode:
    logging.debug("thumb_%s_place()", name)
    rotation, offset = THUMB_PLACEMENTS[name]
    shape = geometry_engine.rotate(shape, rotation)
    shape = geometry_engine.translate(shape, thumb_origin(config))
    shape = geometry_engine.translate(shape, offset)
    return shape


def thumb_position(config: KeyboardConfig, name: str, point: Sequence[float]) -> np.ndarray:
    """
    Point form of `thumb_place`.
    """
    rotation, offset = THUMB_PLACEMENTS[name]
    position = apply_matrix(euler_matrix(rotation), point)[0]
    return position + thumb_origin(config) + np.asarray(offset)


def thumb_tl_place(config: KeyboardConfig, shape: ShapeNode) -> ShapeNode:
    return thumb_place(config, shape, "tl")


def thumb_tr_place(config: KeyboardConfig, shape: ShapeNode) -> ShapeNode:
    return thumb_place(config, shape, "tr")


def thumb_mr_place(config: KeyboardConfig, shape: ShapeNode) -> ShapeNode:
    return thumb_place(config, shape, "mr")


def thumb_ml_place(config: KeyboardConfig, shape: ShapeNode) -> ShapeNode:
    return thumb_place(config, shape, "ml")


def thumb_br_place(config: KeyboardConfig, shape: ShapeNode) -> ShapeNode:
    return thumb_place(config, shape, "br")


def thumb_bl_place(config: KeyboardConfig, shape: ShapeNode) -> ShapeNode:
    return thumb_place(config, shape, "bl")


def thumb_1x_layout(config: KeyboardConfig, shape: ShapeNode) -> ShapeNode:
    logging.debug("thumb_1x_layout()")
    return geometry_engine.union([thumb_place(config, shape, name) for name in THUMB_1X_MOUNTS])


def thumb_15x_layout(config: KeyboardConfig, shape: ShapeNode) -> ShapeNode:
    logging.debug("thumb_15x_layout()")
    return geometry_engine.union([thumb_place(config, shape, name) for name in THUMB_15X_MOUNTS])


def thumb(config: KeyboardConfig) -> ShapeNode:
    logging.debug("thumb()")
    plate = geometry_engine.rotate(single_plate(config), (0, 0, -90))
    shape = thumb_1x_layout(config, plate)
    shape = geometry_engine.union([shape, thumb_15x_layout(config, plate)])
    shape = geometry_engine.union([shape, thumb_15x_layout(config, double_plate(config))])
    return shape


def thumbcaps(config: KeyboardConfig) -> ShapeNode:
    logging.debug("thumbcaps()")
    shape = thumb_1x_layout(config, sa_cap(config, 1))
    return geometry_engine.union([
        shape,
        thumb_15x_layout(config, geometry_engine.rotate(sa_cap(config, 1.5), (0, 0, 90))),
    ])


# the 1.5u mounts reach past the switch hole by the double plate height

def thumb_post_tr(config: KeyboardConfig) -> ShapeNode:
    return geometry_engine.translate(web_post(config), [
        (config.mount_width / 2) - config.post_adj,
        ((config.mount_height / 2) + config.double_plate_height) - config.post_adj,
        0,
    ])


def thumb_post_tl(config: KeyboardConfig) -> ShapeNode:
    return geometry_engine.translate(web_post(config), [
        -(config.mount_width / 2) + config.post_adj,
        ((config.mount_height / 2) + config.double_plate_height) - config.post_adj,
        0,
    ])


def thumb_post_bl(config: KeyboardConfig) -> ShapeNode:
    return geometry_engine.translate(web_post(config), [
        -(config.mount_width / 2) + config.post_adj,
        -((config.mount_height / 2) + config.double_plate_height) + config.post_adj,
        0,
    ])


def thumb_post_br(config: KeyboardConfig) -> ShapeNode:
    return geometry_engine.translate(web_post(config), [
        (config.mount_width / 2) - config.post_adj,
        -((config.mount_height / 2) + config.double_plate_height) + config.post_adj,
        0,
    ])
