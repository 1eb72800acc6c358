import functools
import logging
from typing import Callable, List, Sequence

import numpy as np

from .configuration import KeyboardConfig
from .connectors import fan_hulls
from .engines.csg_engine import geometry_engine
from .parts import web_post, web_post_bl, web_post_br, web_post_tl, web_post_tr
from .placement import grid_points, key_place, key_position, left_key_place, left_key_position
from .shapes import ShapeNode, bounds
from .thumbs import THUMB_15X_MOUNTS, THUMB_PLACEMENTS, thumb_place, thumb_position, thumb_post_br, thumb_post_tl

Place = Callable[[ShapeNode], ShapeNode]

BOTTOM_SLAB_HEIGHT = 0.001
CLIP_MARGIN = 10.0


def wall_locate1(config: KeyboardConfig, dx: float, dy: float) -> List[float]:
    return [dx * config.wall_thickness, dy * config.wall_thickness, -1]


def wall_locate2(config: KeyboardConfig, dx: float, dy: float) -> List[float]:
    return [dx * config.wall_xy_offset, dy * config.wall_xy_offset, config.wall_z_offset]


def wall_locate3(config: KeyboardConfig, dx: float, dy: float) -> List[float]:
    return [
        dx * (config.wall_xy_offset + config.wall_thickness),
        dy * (config.wall_xy_offset + config.wall_thickness),
        config.wall_z_offset,
    ]


@functools.lru_cache(maxsize=None)
def ground_z(config: KeyboardConfig) -> float:
    """
    Height of the slab every bottom hull reaches down to.

    Walls hang from posts moved outward by at most the wall offsets in the mount's own frame,
    so the corners of each mount grown by those offsets bound every wall point from below.
    The result is never above z=0, so the walls always cross the ground plane.
    """
    logging.debug("ground_z()")
    reach = config.wall_xy_offset + config.wall_thickness
    drop = min(0.0, config.plate_thickness - config.web_thickness) + min(config.wall_z_offset, -1.0)

    def corners(half_width, half_height):
        return [(sx * half_width, sy * half_height, drop) for sx in (-1, 1) for sy in (-1, 1)]

    heights = []
    for column, row in grid_points(config):
        wide = config.wide_pinky and column == config.lastcol
        half_width = config.mount_width / (1.2 if wide else 2) + reach
        for corner in corners(half_width, config.mount_height / 2 + reach):
            heights.append(key_position(config, corner, column, row)[2])

    # the synthetic left keys are translated, not rotated
    for row in range(config.lastrow):
        heights.extend(left_key_position(config, row, direction)[2] + drop for direction in (-1, 1))

    for name in THUMB_PLACEMENTS:
        extension = config.double_plate_height if name in THUMB_15X_MOUNTS else 0.0
        for corner in corners(config.mount_width / 2 + reach, config.mount_height / 2 + extension + reach):
            heights.append(thumb_position(config, name, corner)[2])

    return float(min(0.0, min(heights)) - config.ground_clearance)


def bottom(config: KeyboardConfig, height: float, shapes: Sequence[ShapeNode]) -> ShapeNode:
    shape = geometry_engine.project(geometry_engine.union(shapes), height)
    return geometry_engine.translate(shape, (0, 0, ground_z(config)))


def bottom_hull(config: KeyboardConfig, shapes: Sequence[ShapeNode]) -> ShapeNode:
    """
    Hull the shapes together with their footprint on the ground slab.
    """
    logging.debug("bottom_hull()")
    shapes = list(shapes)
    return geometry_engine.convex_hull(shapes + [bottom(config, BOTTOM_SLAB_HEIGHT, shapes)])


def wall_brace(
        config: KeyboardConfig,
        place1: Place, dx1: float, dy1: float, post1: ShapeNode,
        place2: Place, dx2: float, dy2: float, post2: ShapeNode,
) -> ShapeNode:
    logging.debug("wall_brace()")
    hulls = []

    hulls.append(place1(post1))
    hulls.append(place1(geometry_engine.translate(post1, wall_locate1(config, dx1, dy1))))
    hulls.append(place1(geometry_engine.translate(post1, wall_locate2(config, dx1, dy1))))
    hulls.append(place1(geometry_engine.translate(post1, wall_locate3(config, dx1, dy1))))

    hulls.append(place2(post2))
    hulls.append(place2(geometry_engine.translate(post2, wall_locate1(config, dx2, dy2))))
    hulls.append(place2(geometry_engine.translate(post2, wall_locate2(config, dx2, dy2))))
    hulls.append(place2(geometry_engine.translate(post2, wall_locate3(config, dx2, dy2))))

    shape1 = geometry_engine.convex_hull(hulls)

    hulls = [
        place1(geometry_engine.translate(post1, wall_locate2(config, dx1, dy1))),
        place1(geometry_engine.translate(post1, wall_locate3(config, dx1, dy1))),
        place2(geometry_engine.translate(post2, wall_locate2(config, dx2, dy2))),
        place2(geometry_engine.translate(post2, wall_locate3(config, dx2, dy2))),
    ]
    shape2 = bottom_hull(config, hulls)

    return geometry_engine.union([shape1, shape2])


def key_wall_brace(
        config: KeyboardConfig,
        x1: int, y1: int, dx1: float, dy1: float, post1: ShapeNode,
        x2: int, y2: int, dx2: float, dy2: float, post2: ShapeNode,
) -> ShapeNode:
    return wall_brace(
        config,
        (lambda shape: key_place(config, shape, x1, y1)), dx1, dy1, post1,
        (lambda shape: key_place(config, shape, x2, y2)), dx2, dy2, post2,
    )


def _left_place(config: KeyboardConfig, row: int, direction: float) -> Place:
    return lambda shape: left_key_place(config, shape, row, direction)


def _thumb_place(config: KeyboardConfig, name: str) -> Place:
    return lambda shape: thumb_place(config, shape, name)


###########
## Walls ##
###########


def back_wall_braces(config: KeyboardConfig) -> List[ShapeNode]:
    c = config
    braces = []
    for x in range(c.columns):
        braces.append(key_wall_brace(c, x, 0, 0, 1, web_post_tl(c), x, 0, 0, 1, web_post_tr(c)))
    for x in range(1, c.columns):
        braces.append(key_wall_brace(c, x, 0, 0, 1, web_post_tl(c), x - 1, 0, 0, 1, web_post_tr(c)))
    return braces


def right_wall_braces(config: KeyboardConfig) -> List[ShapeNode]:
    c = config
    lastcol = c.lastcol
    tr = web_post_tr(c, wide=c.wide_pinky)
    br = web_post_br(c, wide=c.wide_pinky)

    braces = [key_wall_brace(c, lastcol, 0, 0, 1, tr, lastcol, 0, 1, 0, tr)]
    for y in range(c.lastrow):
        braces.append(key_wall_brace(c, lastcol, y, 1, 0, tr, lastcol, y, 1, 0, br))
    for y in range(1, c.lastrow):
        braces.append(key_wall_brace(c, lastcol, y - 1, 1, 0, br, lastcol, y, 1, 0, tr))
    braces.append(key_wall_brace(c, lastcol, c.cornerrow, 0, -1, br, lastcol, c.cornerrow, 1, 0, br))
    return braces


def left_wall_braces(config: KeyboardConfig) -> List[ShapeNode]:
    """
    Braces hanging from the synthetic keys left of column 0, with the hulls that join them to the grid.
    """
    c = config
    post = web_post(c)
    braces = []
    for y in range(c.lastrow):
        braces.append(geometry_engine.union([
            wall_brace(c, _left_place(c, y, 1), -1, 0, post, _left_place(c, y, -1), -1, 0, post),
            geometry_engine.convex_hull((
                key_place(c, web_post_tl(c), 0, y),
                key_place(c, web_post_bl(c), 0, y),
                left_key_place(c, post, y, 1),
                left_key_place(c, post, y, -1),
            )),
        ]))
    for y in range(1, c.lastrow):
        braces.append(geometry_engine.union([
            wall_brace(c, _left_place(c, y - 1, -1), -1, 0, post, _left_place(c, y, 1), -1, 0, post),
            geometry_engine.convex_hull((
                key_place(c, web_post_tl(c), 0, y),
                key_place(c, web_post_bl(c), 0, y - 1),
                left_key_place(c, post, y, 1),
                left_key_place(c, post, y - 1, -1),
            )),
        ]))

    # back left corner
    braces.append(wall_brace(
        c, (lambda shape: key_place(c, shape, 0, 0)), 0, 1, web_post_tl(c),
        _left_place(c, 0, 1), 0, 1, post,
    ))
    braces.append(wall_brace(c, _left_place(c, 0, 1), 0, 1, post, _left_place(c, 0, 1), -1, 0, post))
    return braces


def front_wall_braces(config: KeyboardConfig) -> List[ShapeNode]:
    """
    Front edge from the first column right of the thumb cluster to the last column.

    The front edge steps up from the last row to the corner row after the last short-row column.
    """
    c = config
    lastrow = c.lastrow
    cornerrow = c.cornerrow
    first = c.reduced_inner_cols + 1
    last_short = c.short_row_columns[-1]

    braces = []
    for x in range(first, c.columns):
        if x <= last_short:
            if x > first:
                braces.append(key_wall_brace(c, x - 1, lastrow, 0, -1, web_post_br(c), x, lastrow, 0, -1, web_post_bl(c)))
            if x < last_short:
                braces.append(key_wall_brace(c, x, lastrow, 0, -1, web_post_bl(c), x, lastrow, 0, -1, web_post_br(c)))
            else:
                braces.append(key_wall_brace(c, x, lastrow, 0, -1, web_post_bl(c), x, lastrow, 0.5, -1, web_post_br(c)))

        elif x == last_short + 1:
            braces.append(key_wall_brace(c, x - 1, lastrow, 0.5, -1, web_post_br(c), x, cornerrow, 0.5, -1, web_post_bl(c)))
            braces.append(key_wall_brace(c, x, cornerrow, 0.5, -1, web_post_bl(c), x, cornerrow, 0, -1, web_post_br(c)))

        else:
            braces.append(key_wall_brace(c, x, cornerrow, 0, -1, web_post_bl(c), x - 1, cornerrow, 0, -1, web_post_br(c)))
            braces.append(key_wall_brace(c, x, cornerrow, 0, -1, web_post_bl(c), x, cornerrow, 0, -1, web_post_br(c)))

    return braces


def thumb_wall_braces(config: KeyboardConfig) -> List[ShapeNode]:
    c = config
    tr = _thumb_place(c, "tr")
    mr = _thumb_place(c, "mr")
    ml = _thumb_place(c, "ml")
    br = _thumb_place(c, "br")
    bl = _thumb_place(c, "bl")

    # the front wall starts right of the column the cluster covers, or at its corner on a one-column short row
    inner = c.reduced_inner_cols
    if c.has_key(inner + 1, c.lastrow):
        front_column, front_dx, front_post = inner + 1, 0, web_post_bl(c)
    else:
        front_column, front_dx, front_post = inner, 0.5, web_post_br(c)

    return [
        wall_brace(c, mr, 0, -1, web_post_br(c), tr, 0, -1, thumb_post_br(c)),
        wall_brace(c, mr, 0, -1, web_post_br(c), mr, 0, -1, web_post_bl(c)),
        wall_brace(c, br, 0, -1, web_post_br(c), br, 0, -1, web_post_bl(c)),
        wall_brace(c, ml, -0.3, 1, web_post_tr(c), ml, 0, 1, web_post_tl(c)),
        wall_brace(c, bl, 0, 1, web_post_tr(c), bl, 0, 1, web_post_tl(c)),
        wall_brace(c, br, -1, 0, web_post_tl(c), br, -1, 0, web_post_bl(c)),
        wall_brace(c, bl, -1, 0, web_post_tl(c), bl, -1, 0, web_post_bl(c)),
        # corners
        wall_brace(c, br, -1, 0, web_post_bl(c), br, 0, -1, web_post_bl(c)),
        wall_brace(c, bl, -1, 0, web_post_tl(c), bl, 0, 1, web_post_tl(c)),
        # tweeners
        wall_brace(c, mr, 0, -1, web_post_bl(c), br, 0, -1, web_post_br(c)),
        wall_brace(c, ml, 0, 1, web_post_tl(c), bl, 0, 1, web_post_tr(c)),
        wall_brace(c, bl, -1, 0, web_post_bl(c), br, -1, 0, web_post_tl(c)),
        wall_brace(
            c, tr, 0, -1, thumb_post_br(c),
            (lambda shape: key_place(c, shape, front_column, c.lastrow)), front_dx, -1, front_post,
        ),
    ]


def thumb_connection_hulls(config: KeyboardConfig) -> List[ShapeNode]:
    """
    The hand-built seam between the left wall, the thumb cluster and the grid.
    """
    c = config
    row = c.cornerrow
    post = web_post(c)
    tl_post = thumb_place(c, thumb_post_tl(c), "tl")

    def left(offset=None):
        shape = post if offset is None else geometry_engine.translate(post, offset)
        return left_key_place(c, shape, row, -1)

    def ml(offset=None):
        shape = web_post_tr(c) if offset is None else geometry_engine.translate(web_post_tr(c), offset)
        return thumb_place(c, shape, "ml")

    return [
        bottom_hull(c, [
            left(wall_locate2(c, -1, 0)),
            left(wall_locate3(c, -1, 0)),
            ml(wall_locate2(c, -0.3, 1)),
            ml(wall_locate3(c, -0.3, 1)),
        ]),
        geometry_engine.convex_hull([
            left(wall_locate2(c, -1, 0)),
            left(wall_locate3(c, -1, 0)),
            ml(wall_locate2(c, -0.3, 1)),
            ml(wall_locate3(c, -0.3, 1)),
            tl_post,
        ]),
        geometry_engine.convex_hull([
            left(wall_locate1(c, -1, 0)),
            left(wall_locate2(c, -1, 0)),
            left(wall_locate3(c, -1, 0)),
            tl_post,
        ]),
        geometry_engine.convex_hull([
            left(),
            left(wall_locate1(c, -1, 0)),
            key_place(c, web_post_bl(c), 0, row),
            tl_post,
        ]),
        geometry_engine.convex_hull([
            ml(),
            ml(wall_locate1(c, -0.3, 1)),
            ml(wall_locate2(c, -0.3, 1)),
            ml(wall_locate3(c, -0.3, 1)),
            tl_post,
        ]),
    ]


def pinky_wall_braces(config: KeyboardConfig) -> List[ShapeNode]:
    """
    Close the gap between the standard and wide posts of the 1.5u column on the front and back.
    """
    c = config
    if not c.wide_pinky:
        return []
    lastcol = c.lastcol
    return [
        key_wall_brace(c, lastcol, c.cornerrow, 0, -1, web_post_br(c), lastcol, c.cornerrow, 0, -1, web_post_br(c, wide=True)),
        key_wall_brace(c, lastcol, 0, 0, 1, web_post_tr(c), lastcol, 0, 0, 1, web_post_tr(c, wide=True)),
    ]


def back_wall(config: KeyboardConfig) -> ShapeNode:
    logging.debug("back_wall()")
    return geometry_engine.union(back_wall_braces(config))


def right_wall(config: KeyboardConfig) -> ShapeNode:
    logging.debug("right_wall()")
    return geometry_engine.union(right_wall_braces(config))


def left_wall(config: KeyboardConfig) -> ShapeNode:
    logging.debug("left_wall()")
    return geometry_engine.union(left_wall_braces(config))


def front_wall(config: KeyboardConfig) -> ShapeNode:
    logging.debug("front_wall()")
    return geometry_engine.union(front_wall_braces(config))


def thumb_walls(config: KeyboardConfig) -> ShapeNode:
    logging.debug("thumb_walls()")
    return geometry_engine.union(thumb_wall_braces(config))


def thumb_connection(config: KeyboardConfig) -> ShapeNode:
    logging.debug("thumb_connection()")
    return geometry_engine.union(thumb_connection_hulls(config))


def pinky_walls(config: KeyboardConfig) -> ShapeNode:
    logging.debug("pinky_walls()")
    return geometry_engine.union(pinky_wall_braces(config))


def case_wall_list(config: KeyboardConfig) -> List[ShapeNode]:
    """
    Every wall piece of the perimeter, in walking order: right, back, left, front, then the thumb cluster.
    """
    logging.debug("case_wall_list()")
    return (
        right_wall_braces(config)
        + back_wall_braces(config)
        + left_wall_braces(config)
        + front_wall_braces(config)
        + thumb_wall_braces(config)
        + thumb_connection_hulls(config)
    )


def case_walls(config: KeyboardConfig) -> ShapeNode:
    logging.debug("case_walls()")
    return geometry_engine.union(case_wall_list(config))


def _wall_sections(config: KeyboardConfig, height: float) -> List[ShapeNode]:
    walls = case_wall_list(config) + pinky_wall_braces(config)
    return [geometry_engine.project(wall, height, cut=True) for wall in walls]


def case_walls_plate(config: KeyboardConfig, height: float) -> ShapeNode:
    """
    Filled footprint of the walls at z=0, extruded up to height.

    Every wall section is fanned against a small square at the origin, which lies inside the perimeter.
    """
    logging.debug("case_walls_plate()")
    anchor = geometry_engine.project(geometry_engine.box(1, 1, 1), height, cut=True)
    return fan_hulls([anchor] + _wall_sections(config, height))


def case_walls_plate_outline(config: KeyboardConfig, height: float) -> ShapeNode:
    logging.debug("case_walls_plate_outline()")
    return geometry_engine.union(_wall_sections(config, height))


def ground_clip(config: KeyboardConfig, shape: ShapeNode) -> ShapeNode:
    """
    A block filling everything under z=0 below the shape, for subtraction.
    """
    logging.debug("ground_clip()")
    lower, upper = bounds(shape)
    lower = np.minimum(lower, [-CLIP_MARGIN, -CLIP_MARGIN, ground_z(config)])
    upper = np.maximum(upper, [CLIP_MARGIN, CLIP_MARGIN, 0.0])
    width, depth = (upper[:2] - lower[:2]) + 2 * CLIP_MARGIN
    height = -lower[2] + CLIP_MARGIN
    center_x, center_y = (upper[:2] + lower[:2]) / 2
    block = geometry_engine.box(width, depth, height)
    return geometry_engine.translate(block, (center_x, center_y, -height / 2))
