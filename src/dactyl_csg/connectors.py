import logging
from typing import Optional, Sequence

from .configuration import KeyboardConfig
from .engines.csg_engine import geometry_engine
from .errors import DegenerateGeometryError
from .parts import web_post_bl, web_post_br, web_post_tl, web_post_tr
from .placement import key_place
from .shapes import ShapeNode
from .thumbs import (
    thumb_bl_place,
    thumb_br_place,
    thumb_ml_place,
    thumb_mr_place,
    thumb_post_bl,
    thumb_post_br,
    thumb_post_tl,
    thumb_post_tr,
    thumb_tl_place,
    thumb_tr_place,
)

HULL_WINDOW = 4


def hull(shapes: Sequence[ShapeNode]) -> Optional[ShapeNode]:
    """
    Convex hull of the shapes, or None when there are too few shapes to hull.
    """
    try:
        return geometry_engine.convex_hull(shapes)
    except DegenerateGeometryError as e:
        logging.debug("skipping hull: %s", e)
        return None


def triangle_hulls(shapes: Sequence[ShapeNode]) -> ShapeNode:
    """
    Union of the hulls of every run of four consecutive shapes.

    N shapes give max(0, N - 3) hulls; the order of `shapes` is the winding of the web.
    """
    hulls = []
    for i in range(len(shapes) - (HULL_WINDOW - 1)):
        shape = hull(shapes[i: (i + HULL_WINDOW)])
        if shape is not None:
            hulls.append(shape)

    return geometry_engine.union(hulls)


def fan_hulls(shapes: Sequence[ShapeNode]) -> ShapeNode:
    """
    Union of the hulls of every shape after the first with the first.
    """
    hulls = []
    for shape in shapes[1:]:
        shape = hull([shapes[0], shape])
        if shape is not None:
            hulls.append(shape)

    return geometry_engine.union(hulls)


def connectors(config: KeyboardConfig) -> ShapeNode:
    logging.debug("connectors()")
    ncols = config.columns
    lastrow = config.lastrow
    cornerrow = config.cornerrow
    reduced_inner_cols = config.reduced_inner_cols
    reduced_outer_cols = config.reduced_outer_cols

    def post(post_fn, column, row):
        return key_place(config, post_fn(config), column, row)

    hulls = []
    # row connections
    for column in range(ncols - 1):
        if reduced_inner_cols <= column < (ncols - reduced_outer_cols - 1):
            iterrows = lastrow + 1
        else:
            iterrows = lastrow
        for row in range(iterrows):
            hulls.append(triangle_hulls([
                post(web_post_tl, column + 1, row),
                post(web_post_tr, column, row),
                post(web_post_bl, column + 1, row),
                post(web_post_br, column, row),
            ]))

    # column connections
    for column in range(ncols):
        if reduced_inner_cols <= column < (ncols - reduced_outer_cols):
            iterrows = lastrow
        else:
            iterrows = cornerrow
        for row in range(iterrows):
            hulls.append(triangle_hulls([
                post(web_post_bl, column, row),
                post(web_post_br, column, row),
                post(web_post_tl, column, row + 1),
                post(web_post_tr, column, row + 1),
            ]))

    # diagonal connections
    for column in range(ncols - 1):
        if reduced_inner_cols <= column < (ncols - reduced_outer_cols - 1):
            iterrows = lastrow
        else:
            iterrows = cornerrow
        for row in range(iterrows):
            hulls.append(triangle_hulls([
                post(web_post_br, column, row),
                post(web_post_tr, column, row + 1),
                post(web_post_bl, column + 1, row),
                post(web_post_tl, column + 1, row + 1),
            ]))

        # inside corners where the short last row starts and ends
        if column == (reduced_inner_cols - 1):
            hulls.append(triangle_hulls([
                post(web_post_bl, column + 1, iterrows),
                post(web_post_br, column, iterrows),
                post(web_post_tl, column + 1, iterrows + 1),
                post(web_post_bl, column + 1, iterrows + 1),
            ]))
        if column == (ncols - reduced_outer_cols - 1):
            hulls.append(triangle_hulls([
                post(web_post_br, column, iterrows),
                post(web_post_bl, column + 1, iterrows),
                post(web_post_tr, column, iterrows + 1),
                post(web_post_br, column, iterrows + 1),
            ]))

    return geometry_engine.union(hulls)


def pinky_connectors(config: KeyboardConfig) -> ShapeNode:
    """
    Webbing between the standard and the wide posts of the 1.5u pinky column.
    """
    logging.debug("pinky_connectors()")
    if not config.wide_pinky:
        return geometry_engine.union([])

    lastcol = config.lastcol

    def post(post_fn, row, wide=False):
        return key_place(config, post_fn(config, wide=wide), lastcol, row)

    hulls = []
    for row in range(config.lastrow):
        hulls.append(triangle_hulls([
            post(web_post_tr, row),
            post(web_post_tr, row, wide=True),
            post(web_post_br, row),
            post(web_post_br, row, wide=True),
        ]))

    for row in range(config.cornerrow):
        hulls.append(triangle_hulls([
            post(web_post_br, row),
            post(web_post_br, row, wide=True),
            post(web_post_tr, row + 1),
            post(web_post_tr, row + 1, wide=True),
        ]))

    return geometry_engine.union(hulls)


def thumb_connectors(config: KeyboardConfig) -> ShapeNode:
    logging.debug("thumb_connectors()")
    lastrow = config.lastrow
    cornerrow = config.cornerrow
    c = config

    hulls = []

    # top two
    hulls.append(
        triangle_hulls(
            [
                thumb_tl_place(c, thumb_post_tr(c)),
                thumb_tl_place(c, thumb_post_br(c)),
                thumb_tr_place(c, thumb_post_tl(c)),
                thumb_tr_place(c, thumb_post_bl(c)),
            ]
        )
    )

    # bottom two on the right
    hulls.append(
        triangle_hulls(
            [
                thumb_br_place(c, web_post_tr(c)),
                thumb_br_place(c, web_post_br(c)),
                thumb_mr_place(c, web_post_tl(c)),
                thumb_mr_place(c, web_post_bl(c)),
            ]
        )
    )

    # centers of the bottom four
    hulls.append(
        triangle_hulls(
            [
                thumb_bl_place(c, web_post_tr(c)),
                thumb_bl_place(c, web_post_br(c)),
                thumb_ml_place(c, web_post_tl(c)),
                thumb_ml_place(c, web_post_bl(c)),
            ]
        )
    )

    # top two to the middle two, starting on the left
    hulls.append(
        triangle_hulls(
            [
                thumb_br_place(c, web_post_tl(c)),
                thumb_bl_place(c, web_post_bl(c)),
                thumb_br_place(c, web_post_tr(c)),
                thumb_bl_place(c, web_post_br(c)),
                thumb_mr_place(c, web_post_tl(c)),
                thumb_ml_place(c, web_post_bl(c)),
                thumb_mr_place(c, web_post_tr(c)),
                thumb_ml_place(c, web_post_br(c)),
            ]
        )
    )

    # the 1.5u pair to the middle two
    hulls.append(
        triangle_hulls(
            [
                thumb_tl_place(c, thumb_post_tl(c)),
                thumb_ml_place(c, web_post_tr(c)),
                thumb_tl_place(c, thumb_post_bl(c)),
                thumb_ml_place(c, web_post_br(c)),
                thumb_tl_place(c, thumb_post_br(c)),
                thumb_mr_place(c, web_post_tr(c)),
                thumb_tr_place(c, thumb_post_bl(c)),
                thumb_mr_place(c, web_post_br(c)),
                thumb_tr_place(c, thumb_post_br(c)),
            ]
        )
    )

    # top two to the main keyboard, starting on the left
    inner = config.reduced_inner_cols
    seam = [
        thumb_tl_place(c, thumb_post_tl(c)),
        key_place(c, web_post_bl(c), 0, cornerrow),
        thumb_tl_place(c, thumb_post_tr(c)),
        key_place(c, web_post_br(c), 0, cornerrow),
        thumb_tr_place(c, thumb_post_tl(c)),
        key_place(c, web_post_bl(c), inner - 1, cornerrow),
        thumb_tr_place(c, thumb_post_tr(c)),
        key_place(c, web_post_br(c), inner - 1, cornerrow),
        key_place(c, web_post_tl(c), inner, lastrow),
        key_place(c, web_post_bl(c), inner, lastrow),
        thumb_tr_place(c, thumb_post_tr(c)),
        key_place(c, web_post_bl(c), inner, lastrow),
        thumb_tr_place(c, thumb_post_br(c)),
        key_place(c, web_post_br(c), inner, lastrow),
    ]
    # on a one-column short row the front wall picks up at the corner instead
    if config.has_key(inner + 1, lastrow):
        seam.append(key_place(c, web_post_bl(c), inner + 1, lastrow))
    hulls.append(triangle_hulls(seam))

    return geometry_engine.union(hulls)
