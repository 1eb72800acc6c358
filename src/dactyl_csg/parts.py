import logging

from .configuration import KeyboardConfig
from .engines.csg_engine import geometry_engine
from .placement import grid_points, key_place
from .shapes import ShapeNode

#################
## Switch Hole ##
#################


def single_plate(config: KeyboardConfig) -> ShapeNode:
    """
    Switch mount: a rim around the keyswitch hole, side nubs for MX-style switches and
    a relief for the retention tabs.
    """
    logging.debug("single_plate()")
    keyswitch_width = config.keyswitch_width
    keyswitch_height = config.keyswitch_height
    plate_thickness = config.plate_thickness
    rim = config.plate_rim

    top_wall = geometry_engine.box(config.mount_width, rim, plate_thickness)
    top_wall = geometry_engine.translate(top_wall, (0, (rim / 2) + (keyswitch_height / 2), plate_thickness / 2))

    left_wall = geometry_engine.box(rim, config.mount_height, plate_thickness)
    left_wall = geometry_engine.translate(left_wall, ((rim / 2) + (keyswitch_width / 2), 0, plate_thickness / 2))

    halves = [top_wall, left_wall]
    if config.create_side_nubs:
        side_nub = geometry_engine.cylinder(radius=1, height=2.75, segments=config.resolution)
        side_nub = geometry_engine.rotate(side_nub, (90, 0, 0))
        side_nub = geometry_engine.translate(side_nub, (keyswitch_width / 2, 0, 1))

        nub_cube = geometry_engine.box(rim, 2.75, config.side_nub_thickness)
        nub_cube = geometry_engine.translate(nub_cube, ((rim / 2) + (keyswitch_width / 2), 0, config.side_nub_thickness / 2))

        side_nub = geometry_engine.convex_hull((side_nub, nub_cube))
        side_nub = geometry_engine.translate(side_nub, (0, 0, plate_thickness - config.side_nub_thickness))
        halves.append(side_nub)

    plate_half1 = geometry_engine.union(halves)
    plate_half2 = geometry_engine.mirror(plate_half1, (1, 0, 0))
    plate_half2 = geometry_engine.mirror(plate_half2, (0, 1, 0))
    plate = geometry_engine.union([plate_half1, plate_half2])

    tab_hole_thickness = plate_thickness - config.retention_tab_thickness
    top_nub = geometry_engine.box(5, 5, tab_hole_thickness)
    top_nub = geometry_engine.translate(top_nub, (keyswitch_width / 2, 0, tab_hole_thickness / 2))
    top_nub_pair = geometry_engine.union([
        top_nub,
        geometry_engine.mirror(geometry_engine.mirror(top_nub, (1, 0, 0)), (0, 1, 0)),
    ])
    top_nub_pair = geometry_engine.rotate(top_nub_pair, (0, 0, 90))

    return geometry_engine.difference(plate, [top_nub_pair])


def double_plate(config: KeyboardConfig) -> ShapeNode:
    """
    Fillers above and below a 1u mount that carry a 1.5u thumb key.
    """
    logging.debug("double_plate()")
    top_plate = geometry_engine.box(config.mount_width, config.double_plate_height, config.web_thickness)
    top_plate = geometry_engine.translate(top_plate,
                                          [0, (config.double_plate_height + config.mount_height) / 2,
                                           config.plate_thickness - (config.web_thickness / 2)]
                                          )
    return geometry_engine.union((top_plate, geometry_engine.mirror(top_plate, (0, 1, 0))))


################
## SA Keycaps ##
################


def sa_cap(config: KeyboardConfig, usize: float = 1) -> ShapeNode:
    """
    Preview-only keycap outline for 1u, 1.5u and 2u keys.
    """
    if usize == 1:
        bl2 = 18.5 / 2
        bw2 = 18.5 / 2
        m = 17 / 2
        pl2 = 6
        pw2 = 6

    elif usize == 2:
        bl2 = config.sa_length
        bw2 = config.sa_length / 2
        m = 0
        pl2 = 16
        pw2 = 6

    elif usize == 1.5:
        bl2 = config.sa_length / 2
        bw2 = 27.94 / 2
        m = 0
        pl2 = 6
        pw2 = 11

    else:
        raise ValueError("no keycap for {}u keys".format(usize))

    def outline(half_width, half_length, z):
        square = geometry_engine.polygon(
            [[half_width, half_length], [half_width, -half_length], [-half_width, -half_length], [-half_width, half_length]],
            0.1,
        )
        return geometry_engine.translate(square, (0, 0, z))

    layers = [outline(bw2, bl2, 0.05)]
    if m > 0:
        layers.append(outline(m, m, 6.0))
    layers.append(outline(pw2, pl2, 12.0))

    key_cap = geometry_engine.convex_hull(layers)
    return geometry_engine.translate(key_cap, (0, 0, 5 + config.plate_thickness))


def key_holes(config: KeyboardConfig) -> ShapeNode:
    logging.debug("key_holes()")
    plate = single_plate(config)
    return geometry_engine.union([key_place(config, plate, column, row) for column, row in grid_points(config)])


def caps(config: KeyboardConfig) -> ShapeNode:
    logging.debug("caps()")
    shapes = []
    for column, row in grid_points(config):
        usize = 1.5 if config.wide_pinky and column == config.lastcol else 1
        shapes.append(key_place(config, sa_cap(config, usize), column, row))
    return geometry_engine.union(shapes)


####################
## Web Connectors ##
####################


def web_post(config: KeyboardConfig) -> ShapeNode:
    post = geometry_engine.box(config.post_size, config.post_size, config.web_thickness)
    post = geometry_engine.translate(post, (0, 0, config.plate_thickness - (config.web_thickness / 2)))
    return post


def _w_divide(wide):
    return 1.2 if wide else 2.0


def web_post_tr(config: KeyboardConfig, wide: bool = False) -> ShapeNode:
    return geometry_engine.translate(web_post(config), (
        (config.mount_width / _w_divide(wide)) - config.post_adj, (config.mount_height / 2) - config.post_adj, 0))


def web_post_tl(config: KeyboardConfig, wide: bool = False) -> ShapeNode:
    return geometry_engine.translate(web_post(config), (
        -(config.mount_width / _w_divide(wide)) + config.post_adj, (config.mount_height / 2) - config.post_adj, 0))


def web_post_bl(config: KeyboardConfig, wide: bool = False) -> ShapeNode:
    return geometry_engine.translate(web_post(config), (
        -(config.mount_width / _w_divide(wide)) + config.post_adj, -(config.mount_height / 2) + config.post_adj, 0))


def web_post_br(config: KeyboardConfig, wide: bool = False) -> ShapeNode:
    return geometry_engine.translate(web_post(config), (
        (config.mount_width / _w_divide(wide)) - config.post_adj, -(config.mount_height / 2) + config.post_adj, 0))
