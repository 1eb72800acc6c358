import argparse
import logging
import pathlib
import sys
from typing import Dict, Optional

from .configuration import DEFAULT_CONFIG, GenerateConfigAction, KeyboardConfig, load_config
from .connectors import connectors, pinky_connectors, thumb_connectors
from .engines.csg_engine import geometry_engine
from .engines.engine import GeometryEngine, render
from .errors import ConfigurationError
from .parts import caps, key_holes
from .peripherals import (
    pro_micro_holder,
    screw_insert_holes,
    screw_insert_outers,
    screw_insert_screw_countersinks,
    screw_insert_screw_holes,
    trrs_hole,
    trrs_holder,
    usb_hole,
    usb_holder,
)
from .shapes import ShapeNode
from .thumbs import thumb, thumbcaps
from .walls import case_walls, case_walls_plate, case_walls_plate_outline, ground_clip, pinky_walls

MIRROR_PLANE = (1, 0, 0)
ENGINES = ("solid", "cadquery", "csg")


class LogLevelAction(argparse.Action):
    """
    Set the log level
    """

    log_levels = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL,
    }

    def __init__(self, option_strings, dest: str, **kwargs):
        kwargs.update({
            'default': "INFO",
            'type': str,
            'choices': self.log_levels.keys(),
            'help': "The log level to use."
        })
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, _parser: argparse.ArgumentParser, namespace: argparse.Namespace, values: str, _option_string: Optional[str] = None):
        setattr(namespace, self.dest, values)


parser = argparse.ArgumentParser(description="Generate a dactyl-manuform keyboard case.")
parser.add_argument("--generate-config", action=GenerateConfigAction)
parser.add_argument("--config", default=None, type=pathlib.Path, help="A config file to control keyboard generation.")
parser.add_argument("--engine", default="solid", choices=ENGINES, help="The geometry engine the case is exported with.")
parser.add_argument("--out", default=pathlib.Path("things"), type=pathlib.Path, help="The directory to write the case files to.")
parser.add_argument("--log-level", action=LogLevelAction)


##################
## CSG Assembly ##
##################


def model_base(config: KeyboardConfig) -> ShapeNode:
    """
    The right-hand case: key mounts, webbing, thumb cluster and walls, clipped at the ground plane.
    """
    logging.debug("model_base()")
    shape = geometry_engine.union([
        key_holes(config),
        pinky_connectors(config),
        pinky_walls(config),
        connectors(config),
        thumb(config),
        thumb_connectors(config),
    ])

    walls = [case_walls(config), screw_insert_outers(config)]
    if config.connector_cavities:
        walls.append(pro_micro_holder(config))
    s2 = geometry_engine.difference(geometry_engine.union(walls), [screw_insert_holes(config)])

    shape = geometry_engine.union([shape, s2])
    return geometry_engine.difference(shape, [ground_clip(config, shape)])


def model_right(config: KeyboardConfig) -> ShapeNode:
    logging.debug("model_right()")
    shape = model_base(config)
    if not config.connector_cavities:
        return shape

    shape = geometry_engine.union([shape, trrs_holder(config), usb_holder(config)])
    return geometry_engine.difference(shape, [geometry_engine.union([usb_hole(config), trrs_hole(config)])])


def model_left(config: KeyboardConfig) -> ShapeNode:
    logging.debug("model_left()")
    return geometry_engine.mirror(model_right(config), MIRROR_PLANE)


def plate_right(config: KeyboardConfig) -> ShapeNode:
    """
    The bottom plate: the wall footprint, plus a rim following the walls and the screw inserts,
    with countersunk screw holes.
    """
    logging.debug("plate_right()")
    plate_thickness = config.plate_thickness
    extra_thickness = max(1.0, config.screw_countersink_height + 1 - plate_thickness)

    base = case_walls_plate(config, plate_thickness)
    rim = geometry_engine.union([
        case_walls_plate_outline(config, extra_thickness),
        geometry_engine.project(screw_insert_outers(config), extra_thickness, cut=True),
    ])
    rim = geometry_engine.translate(rim, (0, 0, plate_thickness))

    holes = geometry_engine.union([
        geometry_engine.translate(screw_insert_screw_holes(config), (0, 0, -10)),
        geometry_engine.translate(screw_insert_screw_countersinks(config), (0, 0, -0.01)),
    ])
    return geometry_engine.difference(geometry_engine.union([base, rim]), [holes])


def plate_left(config: KeyboardConfig) -> ShapeNode:
    logging.debug("plate_left()")
    return geometry_engine.mirror(plate_right(config), MIRROR_PLANE)


def preview_right(config: KeyboardConfig) -> ShapeNode:
    """
    The case with keycaps in place, for checking clearances.
    """
    logging.debug("preview_right()")
    shape = geometry_engine.union([
        key_holes(config),
        pinky_connectors(config),
        pinky_walls(config),
        connectors(config),
        thumb(config),
        thumb_connectors(config),
        case_walls(config),
        thumbcaps(config),
        caps(config),
    ])
    return geometry_engine.difference(shape, [ground_clip(config, shape)])


def generate(config: KeyboardConfig = DEFAULT_CONFIG) -> Dict[str, ShapeNode]:
    """
    Every variant of the case, keyed by the name of the file it is written to.
    """
    logging.info("Generating case")
    right = model_right(config)
    plate = plate_right(config)
    return {
        "right": right,
        "left": geometry_engine.mirror(right, MIRROR_PLANE),
        "right-plate": plate,
        "left-plate": geometry_engine.mirror(plate, MIRROR_PLANE),
        "right-test": preview_right(config),
    }


def get_engine(name: str) -> GeometryEngine:
    logging.info("Using engine %s", name)
    if name == 'cadquery':
        from .engines.cadquery_engine import CadQueryEngine
        return CadQueryEngine()
    if name == 'csg':
        return geometry_engine

    from .engines.solid_engine import SolidEngine
    return SolidEngine()


def run(config: KeyboardConfig, engine: GeometryEngine, save_path: pathlib.Path):
    variants = generate(config)

    save_path.mkdir(parents=True, exist_ok=True)
    for name, shape in variants.items():
        geometry = render(shape, engine)
        for exporter in engine.exporters():
            exporter.export_geometry(geometry, save_path / (name + exporter.file_type()))


def main(argv=None) -> int:
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level)

    try:
        if args.config is None:
            logging.info("NO CONFIGURATION SPECIFIED, USING DEFAULT CONFIGURATION")
            config = DEFAULT_CONFIG
        else:
            config = load_config(args.config)
    except ConfigurationError as e:
        logging.error("Invalid configuration: %s", e)
        return 1

    run(config, get_engine(args.engine), args.out)
    return 0


if __name__ == '__main__':
    sys.exit(main())
