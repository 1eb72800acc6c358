import logging
from pathlib import Path
from typing import Sequence
import sys
if sys.version_info[:2] > (3, 8):
    from collections.abc import Iterable
else:
    from typing import Iterable

from solid import (
    OpenSCADObject,
    cube,
    cylinder,
    difference,
    hull,
    intersection,
    linear_extrude,
    mirror,
    polygon,
    projection,
    rotate,
    scad_render_to_file,
    sphere,
    translate,
    union,
)

from ..errors import DegenerateGeometryError
from .engine import GeometryEngine, GeometryExporter

SCAD_HEADER = "// generated by dactyl-csg"


def _vector(values: Sequence[float]) -> list:
    return [float(v) for v in values]


class _SolidScadExporter(GeometryExporter[OpenSCADObject]):
    """
    Exporter that writes OpenSCAD source
    """

    @staticmethod
    def file_type() -> str:
        return ".scad"

    @staticmethod
    def export_geometry(shape: OpenSCADObject, path: Path):
        logging.info("Exporting to %s", path)
        scad_render_to_file(shape, str(path), file_header=SCAD_HEADER, include_orig_code=False)


class SolidEngine(GeometryEngine[OpenSCADObject]):
    """
    SolidPython geometry engine; OpenSCAD evaluates the exported source.
    """

    @staticmethod
    def box(width: float, height: float, depth: float) -> OpenSCADObject:
        return cube([width, height, depth], center=True)

    @staticmethod
    def cylinder(radius: float, height: float, segments: int = 100) -> OpenSCADObject:
        return cylinder(r=radius, h=height, center=True, segments=segments)

    @staticmethod
    def sphere(radius: float, segments: int = 100) -> OpenSCADObject:
        return sphere(r=radius, segments=segments)

    @staticmethod
    def cone(radius_bottom: float, radius_top: float, height: float, segments: int = 100) -> OpenSCADObject:
        return cylinder(r1=radius_bottom, r2=radius_top, h=height, center=True, segments=segments)

    @staticmethod
    def polygon(points: Sequence[Sequence[float]], height: float) -> OpenSCADObject:
        return linear_extrude(height=height)(polygon([_vector(point) for point in points]))

    @staticmethod
    def rotate(shape: OpenSCADObject, euler_degrees: Sequence[float]) -> OpenSCADObject:
        return rotate(a=_vector(euler_degrees))(shape)

    @staticmethod
    def translate(shape: OpenSCADObject, vector: Sequence[float]) -> OpenSCADObject:
        return translate(_vector(vector))(shape)

    @staticmethod
    def mirror(shape: OpenSCADObject, vector: Sequence[float]) -> OpenSCADObject:
        return mirror(_vector(vector))(shape)

    @staticmethod
    def union(shapes: Iterable[OpenSCADObject]) -> OpenSCADObject:
        return union()(*shapes)

    @staticmethod
    def difference(initial_shape: OpenSCADObject, subtractions: Iterable[OpenSCADObject]) -> OpenSCADObject:
        subtractions = list(subtractions)
        if not subtractions:
            return initial_shape
        return difference()(initial_shape, *subtractions)

    @staticmethod
    def intersect(shapes: Iterable[OpenSCADObject]) -> OpenSCADObject:
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")
        return intersection()(*shapes)

    @staticmethod
    def convex_hull(shapes: Iterable[OpenSCADObject]) -> OpenSCADObject:
        shapes = list(shapes)
        if len(shapes) < 2:
            raise DegenerateGeometryError("a hull needs at least two shapes, got {}".format(len(shapes)))
        return hull()(*shapes)

    @staticmethod
    def project(shape: OpenSCADObject, height: float, cut: bool = False) -> OpenSCADObject:
        return linear_extrude(height=height)(projection(cut=cut)(shape))

    @staticmethod
    def exporters() -> Iterable[GeometryExporter[OpenSCADObject]]:
        return [_SolidScadExporter()]
