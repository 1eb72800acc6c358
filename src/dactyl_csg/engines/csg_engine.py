import json
import logging
from pathlib import Path
from typing import Sequence
import sys
if sys.version_info[:2] > (3, 8):
    from collections.abc import Iterable
else:
    from typing import Iterable

from ..errors import DegenerateGeometryError
from ..shapes import BooleanOp, Primitive, Projection, ShapeNode, Transform, as_dict, is_empty
from .engine import GeometryEngine, GeometryExporter


def _vector(values: Sequence[float]) -> tuple:
    return tuple(float(v) for v in values)


class _CsgJsonExporter(GeometryExporter[ShapeNode]):
    """
    Exporter that dumps the shape tree itself as JSON
    """

    @staticmethod
    def file_type() -> str:
        return ".json"

    @staticmethod
    def export_geometry(shape: ShapeNode, path: Path):
        logging.info("Exporting to %s", path)
        with open(path, mode="wt", encoding="utf-8") as fid:
            json.dump(as_dict(shape), fid, indent=1)


class CsgEngine(GeometryEngine[ShapeNode]):
    """
    Engine that records operations as a shape tree instead of evaluating them.
    """

    @staticmethod
    def box(width: float, height: float, depth: float) -> ShapeNode:
        return Primitive("box", _vector((width, height, depth)))

    @staticmethod
    def cylinder(radius: float, height: float, segments: int = 100) -> ShapeNode:
        return Primitive("cylinder", _vector((radius, radius, height)), segments=segments)

    @staticmethod
    def sphere(radius: float, segments: int = 100) -> ShapeNode:
        return Primitive("sphere", _vector((radius,)), segments=segments)

    @staticmethod
    def cone(radius_bottom: float, radius_top: float, height: float, segments: int = 100) -> ShapeNode:
        return Primitive("cylinder", _vector((radius_bottom, radius_top, height)), segments=segments)

    @staticmethod
    def polygon(points: Sequence[Sequence[float]], height: float) -> ShapeNode:
        return Primitive("polygon", _vector((height,)), points=tuple(_vector(point) for point in points))

    @staticmethod
    def rotate(shape: ShapeNode, euler_degrees: Sequence[float]) -> ShapeNode:
        return Transform("rotate", _vector(euler_degrees), shape)

    @staticmethod
    def translate(shape: ShapeNode, vector: Sequence[float]) -> ShapeNode:
        return Transform("translate", _vector(vector), shape)

    @staticmethod
    def mirror(shape: ShapeNode, vector: Sequence[float]) -> ShapeNode:
        return Transform("mirror", _vector(vector), shape)

    @staticmethod
    def union(shapes: Iterable[ShapeNode]) -> ShapeNode:
        """
        An empty collection gives an empty union; empty unions passed in are dropped.
        """
        return BooleanOp("union", tuple(shape for shape in shapes if not is_empty(shape)))

    @staticmethod
    def difference(initial_shape: ShapeNode, subtractions: Iterable[ShapeNode]) -> ShapeNode:
        subtractions = tuple(subtractions)
        if not subtractions:
            return initial_shape
        return BooleanOp("difference", (initial_shape, *subtractions))

    @staticmethod
    def intersect(shapes: Iterable[ShapeNode]) -> ShapeNode:
        shapes = tuple(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")
        return BooleanOp("intersection", shapes)

    @staticmethod
    def convex_hull(shapes: Iterable[ShapeNode]) -> ShapeNode:
        shapes = tuple(shapes)
        if len(shapes) < 2:
            raise DegenerateGeometryError("a hull needs at least two shapes, got {}".format(len(shapes)))
        return BooleanOp("hull", shapes)

    @staticmethod
    def project(shape: ShapeNode, height: float, cut: bool = False) -> ShapeNode:
        return Projection(shape, float(height), cut)

    @staticmethod
    def exporters() -> Iterable[GeometryExporter[ShapeNode]]:
        return [_CsgJsonExporter()]


geometry_engine = CsgEngine()
