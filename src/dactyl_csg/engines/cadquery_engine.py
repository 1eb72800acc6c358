from functools import reduce
import logging
from pathlib import Path
from typing import Sequence
import sys
if sys.version_info[:2] > (3, 8):
    from collections.abc import Iterable
else:
    from typing import Iterable

from cadquery import Compound, Edge, Face, Shape, Shell, Solid, Vector, Wire, exporters
from scipy.spatial import ConvexHull as sphull
import numpy as np

from ..errors import DegenerateGeometryError
from .engine import GeometryEngine, GeometryExporter

TESSELLATION_TOLERANCE = 0.05
SECTION_HEIGHT = 0.005
SLICE_EXTENT = 1000


class _CadQueryStepExporter(GeometryExporter[Shape]):
    """
    Exporter for cadquery that can export STEP files
    """

    @staticmethod
    def file_type() -> str:
        return ".step"

    @staticmethod
    def export_geometry(shape: Shape, path: Path):
        logging.info("Exporting to %s", path)
        exporters.export(shape, str(path), exporters.ExportTypes.STEP)


class _CadQueryStlExporter(GeometryExporter[Shape]):
    """
    Exporter for cadquery that can export STL meshes
    """

    @staticmethod
    def file_type() -> str:
        return ".stl"

    @staticmethod
    def export_geometry(shape: Shape, path: Path):
        logging.info("Exporting to %s", path)
        exporters.export(shape, str(path), exporters.ExportTypes.STL)


def _empty() -> Shape:
    return Compound.makeCompound([])


class CadQueryEngine(GeometryEngine[Shape]):
    """
    CadQuery geometry engine

    Hulls are computed from a tessellation of the shapes, so they are convex. A projection is the union
    of the convex outlines of each solid's footprint, or with `cut` the exact section of the shape just above z=0.
    """

    @staticmethod
    def box(width: float, height: float, depth: float) -> Shape:
        return Solid.makeBox(width, height, depth).translate(Vector(-width / 2, -height / 2, -depth / 2))

    @staticmethod
    def cylinder(radius: float, height: float, _segments: int = 100) -> Shape:
        return Solid.makeCylinder(radius, height).translate(Vector(0, 0, -height / 2))

    @staticmethod
    def sphere(radius: float, _segments: int = 100) -> Shape:
        return Solid.makeSphere(radius, angleDegrees1=-90, angleDegrees2=90)

    @staticmethod
    def cone(radius_bottom: float, radius_top: float, height: float, _segments: int = 100) -> Shape:
        cone = Solid.makeCone(radius1=radius_bottom, radius2=radius_top, height=height)
        return cone.translate(Vector(0, 0, -height / 2))

    @staticmethod
    def polygon(points: Sequence[Sequence[float]], height: float) -> Shape:
        vertices = [Vector(x, y, 0) for x, y in points]
        wire = Wire.makePolygon(vertices + [vertices[0]])
        return Solid.extrudeLinear(wire, [], Vector(0, 0, height))

    @staticmethod
    def rotate(shape: Shape, euler_degrees: Sequence[float]) -> Shape:
        origin = (0, 0, 0)
        shape = shape.rotate(startVector=origin, endVector=(1, 0, 0), angleDegrees=euler_degrees[0])
        shape = shape.rotate(startVector=origin, endVector=(0, 1, 0), angleDegrees=euler_degrees[1])
        shape = shape.rotate(startVector=origin, endVector=(0, 0, 1), angleDegrees=euler_degrees[2])
        return shape

    @staticmethod
    def translate(shape: Shape, vector: Sequence[float]) -> Shape:
        return shape.translate(Vector(*vector))

    @staticmethod
    def mirror(shape: Shape, vector: Sequence[float]) -> Shape:
        return shape.mirror(tuple(vector))

    @staticmethod
    def union(shapes: Iterable[Shape]) -> Shape:
        logging.debug("union()")
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        if len(shapes) == 1:
            return shapes[0].copy()
        return reduce(lambda x, y: x.fuse(y), shapes)

    @staticmethod
    def difference(initial_shape: Shape, subtractions: Iterable[Shape]) -> Shape:
        logging.debug("difference()")
        subtractions = list(subtractions)
        if not subtractions:
            return initial_shape.copy()
        return reduce(lambda initial, to_remove: initial.cut(to_remove), subtractions, initial_shape)

    @staticmethod
    def intersect(shapes: Iterable[Shape]) -> Shape:
        logging.debug("intersect()")
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        if len(shapes) == 1:
            return shapes[0].copy()
        return reduce(lambda x, y: x.intersect(y), shapes)

    @staticmethod
    def convex_hull(shapes: Iterable[Shape]) -> Shape:
        shapes = list(shapes)
        if len(shapes) < 2:
            raise DegenerateGeometryError("a hull needs at least two shapes, got {}".format(len(shapes)))

        vertices = []
        for shape in shapes:
            vertices.extend(CadQueryEngine._points(shape))

        return CadQueryEngine._hull_from_points(vertices)

    @staticmethod
    def project(shape: Shape, height: float, cut: bool = False) -> Shape:
        if cut:
            section = shape.intersect(
                Face.makePlane(SLICE_EXTENT, SLICE_EXTENT, basePnt=Vector(0, 0, SECTION_HEIGHT))
            )
            outlines = [
                Solid.extrudeLinear(face.outerWire(), face.innerWires(), Vector(0, 0, height))
                for face in section.translate(Vector(0, 0, -SECTION_HEIGHT)).Faces()
            ]
        else:
            outlines = [CadQueryEngine._outline(solid, height) for solid in shape.Solids()]
            outlines = [outline for outline in outlines if outline is not None]

        if not outlines:
            logging.debug("nothing to project")
            return _empty()
        return CadQueryEngine.union(outlines)

    @staticmethod
    def _outline(solid: Shape, height: float):
        points = CadQueryEngine._points(solid)
        if not points:
            return None

        flat = np.unique(np.round(np.array(points)[:, :2], 6), axis=0)
        if len(flat) < 3:
            return None

        outline = sphull(flat)
        return CadQueryEngine.polygon([flat[i] for i in outline.vertices], height)

    @staticmethod
    def _points(shape: Shape) -> list:
        vertices, _triangles = shape.tessellate(TESSELLATION_TOLERANCE)
        return [v.toTuple() for v in vertices]

    @staticmethod
    def _face_from_points(points):
        edges = []
        num_pnts = len(points)
        for i in range(len(points)):
            p1 = points[i]
            p2 = points[(i + 1) % num_pnts]
            edges.append(Edge.makeLine(Vector(*p1), Vector(*p2)))

        return Face.makeFromWires(Wire.assembleEdges(edges))

    @staticmethod
    def _hull_from_points(points):
        hull_calc = sphull(points)
        n_faces = len(hull_calc.simplices)

        faces = []
        for i in range(n_faces):
            face_items = hull_calc.simplices[i]
            fpnts = []
            for item in face_items:
                fpnts.append(points[item])
            faces.append(CadQueryEngine._face_from_points(fpnts))

        return Solid.makeSolid(Shell.makeShell(faces))

    @staticmethod
    def exporters() -> Iterable[GeometryExporter[Shape]]:
        return [_CadQueryStepExporter(), _CadQueryStlExporter()]
