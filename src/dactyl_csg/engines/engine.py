from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, Sequence, TypeVar
import sys
if sys.version_info[:2] > (3, 8):
    from collections.abc import Iterable
else:
    from typing import Iterable

from ..shapes import Primitive, Projection, ShapeNode, Transform, is_empty

TGeometry = TypeVar("TGeometry")


class GeometryExporter(ABC, Generic[TGeometry]):
    """
    A class that encapsulates the ability to export geometry.
    """

    @staticmethod
    @abstractmethod
    def file_type() -> str:
        """
        The file extension this exporter supports
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def export_geometry(shape: TGeometry, path: Path):
        """
        Export the given shape to path.
        """
        raise NotImplementedError


class GeometryEngine(ABC, Generic[TGeometry]):
    """
    Engine base class.

    Dimensions are in millimeters.
    All operations that manipulate shapes return copies; no in-place manipulation is performed.
    Boxes, cylinders, cones and spheres are centered on the origin.
    """

    @staticmethod
    @abstractmethod
    def box(width: float, height: float, depth: float) -> TGeometry:
        """
        Create a box with the given dimensions.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def cylinder(radius: float, height: float, segments: int = 100) -> TGeometry:
        """
        Create a cylinder with the given dimensions.

        The number of segments may be provided, but this may be ignored on some engines.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def sphere(radius: float, segments: int = 100) -> TGeometry:
        """
        Create a sphere with the given radius.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def cone(radius_bottom: float, radius_top: float, height: float, segments: int = 100) -> TGeometry:
        """
        Create a cone with the given radii and height.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def polygon(points: Sequence[Sequence[float]], height: float) -> TGeometry:
        """
        Extrude a 2D polygon in the XY plane from z=0 up to height.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def rotate(shape: TGeometry, euler_degrees: Sequence[float]) -> TGeometry:
        """
        Rotate the shape by the given euler angles in degrees, and return a copy.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def translate(shape: TGeometry, vector: Sequence[float]) -> TGeometry:
        """
        Translate the given shape, and return a copy.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def mirror(shape: TGeometry, vector: Sequence[float]) -> TGeometry:
        """
        Mirror the given shape about the plane through the origin normal to vector, and return a copy
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def union(shapes: Iterable[TGeometry]) -> TGeometry:
        """
        Create a new shape from the union of multiple other shapes
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def difference(initial_shape: TGeometry, subtractions: Iterable[TGeometry]) -> TGeometry:
        """
        Create a new shape from the subtraction of multiple shapes from a starting shape.
        If `subtractions` is empty, a copy of `initial_shape` is returned.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def intersect(shapes: Iterable[TGeometry]) -> TGeometry:
        """
        Create a new shape from the intersection of multiple shapes.
        It is an error to pass an empty collection.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def convex_hull(shapes: Iterable[TGeometry]) -> TGeometry:
        """
        Construct a convex hull from the collection of multiple shapes.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def project(shape: TGeometry, height: float, cut: bool = False) -> TGeometry:
        """
        Flatten the shape onto the z=0 plane, or slice it there when `cut` is set,
        and extrude the outline from z=0 up to height.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def exporters() -> Iterable[GeometryExporter[TGeometry]]:
        """
        Get the exporters this engine supports.
        """
        raise NotImplementedError


def render(node: ShapeNode, engine: GeometryEngine[TGeometry]) -> TGeometry:
    """
    Rebuild a shape tree with the given engine.

    Empty unions are dropped from their parents, since not every engine can build an empty solid.
    """
    if isinstance(node, Primitive):
        if node.kind == "box":
            return engine.box(*node.size)
        if node.kind == "cylinder":
            bottom, top, height = node.size
            if bottom == top:
                return engine.cylinder(bottom, height, node.segments)
            return engine.cone(bottom, top, height, node.segments)
        if node.kind == "sphere":
            return engine.sphere(node.size[0], node.segments)
        if node.kind == "polygon":
            return engine.polygon(node.points, node.size[0])
        raise ValueError("unknown primitive {!r}".format(node.kind))

    if isinstance(node, Transform):
        child = render(node.child, engine)
        if node.kind == "translate":
            return engine.translate(child, node.vector)
        if node.kind == "rotate":
            return engine.rotate(child, node.vector)
        if node.kind == "mirror":
            return engine.mirror(child, node.vector)
        raise ValueError("unknown transform {!r}".format(node.kind))

    if isinstance(node, Projection):
        return engine.project(render(node.child, engine), node.height, node.cut)

    if node.kind == "difference":
        initial, *subtractions = node.children
        return engine.difference(
            render(initial, engine), [render(child, engine) for child in subtractions if not is_empty(child)]
        )

    children = [render(child, engine) for child in node.children if not is_empty(child)]
    if node.kind == "union":
        return engine.union(children)
    if node.kind == "hull":
        return engine.convex_hull(children)
    if node.kind == "intersection":
        return engine.intersect(children)
    raise ValueError("unknown boolean operation {!r}".format(node.kind))
