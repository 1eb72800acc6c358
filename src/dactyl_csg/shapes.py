"""
The CSG tree the generator builds.

Four node kinds make up a tree: primitives, transforms, boolean operations and projections.
Nodes are frozen dataclasses holding tuples, so a tree is a plain value: two trees built from
the same parameters compare equal, and reusing a subtree in several places never aliases
anything mutable.
"""
from dataclasses import dataclass
import math
from typing import Optional, Tuple, Union

import numpy as np

PRIMITIVE_KINDS = ("box", "cylinder", "sphere", "polygon")
TRANSFORM_KINDS = ("translate", "rotate", "mirror")
BOOLEAN_KINDS = ("union", "difference", "hull", "intersection")


@dataclass(frozen=True)
class Primitive:
    """
    A solid with explicit dimensions.

    box: size is (width, height, depth), centered on the origin.
    cylinder: size is (bottom radius, top radius, height), centered on the origin.
    sphere: size is (radius,).
    polygon: size is (height,); the 2D `points` are extruded from z=0 up to height.

    `segments` is the tessellation resolution for round primitives.
    """
    kind: str
    size: Tuple[float, ...]
    points: Tuple[Tuple[float, float], ...] = ()
    segments: Optional[int] = None


@dataclass(frozen=True)
class Transform:
    """
    A rigid transform (or mirror) applied to a child.

    translate: vector is the offset.
    rotate: vector is Euler angles in degrees, applied about x, then y, then z.
    mirror: vector is the normal of the mirror plane through the origin.
    """
    kind: str
    vector: Tuple[float, float, float]
    child: "ShapeNode"

    @property
    def matrix(self) -> np.ndarray:
        if self.kind == "translate":
            return translation_matrix(self.vector)
        if self.kind == "rotate":
            return euler_matrix(self.vector)
        return mirror_matrix(self.vector)


@dataclass(frozen=True)
class BooleanOp:
    """
    union, hull and intersection combine all children; difference removes the rest from the first.
    """
    kind: str
    children: Tuple["ShapeNode", ...]


@dataclass(frozen=True)
class Projection:
    """
    The child flattened onto z=0 (sliced at z=0 when `cut`), then extruded from z=0 up to `height`.
    """
    child: "ShapeNode"
    height: float
    cut: bool = False


ShapeNode = Union[Primitive, Transform, BooleanOp, Projection]


def translation_matrix(vector) -> np.ndarray:
    matrix = np.identity(4)
    matrix[:3, 3] = vector
    return matrix


def euler_matrix(euler_degrees) -> np.ndarray:
    """
    4x4 rotation about x, then y, then z, angles in degrees.
    """
    ax, ay, az = (math.radians(angle) for angle in euler_degrees)
    rx = np.array([
        [1, 0, 0],
        [0, math.cos(ax), -math.sin(ax)],
        [0, math.sin(ax), math.cos(ax)],
    ])
    ry = np.array([
        [math.cos(ay), 0, math.sin(ay)],
        [0, 1, 0],
        [-math.sin(ay), 0, math.cos(ay)],
    ])
    rz = np.array([
        [math.cos(az), -math.sin(az), 0],
        [math.sin(az), math.cos(az), 0],
        [0, 0, 1],
    ])
    matrix = np.identity(4)
    matrix[:3, :3] = rz @ ry @ rx
    return matrix


def mirror_matrix(normal) -> np.ndarray:
    n = np.asarray(normal, dtype=float)
    n = n / np.linalg.norm(n)
    matrix = np.identity(4)
    matrix[:3, :3] -= 2 * np.outer(n, n)
    return matrix


def apply_matrix(matrix: np.ndarray, points) -> np.ndarray:
    points = np.atleast_2d(np.asarray(points, dtype=float))
    return points @ matrix[:3, :3].T + matrix[:3, 3]


def placement_matrix(node: ShapeNode) -> np.ndarray:
    """
    Compose the chain of transforms above the first non-transform node.

    Applied to a point in the local frame of that node, it gives the world position.
    """
    matrix = np.identity(4)
    while isinstance(node, Transform):
        matrix = matrix @ node.matrix
        node = node.child
    return matrix


def _primitive_vertices(node: Primitive) -> np.ndarray:
    if node.kind == "box":
        half = np.asarray(node.size, dtype=float) / 2
        return np.array([[sx, sy, sz] for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)]) * half
    if node.kind == "cylinder":
        bottom, top, height = node.size
        return np.array([
            [sx * radius, sy * radius, z]
            for radius, z in ((bottom, -height / 2), (top, height / 2))
            for sx in (-1, 1)
            for sy in (-1, 1)
        ])
    if node.kind == "sphere":
        radius = node.size[0]
        return np.array([[sx, sy, sz] for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)]) * radius
    height = node.size[0]
    return np.array([[x, y, z] for x, y in node.points for z in (0.0, height)])


def vertices(node: ShapeNode) -> np.ndarray:
    """
    A vertex cloud enclosing the node, as an (n, 3) array.

    Round primitives contribute their bounding box corners, so the cloud is conservative:
    its convex hull always contains the solid.
    """
    if isinstance(node, Primitive):
        return _primitive_vertices(node)
    if isinstance(node, Transform):
        return apply_matrix(node.matrix, vertices(node.child))
    if isinstance(node, Projection):
        flat = vertices(node.child)
        if len(flat) == 0:
            return flat
        bottom = flat * [1, 1, 0]
        top = bottom + [0, 0, node.height]
        return np.vstack([bottom, top])
    if node.kind in ("difference", "intersection"):
        if not node.children:
            return np.empty((0, 3))
        return vertices(node.children[0])
    clouds = [vertices(child) for child in node.children]
    if not clouds:
        return np.empty((0, 3))
    return np.vstack(clouds)


def bounds(node: ShapeNode) -> Tuple[np.ndarray, np.ndarray]:
    """
    Axis-aligned (minimum, maximum) corners of the node.
    """
    cloud = vertices(node)
    if len(cloud) == 0:
        raise ValueError("an empty shape has no bounds")
    return cloud.min(axis=0), cloud.max(axis=0)


def as_dict(node: ShapeNode) -> dict:
    """
    A JSON-ready description of the tree.
    """
    if isinstance(node, Primitive):
        described = {"primitive": node.kind, "size": list(node.size)}
        if node.points:
            described["points"] = [list(point) for point in node.points]
        if node.segments is not None:
            described["segments"] = node.segments
        return described
    if isinstance(node, Transform):
        return {"transform": node.kind, "vector": list(node.vector), "child": as_dict(node.child)}
    if isinstance(node, Projection):
        return {"projection": "cut" if node.cut else "flat", "height": node.height, "child": as_dict(node.child)}
    return {"operation": node.kind, "children": [as_dict(child) for child in node.children]}


def is_empty(node: ShapeNode) -> bool:
    """
    Whether the node is a union of nothing.
    """
    return isinstance(node, BooleanOp) and node.kind == "union" and not node.children


def count_nodes(node: ShapeNode) -> int:
    if isinstance(node, Primitive):
        return 1
    if isinstance(node, (Transform, Projection)):
        return 1 + count_nodes(node.child)
    return 1 + sum(count_nodes(child) for child in node.children)
