"""Scene objects: spheres, planes and finite cylinders, with their hit boxes."""

from __future__ import annotations

import enum
import math
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import ClassVar

from minirt.vector import (
    Ray,
    Vector,
    normalize_quat,
    quadratic_equation,
    rotate_inverse_quaternion,
    rotate_quaternion,
    rotation_x,
    rotation_y,
)

ROTATION_STEP = 0.174533
RESIZE_STEP = 0.2
BOX_MARGIN = 0.5

MAX_DIAMETER = 200.0
MIN_DIAMETER = 0.2
MAX_HEIGHT = 1000.0
MIN_HEIGHT = 0.2


class Key(enum.IntEnum):
    """X11 keysyms of the keys the viewer reacts to."""

    ESCAPE = 0xFF1B
    LEFT = 0xFF51
    UP = 0xFF52
    RIGHT = 0xFF53
    DOWN = 0xFF54
    KP_RIGHT = 0xFF98
    KP_PRIOR = 0xFF9A
    KP_ADD = 0xFFAB
    KP_SUBTRACT = 0xFFAD
    UPPER_A = 0x41
    UPPER_D = 0x44
    UPPER_S = 0x53
    UPPER_W = 0x57
    LOWER_A = 0x61
    LOWER_D = 0x64
    LOWER_S = 0x73
    LOWER_W = 0x77


ARROW_KEYS = frozenset({Key.LEFT, Key.RIGHT, Key.UP, Key.DOWN})
ROTATION_KEYS = frozenset(
    {
        Key.LOWER_A,
        Key.UPPER_A,
        Key.LOWER_W,
        Key.UPPER_W,
        Key.LOWER_D,
        Key.UPPER_D,
        Key.LOWER_S,
        Key.UPPER_S,
    }
)
RESIZE_KEYS = frozenset({Key.KP_ADD, Key.KP_SUBTRACT, Key.KP_RIGHT, Key.KP_PRIOR})

_KEYS_A = frozenset({Key.LOWER_A, Key.UPPER_A})
_KEYS_D = frozenset({Key.LOWER_D, Key.UPPER_D})
_KEYS_W = frozenset({Key.LOWER_W, Key.UPPER_W})
_KEYS_S = frozenset({Key.LOWER_S, Key.UPPER_S})


class ObjectKind(enum.Enum):
    SPHERE = "sp"
    PLANE = "pl"
    CYLINDER = "cy"


@dataclass(frozen=True)
class Hit:
    """Where a ray meets an object: distance along the ray and surface normal."""

    length: float
    normal: Vector


def _sqrt(value: float) -> float:
    return math.sqrt(value) if value >= 0 or math.isnan(value) else math.nan


def bounding_box_max(vertices: Iterable[Vector]) -> Vector:
    """Largest coordinates of the vertices, widened by the box margin."""
    points = list(vertices)
    return Vector(
        max(p.x for p in points) + BOX_MARGIN,
        max(p.y for p in points) + BOX_MARGIN,
        max(p.z for p in points) + BOX_MARGIN,
        0.0,
    )


def bounding_box_min(vertices: Iterable[Vector]) -> Vector:
    """Smallest coordinates of the vertices, widened by the box margin."""
    points = list(vertices)
    return Vector(
        min(p.x for p in points) - BOX_MARGIN,
        min(p.y for p in points) - BOX_MARGIN,
        min(p.z for p in points) - BOX_MARGIN,
        0.0,
    )


def point_in_box(maximum: Vector, minimum: Vector, point: Vector) -> bool:
    """Whether ``point`` lies in the axis-aligned box, bounds included."""
    return (
        minimum.x <= point.x <= maximum.x
        and minimum.y <= point.y <= maximum.y
        and minimum.z <= point.z <= maximum.z
    )


def shortest_length(a: float, b: float) -> float | None:
    """The smaller of two cap distances, ignoring zeros, which mean no hit."""
    if a != 0 and b != 0:
        return a if a < b else b
    if a == 0 and b == 0:
        return None
    return b if a == 0 else a


def _box_vertices(
    centre: Vector, axis: Vector, right: Vector, half_length: float, radius: float
) -> list[Vector]:
    depth = axis.cross(right).normalized().scaled(radius)
    side = right.scaled(radius)
    offset = axis.scaled(half_length)
    vertices = []
    for cap in (centre + offset, centre - offset):
        vertices.extend((cap + side, cap + depth, cap - side, cap - depth))
    return vertices


@dataclass
class Shape(ABC):
    """Common part of every scene object."""

    kind: ClassVar[ObjectKind]

    centre: Vector = field(default_factory=Vector)
    color: int = 0

    @abstractmethod
    def collide(self, ray: Ray) -> Hit | None:
        """The hit of ``ray`` on this object, or None."""

    @abstractmethod
    def hit_box(self, point: Vector) -> bool:
        """Whether ``point`` is inside the object's bounding box."""

    @abstractmethod
    def resize(self, key: int, camera_centre: Vector) -> None:
        """Grow or shrink the object in answer to a key."""

    @abstractmethod
    def rotate(self, key: int, camera_centre: Vector) -> None:
        """Turn the object in answer to a key."""


@dataclass
class Sphere(Shape):
    kind: ClassVar[ObjectKind] = ObjectKind.SPHERE

    diameter: float = 1.0
    normal: Vector = field(default_factory=lambda: Vector(0.0, 0.0, 1.0))
    right: Vector = field(default_factory=lambda: Vector(1.0, 0.0, 0.0))

    def collide(self, ray: Ray) -> Hit | None:
        radius = self.diameter * 0.5
        to_centre = self.centre - ray.origin
        distance = to_centre.length()
        if distance < radius:
            return None
        along = to_centre.dot(ray.direction)
        if along < 0:
            return None
        off_axis = _sqrt(distance * distance - along * along)
        if off_axis > radius:
            return None
        length = along - _sqrt(radius * radius - off_axis * off_axis)
        return Hit(length, ray.at(length) - self.centre)

    def hit_box(self, point: Vector) -> bool:
        half = self.diameter / 2
        vertices = _box_vertices(self.centre, self.normal, self.right, half, half)
        return point_in_box(
            bounding_box_max(vertices), bounding_box_min(vertices), point
        )

    def resize(self, key: int, camera_centre: Vector) -> None:
        if key == Key.KP_ADD and self.diameter < MAX_DIAMETER:
            grown = replace(self, diameter=self.diameter + RESIZE_STEP)
            if not grown.hit_box(camera_centre):
                self.diameter += RESIZE_STEP
        if key == Key.KP_SUBTRACT and self.diameter > MIN_DIAMETER:
            shrunk = replace(self, diameter=self.diameter - RESIZE_STEP)
            if not shrunk.hit_box(camera_centre):
                self.diameter -= RESIZE_STEP

    def rotate(self, key: int, camera_centre: Vector) -> None:
        """A sphere looks the same from every side; nothing changes."""


@dataclass
class Plane(Shape):
    kind: ClassVar[ObjectKind] = ObjectKind.PLANE

    normal: Vector = field(default_factory=lambda: Vector(0.0, 1.0, 0.0))
    right: Vector = field(default_factory=lambda: Vector(1.0, 0.0, 0.0))

    def collide(self, ray: Ray) -> Hit | None:
        denominator = ray.direction.dot(self.normal)
        if denominator == 0:
            return None
        length = (self.centre - ray.origin).dot(self.normal) / denominator
        if length < 0:
            return None
        if self.normal.dot(ray.direction) < 0:
            normal = self.normal
        else:
            normal = Vector(-self.normal.x, -self.normal.y, -self.normal.z, 1.0)
        return Hit(length, normal)

    def hit_box(self, point: Vector) -> bool:
        """An infinite plane never blocks the camera."""
        return False

    def resize(self, key: int, camera_centre: Vector) -> None:
        """An infinite plane has no size to change."""

    def rotate(self, key: int, camera_centre: Vector) -> None:
        up = self.normal.cross(self.right)
        if key in _KEYS_A:
            self.normal, self.right = rotation_x(
                self.normal, self.right, up, ROTATION_STEP
            )
        elif key in _KEYS_D:
            self.normal, self.right = rotation_x(
                self.normal, self.right, up, -ROTATION_STEP
            )
        elif key in _KEYS_W:
            self.normal, _ = rotation_y(self.normal, self.right, up, ROTATION_STEP)
        elif key in _KEYS_S:
            self.normal, _ = rotation_y(self.normal, self.right, up, -ROTATION_STEP)


@dataclass
class Cylinder(Shape):
    kind: ClassVar[ObjectKind] = ObjectKind.CYLINDER

    diameter: float = 1.0
    height: float = 1.0
    normal: Vector = field(default_factory=lambda: Vector(0.0, 1.0, 0.0))
    right: Vector = field(default_factory=lambda: Vector(1.0, 0.0, 0.0))
    quaternion: Vector = field(init=False, default_factory=Vector)

    def __post_init__(self) -> None:
        self.update_quaternion()

    def update_quaternion(self) -> None:
        """Recompute the rotation that carries the y axis onto the cylinder axis."""
        y_axis = Vector(0.0, 1.0, 0.0)
        axis = y_axis.cross(self.normal)
        dot = y_axis.dot(self.normal)
        self.quaternion = normalize_quat(Vector(axis.x, axis.y, axis.z, 1 + dot))

    def _cap(self, probe: Ray, centre: Vector) -> float:
        hit = Plane(centre=centre, normal=Vector(0.0, 1.0, 0.0)).collide(probe)
        if hit is None:
            return 0.0
        point = probe.direction.scaled(hit.length)
        gap = Vector(centre.x - point.x, centre.y - point.y, centre.z - point.z)
        radius = self.diameter / 2
        if gap.dot(gap) > radius * radius:
            return 0.0
        return hit.length

    def _finite(
        self, t: float, direction: Vector, centre: Vector
    ) -> tuple[float, bool] | None:
        probe = Ray(origin=Vector(), direction=direction)
        half = self.height / 2
        bottom = Vector(centre.x, centre.y - half, centre.z, centre.w)
        top = Vector(centre.x, centre.y - half + self.height, centre.z, centre.w)
        t1 = self._cap(probe, bottom)
        t2 = self._cap(probe, top)
        if (
            centre.y - half < t * direction.y < centre.y + half
            and (not t1 or t < t1)
            and (not t2 or t < t2)
        ):
            return t, False
        length = shortest_length(t1, t2)
        if length is None:
            return None
        return length, True

    def collide(self, ray: Ray) -> Hit | None:
        q = self.quaternion
        centre = rotate_inverse_quaternion(q, self.centre - ray.origin)
        direction = rotate_inverse_quaternion(q, ray.direction)
        radius = self.diameter * 0.5
        a = direction.x * direction.x + direction.z * direction.z
        b = 2 * (-centre.x * direction.x + -centre.z * direction.z)
        c = centre.x * centre.x + centre.z * centre.z - radius * radius
        if b * b - 4 * a * c < 0:
            return None
        found = self._finite(quadratic_equation(a, b, c), direction, centre)
        if found is None:
            return None
        length, on_cap = found
        point = Ray(origin=Vector(), direction=direction).at(length)
        if on_cap:
            normal = Vector(0.0, 1.0 if point.y > centre.y else -1.0, 0.0)
        else:
            normal = Vector(point.x - centre.x, 0.0, point.z - centre.z)
        return Hit(length, rotate_quaternion(q, normal))

    def hit_box(self, point: Vector) -> bool:
        vertices = _box_vertices(
            self.centre, self.normal, self.right, self.height / 2, self.diameter / 2
        )
        return point_in_box(
            bounding_box_max(vertices), bounding_box_min(vertices), point
        )

    def resize(self, key: int, camera_centre: Vector) -> None:
        if key == Key.KP_ADD and self.diameter < MAX_DIAMETER:
            grown = replace(self, diameter=self.diameter + RESIZE_STEP)
            if not grown.hit_box(camera_centre):
                self.diameter += RESIZE_STEP
        if key == Key.KP_SUBTRACT and self.diameter > MIN_DIAMETER:
            self.diameter -= RESIZE_STEP
        if key == Key.KP_RIGHT and self.height > MIN_HEIGHT:
            self.height -= RESIZE_STEP
        if key == Key.KP_PRIOR and self.height < MAX_HEIGHT:
            taller = replace(self, height=self.height + RESIZE_STEP)
            if not taller.hit_box(camera_centre):
                self.height += RESIZE_STEP

    def rotate(self, key: int, camera_centre: Vector) -> None:
        last = self.normal.cross(self.right)
        normal, right = self.normal, self.right
        if key in _KEYS_A:
            normal, _ = rotation_y(normal, right, last, ROTATION_STEP)
        elif key in _KEYS_D:
            normal, _ = rotation_y(normal, right, last, -ROTATION_STEP)
        elif key in _KEYS_W:
            normal, right = rotation_x(normal, right, last, ROTATION_STEP)
        elif key in _KEYS_S:
            normal, right = rotation_x(normal, right, last, -ROTATION_STEP)
        candidate = replace(self, normal=normal, right=right)
        if not candidate.hit_box(camera_centre):
            self.normal = normal
            self.right = right
        self.update_quaternion()