"""Building a scene (ambient light, camera, light and objects) from its text lines."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field

from minirt.matrix import Matrix, cam_to_world_matrix
from minirt.shapes import (
    MAX_DIAMETER,
    MAX_HEIGHT,
    MIN_DIAMETER,
    MIN_HEIGHT,
    Cylinder,
    Plane,
    Shape,
    Sphere,
)
from minirt.textparse import (
    has_required_elements,
    has_rt_extension,
    lines_are_valid,
    parse_color,
    parse_float,
    parse_point,
    read_scene_lines,
    split_words,
)
from minirt.vector import Vector

PI = 3.1415926
MIN_PATH_LENGTH = 4

_X_AXIS = Vector(1.0, 0.0, 0.0)
_Y_AXIS = Vector(0.0, 1.0, 0.0)


class SceneError(ValueError):
    """A scene description that cannot be turned into a scene."""


@dataclass
class Ambient:
    brightness: float
    color: int


@dataclass
class Light:
    centre: Vector
    brightness: float
    color: int


@dataclass
class Camera:
    """The viewpoint: position, viewing direction, field of view in radians."""

    centre: Vector
    orientation: Vector
    fov: float
    up: Vector = field(default_factory=Vector)
    right: Vector = field(default_factory=Vector)
    cam_to_world: Matrix = ()

    def update_basis(self) -> None:
        """Derive the up and right vectors from the orientation, then normalise it."""
        z = self.orientation
        if (z.x, z.y, z.z) in ((1, 0, 0), (-1, 0, 0)):
            up = _Y_AXIS
        elif z.z > 0:
            up = z.cross(_X_AXIS)
        else:
            up = _X_AXIS.cross(z)
        right = up.cross(z) if z.z > 0 else z.cross(up)
        self.up = up
        self.right = right
        self.orientation = z.normalized()

    def rebuild_matrix(self) -> None:
        """Recompute the camera-to-world matrix from orientation and centre."""
        self.cam_to_world = cam_to_world_matrix(self.orientation, self.centre)


@dataclass
class Scene:
    ambient: Ambient
    camera: Camera
    light: Light
    objects: list[Shape] = field(default_factory=list)

    def blocked(self, point: Vector) -> bool:
        """Whether ``point`` falls inside the bounding box of any object."""
        return any(obj.hit_box(point) for obj in self.objects)

    def check_camera_outside(self) -> None:
        """Raise SceneError when the camera starts inside an object."""
        if self.blocked(self.camera.centre):
            raise SceneError("camera can not be inside an object")


@contextmanager
def _parsing(what: str) -> Iterator[None]:
    try:
        yield
    except SceneError:
        raise
    except ValueError as exc:
        raise SceneError(f"invalid {what}: {exc}") from exc


def _field(words: Sequence[str], index: int, what: str) -> str:
    if index >= len(words):
        raise SceneError(f"{what}: missing field {index}")
    return words[index]


def _is_zero(v: Vector) -> bool:
    return v.x == 0 and v.y == 0 and v.z == 0


def _require_camera(camera: Camera | None, what: str) -> Camera:
    if camera is None:
        raise SceneError(f"{what} needs the camera to be declared first")
    return camera


def parse_ambient(line: str) -> Ambient:
    """Parse ``A <brightness> <r,g,b>``."""
    words = split_words(line, " ")
    with _parsing("ambient light"):
        brightness = parse_float(_field(words, 1, "ambient light"))
        color = parse_color(_field(words, 2, "ambient light"))
    return Ambient(brightness, color)


def parse_camera(line: str) -> Camera:
    """Parse ``C <x,y,z> <orientation> <fov in degrees>``."""
    words = split_words(line, " ")
    with _parsing("camera"):
        centre = parse_point(_field(words, 1, "camera"))
        orientation = parse_point(_field(words, 2, "camera"))
        if _is_zero(orientation):
            raise SceneError("camera orientation is a zero vector")
        fov = parse_float(_field(words, 3, "camera"))
    camera = Camera(centre=centre, orientation=orientation, fov=fov * (PI / 180))
    camera.update_basis()
    camera.rebuild_matrix()
    return camera


def parse_light(line: str) -> Light:
    """Parse ``L <x,y,z> <brightness 0..1> <r,g,b>``."""
    words = split_words(line, " ")
    with _parsing("light"):
        centre = parse_point(_field(words, 1, "light"))
        brightness = parse_float(_field(words, 2, "light"))
        if brightness > 1.0 or brightness < 0:
            raise SceneError(f"light brightness out of range: {brightness}")
        color = parse_color(_field(words, 3, "light"))
    return Light(centre, brightness, color)


def _object_color(text: str, what: str) -> int:
    color = parse_color(text)
    if color <= 0:
        raise SceneError(f"{what} colour must not be black")
    return color


def _check_diameter(diameter: float, what: str) -> None:
    if diameter < MIN_DIAMETER or diameter > MAX_DIAMETER:
        raise SceneError(f"{what} diameter out of range: {diameter}")


def parse_sphere(line: str, camera: Camera | None) -> Sphere:
    """Parse ``sp <x,y,z> <diameter> <r,g,b>``; the sphere faces the camera."""
    camera = _require_camera(camera, "sphere")
    words = split_words(line, " ")
    with _parsing("sphere"):
        centre = parse_point(_field(words, 1, "sphere"))
        diameter = parse_float(_field(words, 2, "sphere"))
        _check_diameter(diameter, "sphere")
        color = _object_color(_field(words, 3, "sphere"), "sphere")
    return Sphere(
        centre=centre,
        color=color,
        diameter=diameter,
        normal=camera.orientation,
        right=camera.right,
    )


def parse_plane(line: str, camera: Camera | None) -> Plane:
    """Parse ``pl <x,y,z> <normal> <r,g,b>``."""
    _require_camera(camera, "plane")
    words = split_words(line, " ")
    with _parsing("plane"):
        centre = parse_point(_field(words, 1, "plane"))
        normal = parse_point(_field(words, 2, "plane"))
        if _is_zero(normal):
            raise SceneError("plane normal is a zero vector")
        color = _object_color(_field(words, 3, "plane"), "plane")
    z = normal
    if (z.x, z.y, z.z) == (1, 0, 0):
        right = Vector(0.0, 0.0, -1.0)
    elif (z.x, z.y, z.z) == (-1, 0, 0):
        right = Vector(0.0, 0.0, 1.0)
    elif z.z > 0:
        right = z.cross(_X_AXIS)
    else:
        right = _X_AXIS.cross(z)
    return Plane(centre=centre, color=color, normal=normal, right=right)


def parse_cylinder(line: str) -> Cylinder:
    """Parse ``cy <x,y,z> <axis> <diameter> <height> <r,g,b>``."""
    words = split_words(line, " ")
    with _parsing("cylinder"):
        centre = parse_point(_field(words, 1, "cylinder"))
        normal = parse_point(_field(words, 2, "cylinder"))
        if _is_zero(normal):
            raise SceneError("cylinder axis is a zero vector")
        diameter = parse_float(_field(words, 3, "cylinder"))
        _check_diameter(diameter, "cylinder")
        height = parse_float(_field(words, 4, "cylinder"))
        if height <= MIN_HEIGHT or height > MAX_HEIGHT:
            raise SceneError(f"cylinder height out of range: {height}")
        color = _object_color(_field(words, 5, "cylinder"), "cylinder")
    z = normal
    if (z.x, z.y, z.z) in ((0, 1, 0), (0, -1, 0)):
        right = _X_AXIS
    elif z.z > 0:
        right = z.cross(_X_AXIS)
    else:
        right = _X_AXIS.cross(z)
    return Cylinder(
        centre=centre,
        color=color,
        diameter=diameter,
        height=height,
        normal=normal.normalized(),
        right=right.normalized(),
    )


def build_scene(lines: Iterable[str]) -> Scene:
    """Validate scene lines and build the scene they describe."""
    lines = list(lines)
    if not lines_are_valid(lines) or not has_required_elements(lines):
        raise SceneError("invalid scene description")
    ambient: Ambient | None = None
    camera: Camera | None = None
    light: Light | None = None
    objects: list[Shape] = []
    for line in lines:
        first, second = line[0:1], line[1:2]
        if first == "A":
            if ambient is not None:
                raise SceneError("ambient light declared twice")
            ambient = parse_ambient(line)
        elif first == "C":
            if camera is not None:
                raise SceneError("camera declared twice")
            camera = parse_camera(line)
        elif first == "L":
            if light is not None:
                raise SceneError("light declared twice")
            light = parse_light(line)
        elif first == "s" or second == "p":
            objects.append(parse_sphere(line, camera))
        elif first == "p" or second == "l":
            objects.append(parse_plane(line, camera))
        elif first == "c" or second == "y":
            objects.append(parse_cylinder(line))
    if ambient is None or camera is None or light is None:
        raise SceneError("one necessary element is missing")
    scene = Scene(ambient=ambient, camera=camera, light=light, objects=objects)
    scene.check_camera_outside()
    return scene


def load_scene(path: str | os.PathLike[str]) -> Scene:
    """Read a ``.rt`` file and build its scene."""
    name = os.fspath(path)
    if len(name) < MIN_PATH_LENGTH:
        raise SceneError(f"scene path too short: {name!r}")
    if not has_rt_extension(name):
        raise SceneError(f"scene file needs the .rt extension: {name!r}")
    try:
        lines = read_scene_lines(name)
    except OSError as exc:
        raise SceneError(f"cannot read {name!r}: {exc}") from exc
    if not lines:
        raise SceneError(f"scene file {name!r} is empty")
    return build_scene(lines)