"""Shading, drawing a scene into an image, and the interactive viewer controls."""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from minirt.matrix import vector_times_matrix
from minirt.scene import Scene
from minirt.shapes import (
    ARROW_KEYS,
    RESIZE_KEYS,
    ROTATION_KEYS,
    ROTATION_STEP,
    Hit,
    Key,
    ObjectKind,
    Shape,
)
from minirt.vector import Ray, Vector, rotation_x, rotation_y

MIN_HIT_LENGTH = 0.001
SHADOW_TOLERANCE = 0.01
SHININESS = 32
SPECULAR_STRENGTH = 0.5
BUTTON_LEFT = 1
BACKGROUND = 0x000000

_Y_AXIS = Vector(0.0, 1.0, 0.0)
_X_AXIS = Vector(1.0, 0.0, 0.0)

_KEYS_A = frozenset({Key.LOWER_A, Key.UPPER_A})
_KEYS_D = frozenset({Key.LOWER_D, Key.UPPER_D})
_KEYS_W = frozenset({Key.LOWER_W, Key.UPPER_W})
_KEYS_S = frozenset({Key.LOWER_S, Key.UPPER_S})


class Image:
    """A width x height grid of 32-bit pixel colours, all black at first."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"image size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._pixels = [BACKGROUND] * (width * height)

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height}")
        return y * self.width + x

    def put(self, x: int, y: int, color: int) -> None:
        self._pixels[self._offset(x, y)] = color & 0xFFFFFFFF

    def get(self, x: int, y: int) -> int:
        return self._pixels[self._offset(x, y)]

    def rows(self) -> Iterator[list[int]]:
        """The pixel colours row by row, top row first."""
        for y in range(self.height):
            yield self._pixels[y * self.width : (y + 1) * self.width]


def _truncate(value: float) -> int:
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return 255 if value > 0 else 0
    return int(value)


def color_brightness(
    light_color: int, color: int, brightness: float, specular: float
) -> int:
    """Shade ``color`` by a light of ``light_color``, each channel capped at 255."""
    channels = []
    for shift in (16, 8, 0):
        light = (light_color >> shift) & 0xFF
        base = (color >> shift) & 0xFF
        value = _truncate(base * brightness * light / 255 + specular * light)
        channels.append(min(value, 255))
    red, green, blue = channels
    return (red << 16) + (green << 8) + blue


def specular_light(light_dir: Vector, view_dir: Vector, normal: Vector) -> float:
    """Phong highlight strength for a surface seen along ``view_dir``."""
    incoming = -light_dir
    towards_eye = -view_dir
    dot = incoming.dot(normal)
    reflect = (incoming - normal.scaled(2 * dot)).normalized()
    return max(reflect.dot(towards_eye), 0.0) ** SHININESS * SPECULAR_STRENGTH


def check_collision(ray: Ray, objects: Sequence[Shape]) -> tuple[int, Hit] | None:
    """The index and hit of the nearest object further than a tiny epsilon."""
    best: tuple[int, Hit] | None = None
    best_length = math.inf
    for index, obj in enumerate(objects):
        hit = obj.collide(ray)
        if hit is not None and MIN_HIT_LENGTH < hit.length < best_length:
            best = (index, hit)
            best_length = hit.length
    return best


def pixel_direction(scene: Scene, x: int, y: int, width: int, height: int) -> Vector:
    """World-space direction, not normalised, through the centre of pixel (x, y)."""
    camera = scene.camera
    ratio = width / height
    px = (2 * (x + 0.5) / width - 1.0) * camera.fov * ratio
    py = (1 - 2 * (y + 0.5) / height) * camera.fov
    return vector_times_matrix(Vector(px, py, 1.0, 0.0), camera.cam_to_world)


def render_pixel(scene: Scene, direction: Vector) -> int:
    """The colour seen from the camera looking along ``direction``."""
    view = Ray(origin=scene.camera.centre, direction=direction.normalized())
    found = check_collision(view, scene.objects)
    if found is None:
        return BACKGROUND
    index, hit = found
    obj = scene.objects[index]
    light = scene.light
    ambient = scene.ambient.brightness

    hit_point = view.at(hit.length)
    to_light = light.centre - hit_point
    light_distance = to_light.length()
    light_dir = to_light.normalized()
    normal = hit.normal.normalized()
    dot = light_dir.dot(normal)
    if dot <= 0:
        return color_brightness(light.color, obj.color, ambient, 0.0)

    brightness = ambient
    specular = 0.0
    shadow = check_collision(
        Ray(origin=hit_point, direction=light_dir), scene.objects
    )
    shadow_length = math.inf if shadow is None else shadow[1].length
    if (
        shadow is None or shadow_length > light_distance
    ) and abs(shadow_length - light_distance) > SHADOW_TOLERANCE:
        brightness += light.brightness * dot
        if obj.kind is not ObjectKind.PLANE:
            specular = specular_light(light_dir, view.direction, hit.normal)
    return color_brightness(light.color, obj.color, brightness, specular)


def draw(scene: Scene, image: Image) -> None:
    """Render every pixel of ``image``."""
    for x in range(image.width):
        for y in range(image.height):
            direction = pixel_direction(scene, x, y, image.width, image.height)
            image.put(x, y, render_pixel(scene, direction))


@dataclass
class Controller:
    """Reacts to mouse clicks and key presses by changing the scene and redrawing."""

    scene: Scene
    image: Image
    select: int = -1
    running: bool = True

    def click(self, button: int, x: int, y: int) -> None:
        """Select the object under the pointer, or clear the selection."""
        if button != BUTTON_LEFT:
            self.select = -1
            return
        direction = pixel_direction(
            self.scene, x, y, self.image.width, self.image.height
        )
        ray = Ray(origin=self.scene.camera.centre, direction=direction.normalized())
        found = check_collision(ray, self.scene.objects)
        self.select = -1 if found is None else found[0]

    def key_press(self, key: int) -> None:
        """Move, turn or resize, then redraw; Escape stops the viewer."""
        if key == Key.ESCAPE:
            self.running = False
            return
        if self.select >= 0:
            self._move_object(key)
        elif key in ARROW_KEYS:
            self._move_camera(key)
        elif key in ROTATION_KEYS:
            self._turn_camera(key)
        draw(self.scene, self.image)

    def _free(self, point: Vector) -> bool:
        return not self.scene.blocked(point)

    def _move_camera(self, key: int) -> None:
        camera = self.scene.camera
        normal = camera.orientation
        if (normal.x, normal.y, normal.z) == (0, 1, 0):
            right = _X_AXIS
        else:
            right = normal.cross(_Y_AXIS)
        right = right.normalized()
        centre = camera.centre
        targets = {
            Key.RIGHT: centre - right,
            Key.UP: centre + normal,
            Key.LEFT: centre + right,
            Key.DOWN: centre - normal,
        }
        target = targets[Key(key)]
        if self._free(target):
            camera.centre = target

    def _turn_camera(self, key: int) -> None:
        camera = self.scene.camera
        if key in _KEYS_A:
            camera.orientation, camera.right = rotation_x(
                camera.orientation, camera.right, camera.up, -ROTATION_STEP
            )
        elif key in _KEYS_W:
            camera.orientation, camera.up = rotation_y(
                camera.orientation, camera.right, camera.up, -ROTATION_STEP
            )
        elif key in _KEYS_S:
            camera.orientation, camera.up = rotation_y(
                camera.orientation, camera.right, camera.up, ROTATION_STEP
            )
        elif key in _KEYS_D:
            camera.orientation, camera.right = rotation_x(
                camera.orientation, camera.right, camera.up, ROTATION_STEP
            )
        camera.orientation = camera.orientation.normalized()
        camera.rebuild_matrix()

    def _move_object(self, key: int) -> None:
        obj = self.scene.objects[self.select]
        camera = self.scene.camera
        eye = camera.centre
        if key in ARROW_KEYS:
            pressed = Key(key)
            if pressed == Key.LEFT and self._free(eye + camera.right):
                obj.centre = obj.centre - camera.right
            elif pressed == Key.RIGHT and self._free(eye - camera.right):
                obj.centre = obj.centre + camera.right
            elif pressed == Key.UP and self._free(eye + camera.orientation):
                obj.centre = obj.centre + camera.up
            elif pressed == Key.DOWN and self._free(eye - camera.orientation):
                obj.centre = obj.centre - camera.up
        elif key in ROTATION_KEYS:
            obj.rotate(key, eye)
        elif key in RESIZE_KEYS:
            obj.resize(key, eye)