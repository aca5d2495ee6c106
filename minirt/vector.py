"""Vectors, rays, quaternion rotations and the ray-tracing quadratic solver."""

from __future__ import annotations

import math
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Vector:
    """A 3D point or direction with a fourth component, also used as a quaternion."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z, self.w)

    def __sub__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z, self.w)

    def __neg__(self) -> Vector:
        return Vector(-self.x, -self.y, -self.z, self.w)

    def __mul__(self, other: Vector) -> Vector:
        """Component-wise product, the fourth component included."""
        if not isinstance(other, Vector):
            return NotImplemented
        return Vector(
            self.x * other.x, self.y * other.y, self.z * other.z, self.w * other.w
        )

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector) -> Vector:
        return Vector(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
            0.0,
        )

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def normalized(self) -> Vector:
        """Unit vector in the same direction; a zero vector is returned unchanged."""
        squared = self.dot(self)
        if squared == 0:
            return self
        norm = math.sqrt(squared)
        return Vector(self.x / norm, self.y / norm, self.z / norm, self.w)

    def scaled(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar, self.z * scalar, self.w)


@dataclass
class Ray:
    """A ray with its travelled length and the surface normal at its last hit."""

    origin: Vector = field(default_factory=Vector)
    direction: Vector = field(default_factory=Vector)
    normal: Vector = field(default_factory=Vector)
    length: float = 0.0

    def at(self, length: float) -> Vector:
        """The point reached after travelling ``length`` along the ray."""
        return Vector(
            self.origin.x + length * self.direction.x,
            self.origin.y + length * self.direction.y,
            self.origin.z + length * self.direction.z,
        )


def quaternion_multiply(u: Vector, v: Vector) -> Vector:
    """Hamilton product of two quaternions stored as (x, y, z, w)."""
    return Vector(
        u.w * v.x + u.x * v.w - u.y * v.z + u.z * v.y,
        u.w * v.y + u.x * v.z + u.y * v.w - u.z * v.x,
        u.w * v.z - u.x * v.y + u.y * v.x + u.z * v.w,
        u.w * v.w - u.x * v.x - u.y * v.y - u.z * v.z,
    )


def normalize_quat(q: Vector) -> Vector:
    """Scale a quaternion to unit norm; a zero quaternion is returned unchanged."""
    norm = math.sqrt(q.w * q.w + q.x * q.x + q.y * q.y + q.z * q.z)
    if norm == 0:
        return q
    return Vector(q.x / norm, q.y / norm, q.z / norm, q.w / norm)


def _conjugate(q: Vector) -> Vector:
    return Vector(-q.x, -q.y, -q.z, q.w)


def _is_identity(q: Vector) -> bool:
    return not q.x and not q.y and not q.z


def rotate_quaternion(quaternion: Vector, u: Vector) -> Vector:
    """Rotate ``u`` by ``conj(q) * u * q``."""
    if _is_identity(quaternion):
        return Vector(u.x, u.y, u.z, 0.0)
    pure = Vector(u.x, u.y, u.z, 0.0)
    return quaternion_multiply(
        quaternion_multiply(_conjugate(quaternion), pure), quaternion
    )


def rotate_inverse_quaternion(quaternion: Vector, u: Vector) -> Vector:
    """Rotate ``u`` by ``q * u * conj(q)``, undoing :func:`rotate_quaternion`."""
    if _is_identity(quaternion):
        return Vector(u.x, u.y, u.z, 0.0)
    pure = Vector(u.x, u.y, u.z, 0.0)
    return quaternion_multiply(
        quaternion, quaternion_multiply(pure, _conjugate(quaternion))
    )


def _axis_quaternion(axis: Vector, angle: float) -> Vector:
    half_sin = math.sin(angle / 2)
    return normalize_quat(
        Vector(axis.x * half_sin, axis.y * half_sin, axis.z * half_sin, math.cos(angle / 2))
    )


def rotation_x(
    vect: Vector, right: Vector, up: Vector, angle: float
) -> tuple[Vector, Vector]:
    """Turn ``vect`` about ``up``; return the new vector and the new right vector."""
    rotated = rotate_quaternion(_axis_quaternion(up, angle), vect)
    new_right = up.cross(rotated).normalized()
    return rotated.normalized(), new_right


def rotation_y(
    vect: Vector, right: Vector, up: Vector, angle: float
) -> tuple[Vector, Vector]:
    """Turn ``vect`` about ``right``; return the new vector and the new up vector."""
    rotated = rotate_quaternion(_axis_quaternion(right, angle), vect)
    new_up = rotated.cross(right).normalized()
    return rotated.normalized(), new_up


def _ieee_div(numerator: float, denominator: float) -> float:
    if denominator != 0:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def quadratic_equation(a: float, b: float, c: float) -> float:
    """Pick the root of ``a t^2 + b t + c`` that a ray should use.

    The smallest non-negative root is preferred; when both are negative the
    smaller one is returned. Without real roots the result is NaN.
    """
    delta = b * b - 4 * a * c
    if delta == 0:
        return _ieee_div(-b, 2 * a)
    if delta < 0:
        return math.nan
    root = math.sqrt(delta)
    ret1 = _ieee_div(-b - root, 2 * a)
    ret2 = _ieee_div(-b + root, 2 * a)
    if ret1 < 0 and ret2 < 0:
        return ret1
    if ret1 < 0:
        return ret2
    if ret2 < 0:
        return ret1
    if ret1 < ret2:
        return ret1
    return ret2