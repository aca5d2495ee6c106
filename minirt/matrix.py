"""4x4 matrices stored row-major as flat 16-element tuples."""

from __future__ import annotations

from collections.abc import Sequence

from minirt.vector import Vector

Matrix = tuple[float, ...]


def _check4(m: Sequence[float]) -> None:
    if len(m) != 16:
        raise ValueError(f"expected 16 matrix entries, got {len(m)}")


def _kept_indices(deleted: int) -> list[int]:
    return [k for k in range(4) if k + 1 != deleted][:3]


def fill_mat3(m4: Sequence[float], del_a: int, del_b: int) -> Matrix:
    """The 3x3 minor of ``m4`` without row ``del_a`` and column ``del_b`` (1-based)."""
    _check4(m4)
    rows = _kept_indices(del_a)
    cols = _kept_indices(del_b)
    return tuple(m4[r * 4 + c] for r in rows for c in cols)


def determinant3(m: Sequence[float]) -> float:
    if len(m) != 9:
        raise ValueError(f"expected 9 matrix entries, got {len(m)}")
    return (
        m[0] * m[4] * m[8]
        + m[1] * m[5] * m[6]
        + m[2] * m[3] * m[7]
        - m[2] * m[4] * m[6]
        - m[1] * m[3] * m[8]
        - m[0] * m[5] * m[7]
    )


def determinant4(m: Sequence[float]) -> float:
    """Determinant by cofactor expansion along the first column."""
    _check4(m)
    return sum(
        (-1) ** row * m[4 * row] * determinant3(fill_mat3(m, row + 1, 1))
        for row in range(4)
    )


def invert_matrix(m: Sequence[float]) -> Matrix:
    """Cofactor matrix divided by the determinant: the transpose of the inverse.

    Raises ValueError for a singular matrix.
    """
    det = determinant4(m)
    if det == 0:
        raise ValueError("matrix is singular")
    return tuple(
        (-1 if (i // 4 + i % 4) % 2 else 1)
        * determinant3(fill_mat3(m, i // 4 + 1, i % 4 + 1))
        / det
        for i in range(16)
    )


def generate_orthogonal_vector(z: Vector) -> Vector:
    """A unit vector orthogonal to ``z``."""
    if not z.y:
        result = Vector(0.0, 1.0, 0.0)
    elif not z.x:
        result = Vector(1.0, 0.0, 0.0)
    elif not z.z:
        result = Vector(0.0, 0.0, 1.0)
    else:
        result = Vector(1.0, 1.0, (-z.x - z.y) / z.z)
    return result.normalized()


def cartesian_basis(z: Vector) -> tuple[Vector, Vector]:
    """Two vectors completing ``z`` to a basis: a unit x, and y = z cross x."""
    if z.x == 0 and z.y == 1 and z.z == 0:
        x = Vector(1.0, 0.0, 0.0)
    else:
        x = Vector(0.0, 1.0, 0.0).cross(z)
    x = x.normalized()
    y = z.cross(x)
    return x, y


def cam_to_world_matrix(orientation: Vector, centre: Vector) -> Matrix:
    """Rows: camera x axis, camera y axis, orientation, centre."""
    x, y = cartesian_basis(orientation)
    rows = (x, y, orientation, centre)
    return tuple(value for row in rows for value in (row.x, row.y, row.z, row.w))


def vector_times_matrix(u: Vector, m: Sequence[float]) -> Vector:
    """Row vector ``u`` multiplied by matrix ``m``."""
    _check4(m)
    coords = (u.x, u.y, u.z, u.w)
    x, y, z, w = (
        sum(coords[row] * m[row * 4 + col] for row in range(4)) for col in range(4)
    )
    return Vector(x, y, z, w)