import pytest

from minirt.matrix import (
    cam_to_world_matrix,
    cartesian_basis,
    determinant3,
    determinant4,
    fill_mat3,
    generate_orthogonal_vector,
    invert_matrix,
    vector_times_matrix,
)
from minirt.vector import Vector

IDENTITY4 = (1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1)
IDENTITY3 = (1, 0, 0, 0, 1, 0, 0, 0, 1)
SAMPLE = (2, 1, 0, 3, 1, 3, 2, 0, 0, 1, 4, 1, 5, 0, 1, 2)


def _matmul(a, b):
    return tuple(
        sum(a[r * 4 + k] * b[k * 4 + c] for k in range(4))
        for r in range(4)
        for c in range(4)
    )


def _transpose(m):
    return tuple(m[c * 4 + r] for r in range(4) for c in range(4))


def _xyzw(v):
    return (v.x, v.y, v.z, v.w)


def test_fill_mat3_removes_first_row_and_column():
    m = tuple(range(16))
    assert fill_mat3(m, 1, 1) == (5, 6, 7, 9, 10, 11, 13, 14, 15)


def test_fill_mat3_rejects_wrong_size():
    with pytest.raises(ValueError):
        fill_mat3((1, 2, 3), 1, 1)


def test_determinant3_identity():
    assert determinant3(IDENTITY3) == 1


def test_determinant3_rejects_wrong_size():
    with pytest.raises(ValueError):
        determinant3(IDENTITY4)


def test_determinant4_identity():
    assert determinant4(IDENTITY4) == 1


def test_determinant4_triangular_is_product_of_diagonal():
    d = (2.0, 3.0, 4.0, 5.0)
    m = (d[0], 7, 1, 2, 0, d[1], 8, 3, 0, 0, d[2], 6, 0, 0, 0, d[3])
    assert determinant4(m) == pytest.approx(d[0] * d[1] * d[2] * d[3])


def test_determinant4_row_swap_negates():
    swapped = SAMPLE[4:8] + SAMPLE[0:4] + SAMPLE[8:]
    assert determinant4(swapped) == pytest.approx(-determinant4(SAMPLE))


def test_determinant4_transpose_invariant():
    assert determinant4(_transpose(SAMPLE)) == pytest.approx(determinant4(SAMPLE))


def test_determinant4_duplicate_rows_is_zero():
    m = SAMPLE[0:4] + SAMPLE[0:4] + SAMPLE[8:]
    assert determinant4(m) == pytest.approx(0.0)


def test_invert_gives_transposed_inverse():
    result = invert_matrix(SAMPLE)
    product = _matmul(SAMPLE, _transpose(result))
    assert product == pytest.approx(IDENTITY4, abs=1e-9)


def test_invert_identity():
    assert invert_matrix(IDENTITY4) == pytest.approx(IDENTITY4)


def test_invert_singular_raises():
    with pytest.raises(ValueError):
        invert_matrix(SAMPLE[0:4] + SAMPLE[0:4] + SAMPLE[8:])


@pytest.mark.parametrize(
    "z",
    [Vector(1, 0, 0), Vector(0, 1, 0), Vector(1, 2, 0), Vector(1, 2, 3), Vector(0, 0, 1)],
)
def test_generate_orthogonal_vector(z):
    y = generate_orthogonal_vector(z)
    assert y.dot(z) == pytest.approx(0.0, abs=1e-9)
    assert y.length() == pytest.approx(1.0)


@pytest.mark.parametrize(
    "z", [Vector(0, 0, 1), Vector(1, 0, 0), Vector(1, 2, 3).normalized()]
)
def test_cartesian_basis_is_orthogonal(z):
    x, y = cartesian_basis(z)
    assert x.length() == pytest.approx(1.0)
    assert x.dot(z) == pytest.approx(0.0, abs=1e-9)
    assert y.dot(x) == pytest.approx(0.0, abs=1e-9)
    assert y.dot(z) == pytest.approx(0.0, abs=1e-9)


def test_cartesian_basis_looking_up():
    x, y = cartesian_basis(Vector(0, 1, 0))
    assert (x.x, x.y, x.z) == (1, 0, 0)
    assert y.dot(x) == pytest.approx(0.0)


def test_cam_to_world_maps_forward_to_orientation():
    orientation = Vector(1, 2, 3).normalized()
    centre = Vector(4, 5, 6)
    m = cam_to_world_matrix(orientation, centre)
    forward = vector_times_matrix(Vector(0, 0, 1, 0), m)
    assert _xyzw(forward) == pytest.approx(_xyzw(orientation))
    origin = vector_times_matrix(Vector(0, 0, 0, 1), m)
    assert _xyzw(origin) == pytest.approx(_xyzw(centre))


def test_cam_to_world_rows_are_orthogonal():
    orientation = Vector(-1, 0.5, 2).normalized()
    m = cam_to_world_matrix(orientation, Vector())
    right = vector_times_matrix(Vector(1, 0, 0, 0), m)
    up = vector_times_matrix(Vector(0, 1, 0, 0), m)
    assert right.dot(up) == pytest.approx(0.0, abs=1e-9)
    assert right.dot(orientation) == pytest.approx(0.0, abs=1e-9)


def test_vector_times_identity():
    v = Vector(1.5, -2, 3, 0.5)
    assert _xyzw(vector_times_matrix(v, IDENTITY4)) == _xyzw(v)


def test_vector_times_matrix_rejects_wrong_size():
    with pytest.raises(ValueError):
        vector_times_matrix(Vector(), IDENTITY3)