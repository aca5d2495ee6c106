import math

import pytest

from minirt.scene import (
    Ambient,
    Camera,
    Light,
    Scene,
    SceneError,
    build_scene,
    load_scene,
    parse_ambient,
    parse_camera,
    parse_cylinder,
    parse_light,
    parse_plane,
    parse_sphere,
)
from minirt.shapes import Cylinder, ObjectKind, Plane, Sphere
from minirt.vector import Vector

AMBIENT = "A 0.2 255,255,255"
CAMERA = "C -50,0,20 0,0,1 70"
LIGHT = "L -40,0,30 0.7 255,255,255"
SPHERE = "sp 0,0,20 20 255,0,0"
PLANE = "pl 0,0,0 0,1,0 0,0,255"
CYLINDER = "cy 50,0,20.6 0,0,1 14.2 21.42 10,0,255"

SCENE_LINES = [AMBIENT, CAMERA, LIGHT, SPHERE, PLANE, CYLINDER]


@pytest.fixture
def camera():
    return parse_camera(CAMERA)


def test_parse_ambient_values():
    ambient = parse_ambient(AMBIENT)
    assert ambient == Ambient(0.2, 0xFFFFFF)


def test_parse_ambient_rejects_out_of_range_colour():
    with pytest.raises(SceneError):
        parse_ambient("A 0.2 256,0,0")


def test_parse_ambient_missing_field():
    with pytest.raises(SceneError):
        parse_ambient("A 0.2")


def test_parse_camera_basis(camera):
    assert camera.centre == Vector(-50.0, 0.0, 20.0)
    assert camera.fov == pytest.approx(math.radians(70), rel=1e-6)
    assert camera.orientation.length() == pytest.approx(1.0)
    assert camera.up.dot(camera.orientation) == pytest.approx(0.0)
    assert camera.right.dot(camera.orientation) == pytest.approx(0.0)


def test_parse_camera_normalises_orientation():
    cam = parse_camera("C 0,0,0 0,0,5 90")
    assert cam.orientation == Vector(0.0, 0.0, 1.0)


def test_camera_matrix_holds_orientation_and_centre(camera):
    assert len(camera.cam_to_world) == 16
    assert camera.cam_to_world[8:11] == (
        camera.orientation.x,
        camera.orientation.y,
        camera.orientation.z,
    )
    assert camera.cam_to_world[12:15] == (-50.0, 0.0, 20.0)


def test_camera_rebuild_matrix_follows_centre(camera):
    camera.centre = Vector(1.0, 2.0, 3.0)
    camera.rebuild_matrix()
    assert camera.cam_to_world[12:15] == (1.0, 2.0, 3.0)


def test_parse_camera_rejects_zero_orientation():
    with pytest.raises(SceneError):
        parse_camera("C 0,0,0 0,0,0 70")


def test_parse_light_values():
    light = parse_light(LIGHT)
    assert light == Light(Vector(-40.0, 0.0, 30.0), 0.7, 0xFFFFFF)


@pytest.mark.parametrize("brightness", ["1.5", "-0.1"])
def test_parse_light_rejects_brightness(brightness):
    with pytest.raises(SceneError):
        parse_light(f"L 0,0,0 {brightness} 255,255,255")


def test_parse_sphere_faces_camera(camera):
    sphere = parse_sphere(SPHERE, camera)
    assert sphere.diameter == 20.0
    assert sphere.color == 0xFF0000
    assert sphere.normal == camera.orientation
    assert sphere.right == camera.right


@pytest.mark.parametrize("diameter", ["0.1", "200.5"])
def test_parse_sphere_rejects_diameter(camera, diameter):
    with pytest.raises(SceneError):
        parse_sphere(f"sp 0,0,0 {diameter} 255,0,0", camera)


def test_parse_sphere_rejects_black(camera):
    with pytest.raises(SceneError):
        parse_sphere("sp 0,0,0 2 0,0,0", camera)


def test_parse_sphere_needs_camera():
    with pytest.raises(SceneError):
        parse_sphere(SPHERE, None)


def test_parse_plane_right_is_orthogonal(camera):
    plane = parse_plane(PLANE, camera)
    assert plane.normal == Vector(0.0, 1.0, 0.0)
    assert plane.right.dot(plane.normal) == pytest.approx(0.0)
    assert plane.color == 0x0000FF


def test_parse_plane_rejects_zero_normal(camera):
    with pytest.raises(SceneError):
        parse_plane("pl 0,0,0 0,0,0 0,0,255", camera)


def test_parse_cylinder_values():
    cyl = parse_cylinder(CYLINDER)
    assert cyl.diameter == pytest.approx(14.2)
    assert cyl.height == pytest.approx(21.42)
    assert cyl.normal.length() == pytest.approx(1.0)
    assert cyl.right.length() == pytest.approx(1.0)
    assert cyl.right.dot(cyl.normal) == pytest.approx(0.0)


@pytest.mark.parametrize("height", ["0.2", "1000.5"])
def test_parse_cylinder_rejects_height(height):
    with pytest.raises(SceneError):
        parse_cylinder(f"cy 0,0,0 0,1,0 2 {height} 1,1,1")


def test_parse_cylinder_accepts_max_height():
    assert parse_cylinder("cy 0,0,0 0,1,0 2 1000 1,1,1").height == 1000.0


def test_build_scene_objects_in_order():
    scene = build_scene(SCENE_LINES)
    assert [obj.kind for obj in scene.objects] == [
        ObjectKind.SPHERE,
        ObjectKind.PLANE,
        ObjectKind.CYLINDER,
    ]
    assert isinstance(scene.objects[0], Sphere)
    assert isinstance(scene.objects[1], Plane)
    assert isinstance(scene.objects[2], Cylinder)
    assert scene.ambient.brightness == 0.2


def test_build_scene_second_letter_dispatch():
    scene = build_scene(SCENE_LINES + ["cp 0,0,-30 4 1,2,3"])
    assert isinstance(scene.objects[-1], Sphere)
    assert scene.objects[-1].diameter == 4.0


def test_build_scene_rejects_duplicate_ambient():
    with pytest.raises(SceneError):
        build_scene(SCENE_LINES + ["A 0.5 255,255,255"])


def test_build_scene_rejects_missing_light():
    with pytest.raises(SceneError):
        build_scene([AMBIENT, CAMERA, SPHERE])


def test_build_scene_rejects_bad_character():
    with pytest.raises(SceneError):
        build_scene([AMBIENT, CAMERA, LIGHT, "sp 0,0,20 20 255,0,0;"])


def test_build_scene_rejects_camera_inside_object():
    with pytest.raises(SceneError):
        build_scene([AMBIENT, "C 0,0,20 0,0,1 70", LIGHT, SPHERE])


def test_scene_blocked():
    scene = build_scene(SCENE_LINES)
    assert scene.blocked(Vector(0.0, 0.0, 20.0))
    assert not scene.blocked(Vector(-50.0, 0.0, 20.0))


def test_check_camera_outside_after_move():
    scene = build_scene(SCENE_LINES)
    scene.camera.centre = Vector(0.0, 0.0, 20.0)
    with pytest.raises(SceneError):
        scene.check_camera_outside()


def test_load_scene_round_trip(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "scene.rt").write_text("\n".join(SCENE_LINES) + "\n")
    scene = load_scene("scene.rt")
    assert scene == build_scene(SCENE_LINES)


def test_load_scene_stops_at_blank_line(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    text = "\n".join(SCENE_LINES) + "\n\nA 0.5 1,1,1\n"
    (tmp_path / "scene.rt").write_text(text)
    assert len(load_scene("scene.rt").objects) == 3


def test_load_scene_rejects_extension(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "scene.txt").write_text("\n".join(SCENE_LINES))
    with pytest.raises(SceneError):
        load_scene("scene.txt")


def test_load_scene_rejects_short_path():
    with pytest.raises(SceneError):
        load_scene(".rt")


def test_load_scene_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SceneError):
        load_scene("absent.rt")


def test_load_scene_leading_blank_line(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "scene.rt").write_text("\n" + "\n".join(SCENE_LINES))
    with pytest.raises(SceneError):
        load_scene("scene.rt")


def test_scene_error_is_value_error():
    with pytest.raises(ValueError):
        parse_light("L 0,0,0 2 255,255,255")


def test_camera_update_basis_special_axis():
    cam = Camera(centre=Vector(), orientation=Vector(-1.0, 0.0, 0.0), fov=1.0)
    cam.update_basis()
    assert cam.up == Vector(0.0, 1.0, 0.0)
    assert cam.right.dot(cam.orientation) == pytest.approx(0.0)


def test_scene_dataclass_blocked_without_objects():
    scene = Scene(
        ambient=Ambient(0.1, 1),
        camera=parse_camera(CAMERA),
        light=Light(Vector(), 0.5, 1),
    )
    assert scene.blocked(Vector()) is False