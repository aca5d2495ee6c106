# minirt

A small ray tracer. It reads a scene from an `.rt` file and renders it
with ambient light, one point light with diffuse shading and specular
highlights on spheres and cylinders, and hard shadows. Spheres, planes
and finite capped cylinders are supported.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

The package has no third-party dependencies. The interactive viewer uses
`tkinter` from the standard library, which some Python builds leave out.

## Running

```
minirt scene.rt
```

The command takes exactly one argument, the path of a scene file, and
opens a window the size of the screen showing the rendered scene. The
file name must be at least four characters long, and everything from its
first dot on must be exactly `.rt`.

On failure a message goes to standard error and the command returns a
non-zero status:

| Status | Cause |
|--------|-------|
| 19 | not exactly one argument |
| 17 | the argument is empty |
| 22 | the path is shorter than four characters |
| 16 | the path does not end in `.rt` |
| 2  | the file cannot be read, is empty or malformed, or the camera starts inside an object |
| 1  | no window could be opened (no `tkinter`, or no display) |

## Scene files

Each line describes one element. Fields are separated by spaces. Points,
directions and colours are comma-separated triples. Colour channels are
integers from 0 to 255.

```
A 0.2 255,255,255
C 0,0,-20 0,0,1 70
L -10,10,-10 0.7 255,255,255
sp 0,0,5 4 255,0,0
pl 0,-3,0 0,1,0 0,128,255
cy 5,0,8 0,1,0 2 6 10,200,10
```

| Identifier | Fields |
|------------|--------|
| `A`  | ambient ratio, colour |
| `C`  | position, orientation (not all zero), field of view in degrees |
| `L`  | position, brightness (0 to 1), colour |
| `sp` | centre, diameter (0.2 to 200), colour |
| `pl` | point, normal (not all zero), colour |
| `cy` | centre, axis (not all zero), diameter (0.2 to 200), height (above 0.2, at most 1000), colour |

Rules enforced by the parser:

* `A`, `C` and `L` must each be present, and none may appear twice;
  there must be at least one shape.
* `sp` and `pl` lines must come after the `C` line.
* Every line is at least 12 characters long and uses only letters,
  digits, spaces, `.`, `,` and `-`.
* Reading stops at the first empty line.
* Shape colours must not be pure black (`0,0,0`).
* The camera must not start inside the bounding box of an object.

## Controls

In the viewer window:

* Arrow keys move the camera, unless an object is selected; a move that
  would put the camera inside an object's bounding box is refused.
* `W`, `A`, `S`, `D` turn the camera, or the selected plane or cylinder
  (spheres are left as they are).
* Left click selects the object under the cursor; any other button
  clears the selection.
* With an object selected, the arrow keys move it, and keypad `+` / `-`
  change the diameter of a sphere or cylinder. For a cylinder, keypad
  Right and Page Up change its height.
* `Escape` closes the window.

The image is redrawn after every key release.

## Using it as a library

```python
from minirt.render import Image, color_brightness, draw
from minirt.scene import load_scene

scene = load_scene("scene.rt")
print(scene.blocked(scene.camera.centre))

image = Image(320, 240)
draw(scene, image)
print(hex(image.get(160, 120)))

# Scale a colour by a brightness under a white light, no highlight.
print(hex(color_brightness(0xFFFFFF, 0x336699, 0.5, 0.0)))
```

Malformed scenes raise `minirt.scene.SceneError`, a subclass of
`ValueError`. `minirt.scene.build_scene` builds a scene from a list of
lines without reading a file.

The vector maths lives in `minirt.vector` (`Vector`, `Ray`, quaternion
rotations, `quadratic_equation`), the 4×4 matrix helpers in
`minirt.matrix`, the shapes in `minirt.shapes` (`Sphere`, `Plane`,
`Cylinder`, `Key`), scene-file parsing in `minirt.textparse` and
`minirt.scene`, shading and input handling in `minirt.render` (`Image`,
`draw`, `render_pixel`, `Controller`), and the command in `minirt.app`.

## What it does not do

There is no way to save a rendered image to a file: pictures are shown
in the viewer window or kept in an `Image` in memory, whose pixels can be
read with `Image.get` or `Image.rows`. There is only one point light, and
no reflections, refraction or textures.