"""Command-line entry point: load a scene and show it in an interactive window."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from minirt.render import Controller, Image, draw
from minirt.scene import MIN_PATH_LENGTH, Scene, SceneError, load_scene
from minirt.textparse import has_rt_extension

USAGE = "./minirt files.rt\n"
EMPTY_ARGUMENT = "empty arguments\n"
BAD_INPUT = "met un input correct\n"
NEED_RT = "need .rt files\n"
PARSE_ERROR = "ERREUR \n"
WINDOW_TITLE = "title"

EXIT_USAGE = 19
EXIT_EMPTY = 17
EXIT_BAD_INPUT = 22
EXIT_NEED_RT = 16
EXIT_PARSE = 2
EXIT_DISPLAY = 1


def _photo_data(image: Image) -> str:
    """The image as the row list a Tk photo image accepts."""
    return " ".join(
        "{" + " ".join(f"#{color & 0xFFFFFF:06x}" for color in row) + "}"
        for row in image.rows()
    )


def _show(scene: Scene) -> int:
    """Open a full-screen window on the scene and run its event loop."""
    try:
        import tkinter
    except ImportError:
        sys.stderr.write("no display toolkit available\n")
        return EXIT_DISPLAY

    try:
        root = tkinter.Tk()
    except tkinter.TclError as exc:
        sys.stderr.write(f"cannot open a window: {exc}\n")
        return EXIT_DISPLAY

    root.title(WINDOW_TITLE)
    width = root.winfo_screenwidth()
    height = root.winfo_screenheight()
    image = Image(width, height)
    draw(scene, image)
    controller = Controller(scene=scene, image=image)

    photo = tkinter.PhotoImage(width=width, height=height)
    photo.put(_photo_data(image))
    label = tkinter.Label(root, image=photo, borderwidth=0)
    label.pack()

    def on_key(event: tkinter.Event) -> None:
        controller.key_press(event.keysym_num)
        if not controller.running:
            root.destroy()
            return
        photo.put(_photo_data(image))

    def on_click(event: tkinter.Event) -> None:
        controller.click(event.num, event.x, event.y)

    root.bind("<KeyRelease>", on_key)
    label.bind("<ButtonPress>", on_click)
    root.protocol("WM_DELETE_WINDOW", root.destroy)
    root.mainloop()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the viewer on the one scene file named in ``argv``; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        sys.stderr.write(USAGE)
        return EXIT_USAGE
    path = args[0]
    if not path:
        sys.stderr.write(EMPTY_ARGUMENT)
        return EXIT_EMPTY
    if len(path) < MIN_PATH_LENGTH:
        sys.stderr.write(BAD_INPUT)
        return EXIT_BAD_INPUT
    if not has_rt_extension(path):
        sys.stderr.write(NEED_RT)
        return EXIT_NEED_RT
    try:
        scene = load_scene(path)
    except SceneError as exc:
        sys.stderr.write(PARSE_ERROR)
        sys.stderr.write(f"{exc}\n")
        return EXIT_PARSE
    return _show(scene)


if __name__ == "__main__":
    sys.exit(main())