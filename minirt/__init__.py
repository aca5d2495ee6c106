"""A small ray tracer for .rt scene files, with an interactive viewer."""

__version__ = "1.0.0"