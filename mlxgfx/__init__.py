"""Windowing, RGBA image buffers, PNG and XPM42 textures, input hooks and a depth-sorted render queue."""

__version__ = "0.1.0"

__all__ = ["display", "errors", "image", "keys", "texture", "utils", "window"]