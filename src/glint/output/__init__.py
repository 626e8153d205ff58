"""Output module for encoding rendered images.

Components:
    encode: Gamma correction, byte conversion, PPM and Pillow writers
"""

from glint.output.encode import (
    MAX_INTENSITY,
    color_to_bytes,
    format_pixel,
    linear_to_gamma,
    save_image,
    save_png,
    write_ppm,
)

__all__ = [
    "MAX_INTENSITY",
    "linear_to_gamma",
    "color_to_bytes",
    "format_pixel",
    "write_ppm",
    "save_png",
    "save_image",
]
