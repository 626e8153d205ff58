"""Image encoding for accumulated radiance sums.

The render target holds, for every pixel, the sum of all its samples. This
module turns those sums into 8-bit pixel values and writes them out:

    byte = floor(256 * clamp(sqrt(sum / samples), 0.0, 0.999))

The square root is an approximate sRGB gamma of 2.0. Channels that overshoot
are clamped rather than rejected.

Supported formats:
    - Plain-text PPM (``P3``), written to any text stream
    - PNG and other raster formats (8-bit RGB via Pillow)

Example:
    >>> import sys
    >>> from glint.output.encode import write_ppm
    >>> write_ppm(sys.stdout, sample_sums, samples=100)
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Largest channel value before scaling; keeps 256 * x below 256
MAX_INTENSITY = 0.999


def linear_to_gamma(linear: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Apply gamma 2 correction (square root); negative inputs map to 0."""
    values = np.asarray(linear, dtype=np.float64)
    return np.sqrt(np.maximum(values, 0.0))


def color_to_bytes(
    sample_sum: npt.ArrayLike,
    samples: int,
) -> npt.NDArray[np.uint8]:
    """Convert radiance sums to 8-bit channel values.

    Args:
        sample_sum: Summed linear radiance, any shape (typically (H, W, 3)).
        samples: Number of samples that went into each sum.

    Returns:
        Array of the same shape with dtype uint8.

    Raises:
        ValueError: If samples is not positive.
    """
    if samples < 1:
        raise ValueError(f"samples must be at least 1, got {samples}")

    average = np.nan_to_num(np.asarray(sample_sum, dtype=np.float64) / samples)
    intensity = np.clip(linear_to_gamma(average), 0.0, MAX_INTENSITY)
    return np.floor(256.0 * intensity).astype(np.uint8)


def format_pixel(rgb: npt.ArrayLike) -> str:
    """Format one pixel's three byte values as a PPM text line."""
    r, g, b = (int(c) for c in np.asarray(rgb).reshape(3))
    return f"{r} {g} {b}"


def write_ppm(stream: TextIO, sample_sum: npt.ArrayLike, samples: int) -> None:
    """Write an image as plain-text PPM.

    Layout: ``P3``, ``<width> <height>``, ``255``, then one line per pixel
    in row-major order with the top row first.

    Args:
        stream: Writable text stream.
        sample_sum: Summed radiance of shape (H, W, 3), row 0 at the top.
        samples: Number of samples per pixel.

    Raises:
        OSError: If the stream cannot be written.
    """
    pixels = color_to_bytes(sample_sum, samples)
    height, width = pixels.shape[0], pixels.shape[1]

    stream.write(f"P3\n{width} {height}\n255\n")
    for row in pixels:
        for rgb in row:
            stream.write(format_pixel(rgb))
            stream.write("\n")


def save_png(filepath: str | Path, sample_sum: npt.ArrayLike, samples: int) -> None:
    """Save an image through Pillow (format chosen from the file suffix).

    Uses the same byte conversion as the PPM output.
    """
    pixels = color_to_bytes(sample_sum, samples)
    pil_image = PILImage.fromarray(pixels, mode="RGB")
    pil_image.save(filepath)


def save_image(filepath: str | Path, sample_sum: npt.ArrayLike, samples: int) -> Path:
    """Save an image, writing PPM for ``.ppm`` paths and using Pillow otherwise.

    Returns:
        The path written.

    Raises:
        OSError: If the file cannot be written.
    """
    path = Path(filepath)
    if path.suffix.lower() == ".ppm":
        with path.open("w", encoding="ascii", newline="\n") as stream:
            write_ppm(stream, sample_sum, samples)
    else:
        save_png(path, sample_sum, samples)
    return path
