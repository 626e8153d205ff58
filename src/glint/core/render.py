"""Scanline render driver.

This module provides a convenient wrapper around the core integrator that
supports:
- Camera and render target setup from a single CameraConfig
- Scanline-by-scanline rendering, top row first
- Progress logging and optional progress callbacks
- Image retrieval and output through the encoder

Progress is reported on this module's logger: ``Scanlines remaining: N``
before each row and ``Done.`` at the end.

Example:
    >>> from glint.runtime import init_taichi
    >>> init_taichi()
    >>> from glint.core.render import Renderer
    >>> from glint.scene.presets import create_hollow_glass_scene
    >>>
    >>> scene, config = create_hollow_glass_scene()
    >>> renderer = Renderer(config)
    >>> renderer.render()
    >>> renderer.save("image.png")
"""

import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt

from glint.camera.thin_lens import CameraConfig, CameraGeometry, setup_camera
from glint.core.integrator import (
    clear_render_target,
    get_sample_sum_numpy,
    render_scanline,
    setup_render_target,
)
from glint.output.encode import color_to_bytes, linear_to_gamma, save_image, write_ppm

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders the current scene through a camera, one scanline at a time.

    Creating a Renderer computes the camera geometry and sets up the render
    target. The scene itself lives in the global scene storage (see
    glint.scene.manager.SceneManager) and must not change while rendering.

    Attributes:
        config: The camera and render settings.
        geometry: The derived camera geometry.
    """

    def __init__(self, config: CameraConfig) -> None:
        """Initialize the renderer.

        Args:
            config: Camera and render settings.

        Raises:
            ValueError: If the camera framing is degenerate or the image
                exceeds the maximum supported size.
        """
        self.config = config
        self.geometry: CameraGeometry = setup_camera(config)
        setup_render_target(self.width, self.height)
        self._rows_done = 0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.geometry.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.geometry.image_height

    @property
    def samples_per_pixel(self) -> int:
        """Get the number of samples accumulated per pixel."""
        return self.config.samples_per_pixel

    @property
    def rows_done(self) -> int:
        """Get the number of scanlines rendered so far."""
        return self._rows_done

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render scanlines top to bottom, yielding progress after each one.

        The accumulated sums are zeroed first, so rendering again with the
        same renderer starts from a black image.

        Yields:
            Tuple of (rows_done, total_rows).
        """
        clear_render_target()
        self._rows_done = 0
        for j in range(self.height):
            logger.info("Scanlines remaining: %d", self.height - j)
            render_scanline(j, self.config.samples_per_pixel, self.config.max_depth)
            self._rows_done = j + 1
            yield (self._rows_done, self.height)
        logger.info("Done.")

    def render(self, callback: ProgressCallback | None = None) -> npt.NDArray[np.float64]:
        """Render the full image.

        Args:
            callback: Optional callback called after each scanline.
                Receives (rows_done, total_rows).

        Returns:
            The per-pixel radiance sums, shape (height, width, 3).
        """
        for done, total in self.render_progressive():
            if callback is not None:
                callback(done, total)
        return self.get_sample_sum()

    def get_sample_sum(self) -> npt.NDArray[np.float64]:
        """Get the per-pixel radiance sums, shape (height, width, 3)."""
        return get_sample_sum_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the averaged, gamma-corrected image with values in [0, 1]."""
        average = self.get_sample_sum() / self.samples_per_pixel
        return np.clip(linear_to_gamma(average), 0.0, 1.0)

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the image as 8-bit values, matching the written output."""
        return color_to_bytes(self.get_sample_sum(), self.samples_per_pixel)

    def write_ppm(self, stream: TextIO) -> None:
        """Write the image as plain-text PPM to a stream."""
        write_ppm(stream, self.get_sample_sum(), self.samples_per_pixel)

    def save(self, filepath: str | Path) -> Path:
        """Save the image; ``.ppm`` paths get PPM text, others go through Pillow.

        Raises:
            OSError: If the file cannot be written.
        """
        path = save_image(filepath, self.get_sample_sum(), self.samples_per_pixel)
        logger.info("Wrote %s", path)
        return path

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.samples_per_pixel}, rows_done={self.rows_done})"
        )
