"""Thin-lens camera model for primary ray generation.

This module implements a positionable camera that generates primary rays for
rendering. The camera supports:
- Look-at positioning (look_from, look_at, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios (image height is derived from the width)
- Jittered sampling for anti-aliasing
- Depth of field through a defocus disk (thin lens)

Configuration and derived state are kept apart. ``CameraConfig`` is a plain
immutable record; ``setup_camera`` computes the orthonormal basis (u, v, w)
and viewport geometry once, writes it to Taichi fields for the kernels, and
returns a read-only ``CameraGeometry`` snapshot:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Pixel (0, 0) is the top-left pixel; ``j`` grows downward.

Example:
    >>> from glint.runtime import init_taichi
    >>> init_taichi()
    >>> from glint.camera.thin_lens import CameraConfig, setup_camera, get_ray
    >>>
    >>> config = CameraConfig(
    ...     look_from=(13.0, 2.0, 3.0),
    ...     look_at=(0.0, 0.0, 0.0),
    ...     vfov=20.0,
    ...     defocus_angle=0.6,
    ...     focus_dist=10.0,
    ... )
    >>> geometry = setup_camera(config)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0, 0)  # Ray through the top-left pixel
"""

import logging
import math
import numbers
from dataclasses import dataclass

import numpy as np
import taichi as ti

from glint.core.ray import Ray, make_ray, random_in_unit_disk, real, vec3
from glint.core.sampler import random_float

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class CameraConfig:
    """Configuration for a thin-lens camera and its render settings.

    Attributes:
        aspect_ratio: Width divided by height of the output image.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Number of random samples accumulated per pixel.
        max_depth: Maximum number of ray bounces into the scene.
        vfov: Vertical field of view in degrees.
        look_from: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        vup: Camera-relative "up" direction (typically (0, 1, 0)).
        defocus_angle: Variation angle of rays through each pixel, in degrees.
            0 gives a pinhole camera with everything in focus.
        focus_dist: Distance from look_from to the plane of perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    look_from: tuple[float, float, float] = (0.0, 0.0, 0.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_dist: float = 10.0

    def __post_init__(self) -> None:
        for name in ("image_width", "samples_per_pixel", "max_depth"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            # numpy integers are stored as plain ints
            object.__setattr__(self, name, int(value))
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_width < 1:
            raise ValueError(f"image_width must be at least 1, got {self.image_width}")
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.defocus_angle < 0.0:
            raise ValueError(f"defocus_angle must be non-negative, got {self.defocus_angle}")
        if not self.focus_dist > 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")

    @property
    def image_height(self) -> int:
        """Image height in pixels, derived from width and aspect ratio (at least 1)."""
        return max(1, int(self.image_width / self.aspect_ratio))


@dataclass(frozen=True)
class CameraGeometry:
    """Derived camera state, computed once by ``setup_camera``.

    All vectors are read-only float64 NumPy arrays of shape (3,).
    """

    image_width: int
    image_height: int
    center: np.ndarray
    pixel00_loc: np.ndarray
    pixel_delta_u: np.ndarray
    pixel_delta_v: np.ndarray
    u: np.ndarray
    v: np.ndarray
    w: np.ndarray
    defocus_disk_u: np.ndarray
    defocus_disk_v: np.ndarray
    defocus_angle: float


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera center (position)
_camera_center = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())  # Backward (opposite view)

# Location of pixel (0, 0) and offsets to the neighbouring pixels
_pixel00_loc = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # One pixel right
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # One pixel down

# Defocus disk horizontal and vertical radius vectors
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f64, shape=())
_defocus_angle = ti.field(dtype=ti.f64, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def _frozen(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def setup_camera(config: CameraConfig) -> CameraGeometry:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis (u, v, w) and viewport geometry
    from the provided camera parameters. This must be called before rendering
    and the result is not recomputed while a render is running.

    The viewport lies on the focus plane, ``focus_dist`` in front of the
    camera. Its height follows from the vertical field of view and its width
    from the actual pixel ratio (not the requested aspect ratio), so pixels
    stay square after image height is rounded down.

    Args:
        config: Camera configuration with position, orientation, and FOV.

    Returns:
        The derived camera geometry.

    Raises:
        ValueError: If look_from equals look_at or vup is parallel to the
            view direction.
    """
    image_width = config.image_width
    image_height = config.image_height

    center = np.array(config.look_from, dtype=np.float64)
    look_at = np.array(config.look_at, dtype=np.float64)
    vup = np.array(config.vup, dtype=np.float64)

    # Viewport dimensions on the focus plane
    theta = math.radians(config.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * config.focus_dist
    viewport_width = viewport_height * (image_width / image_height)

    # w points from look_at toward look_from (backward)
    w = center - look_at
    w_len = np.linalg.norm(w)
    if w_len == 0.0:
        raise ValueError("look_from and look_at must be different points")
    w = w / w_len

    # u points right (perpendicular to w and vup)
    u = np.cross(vup, w)
    u_len = np.linalg.norm(u)
    if u_len < 1e-12:
        raise ValueError("vup must not be parallel to the view direction")
    u = u / u_len

    # v points up in the camera's frame
    v = np.cross(w, u)

    # Vectors across the horizontal and down the vertical viewport edges
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    viewport_upper_left = center - config.focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_radius = config.focus_dist * math.tan(math.radians(config.defocus_angle / 2.0))
    defocus_disk_u = u * defocus_radius
    defocus_disk_v = v * defocus_radius

    _camera_center[None] = center.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _pixel00_loc[None] = pixel00_loc.tolist()
    _pixel_delta_u[None] = pixel_delta_u.tolist()
    _pixel_delta_v[None] = pixel_delta_v.tolist()
    _defocus_disk_u[None] = defocus_disk_u.tolist()
    _defocus_disk_v[None] = defocus_disk_v.tolist()
    _defocus_angle[None] = config.defocus_angle

    logger.debug(
        "Camera set up: %dx%d, vfov=%.1f, defocus_angle=%.2f",
        image_width,
        image_height,
        config.vfov,
        config.defocus_angle,
    )

    return CameraGeometry(
        image_width=image_width,
        image_height=image_height,
        center=_frozen(center),
        pixel00_loc=_frozen(pixel00_loc),
        pixel_delta_u=_frozen(pixel_delta_u),
        pixel_delta_v=_frozen(pixel_delta_v),
        u=_frozen(u),
        v=_frozen(v),
        w=_frozen(w),
        defocus_disk_u=_frozen(defocus_disk_u),
        defocus_disk_v=_frozen(defocus_disk_v),
        defocus_angle=config.defocus_angle,
    )


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def defocus_disk_sample() -> vec3:
    """Return a random point on the camera's defocus disk."""
    p = random_in_unit_disk()
    return _camera_center[None] + p[0] * _defocus_disk_u[None] + p[1] * _defocus_disk_v[None]


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32) -> Ray:
    """Generate a jittered camera ray for pixel (i, j).

    The ray is aimed at a point sampled uniformly within the pixel square
    around its center. It originates at the camera center, or at a random
    point on the defocus disk when the defocus angle is positive.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).

    Returns:
        A Ray whose direction is not normalized.
    """
    offset_x = random_float() - 0.5
    offset_y = random_float() - 0.5

    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(pixel_i, real) + offset_x) * _pixel_delta_u[None]
        + (ti.cast(pixel_j, real) + offset_y) * _pixel_delta_v[None]
    )

    origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        origin = defocus_disk_sample()

    return make_ray(origin, pixel_sample - origin)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with center, u, v, w, pixel00_loc, pixel_delta_u,
        pixel_delta_v, defocus_disk_u and defocus_disk_v.
    """
    fields = {
        "center": _camera_center,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "pixel00_loc": _pixel00_loc,
        "pixel_delta_u": _pixel_delta_u,
        "pixel_delta_v": _pixel_delta_v,
        "defocus_disk_u": _defocus_disk_u,
        "defocus_disk_v": _defocus_disk_v,
    }
    info = {}
    for name, field in fields.items():
        vec = field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
