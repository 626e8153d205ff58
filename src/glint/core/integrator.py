"""Path tracing integrator for Monte Carlo light transport.

This module implements the rendering kernels: tracing rays from the camera
through the scene, bouncing off surfaces according to their material
properties, and accumulating per-pixel radiance sums.

The only light in the scene is the sky. A path that escapes the geometry
picks up the sky gradient, scaled by the product of the attenuations of
every surface it bounced off. A path that is absorbed, or that runs out of
bounces, contributes black.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Depth-bounded bounce loop carrying the attenuation product
    - Scanline-at-a-time accumulation of radiance sums
    - Self-intersection avoidance through the t_min bound

Example:
    >>> from glint.runtime import init_taichi
    >>> init_taichi()
    >>> from glint.camera.thin_lens import CameraConfig, setup_camera
    >>> from glint.core.integrator import render_scanline, setup_render_target
    >>>
    >>> geometry = setup_camera(CameraConfig(image_width=64))
    >>> setup_render_target(geometry.image_width, geometry.image_height)
    >>> for j in range(geometry.image_height):
    ...     render_scanline(j, samples_per_pixel=10, max_depth=10)
"""

import math

import numpy as np
import taichi as ti
import taichi.math as tm

from glint.camera.thin_lens import get_ray
from glint.core.ray import Ray, make_ray, unit_vector, vec3
from glint.materials.dielectric import scatter_dielectric_by_id
from glint.materials.lambertian import scatter_lambertian_by_id
from glint.materials.metal import scatter_metal_by_id
from glint.scene.intersection import intersect_scene
from glint.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min and t_max for ray intersection; t_min keeps a scattered ray from
# re-hitting the surface it left ("shadow acne")
T_MIN = 0.001
T_MAX = math.inf

# Sky gradient endpoints
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Per-pixel radiance sums, indexed [i, j] with j = 0 the top row
_sample_sum = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Single-evaluation result for trace_ray / render_sample
_probe_color = ti.Vector.field(3, dtype=ti.f64, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _sample_sum.fill(0.0)


def reset_render_target() -> None:
    """Clear the buffers and mark the render target as not set up."""
    clear_render_target()
    _image_width[None] = 0
    _image_height[None] = 0
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit length, facing the ray).
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 0 when the ray is absorbed.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    # Unknown material ids absorb
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation = scatter_lambertian_by_id(type_index, normal)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background color seen along a ray that escapes the scene.

    Blends from white at the horizon to sky blue straight up, using the
    vertical component of the normalized direction.
    """
    unit_direction = unit_vector(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * SKY_HORIZON_COLOR + a * SKY_ZENITH_COLOR


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Equivalent to the recursive formulation: at each surface the material
    either absorbs (black) or scatters, and the result of the scattered ray
    is multiplied by the attenuation. A ray that escapes takes the sky color.
    Depth exhaustion is a normal termination and yields black, so
    ``depth <= 0`` always returns black.

    Args:
        ray: The ray to trace.
        depth: Remaining number of bounces.

    Returns:
        The estimated radiance (RGB).
    """
    origin = ray.origin
    direction = ray.direction

    color = vec3(0.0, 0.0, 0.0)

    # Product of the attenuations of all surfaces bounced off so far
    throughput = vec3(1.0, 1.0, 1.0)

    active = 1

    for _ in range(depth):
        if active == 1:
            rec = intersect_scene(make_ray(origin, direction), T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * sky_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, direction, rec.normal, rec.front_face
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    return color


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Replace NaN/Inf components with zero."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_scanline(
    pixel_j: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Accumulate every sample of one image row into the sum buffer."""
    for i in range(width):
        pixel_sum = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            pixel_sum += _sanitize(ray_color(get_ray(i, pixel_j), max_depth))
        _sample_sum[i, pixel_j] += pixel_sum


@ti.kernel
def _trace_ray_kernel(
    ox: ti.f64,
    oy: ti.f64,
    oz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    depth: ti.i32,
):
    # Single iteration keeps the bounce loop out of the parallel scope
    for _ in range(1):
        ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
        _probe_color[None] = ray_color(ray, depth)


@ti.kernel
def _render_sample_kernel(pixel_i: ti.i32, pixel_j: ti.i32, depth: ti.i32):
    for _ in range(1):
        _probe_color[None] = _sanitize(ray_color(get_ray(pixel_i, pixel_j), depth))


def _probe_result() -> tuple[float, float, float]:
    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
) -> tuple[float, float, float]:
    """Evaluate ray_color once for an explicit ray.

    This is a Python-callable function for testing and debugging.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z); need not be normalized.
        depth: Maximum number of bounces.

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    _trace_ray_kernel(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], depth
    )
    return _probe_result()


def render_sample(pixel_i: int, pixel_j: int, depth: int) -> tuple[float, float, float]:
    """Render a single camera sample for a specific pixel.

    Requires ``setup_camera`` to have been called.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        depth: Maximum number of bounces.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    _render_sample_kernel(pixel_i, pixel_j, depth)
    return _probe_result()


def render_scanline(pixel_j: int, samples_per_pixel: int, max_depth: int) -> None:
    """Render every pixel of one row, adding the samples to the sum buffer.

    Args:
        pixel_j: Row index (0 = top).
        samples_per_pixel: Number of samples per pixel.
        max_depth: Maximum number of bounces per sample.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row is outside the image.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= pixel_j < height:
        raise ValueError(f"Scanline {pixel_j} is outside the image (height {height})")

    _render_scanline(pixel_j, width, samples_per_pixel, max_depth)


def get_sample_sum_numpy() -> np.ndarray:
    """Get the accumulated radiance sums as a NumPy array.

    The array shape is (height, width, 3) with dtype float64, row 0 being
    the top of the image. Values are sums, not averages.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    # Extract active region and transpose from (width, height, 3)
    full_image = _sample_sum.to_numpy()
    image = full_image[:width, :height, :]
    return np.ascontiguousarray(np.transpose(image, (1, 0, 2)))
