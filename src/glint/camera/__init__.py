"""Camera module for view and ray generation.

Components:
    thin_lens: Positionable camera with optional depth of field

Camera responsibilities:
    - Derive the viewport and orthonormal basis from look-at parameters
    - Apply anti-aliasing jitter for sub-pixel sampling
    - Sample the defocus disk for depth-of-field blur

Ray generation uses integer pixel coordinates:
    i in [0, width): left to right across image
    j in [0, height): top to bottom across image
"""

from .thin_lens import (
    CameraConfig,
    CameraGeometry,
    defocus_disk_sample,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "CameraConfig",
    "CameraGeometry",
    "setup_camera",
    "get_ray",
    "defocus_disk_sample",
    "get_camera_info",
]
