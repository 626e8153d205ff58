"""Command-line entry point.

Renders one of the preset scenes and writes the image.

Usage:
    glint [options]
    python -m glint [options]

Options:
    --scene NAME          Preset scene: hollow-glass, fov or cover (default: cover)
    --width WIDTH         Image width in pixels (default: the preset's)
    --aspect-ratio RATIO  Width / height (default: the preset's)
    --samples SAMPLES     Samples per pixel (default: the preset's)
    --max-depth DEPTH     Maximum ray bounces (default: the preset's)
    --vfov DEGREES        Vertical field of view
    --defocus-angle DEG   Defocus (aperture) angle; 0 disables depth of field
    --focus-dist DIST     Distance to the plane of perfect focus
    --output OUTPUT       Output path; "-" writes PPM to stdout (default: -)
    --seed SEED           Random seed for sampling and scene layout (default: 0)
    --arch ARCH           Taichi backend: cpu, gpu, cuda or vulkan (default: cpu)
    --debug               Enable Taichi debug mode (runtime assertions)
    --quiet               Only log warnings and errors
    --verbose             Log debug messages

Example:
    glint --scene hollow-glass --width 200 --samples 20 --output glass.png
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

SCENE_NAMES = ("hollow-glass", "fov", "cover")

# CLI option -> CameraConfig field it overrides
_CAMERA_OVERRIDES = {
    "width": "image_width",
    "aspect_ratio": "aspect_ratio",
    "samples": "samples_per_pixel",
    "max_depth": "max_depth",
    "vfov": "vfov",
    "defocus_angle": "defocus_angle",
    "focus_dist": "focus_dist",
}


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="glint",
        description="Render a sphere scene with a Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=SCENE_NAMES,
        default="cover",
        help="Preset scene to render (default: cover)",
    )
    parser.add_argument("--width", type=int, help="Image width in pixels")
    parser.add_argument("--aspect-ratio", type=float, help="Image width divided by height")
    parser.add_argument("--samples", type=int, help="Number of samples per pixel")
    parser.add_argument("--max-depth", type=int, help="Maximum number of ray bounces")
    parser.add_argument("--vfov", type=float, help="Vertical field of view in degrees")
    parser.add_argument("--defocus-angle", type=float, help="Defocus angle in degrees")
    parser.add_argument("--focus-dist", type=float, help="Distance to the focus plane")
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help='Output file path; "-" writes PPM to stdout (default: -)',
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for sampling and scene layout (default: 0)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu", "cuda", "vulkan"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Taichi debug mode",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )
    return parser.parse_args(argv)


def configure_logging(args: argparse.Namespace) -> None:
    """Send log records to stderr at the level the flags ask for."""
    level = logging.INFO
    if args.quiet:
        level = logging.WARNING
    elif args.verbose:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stderr,
    )


def run(args: argparse.Namespace) -> Path | None:
    """Build the preset scene, render it and write the image.

    Taichi must already be initialised.

    Returns:
        The path written, or None when the image went to stdout.

    Raises:
        ValueError: If the camera settings are invalid.
        OSError: If the output cannot be written.
    """
    # Lazy imports to allow Taichi initialization first
    from glint.core.render import Renderer
    from glint.scene.presets import PRESETS, create_cover_scene

    factory = PRESETS[args.scene]
    if factory is create_cover_scene:
        scene, config = factory(seed=args.seed)
    else:
        scene, config = factory()

    overrides = {
        field: getattr(args, option)
        for option, field in _CAMERA_OVERRIDES.items()
        if getattr(args, option) is not None
    }
    if overrides:
        config = dataclasses.replace(config, **overrides)

    logger.debug(
        "Scene %s: %d spheres, %d materials",
        args.scene,
        scene.get_sphere_count(),
        scene.get_material_count(),
    )

    renderer = Renderer(config)

    start_time = time.perf_counter()
    renderer.render()
    logger.debug("Rendered %r in %.2fs", renderer, time.perf_counter() - start_time)

    if args.output == "-":
        renderer.write_ppm(sys.stdout)
        sys.stdout.flush()
        return None

    return renderer.save(args.output)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(args)

    from glint.runtime import init_taichi

    init_taichi(arch=args.arch, seed=args.seed, debug=args.debug)

    try:
        run(args)
    except (OSError, ValueError) as e:
        logger.error("Error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
