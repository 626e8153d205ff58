"""Taichi runtime initialisation.

All geometry in glint is double precision, so Taichi must be started with
``default_fp=ti.f64`` before any module that declares fields is imported.

Example:
    >>> from glint.runtime import init_taichi
    >>> init_taichi(arch="cpu", seed=7)
    >>> from glint.core.render import Renderer  # safe after init
"""

import logging

import taichi as ti

logger = logging.getLogger(__name__)

# Backend names accepted on the command line
ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
}


def init_taichi(arch: str = "cpu", seed: int = 0, debug: bool = False) -> None:
    """Initialize Taichi for rendering.

    Args:
        arch: Backend name, one of ``ARCHES``. "gpu" lets Taichi pick an
            available GPU backend and fall back to the CPU.
        seed: Seed for the per-thread kernel random number generators.
        debug: Enable kernel assertions and bounds checks.

    Raises:
        ValueError: If arch is not a known backend name.
    """
    try:
        backend = ARCHES[arch]
    except KeyError:
        raise ValueError(
            f"Unknown backend {arch!r}; expected one of {', '.join(sorted(ARCHES))}"
        ) from None

    ti.init(
        arch=backend,
        random_seed=seed,
        default_fp=ti.f64,
        debug=debug,
    )
    logger.debug("Taichi initialized: arch=%s seed=%d debug=%s", arch, seed, debug)
