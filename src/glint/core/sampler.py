"""Uniform random number source for the path tracer.

Every random draw made by the kernels goes through ``random_float()`` so
that tests can pin the stream to a constant with ``set_fixed_sample()``.
With the fixed value 0.5, pixel jitter collapses to the exact pixel centre,
which makes a render fully reproducible for an empty scene.

Kernel randomness itself comes from Taichi's per-thread generators, which
are seeded through ``glint.runtime.init_taichi(seed=...)``. Python-side
scene assembly uses a NumPy generator from ``make_rng()``.

Example:
    >>> from glint.core.sampler import set_fixed_sample, clear_fixed_sample
    >>> set_fixed_sample(0.5)   # every random_float() now returns 0.5
    >>> clear_fixed_sample()
"""

import numpy as np
import taichi as ti

# Deterministic stub state (GPU-accessible)
_fixed_enabled = ti.field(dtype=ti.i32, shape=())
_fixed_value = ti.field(dtype=ti.f64, shape=())


def set_fixed_sample(value: float) -> None:
    """Make every subsequent random draw return ``value``.

    Args:
        value: The constant to return, in [0, 1).

    Raises:
        ValueError: If value is outside [0, 1).
    """
    if not 0.0 <= value < 1.0:
        raise ValueError(f"Fixed sample {value} is outside [0, 1)")
    _fixed_value[None] = value
    _fixed_enabled[None] = 1


def clear_fixed_sample() -> None:
    """Restore the Taichi random stream."""
    _fixed_enabled[None] = 0


def is_fixed_sample() -> bool:
    """Check whether random draws are currently pinned."""
    return bool(_fixed_enabled[None])


@ti.func
def random_float() -> ti.f64:
    """Draw a uniform sample in [0, 1).

    Returns:
        A random double, or the fixed value while the stub is active.
    """
    r = ti.random(ti.f64)
    if _fixed_enabled[None] == 1:
        r = _fixed_value[None]
    return r


@ti.func
def random_float_range(lo: ti.f64, hi: ti.f64) -> ti.f64:
    """Draw a uniform sample in [lo, hi)."""
    return lo + (hi - lo) * random_float()


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Create a NumPy generator for Python-side scene assembly."""
    return np.random.default_rng(seed)
