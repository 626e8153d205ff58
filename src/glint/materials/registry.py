"""Shared bookkeeping for the per-type material registries.

Each material module keeps its parameters in fixed-capacity Taichi fields
plus a 0-d counter field. These helpers hold the checks every registry
applies before it writes a new slot.
"""

import math
from collections.abc import Sequence

import taichi as ti


def check_albedo(albedo: Sequence[float]) -> tuple[float, float, float]:
    """Validate an RGB albedo and return it as a float tuple.

    Raises:
        ValueError: If the albedo does not have three components or any
            component is outside [0, 1] (a surface may not reflect more
            light than it receives).
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for channel, component in zip("RGB", albedo):
        if not 0.0 <= component <= 1.0:
            raise ValueError(f"Albedo {channel} = {component} is outside [0, 1]")
    return (float(albedo[0]), float(albedo[1]), float(albedo[2]))


def check_positive(name: str, value: float) -> float:
    """Return value as a float, rejecting non-finite or non-positive input."""
    if not (math.isfinite(value) and value > 0.0):
        raise ValueError(f"{name} must be positive and finite, got {value}")
    return float(value)


def claim_slot(counter: ti.Field, capacity: int, kind: str) -> int:
    """Reserve the next free index in a registry.

    Args:
        counter: 0-d field holding the number of used slots.
        capacity: Size of the registry's fields.
        kind: Material kind, for the error message.

    Returns:
        The reserved index; the counter is advanced past it.

    Raises:
        RuntimeError: If the registry is full.
    """
    idx = int(counter[None])
    if idx >= capacity:
        raise RuntimeError(f"{kind} material registry is full ({capacity} entries)")
    counter[None] = idx + 1
    return idx
