"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    sampler: Uniform random draws, with a fixed-value stub for tests
    ray: Ray data structure and vector utilities
    integrator: Depth-bounded path tracing and the render target
    render: Scanline render driver with progress reporting

All compute-intensive operations use Taichi kernels.

Note: submodules are NOT imported here. They declare Taichi fields, which
requires ``glint.runtime.init_taichi()`` to have run first. Import them
directly, e.g. ``from glint.core.render import Renderer``.
"""
