"""Monte Carlo sphere path tracer built on Taichi.

This package renders scenes of spheres with diffuse, metal and glass
materials by stochastic path tracing:
- Jittered, optionally defocused camera rays
- Closest-hit intersection against a flat list of spheres
- Lambertian, fuzzy-metal and dielectric scattering
- Depth-bounded radiance integration against a sky gradient

Subpackages:
    core: Vector utilities, sampling, the integrator and the render driver
    geometry: Hit records and the sphere primitive
    materials: Scattering models and their registries
    scene: Sphere storage, scene manager and preset scenes
    camera: Thin-lens camera with ray generation
    output: PPM / PNG encoding of rendered images

Modules that declare Taichi fields must be imported after
``glint.runtime.init_taichi()`` has been called.
"""

__version__ = "0.1.0"
