"""Scene assembly: spheres plus a single id space for every material.

Each material module keeps its own registry, indexed from zero per type.
Spheres, however, refer to one ``material_id`` regardless of type, and the
integrator needs to turn that id back into "which scatter function, which
slot". This module owns that translation table and the ``SceneManager``
that keeps it in step with the sphere and material registries.

A material id is a handle. Any number of spheres may carry the same id (the
two walls of a hollow glass ball, every small glass sphere of the cover
scene), and a registered material never changes.

Example:
    >>> from glint.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> glass = scene.add_dielectric_material(ior=1.5)
    >>> scene.add_sphere(center=(-1, 0, -1), radius=0.5, material_id=glass)
    >>> scene.add_sphere(center=(-1, 0, -1), radius=-0.4, material_id=glass)
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from glint.materials.dielectric import add_dielectric_material, clear_dielectric_materials
from glint.materials.lambertian import add_lambertian_material, clear_lambertian_materials
from glint.materials.metal import add_metal_material, clamp_fuzz, clear_metal_materials
from glint.materials.registry import claim_slot
from glint.scene.intersection import MAX_SPHERES, add_sphere, clear_scene, get_sphere_count

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Scattering model behind a material id; selects the scatter function."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


MAX_MATERIALS = 2048

# Translation table, indexed by material id
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    num_materials[None] = 0


def _register_material(material_type: MaterialType, type_index: int) -> int:
    """Give a freshly registered per-type material its unified id.

    Raises:
        RuntimeError: If MAX_MATERIALS ids are already in use.
    """
    material_id = claim_slot(num_materials, MAX_MATERIALS, "Scene")
    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    return material_id


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """MaterialType value for an id, or -1 if the id was never handed out."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Slot of an id inside its type's registry, or -1 for unknown ids.

    For example the second metal ever registered has type index 1, whatever
    its unified id.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Python-side record of one registered material.

    ``params`` holds the values actually stored, so a metal's fuzz appears
    after clamping.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Python-side record of one sphere (radius may be negative)."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """A scene as plain lists of dicts.

    Material dicts carry a lowercase ``type`` plus that type's parameters;
    sphere dicts carry ``center``, ``radius`` and a ``material_id`` that
    indexes ``materials``.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Builds the (single, global) scene the kernels render.

    Constructing a manager wipes the sphere storage, every material registry
    and the id table, so the newest manager always describes what will be
    drawn. The ``materials`` and ``spheres`` lists mirror the Taichi-side
    data for inspection and export.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> scene.add_sphere((0, -100.5, -1), 100.0, ground)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold)
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere and material, Python- and Taichi-side."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    # -------------------------------------------------------------------------
    # Materials
    # -------------------------------------------------------------------------

    def _track(self, material_type: MaterialType, type_index: int, params: dict[str, Any]) -> int:
        material_id = _register_material(material_type, type_index)
        self.materials.append(MaterialInfo(material_id, material_type, type_index, params))
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a diffuse material and return its id.

        Raises:
            ValueError: If an albedo component is outside [0, 1].
            RuntimeError: If a registry is full.
        """
        type_index = add_lambertian_material(albedo)
        return self._track(MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)})

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Register a metal and return its id.

        Args:
            albedo: Reflected color, components in [0, 1].
            fuzz: Blur radius of the reflection; clamped to [0, 1], with 0
                giving a perfect mirror.

        Raises:
            ValueError: If an albedo component is outside [0, 1].
            RuntimeError: If a registry is full.
        """
        type_index = add_metal_material(albedo, fuzz)
        params = {"albedo": tuple(albedo), "fuzz": clamp_fuzz(fuzz)}
        return self._track(MaterialType.METAL, type_index, params)

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Register a clear refractive material and return its id.

        ``ior`` is relative to the surrounding medium: about 1.33 for water
        and 1.5 for glass, below 1 for a bubble inside a denser medium.

        Raises:
            ValueError: If ior is not a positive finite number.
            RuntimeError: If a registry is full.
        """
        type_index = add_dielectric_material(ior)
        return self._track(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Record for a material id, or None if the id is unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # -------------------------------------------------------------------------
    # Spheres
    # -------------------------------------------------------------------------

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Place a sphere using an already registered material.

        A negative radius turns the sphere inside out, which is how the inner
        wall of a hollow shell is made. Giving that inner sphere the same
        material as the outer one is up to the caller.

        Returns:
            The sphere's index in the scene storage.

        Raises:
            ValueError: If the material id is unknown or the radius is zero
                or not finite.
            RuntimeError: If the sphere storage is full.
        """
        if not 0 <= material_id < num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(SphereInfo(sphere_index, tuple(center), radius, material_id))
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with its own new diffuse material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with its own new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with its own new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(ior)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    # -------------------------------------------------------------------------
    # Plain-data export / import
    # -------------------------------------------------------------------------

    def to_config(self) -> SceneConfig:
        """Describe the scene as a SceneConfig (tuples become lists)."""
        config = SceneConfig()
        for info in self.materials:
            entry: dict[str, Any] = {"type": info.material_type.name.lower()}
            for key, value in info.params.items():
                entry[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(entry)
        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )
        return config

    def _material_loaders(self) -> dict[str, Callable[[dict[str, Any]], int]]:
        return {
            "lambertian": lambda m: self.add_lambertian_material(
                tuple(m.get("albedo", (0.5, 0.5, 0.5)))
            ),
            "metal": lambda m: self.add_metal_material(
                tuple(m.get("albedo", (0.8, 0.8, 0.8))), m.get("fuzz", 0.0)
            ),
            "dielectric": lambda m: self.add_dielectric_material(m.get("ior", 1.5)),
        }

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by ``config``.

        Materials are registered in list order, so the ``material_id`` of a
        sphere entry is its material's position in ``config.materials``.

        Raises:
            ValueError: If a material type is unknown or any entry fails
                validation.
        """
        self.clear()

        loaders = self._material_loaders()
        for entry in config.materials:
            kind = str(entry.get("type", "")).lower()
            if kind not in loaders:
                raise ValueError(f"Unknown material type: {kind!r}")
            loaders[kind](entry)

        for entry in config.spheres:
            self.add_sphere(
                tuple(entry.get("center", (0.0, 0.0, 0.0))),
                entry.get("radius", 1.0),
                entry.get("material_id", 0),
            )

        logger.debug(
            "Loaded scene: %d materials, %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dict with ``materials`` and ``spheres`` lists."""
        self.from_config(SceneConfig(data.get("materials", []), data.get("spheres", [])))

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
