"""Scene module: sphere storage, closest-hit queries and scene building.

Components:
    intersection: Sphere fields and the closest-hit scene query
    manager: SceneManager with a unified material id space
    default_scene: The built-in five-sphere demo scene

Scene data lives in Taichi fields, so Taichi must be initialised first.
"""

from .default_scene import create_default_scene
from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneManager,
    SphereInfo,
    clear_material_tracking,
    get_material_type,
    get_material_type_index,
)

__all__ = [
    # Intersection
    "SceneHitRecord",
    "MAX_SPHERES",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    # Manager
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneManager",
    "MAX_MATERIALS",
    "clear_material_tracking",
    "get_material_type",
    "get_material_type_index",
    # Default scene
    "create_default_scene",
]
