"""Pytest configuration for termtrace tests.

Taichi is initialised once per session with 64-bit floats, and every test
starts from an empty scene, empty material registries and a fixed generator
seed.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which reset the
    runtime and invalidate fields declared by already imported modules.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data and reseed the generator around each test."""
    # Imported here so fields are declared after ti.init
    from termtrace.core.rng import seed_rng
    from termtrace.materials.dielectric import clear_dielectric_materials
    from termtrace.materials.lambertian import clear_lambertian_materials
    from termtrace.materials.metal import clear_metal_materials
    from termtrace.scene.intersection import clear_scene
    from termtrace.scene.manager import clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_tracking()
        seed_rng(12345)

    _clear_all()
    yield
    _clear_all()


class FakeClock:
    """Deterministic clock advancing a fixed step on every call."""

    def __init__(self, step: float = 0.01) -> None:
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture
def fake_clock():
    return FakeClock()
