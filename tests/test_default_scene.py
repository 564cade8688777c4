"""Tests for the built-in demo scene."""

import pytest


class TestDefaultScene:
    def test_object_and_material_counts(self):
        from termtrace.scene.default_scene import create_default_scene

        scene = create_default_scene()
        assert scene.get_object_count() == 5
        assert scene.get_material_count() == 5

    def test_material_types_in_order(self):
        from termtrace.scene.default_scene import create_default_scene
        from termtrace.scene.manager import MaterialType

        scene = create_default_scene()
        types = [info.material_type for info in scene.materials]
        assert types == [
            MaterialType.LAMBERTIAN,
            MaterialType.LAMBERTIAN,
            MaterialType.DIELECTRIC,
            MaterialType.DIELECTRIC,
            MaterialType.METAL,
        ]

    def test_ground_top_is_below_camera(self):
        from termtrace.scene.default_scene import create_default_scene

        ground = create_default_scene().spheres[0]
        assert ground.radius == 100.0
        assert ground.center[1] + ground.radius == pytest.approx(-0.5)

    def test_hollow_glass_shares_center(self):
        from termtrace.scene.default_scene import create_default_scene

        scene = create_default_scene()
        glass, bubble = scene.spheres[2], scene.spheres[3]
        assert glass.center == bubble.center
        assert bubble.radius < glass.radius
        assert scene.materials[bubble.material_id].params["ior"] == pytest.approx(1.0 / 1.5)
        assert scene.materials[glass.material_id].params["ior"] == pytest.approx(1.5)

    def test_metal_is_fully_fuzzy_gold(self):
        from termtrace.scene.default_scene import create_default_scene

        scene = create_default_scene()
        metal = scene.materials[scene.spheres[4].material_id]
        assert metal.params == {"albedo": (0.8, 0.6, 0.2), "fuzz": 1.0}

    def test_rebuild_replaces_previous_scene(self):
        from termtrace.scene.default_scene import create_default_scene

        create_default_scene()
        scene = create_default_scene()
        assert scene.get_object_count() == 5
        assert scene.get_material_count() == 5

    def test_each_sphere_owns_its_material(self):
        from termtrace.scene.default_scene import create_default_scene

        scene = create_default_scene()
        assert [sphere.material_id for sphere in scene.spheres] == [0, 1, 2, 3, 4]
