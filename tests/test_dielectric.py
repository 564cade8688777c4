"""Unit tests for the dielectric (glass) material.

Tests cover:
- Refraction ratio per face
- Total internal reflection
- Schlick-weighted choice between reflection and refraction
- Material registry and validation
"""

import pytest
import taichi as ti


class TestRefractionRatio:
    def test_ratio_depends_on_face(self):
        from termtrace.materials.dielectric import refraction_ratio

        result = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = refraction_ratio(1.5, 1)
            result[1] = refraction_ratio(1.5, 0)

        test_kernel()
        assert result[0] == pytest.approx(1.0 / 1.5)
        assert result[1] == pytest.approx(1.5)


class TestTotalInternalReflection:
    n = 500

    def _reflected_fraction(self, ior, incident, front_face):
        from termtrace.core.ray import vec3
        from termtrace.materials.dielectric import scatter_dielectric

        n = self.n
        y_components = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel(ix: ti.f64, iy: ti.f64, face: ti.i32):
            ti.loop_config(serialize=True)
            for i in range(n):
                d, _, _ = scatter_dielectric(ior, vec3(ix, iy, 0.0), vec3(0.0, 1.0, 0.0), face)
                y_components[i] = d.y

        test_kernel(incident[0], incident[1], front_face)
        return (y_components.to_numpy() > 0.0).mean()

    def test_grazing_exit_always_reflects(self):
        """Leaving glass at a shallow angle cannot refract."""
        assert self._reflected_fraction(1.5, (1.0, -0.2), 0) == 1.0

    def test_entering_glass_can_refract(self):
        assert self._reflected_fraction(1.5, (1.0, -1.0), 1) < 0.5

    def test_bubble_entry_always_reflects(self):
        """An ior below one reverses the roles of the faces."""
        assert self._reflected_fraction(1.0 / 1.5, (1.0, -0.2), 1) == 1.0

    def test_grazing_exit_direction(self):
        from termtrace.core.ray import vec3
        from termtrace.materials.dielectric import scatter_dielectric

        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            d, _, _ = scatter_dielectric(1.5, vec3(1.0, -0.2, 0.0), vec3(0.0, 1.0, 0.0), 0)
            direction[None] = d

        test_kernel()
        d = direction[None]
        assert d[1] > 0.0
        assert d[0] > 0.0


class TestScatterDielectric:
    def test_head_on_mostly_refracts(self):
        """At normal incidence the Schlick reflectance is about 4%."""
        from termtrace.core.ray import vec3
        from termtrace.materials.dielectric import scatter_dielectric

        n = 5000
        y_components = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                d, _, _ = scatter_dielectric(1.5, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1)
                y_components[i] = d.y

        test_kernel()
        values = y_components.to_numpy()
        reflected = (values > 0.0).mean()
        assert reflected == pytest.approx(0.04, abs=0.015)
        assert set(values.round(9).tolist()) <= {-1.0, 1.0}

    def test_attenuation_is_white_and_always_scatters(self):
        from termtrace.core.ray import length, vec3
        from termtrace.materials.dielectric import scatter_dielectric

        attenuation = ti.Vector.field(3, dtype=ti.f64, shape=())
        did_scatter = ti.field(dtype=ti.i32, shape=())
        direction_length = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            d, att, did = scatter_dielectric(
                1.5, vec3(2.0, -2.0, 0.0), vec3(0.0, 1.0, 0.0), 1
            )
            attenuation[None] = att
            did_scatter[None] = did
            direction_length[None] = length(d)

        test_kernel()
        assert tuple(attenuation[None]) == pytest.approx((1.0, 1.0, 1.0))
        assert did_scatter[None] == 1
        assert direction_length[None] == pytest.approx(1.0)

    def test_ior_one_passes_straight_through(self):
        """Matching media neither bend nor reflect the ray."""
        from termtrace.core.ray import vec3
        from termtrace.materials.dielectric import scatter_dielectric

        n = 200
        directions = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                d, _, _ = scatter_dielectric(
                    1.0, vec3(0.0, -2.0, 0.0), vec3(0.0, 1.0, 0.0), 1
                )
                directions[i] = d

        test_kernel()
        d = directions.to_numpy()
        assert d[:, 0] == pytest.approx(0.0)
        assert d[:, 1] == pytest.approx(-1.0)


class TestMaterialRegistry:
    def test_add_and_get_material(self):
        from termtrace.materials.dielectric import add_dielectric_material, get_dielectric_ior

        add_dielectric_material()
        idx = add_dielectric_material(ior=2.4)
        assert idx == 1

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_dielectric_ior(mat_idx)

        test_kernel(idx)
        assert result[None] == pytest.approx(2.4)

    def test_default_ior_is_glass(self):
        from termtrace.materials.dielectric import add_dielectric_material, dielectric_iors

        idx = add_dielectric_material()
        assert dielectric_iors[idx] == pytest.approx(1.5)

    def test_ior_below_one_accepted(self):
        from termtrace.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_material_count,
        )

        add_dielectric_material(ior=1.0 / 1.5)
        assert get_dielectric_material_count() == 1

    @pytest.mark.parametrize("ior", [0.0, -1.5])
    def test_non_positive_ior_rejected(self, ior):
        from termtrace.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_material_count,
        )

        with pytest.raises(ValueError, match="must be positive"):
            add_dielectric_material(ior=ior)
        assert get_dielectric_material_count() == 0

    def test_clear(self):
        from termtrace.materials.dielectric import (
            add_dielectric_material,
            clear_dielectric_materials,
            get_dielectric_material_count,
        )

        add_dielectric_material()
        clear_dielectric_materials()
        assert get_dielectric_material_count() == 0

    def test_scatter_by_id(self):
        from termtrace.core.ray import vec3
        from termtrace.materials.dielectric import (
            add_dielectric_material,
            scatter_dielectric_by_id,
        )

        idx = add_dielectric_material(ior=1.5)
        tir_direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            d, _, _ = scatter_dielectric_by_id(
                mat_idx, vec3(1.0, -0.2, 0.0), vec3(0.0, 1.0, 0.0), 0
            )
            tir_direction[None] = d

        test_kernel(idx)
        assert tir_direction[None][1] > 0.0
