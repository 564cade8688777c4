"""Tests for the explicit xorshift generator."""

import numpy as np
import pytest
import taichi as ti


def _draw_reals(n: int) -> np.ndarray:
    from termtrace.core.rng import random_real

    out = ti.field(dtype=ti.f64, shape=n)

    @ti.kernel
    def draw():
        ti.loop_config(serialize=True)
        for i in range(n):
            out[i] = random_real()

    draw()
    return out.to_numpy()


class TestSeeding:
    def test_same_seed_same_sequence(self):
        from termtrace.core.rng import seed_rng

        seed_rng(7)
        first = _draw_reals(64)
        seed_rng(7)
        second = _draw_reals(64)
        np.testing.assert_array_equal(first, second)

    def test_different_seeds_differ(self):
        from termtrace.core.rng import seed_rng

        seed_rng(1)
        first = _draw_reals(16)
        seed_rng(2)
        second = _draw_reals(16)
        assert not np.array_equal(first, second)

    def test_zero_seed_is_replaced(self):
        """The all-zero state is a fixed point of xorshift."""
        from termtrace.core.rng import DEFAULT_SEED, get_rng_state, seed_rng

        seed_rng(0)
        assert get_rng_state() == DEFAULT_SEED
        values = _draw_reals(8)
        assert len(set(values.tolist())) == 8

    def test_seed_uses_low_32_bits(self):
        from termtrace.core.rng import get_rng_state, seed_rng

        seed_rng((1 << 32) + 5)
        assert get_rng_state() == 5

    def test_state_advances(self):
        from termtrace.core.rng import get_rng_state, seed_rng

        seed_rng(99)
        _draw_reals(1)
        assert get_rng_state() != 99


class TestDistributions:
    def test_random_real_in_unit_interval(self):
        values = _draw_reals(10000)
        assert values.min() >= 0.0
        assert values.max() < 1.0
        assert values.mean() == pytest.approx(0.5, abs=0.02)

    def test_random_range(self):
        from termtrace.core.rng import random_range

        n = 5000
        out = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def draw():
            ti.loop_config(serialize=True)
            for i in range(n):
                out[i] = random_range(-2.0, 3.0)

        draw()
        values = out.to_numpy()
        assert values.min() >= -2.0
        assert values.max() < 3.0
        assert values.mean() == pytest.approx(0.5, abs=0.1)

    def test_random_normal_moments(self):
        from termtrace.core.rng import random_normal

        n = 20000
        out = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def draw():
            ti.loop_config(serialize=True)
            for i in range(n):
                out[i] = random_normal()

        draw()
        values = out.to_numpy()
        assert np.isfinite(values).all()
        assert values.mean() == pytest.approx(0.0, abs=0.05)
        assert values.std() == pytest.approx(1.0, abs=0.05)
