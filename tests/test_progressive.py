"""Tests for the progressive renderer.

This module tests the ProgressiveRenderer class including:
- Settings validation
- Time-sliced row scheduling with a fake clock
- Progress, completion and render time accounting
- Frame buffer contents in subpixel and pixel modes
- Reproducibility for a fixed seed

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from datetime import timedelta

import numpy as np
import pytest


def _fast_settings(**overrides):
    from termtrace.core.progressive import RenderSettings

    values = {"samples_per_pixel": 8, "max_depth": 4}
    values.update(overrides)
    return RenderSettings(**values)


class TestRenderSettings:
    def test_defaults(self):
        from termtrace.core.progressive import RenderMode, RenderSettings

        settings = RenderSettings()
        assert settings.samples_per_pixel == 500
        assert settings.max_depth == 10
        assert settings.mode is RenderMode.SUBPIXEL
        assert settings.time_budget == pytest.approx(0.015)
        assert settings.seed == 0
        assert settings.t_min == 0.0
        assert settings.pixel_aspect_ratio == 0.5

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"samples_per_pixel": 0},
            {"max_depth": -1},
            {"time_budget": 0.0},
            {"t_min": -0.1},
        ],
    )
    def test_invalid_settings_rejected(self, kwargs):
        from termtrace.core.progressive import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs)

    def test_mode_from_string(self):
        from termtrace.core.progressive import RenderMode, RenderSettings

        assert RenderSettings(mode="pixel").mode is RenderMode.PIXEL

    def test_unknown_mode_rejected(self):
        from termtrace.core.progressive import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(mode="ascii")

    @pytest.mark.parametrize("spp,expected", [(1, 1), (7, 1), (8, 1), (17, 2), (500, 62)])
    def test_samples_per_subpixel(self, spp, expected):
        from termtrace.core.progressive import RenderSettings

        assert RenderSettings(samples_per_pixel=spp).samples_per_subpixel == expected


class TestProgressiveRendererInit:
    def test_initial_state(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(6, 3, _fast_settings(), clock=fake_clock)

        assert renderer.width == 6
        assert renderer.height == 3
        assert renderer.next_line == 0
        assert renderer.progress == 0.0
        assert not renderer.is_complete
        assert renderer.elapsed_render_time == timedelta(0)
        assert renderer.frame_buffer.glyphs.shape == (3, 6)
        assert (renderer.frame_buffer.glyphs == " ").all()

    def test_default_scene_has_five_objects(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(4, 2, _fast_settings(), clock=fake_clock)
        assert renderer.object_count == 5

    def test_custom_scene(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer
        from termtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        renderer = ProgressiveRenderer(4, 2, _fast_settings(), scene=scene, clock=fake_clock)
        assert renderer.object_count == 1

    @pytest.mark.parametrize("width,height", [(0, 3), (3, 0)])
    def test_invalid_dimensions(self, width, height):
        from termtrace.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError):
            ProgressiveRenderer(width, height, _fast_settings())

    def test_too_wide_rejected(self):
        from termtrace.core.integrator import MAX_COLUMNS
        from termtrace.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError, match="exceeds"):
            ProgressiveRenderer(MAX_COLUMNS + 1, 2, _fast_settings())

    def test_repr(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(4, 2, _fast_settings(), clock=fake_clock)
        assert repr(renderer) == (
            "ProgressiveRenderer(width=4, height=2, next_line=0, mode=subpixel)"
        )


class TestAdvance:
    def test_one_row_per_budget(self, fake_clock):
        """With a 10 ms tick and a 15 ms budget exactly one row fits."""
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(4, 3, _fast_settings(), clock=fake_clock)

        assert renderer.advance() == 1
        assert renderer.next_line == 1
        assert renderer.progress == pytest.approx(1.0 / 3.0)
        assert renderer.elapsed_render_time.total_seconds() == pytest.approx(0.03)

    def test_generous_budget_finishes_in_one_call(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            4, 3, _fast_settings(time_budget=10.0), clock=fake_clock
        )
        assert renderer.advance() == 3
        assert renderer.is_complete
        assert renderer.progress == 1.0

    def test_complete_renderer_is_idle(self, fake_clock):
        """Calls after completion render nothing and add no time."""
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            4, 2, _fast_settings(time_budget=10.0), clock=fake_clock
        )
        renderer.advance()
        elapsed = renderer.elapsed_render_time
        buffer_before = renderer.frame_buffer.bg.copy()

        assert renderer.advance() == 0
        assert renderer.next_line == 2
        assert renderer.elapsed_render_time == elapsed
        np.testing.assert_array_equal(renderer.frame_buffer.bg, buffer_before)

    def test_rows_fill_top_to_bottom(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(4, 3, _fast_settings(), clock=fake_clock)
        renderer.advance()

        glyphs = renderer.frame_buffer.glyphs
        assert (glyphs[1:] == " ").all()
        assert (renderer.frame_buffer.colors[1:] == 0.0).all()
        assert (renderer.frame_buffer.colors[0] > 0.0).any()

    def test_render_to_completion_yields_progress(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(4, 3, _fast_settings(), clock=fake_clock)
        progress = list(renderer.render_to_completion())

        assert progress == pytest.approx([1.0 / 3.0, 2.0 / 3.0, 1.0])
        assert renderer.is_complete
        assert renderer.elapsed_render_time.total_seconds() == pytest.approx(0.09)

    def test_reset_starts_over(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            4, 2, _fast_settings(time_budget=10.0), clock=fake_clock
        )
        renderer.advance()
        renderer.reset()

        assert renderer.next_line == 0
        assert renderer.elapsed_render_time == timedelta(0)
        assert (renderer.frame_buffer.glyphs == " ").all()
        assert (renderer.frame_buffer.bg == 0.0).all()


class TestFrameContents:
    def test_subpixel_cells_use_braille(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            8, 4, _fast_settings(time_budget=10.0), clock=fake_clock
        )
        renderer.advance()

        codes = np.vectorize(ord)(renderer.frame_buffer.glyphs)
        assert ((codes >= 0x2800) & (codes <= 0x28FF)).all()

    def test_text_colour_contrasts_with_background(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer
        from termtrace.preview.color import brightness

        renderer = ProgressiveRenderer(
            8, 4, _fast_settings(time_budget=10.0), clock=fake_clock
        )
        renderer.advance()

        fb = renderer.frame_buffer
        bright = brightness(fb.bg) > 0.5
        np.testing.assert_array_equal(fb.fg[bright], 0.0)
        np.testing.assert_array_equal(fb.fg[~bright], 1.0)

    def test_pixel_mode_blank_glyphs(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer, RenderMode

        renderer = ProgressiveRenderer(
            8, 4, _fast_settings(mode=RenderMode.PIXEL, time_budget=10.0), clock=fake_clock
        )
        renderer.advance()

        fb = renderer.frame_buffer
        assert (fb.glyphs == " ").all()
        np.testing.assert_array_equal(fb.bg, fb.colors)

    def test_sky_row_is_light(self, fake_clock):
        """The top row of the default view only sees the sky."""
        from termtrace.core.progressive import ProgressiveRenderer, RenderMode

        renderer = ProgressiveRenderer(
            8, 8, _fast_settings(mode=RenderMode.PIXEL), clock=fake_clock
        )
        renderer.advance()

        top = renderer.frame_buffer.colors[0]
        np.testing.assert_allclose(top[:, 2], 1.0)
        assert (top[:, 0] >= 0.5).all()

    def test_colors_are_block_means(self, fake_clock):
        from termtrace.core.integrator import get_row_samples
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(4, 2, _fast_settings(), clock=fake_clock)
        renderer.advance()

        blocks = get_row_samples(4)
        np.testing.assert_allclose(renderer.frame_buffer.colors[0], blocks.mean(axis=(1, 2)))


class TestDeterminism:
    def test_same_seed_same_frame(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer

        settings = _fast_settings(seed=11, time_budget=10.0)
        first = ProgressiveRenderer(6, 3, settings, clock=fake_clock)
        first.advance()
        glyphs, bg = first.frame_buffer.glyphs.copy(), first.frame_buffer.bg.copy()

        second = ProgressiveRenderer(6, 3, settings, clock=fake_clock)
        second.advance()

        np.testing.assert_array_equal(second.frame_buffer.glyphs, glyphs)
        np.testing.assert_array_equal(second.frame_buffer.bg, bg)

    def test_reset_reproduces_frame(self, fake_clock):
        from termtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            6, 3, _fast_settings(seed=5, time_budget=10.0), clock=fake_clock
        )
        renderer.advance()
        colors = renderer.frame_buffer.colors.copy()

        renderer.reset()
        renderer.advance()
        np.testing.assert_array_equal(renderer.frame_buffer.colors, colors)
