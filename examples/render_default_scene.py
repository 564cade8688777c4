#!/usr/bin/env python3
"""Render the default sphere scene progressively in the terminal.

The renderer advances a few rows per tick and the partial image is redrawn
as 24-bit ANSI text after every tick, with a progress gauge underneath.

Usage:
    python -m examples.render_default_scene [options]

Options:
    --width WIDTH       Image width in cells (default: 80)
    --height HEIGHT     Image height in cells (default: 24)
    --samples SAMPLES   Samples per cell (default: 500)
    --depth DEPTH       Maximum bounces per sample (default: 10)
    --mode MODE         subpixel or pixel (default: subpixel)
    --seed SEED         Random seed (default: 0)
    --tick SECONDS      Pause between ticks (default: 0.016)
    --gamma GAMMA       Display gamma (default: 1.0)
    --verbose           Log renderer progress to stderr

Example:
    python -m examples.render_default_scene --width 100 --height 30 --samples 64
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the default sphere scene in the terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=80, help="Image width in cells (default: 80)")
    parser.add_argument(
        "--height", type=int, default=24, help="Image height in cells (default: 24)"
    )
    parser.add_argument(
        "--samples", type=int, default=500, help="Samples per cell (default: 500)"
    )
    parser.add_argument(
        "--depth", type=int, default=10, help="Maximum bounces per sample (default: 10)"
    )
    parser.add_argument(
        "--mode",
        choices=["subpixel", "pixel"],
        default="subpixel",
        help="Cell mapping mode (default: subpixel)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument(
        "--tick",
        type=float,
        default=0.016,
        help="Pause between ticks in seconds (default: 0.016)",
    )
    parser.add_argument("--gamma", type=float, default=1.0, help="Display gamma (default: 1.0)")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log renderer progress to stderr",
    )
    return parser.parse_args()


def render_default_scene(
    width: int = 80,
    height: int = 24,
    samples: int = 500,
    depth: int = 10,
    mode: str = "subpixel",
    seed: int = 0,
    tick: float = 0.016,
    gamma: float = 1.0,
) -> None:
    """Render the default scene, redrawing the terminal after each tick."""
    # Lazy imports to allow Taichi initialization first
    from termtrace.core.progressive import ProgressiveRenderer, RenderSettings
    from termtrace.preview.ansi import (
        CLEAR_SCREEN,
        CURSOR_HOME,
        HIDE_CURSOR,
        SHOW_CURSOR,
        frame_to_ansi,
        progress_bar,
    )

    settings = RenderSettings(
        samples_per_pixel=samples,
        max_depth=depth,
        mode=mode,
        seed=seed,
    )
    renderer = ProgressiveRenderer(width, height, settings)

    sys.stdout.write(CLEAR_SCREEN + HIDE_CURSOR)
    try:
        while not renderer.is_complete:
            renderer.advance()
            sys.stdout.write(CURSOR_HOME)
            sys.stdout.write(frame_to_ansi(renderer.frame_buffer, gamma))
            sys.stdout.write("\n" + progress_bar(renderer.progress, width=min(width, 40)))
            sys.stdout.flush()
            time.sleep(tick)
    finally:
        sys.stdout.write(SHOW_CURSOR + "\n")
        sys.stdout.flush()

    print(f"Objects: {renderer.object_count}")
    print(f"Render time: {renderer.elapsed_render_time.total_seconds():.2f}s")


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    ti.init(arch=ti.cpu, default_fp=ti.f64)

    try:
        render_default_scene(
            width=args.width,
            height=args.height,
            samples=args.samples,
            depth=args.depth,
            mode=args.mode,
            seed=args.seed,
            tick=args.tick,
            gamma=args.gamma,
        )
        return 0
    except KeyboardInterrupt:
        return 130
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
