"""Explicit pseudo-random generator for Monte Carlo sampling.

The generator is a 32-bit xorshift whose state lives in a Taichi field, so
the renderer owns it and seeds it once at construction. Rendering kernels run
their outer loops serialised, which makes every draw happen in a fixed order:
two renders with the same seed produce the same image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from termtrace.core.rng import seed_rng, random_real
    >>> seed_rng(1234)
    >>> # Use random_real() within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Floating point type used for all geometry and colour math
REAL = ti.f64

# Replacement for a zero seed; xorshift never leaves the all-zero state
DEFAULT_SEED = 0x9E3779B9

_UINT32_RANGE = 4294967296.0

_rng_state = ti.field(dtype=ti.u32, shape=())


def seed_rng(seed: int) -> None:
    """Reset the generator state.

    Args:
        seed: Any integer. Only the low 32 bits are used; a value whose low
            bits are all zero is replaced with DEFAULT_SEED.
    """
    state = int(seed) & 0xFFFFFFFF
    if state == 0:
        state = DEFAULT_SEED
    _rng_state[None] = state


def get_rng_state() -> int:
    """Get the raw generator state (for tests and diagnostics)."""
    return int(_rng_state[None])


@ti.func
def next_u32():
    """Advance the xorshift32 state and return the new value."""
    x = _rng_state[None]
    x = x ^ (x << ti.u32(13))
    x = x ^ ti.bit_shr(x, ti.u32(17))
    x = x ^ (x << ti.u32(5))
    _rng_state[None] = x
    return x


@ti.func
def random_real():
    """Uniform random number in [0, 1)."""
    return ti.cast(next_u32(), REAL) / _UINT32_RANGE


@ti.func
def random_range(lower, upper):
    """Uniform random number in [lower, upper)."""
    return lower + (upper - lower) * random_real()


@ti.func
def random_normal():
    """Standard normal random number using the Box-Muller transform."""
    # 1 - u lies in (0, 1], keeping the logarithm finite
    u1 = 1.0 - random_real()
    u2 = random_real()
    radius = ti.sqrt(-2.0 * ti.log(u1))
    return radius * ti.cos(2.0 * tm.pi * u2)
