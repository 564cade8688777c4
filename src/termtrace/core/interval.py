"""Closed numeric interval used for ray parameter ranges.

``contains`` treats both ends as inclusive, ``surrounds`` as exclusive. The
ray-sphere test accepts roots with ``surrounds`` so that hits exactly on the
interval bounds are rejected.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from termtrace.core.interval import Interval, positive_interval
    >>> @ti.kernel
    ... def check() -> ti.i32:
    ...     return positive_interval(0.0).surrounds(1.0)
"""

import taichi as ti
import taichi.math as tm

from termtrace.core.rng import REAL


@ti.dataclass
class Interval:
    """A closed range of real numbers.

    Attributes:
        lower: Lower bound.
        upper: Upper bound. An interval with upper < lower is empty.
    """

    lower: REAL
    upper: REAL

    @ti.func
    def size(self):
        return self.upper - self.lower

    @ti.func
    def contains(self, x):
        return self.lower <= x and x <= self.upper

    @ti.func
    def surrounds(self, x):
        return self.lower < x and x < self.upper

    @ti.func
    def clamp(self, x):
        return tm.clamp(x, self.lower, self.upper)


@ti.func
def make_interval(lower, upper) -> Interval:
    """Create an interval within a Taichi kernel."""
    return Interval(lower=lower, upper=upper)


@ti.func
def positive_interval(lower) -> Interval:
    """Interval from ``lower`` to positive infinity."""
    return Interval(lower=lower, upper=tm.inf)


@ti.func
def empty_interval() -> Interval:
    return Interval(lower=tm.inf, upper=-tm.inf)


@ti.func
def universe_interval() -> Interval:
    return Interval(lower=-tm.inf, upper=tm.inf)
