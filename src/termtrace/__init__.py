"""Progressive terminal path tracer built on Taichi.

This package renders a small sphere scene with Monte Carlo path tracing,
one scanline at a time under a wall-clock budget, and maps each block of
rendered sub-samples onto a single coloured braille character so that a
terminal grid shows more detail than one colour per cell allows.

Subpackages:
    core: Vector math, random numbers, intervals, the shading integrator and
        the time-sliced progressive renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Scene storage, material registry and the default scene
    camera: Viewport camera producing primary rays for fractional pixels
    preview: Subpixel-to-glyph mapping, colour quantisation and ANSI output

Taichi must be initialised (``ti.init(arch=ti.cpu, default_fp=ti.f64)``)
before importing any subpackage that declares Taichi fields.
"""

__version__ = "0.1.0"
