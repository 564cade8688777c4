"""The built-in demo scene.

Five spheres over a large ground sphere:
- Ground: yellowish diffuse, a radius-100 sphere whose top sits at y = -0.5
- Center: blue diffuse
- Left: a glass ball with a smaller air bubble inside it (hollow glass)
- Right: a fuzzy gold metal ball

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from termtrace.scene.default_scene import create_default_scene
    >>> scene = create_default_scene()
    >>> scene.get_object_count()
    5
"""

from termtrace.scene.manager import SceneManager

# =============================================================================
# Default Scene Constants
# =============================================================================

GROUND_ALBEDO = (0.8, 0.8, 0.0)
GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0

CENTER_ALBEDO = (0.1, 0.2, 0.5)
CENTER_CENTER = (0.0, 0.0, -1.2)

GLASS_IOR = 1.5
# Air inside glass: the ratio of the enclosing medium to the enclosed one
BUBBLE_IOR = 1.0 / 1.5
BUBBLE_RADIUS = 0.4
LEFT_CENTER = (-1.0, 0.0, -1.0)

METAL_ALBEDO = (0.8, 0.6, 0.2)
METAL_FUZZ = 1.0
RIGHT_CENTER = (1.0, 0.0, -1.0)

SPHERE_RADIUS = 0.5


def create_default_scene() -> SceneManager:
    """Build the demo scene into the global scene fields.

    Returns:
        The SceneManager holding the five spheres and their materials.
    """
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)
    scene.add_lambertian_sphere(CENTER_CENTER, SPHERE_RADIUS, CENTER_ALBEDO)
    # Hollow glass: a smaller air bubble inside the glass ball
    scene.add_dielectric_sphere(LEFT_CENTER, SPHERE_RADIUS, GLASS_IOR)
    scene.add_dielectric_sphere(LEFT_CENTER, BUBBLE_RADIUS, BUBBLE_IOR)
    scene.add_metal_sphere(RIGHT_CENTER, SPHERE_RADIUS, METAL_ALBEDO, METAL_FUZZ)

    return scene
