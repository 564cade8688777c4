"""Host-side colour helpers.

Rendered colours are linear float RGB and may exceed 1.0. Everything here
works on numpy arrays whose last axis holds (R, G, B), so the same calls
handle a single colour, a row of cells or a whole frame.

Example:
    >>> import numpy as np
    >>> from termtrace.preview.color import to_rgb8
    >>> to_rgb8(np.array([1.5, 0.5, -0.2]))
    array([255, 127,   0], dtype=uint8)
"""

import numpy as np
import numpy.typing as npt

# Displayable intensity range, applied per channel
INTENSITY = (0.0, 1.0)

BLACK = (0.0, 0.0, 0.0)
WHITE = (1.0, 1.0, 1.0)

# Rec. 601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

# Largest factor that still maps 1.0 to 255 after truncation
RGB8_SCALE = 255.999


def brightness(color: npt.ArrayLike) -> npt.NDArray[np.float64] | float:
    """Perceived brightness 0.299R + 0.587G + 0.114B.

    Args:
        color: An array whose last axis is (R, G, B).

    Returns:
        The brightness, with the last axis reduced away. A float for a
        single colour.
    """
    c = np.asarray(color, dtype=np.float64)
    result = c @ np.array(LUMA_WEIGHTS)
    if result.ndim == 0:
        return float(result)
    return result


def clamp_intensity(colors: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Clamp every channel into INTENSITY."""
    return np.clip(np.asarray(colors, dtype=np.float64), INTENSITY[0], INTENSITY[1])


def apply_gamma(
    image: npt.NDArray[np.float64],
    gamma: float = 2.2,
) -> npt.NDArray[np.float64]:
    """Apply gamma correction for display.

    Args:
        image: Linear colour array, any shape with RGB last.
        gamma: Gamma value (2.2 for sRGB-like output, 1.0 for none).

    Returns:
        The gamma encoded image, clamped into INTENSITY.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    # Clamp first, negative values would give NaN
    image = clamp_intensity(image)
    if gamma == 1.0:
        return image
    return np.power(image, 1.0 / gamma)


def to_rgb8(colors: npt.ArrayLike, gamma: float = 1.0) -> npt.NDArray[np.uint8]:
    """Quantise linear colours to 8-bit channels.

    Values outside INTENSITY are clamped first, so HDR input always lands in
    0..255.

    Args:
        colors: Colour array, RGB last.
        gamma: Optional gamma encoding applied after clamping.

    Returns:
        A uint8 array of the same shape.
    """
    encoded = apply_gamma(np.asarray(colors, dtype=np.float64), gamma)
    return (encoded * RGB8_SCALE).astype(np.uint8)


def contrasting_text_color(colors: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Black for bright backgrounds (brightness > 0.5), white otherwise."""
    c = np.asarray(colors, dtype=np.float64)
    bright = np.asarray(brightness(c)) > 0.5
    return np.where(bright[..., None], np.array(BLACK), np.array(WHITE))
