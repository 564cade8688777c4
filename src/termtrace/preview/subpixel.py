"""Map a block of subpixel colours onto one terminal cell.

Each cell is rendered as SUBPIXEL_Y x SUBPIXEL_X (4 x 2) subpixels, the
same grid as the dots of a braille character. The block is split into a
dark and a light colour with 2-means clustering, the dark subpixels become
the braille dot pattern, and one of the two cluster colours becomes the
cell background:

    subpixel index (row-major)    braille dot number
         0 1                           1 4
         2 3                           2 5
         4 5                           3 6
         6 7                           7 8

Bit i of a mask is set when subpixel i belongs to the dark cluster. Braille
code points number their dots 1-8 in the right-hand layout, so mask bits are
permuted into dot order before being added to U+2800.

Everything is vectorised over a leading block axis so a whole row of cells
is mapped in one call.

Example:
    >>> import numpy as np
    >>> from termtrace.preview.subpixel import block_to_cell
    >>> block = np.ones((4, 2, 3))
    >>> block[3, 0] = 0.0  # bottom-left subpixel dark
    >>> block_to_cell(block).glyph
    '⡀'
"""

import numpy as np
import numpy.typing as npt

from termtrace.preview.color import brightness, contrasting_text_color
from termtrace.preview.framebuffer import BLANK_GLYPH, TerminalCell

SUBPIXEL_X = 2
SUBPIXEL_Y = 4
SLOTS_PER_CELL = SUBPIXEL_X * SUBPIXEL_Y

DEFAULT_ITERATIONS = 16

BRAILLE_BASE = 0x2800

# Above this many dark subpixels the dark colour becomes the background
MAJORITY = SLOTS_PER_CELL // 2

_BIT_WEIGHTS = 1 << np.arange(SLOTS_PER_CELL)

__all__ = [
    "SUBPIXEL_X",
    "SUBPIXEL_Y",
    "brightness",
    "cluster_two_colors",
    "cluster_blocks",
    "mask_to_braille",
    "masks_to_braille",
    "block_to_cell",
    "blocks_to_cells",
    "color_to_cell",
    "colors_to_cells",
    "average_blocks",
]


def _as_blocks(blocks: npt.ArrayLike) -> npt.NDArray[np.float64]:
    arr = np.asarray(blocks, dtype=np.float64)
    if arr.shape[-3:] != (SUBPIXEL_Y, SUBPIXEL_X, 3):
        raise ValueError(
            f"Expected blocks of shape (..., {SUBPIXEL_Y}, {SUBPIXEL_X}, 3), got {arr.shape}"
        )
    return arr.reshape(-1, SLOTS_PER_CELL, 3)


def cluster_blocks(
    blocks: npt.ArrayLike,
    iterations: int = DEFAULT_ITERATIONS,
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.int64]]:
    """Split every block into a dark and a light colour with 2-means.

    Seeding: center 0 is the block's first subpixel, center 1 the first
    subpixel that differs from it, swapped if needed so center 0 is the
    darker one. A block with a single colour yields that colour twice and
    an empty mask. Each pass assigns a subpixel to center 0 only if it is
    strictly closer to it, then moves each center to the mean of its
    members; a center with no members stays where it is.

    Args:
        blocks: Array of shape (N, SUBPIXEL_Y, SUBPIXEL_X, 3).
        iterations: Number of assignment/update passes.

    Returns:
        A tuple (dark, light, masks) with shapes (N, 3), (N, 3) and (N,).
        masks holds the dark-cluster membership from the last pass.
    """
    flat = _as_blocks(blocks)
    n = flat.shape[0]

    first = flat[:, 0]
    differs = np.any(flat != first[:, None, :], axis=2)
    found = differs.any(axis=1)
    second = flat[np.arange(n), np.argmax(differs, axis=1)]
    second = np.where(found[:, None], second, first)

    swap = brightness(first) > brightness(second)
    dark = np.where(swap[:, None], second, first)
    light = np.where(swap[:, None], first, second)

    in_dark = np.zeros((n, SLOTS_PER_CELL), dtype=bool)
    for _ in range(iterations):
        dist_dark = np.sum((flat - dark[:, None, :]) ** 2, axis=2)
        dist_light = np.sum((flat - light[:, None, :]) ** 2, axis=2)
        in_dark = dist_dark < dist_light

        count_dark = in_dark.sum(axis=1)
        count_light = SLOTS_PER_CELL - count_dark
        sum_dark = np.sum(flat * in_dark[:, :, None], axis=1)
        sum_light = np.sum(flat * ~in_dark[:, :, None], axis=1)

        dark = np.where(
            count_dark[:, None] > 0, sum_dark / np.maximum(count_dark, 1)[:, None], dark
        )
        light = np.where(
            count_light[:, None] > 0, sum_light / np.maximum(count_light, 1)[:, None], light
        )

    # Uniform blocks keep their exact colour
    dark = np.where(found[:, None], dark, first)
    light = np.where(found[:, None], light, first)
    in_dark &= found[:, None]

    masks = (in_dark * _BIT_WEIGHTS).sum(axis=1).astype(np.int64)
    return dark, light, masks


def cluster_two_colors(
    samples: npt.ArrayLike,
    iterations: int = DEFAULT_ITERATIONS,
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], int]:
    """Cluster a single (SUBPIXEL_Y, SUBPIXEL_X, 3) block.

    Returns:
        A tuple (dark, light, mask) where mask is an int bitmask.
    """
    dark, light, masks = cluster_blocks(np.asarray(samples)[None], iterations)
    return dark[0], light[0], int(masks[0])


def masks_to_braille(masks: npt.ArrayLike) -> npt.NDArray[np.str_]:
    """Vectorised mask_to_braille, returns an array of single characters."""
    m = np.asarray(masks, dtype=np.int64)
    if np.any((m < 0) | (m > 0xFF)):
        raise ValueError("Subpixel masks must be in [0, 255]")
    dots = (
        (m & 0b0000_0001)
        | (m & 0b0000_0010) << 2
        | (m & 0b0000_0100) >> 1
        | (m & 0b0000_1000) << 1
        | (m & 0b0001_0000) >> 2
        | (m & 0b1110_0000)
    )
    codes = dots + BRAILLE_BASE
    glyphs = [chr(int(code)) for code in codes.ravel()]
    return np.array(glyphs, dtype="<U1").reshape(codes.shape)


def mask_to_braille(mask: int) -> str:
    """Braille character whose raised dots are the set bits of mask.

    >>> mask_to_braille(0b1111_1111)
    '⣿'
    """
    return str(masks_to_braille(mask))


def _popcount(masks: npt.NDArray[np.int64]) -> npt.NDArray[np.int64]:
    bits = (masks[:, None] & _BIT_WEIGHTS) != 0
    return bits.sum(axis=1)


def blocks_to_cells(
    blocks: npt.ArrayLike,
    iterations: int = DEFAULT_ITERATIONS,
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.str_]]:
    """Map a row of subpixel blocks to terminal cells.

    The glyph draws the dark cluster. The background is the dark colour when
    more than half of the subpixels are dark and the light colour otherwise;
    the text colour is black on bright backgrounds and white on dark ones.

    Args:
        blocks: Array of shape (N, SUBPIXEL_Y, SUBPIXEL_X, 3).

    Returns:
        A tuple (fg, bg, glyphs) with shapes (N, 3), (N, 3) and (N,).
    """
    dark, light, masks = cluster_blocks(blocks, iterations)
    bg = np.where((_popcount(masks) > MAJORITY)[:, None], dark, light)
    fg = contrasting_text_color(bg)
    return fg, bg, masks_to_braille(masks)


def block_to_cell(block: npt.ArrayLike, iterations: int = DEFAULT_ITERATIONS) -> TerminalCell:
    """Map one (SUBPIXEL_Y, SUBPIXEL_X, 3) block to a TerminalCell."""
    fg, bg, glyphs = blocks_to_cells(np.asarray(block)[None], iterations)
    return TerminalCell(
        fg=tuple(float(c) for c in fg[0]),
        bg=tuple(float(c) for c in bg[0]),
        glyph=str(glyphs[0]),
    )


def colors_to_cells(
    colors: npt.ArrayLike,
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.str_]]:
    """Pixel-mode mapping: each colour fills a blank cell as background.

    Args:
        colors: Array of shape (N, 3).

    Returns:
        A tuple (fg, bg, glyphs) with shapes (N, 3), (N, 3) and (N,).
    """
    bg = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
    fg = contrasting_text_color(bg)
    glyphs = np.full(bg.shape[0], BLANK_GLYPH, dtype="<U1")
    return fg, bg.copy(), glyphs


def color_to_cell(color: npt.ArrayLike) -> TerminalCell:
    """Pixel-mode mapping of a single colour."""
    fg, bg, _ = colors_to_cells(np.asarray(color)[None])
    return TerminalCell(
        fg=tuple(float(c) for c in fg[0]),
        bg=tuple(float(c) for c in bg[0]),
        glyph=BLANK_GLYPH,
    )


def average_blocks(blocks: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Mean colour of each block, shape (N, 3)."""
    return _as_blocks(blocks).mean(axis=1)

