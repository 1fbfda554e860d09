"""
Base map rasterization and braille output.

Polylines are drawn into a boolean dot grid, then every 2x4 block of dots
becomes one braille character. The day/night overlay is composited per
character cell: the cell background is the map grey with black laid over it
at the cell's mean overlay alpha.
"""

import numpy as np
from rich.text import Text

BRAILLE_BASE = 0x2800

BRAILLE_WEIGHTS = np.array([
    [0x01, 0x08],
    [0x02, 0x10],
    [0x04, 0x20],
    [0x40, 0x80],
], dtype=np.uint16)

COLOR_WHITE = 'white'
COLOR_DIM = 'dim white'
BACKGROUND_LEVEL = 58  # grey23


def draw_polylines(grid, px, py, seg_starts, seg_lengths, max_jump=None):
    """
    Draw connected polylines into a boolean grid (vectorized).

    Each consecutive pair of points inside a segment is sampled at one point
    per pixel step. Pairs further apart than max_jump pixels horizontally are
    skipped; those are wrap-arounds at the antimeridian, not real edges.
    """
    height, width = grid.shape
    n = len(px)
    if n < 2:
        return

    is_last = np.zeros(n, dtype=bool)
    is_last[seg_starts + seg_lengths - 1] = True
    idx = np.nonzero(~is_last[:-1])[0]

    x0, y0 = px[idx], py[idx]
    x1, y1 = px[idx + 1], py[idx + 1]
    dx = x1 - x0
    dy = y1 - y0

    keep = np.isfinite(x0) & np.isfinite(y0) & np.isfinite(x1) & np.isfinite(y1)
    if max_jump is not None:
        keep &= np.abs(dx) <= max_jump
    # Cull pairs with both ends off the same side
    keep &= ~(((x0 < 0) & (x1 < 0)) | ((x0 >= width) & (x1 >= width))
              | ((y0 < 0) & (y1 < 0)) | ((y0 >= height) & (y1 >= height)))
    if not np.any(keep):
        return

    x0, y0, dx, dy = x0[keep], y0[keep], dx[keep], dy[keep]
    steps = np.ceil(np.maximum(np.abs(dx), np.abs(dy))).astype(np.int64) + 1
    steps = np.minimum(steps, 2 * (width + height))

    pair = np.repeat(np.arange(len(steps)), steps)
    offsets = np.arange(steps.sum()) - np.repeat(np.cumsum(steps) - steps, steps)
    t = offsets / np.maximum(steps[pair] - 1, 1)

    xs = np.rint(x0[pair] + dx[pair] * t).astype(np.int64)
    ys = np.rint(y0[pair] + dy[pair] * t).astype(np.int64)
    inside = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
    grid[ys[inside], xs[inside]] = True


def render_base_map(flat_data, viewport):
    """Rasterize flattened polylines for a viewport into a (height, width) bool grid."""
    grid = np.zeros((max(viewport.height, 0), max(viewport.width, 0)), dtype=bool)
    if flat_data is None or grid.size == 0:
        return grid

    px, py = viewport.geo_to_pixels(flat_data['all_lats'], flat_data['all_lons'])
    draw_polylines(grid, px, py, flat_data['seg_starts'], flat_data['seg_lengths'],
                   max_jump=viewport.world_size / 2)
    return grid


def compose_braille(border_grid, overlay=None):
    """Convert a dot grid plus an RGBA overlay into braille rows.

    Args:
        border_grid: (height, width) bool grid of map dots
        overlay: (height, width, 4) uint8 RGBA buffer, or None. A buffer of
            any other size is stale and ignored.

    Returns:
        List of Rich Text objects, one per character row
    """
    pixel_h, pixel_w = border_grid.shape
    alpha = None
    if overlay is not None and overlay.shape[:2] == (pixel_h, pixel_w):
        alpha = overlay[:, :, 3]

    pad_h = (4 - pixel_h % 4) % 4
    pad_w = (2 - pixel_w % 2) % 2
    if pad_h or pad_w:
        border_grid = np.pad(border_grid, ((0, pad_h), (0, pad_w)), mode='constant')
        if alpha is not None:
            alpha = np.pad(alpha, ((0, pad_h), (0, pad_w)), mode='constant')

    pixel_h, pixel_w = border_grid.shape
    char_h, char_w = pixel_h // 4, pixel_w // 2

    border_blocks = border_grid.reshape(char_h, 4, char_w, 2).transpose(0, 2, 1, 3)
    weights = BRAILLE_WEIGHTS.reshape(1, 1, 4, 2)
    codes = BRAILLE_BASE + np.sum(border_blocks * weights, axis=(2, 3))
    has_border = np.any(border_blocks, axis=(2, 3))

    if alpha is not None:
        alpha_blocks = alpha.reshape(char_h, 4, char_w, 2).transpose(0, 2, 1, 3)
        cell_alpha = alpha_blocks.mean(axis=(2, 3))
        shade = np.rint(BACKGROUND_LEVEL * (1.0 - cell_alpha / 255.0)).astype(np.int32)
        # Dim borders where at least half of the cell's dots are night
        is_night = np.count_nonzero(alpha_blocks, axis=(2, 3)) >= 4
    else:
        shade = np.full((char_h, char_w), BACKGROUND_LEVEL, dtype=np.int32)
        is_night = np.zeros((char_h, char_w), dtype=bool)

    result = []
    for cy in range(char_h):
        row_text = Text()
        row_codes = codes[cy]
        row_border = has_border[cy]
        row_shade = shade[cy]
        row_night = is_night[cy]

        current_style = None
        current_chars = []

        for cx in range(char_w):
            level = row_shade[cx]
            bg = f"on rgb({level},{level},{level})"
            if row_border[cx]:
                fg = COLOR_DIM if row_night[cx] else COLOR_WHITE
                style = f"{fg} {bg}"
            else:
                style = bg

            char = chr(row_codes[cx])

            if style == current_style:
                current_chars.append(char)
            else:
                if current_chars:
                    row_text.append(''.join(current_chars), style=current_style)
                current_chars = [char]
                current_style = style

        if current_chars:
            row_text.append(''.join(current_chars), style=current_style)

        result.append(row_text)

    return result
