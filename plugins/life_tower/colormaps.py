"""
Colormaps for Tower Snapshots

Maps normalised heights [0, 1] to RGB colours. Each colormap is a
(256, 3) uint8 lookup table; the bottom of the tower sits at 0 and the
height capacity at 1.
"""

import numpy as np


def _interpolate_colors(stops, n=256):
    """
    Build a colormap by smoothstep interpolation between color stops.

    Args:
        stops: List of (position, (r, g, b)) where position is [0, 1]
        n: Number of entries in the LUT
    """
    positions = np.array([s[0] for s in stops], dtype=np.float64)
    colors = np.array([s[1] for s in stops], dtype=np.float64)
    t = np.linspace(0.0, 1.0, n)

    j = np.clip(np.searchsorted(positions, t, side="right") - 1, 0, len(stops) - 2)
    span = positions[j + 1] - positions[j]
    frac = np.where(span > 0, (t - positions[j]) / np.where(span > 0, span, 1.0), 0.0)
    frac = np.clip(frac, 0.0, 1.0)
    frac = frac * frac * (3 - 2 * frac)  # smoothstep

    lut = colors[j] + frac[:, None] * (colors[j + 1] - colors[j])
    return lut.astype(np.uint8)


# --- Colormap Definitions ---

def strata():
    """Sediment layers - sand at the base, rust, then slate at the top."""
    return _interpolate_colors([
        (0.00, (235, 210, 160)),
        (0.30, (200, 130, 70)),
        (0.55, (150, 60, 40)),
        (0.80, (70, 70, 95)),
        (1.00, (30, 35, 60)),
    ])


def basalt():
    """Cooling lava - glowing red base fading to grey stone."""
    return _interpolate_colors([
        (0.00, (200, 40, 10)),
        (0.15, (120, 30, 20)),
        (0.45, (60, 55, 60)),
        (1.00, (150, 150, 160)),
    ])


def lichen():
    """Pale stone base under a cap of yellow-green growth."""
    return _interpolate_colors([
        (0.00, (90, 90, 85)),
        (0.50, (120, 140, 90)),
        (0.85, (170, 190, 60)),
        (1.00, (220, 230, 120)),
    ])


def ember():
    """Black to orange; the newest layers burn brightest."""
    return _interpolate_colors([
        (0.00, (0, 0, 0)),
        (0.60, (110, 20, 0)),
        (1.00, (255, 160, 40)),
    ])


# Registry of all colormaps
COLORMAPS = {
    "strata": strata,
    "basalt": basalt,
    "lichen": lichen,
    "ember": ember,
}

COLORMAP_ORDER = list(COLORMAPS.keys())


def get_colormap(name):
    """Get a colormap LUT (256, 3) uint8 array by name."""
    try:
        return COLORMAPS[name]()
    except KeyError:
        raise ValueError(f"Unknown colormap: {name!r}. "
                         f"Choose from {COLORMAP_ORDER}") from None


def apply_colormap(field, lut, mask=None, background=(0, 0, 0)):
    """
    Apply a colormap LUT to a 2D float field.

    Args:
        field: 2D numpy array with values in [0, 1]
        lut: (256, 3) uint8 colormap lookup table
        mask: Optional 2D bool array; False pixels get the background
        background: RGB used outside the mask

    Returns:
        (H, W, 3) uint8 RGB image
    """
    indices = (np.clip(field, 0, 1) * 255).astype(np.uint8)
    rgb = lut[indices]
    if mask is not None:
        rgb[~np.asarray(mask, dtype=bool)] = background
    return rgb
