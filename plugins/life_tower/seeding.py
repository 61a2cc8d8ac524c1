"""
Seeding - Initial Alive Cells for Layer 0

Three ways to populate the bottom layer before the first advance:
- seed_cells:   explicit (x, z) or (x, y, z) coordinates
- seed_random:  each cell alive with a given probability
- seed_pattern: a small square pattern placed at the layer centre

Only layer 0 may be seeded, and only before it has been produced.
"""

import numpy as np

from .errors import LayerFrozen, OutOfRange


def _check_seedable(layer):
    if layer.y != 0:
        raise OutOfRange(f"only layer 0 can be seeded, got layer {layer.y}")
    if layer.frozen:
        raise LayerFrozen("layer 0 has already been produced")


def seed_cells(layer, coords):
    """Mark each coordinate alive. Accepts (x, z) and (x, y, z) tuples."""
    _check_seedable(layer)
    coords = list(coords)
    for c in coords:
        layer.set_alive(*c)
    return len(coords)


def seed_random(layer, probability=0.5, seed=None):
    """Mark every cell alive with `probability`, reproducibly for a given seed.

    Returns:
        Number of cells set alive
    """
    if not 0.0 <= probability <= 1.0:
        raise ValueError(f"probability must be in [0, 1], got {probability!r}")
    _check_seedable(layer)
    rng = np.random.default_rng(seed)
    mask = rng.random(layer.shape) < probability
    layer.write(layer.alive_mask() | mask)
    return int(mask.sum())


def parse_pattern(text):
    """Parse a pattern drawn with 'O' (alive) and '.' (dead), one row per line.

    Rows are z, columns are x. Short rows are padded with dead cells.
    """
    rows = [line.strip() for line in text.strip().splitlines() if line.strip()]
    if not rows:
        raise ValueError("pattern is empty")
    width = max(len(r) for r in rows)
    grid = np.zeros((len(rows), width), dtype=bool)
    for z, row in enumerate(rows):
        for x, ch in enumerate(row):
            if ch in "Oo*#":
                grid[z, x] = True
            elif ch != ".":
                raise ValueError(f"Unexpected character {ch!r} in pattern row {z}")
    return grid


def seed_pattern(layer, pattern, offset=None):
    """Place a 2D bool pattern (rows = z) on the layer.

    Args:
        layer: Layer 0 of the field
        pattern: 2D bool array or a string for parse_pattern
        offset: (x, z) of the pattern's first cell; default is the layer
            centre (width // 2, depth // 2)

    Raises:
        OutOfRange: if the pattern does not fit at the offset
    """
    _check_seedable(layer)
    if isinstance(pattern, str):
        pattern = parse_pattern(pattern)
    pattern = np.asarray(pattern, dtype=bool)
    if offset is None:
        offset = (layer.width // 2, layer.depth // 2)
    ox, oz = offset

    zs, xs = np.nonzero(pattern)
    xs, zs = xs + ox, zs + oz
    if len(xs) and (xs.min() < 0 or zs.min() < 0
                    or xs.max() >= layer.width or zs.max() >= layer.depth):
        raise OutOfRange(
            f"pattern {pattern.shape[1]}x{pattern.shape[0]} at offset {offset} "
            f"does not fit layer {layer.width}x{layer.depth}"
        )
    for x, z in zip(xs, zs):
        layer.set_alive(int(x), int(z))
    return len(xs)
