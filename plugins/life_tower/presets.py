"""
Life Tower Presets

Each preset names a B/S rule and how layer 0 is seeded: either a small
pattern (drawn with 'O' for alive, '.' for dead, rows along z) placed at
the layer centre, or a uniform random fill with a given density.
"""

# (width, height capacity, depth)
DEFAULT_SIZE = (64, 64, 128)
DEFAULT_SEED = 372198379
DEFAULT_DENSITY = 0.5

PRESETS = {
    # =====================================================================
    # RANDOM FILLS
    # =====================================================================
    "random": {
        "name": "Random Tower",
        "description": "Half the base alive at random - dense, cave-like tower",
        "rule": "B3/S23",
        "seed": "random", "density": DEFAULT_DENSITY,
    },
    "sparse": {
        "name": "Sparse Tower",
        "description": "Thin random base that quickly settles into still lifes",
        "rule": "B3/S23",
        "seed": "random", "density": 0.12,
    },
    "highlife": {
        "name": "HighLife",
        "description": "B36/S23 - replicators grow diagonal struts",
        "rule": "B36/S23",
        "seed": "random", "density": 0.35,
    },
    "day_night": {
        "name": "Day & Night",
        "description": "Symmetric rule - solid masses with hollow chambers",
        "rule": "B3678/S34678",
        "seed": "random", "density": 0.45,
    },

    # =====================================================================
    # PATTERNS
    # =====================================================================
    "glider": {
        "name": "Glider",
        "description": "A single glider - a diagonal staircase up the tower",
        "rule": "B3/S23",
        "seed": "pattern",
        "pattern": """
            .O.
            ..O
            OOO
        """,
    },
    "r_pentomino": {
        "name": "R-pentomino",
        "description": "Five cells that stay chaotic for over a thousand generations",
        "rule": "B3/S23",
        "seed": "pattern",
        "pattern": """
            .OO
            OO.
            .O.
        """,
    },
    "acorn": {
        "name": "Acorn",
        "description": "Methuselah - slowly spreading debris field",
        "rule": "B3/S23",
        "seed": "pattern",
        "pattern": """
            .O.....
            ...O...
            OO..OOO
        """,
    },
    "diehard": {
        "name": "Diehard",
        "description": "Vanishes after 130 generations - a tower with a flat roof",
        "rule": "B3/S23",
        "seed": "pattern",
        "pattern": """
            ......O.
            OO......
            .O...OOO
        """,
    },
    "blinker": {
        "name": "Blinker",
        "description": "Period-2 oscillator - an alternating column",
        "rule": "B3/S23",
        "seed": "pattern",
        "pattern": "OOO",
    },
    "block": {
        "name": "Block",
        "description": "Still life - a straight square pillar",
        "rule": "B3/S23",
        "seed": "pattern",
        "pattern": """
            OO
            OO
        """,
    },
}

PRESET_ORDER = [
    "random", "sparse", "highlife", "day_night",
    "glider", "r_pentomino", "acorn", "diehard", "blinker", "block",
]


def get_preset(name):
    """Get a preset by name.

    Raises:
        ValueError: if no preset has that name
    """
    try:
        return PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown preset: {name!r}. "
                         f"Choose from {PRESET_ORDER}") from None


def list_presets():
    """Return list of (key, name, description) for all presets."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"])
            for k in PRESET_ORDER if k in PRESETS]
