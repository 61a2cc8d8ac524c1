"""
Life Tower - Entry Point

Grows a tower of Game of Life generations, one layer per tick, and
optionally saves a PNG snapshot of the result.

Usage:
    python -m life_tower [preset] [--size WxHxD] [--rule B3/S23]
                         [--seed N] [--density P] [--workers N]
                         [--snap PATH] [--view plan|elevation]
                         [--colormap NAME] [--verbose]

Examples:
    python -m life_tower
    python -m life_tower glider --size 32x96x32
    python -m life_tower acorn --size 128x200x128 --workers 4
    python -m life_tower random --snap tower.png --view elevation

Use --list to see all available presets.
"""

import logging
import sys
import time

from .colormaps import COLORMAP_ORDER
from .errors import LifeTowerError
from .life import GenerationStepper
from .logging_config import setup_logging
from .mesh_builder import LayerMeshBuilder
from .presets import (
    DEFAULT_SEED, DEFAULT_SIZE, PRESET_ORDER, get_preset, list_presets,
)
from .renderer import SnapshotRenderer, placement_transform, world_bounds
from .seeding import seed_pattern, seed_random
from .sequencer import GrowthSequencer, GrowthState
from .voxel_field import VoxelField


def seed_field(field, preset, seed=DEFAULT_SEED, density=None):
    """Seed layer 0 of `field` as the preset describes. Returns alive count."""
    layer = field.layer(0)
    if preset.get("seed") == "pattern":
        return seed_pattern(layer, preset["pattern"])
    return seed_random(layer, density if density is not None else preset.get("density", 0.5),
                       seed=seed)


def grow(sequencer, progress_every=16):
    """Tick loop: call advance() until the tower is complete.

    Returns:
        Number of ticks spent
    """
    ticks = 0
    state = sequencer.state
    while state is not GrowthState.COMPLETE:
        state = sequencer.advance()
        ticks += 1
        if progress_every and sequencer.height % progress_every == 0:
            alive = sequencer.meshes[-1].cell_count
            print(f"  layer {sequencer.height:4d}/{sequencer.capacity}: {alive} alive")
    return ticks


def parse_size(text):
    parts = text.lower().split("x")
    if len(parts) != 3:
        raise ValueError(f"size must look like WxHxD, got {text!r}")
    return tuple(int(p) for p in parts)


def main(argv=None):
    preset_key = "random"
    size = DEFAULT_SIZE
    rule = None
    seed = DEFAULT_SEED
    density = None
    workers = 1
    snap_path = None
    view = "plan"
    colormap = "strata"
    verbose = False

    args = sys.argv[1:] if argv is None else list(argv)
    i = 0
    try:
        while i < len(args):
            arg = args[i]
            if arg == "--size" and i + 1 < len(args):
                size = parse_size(args[i + 1])
                i += 2
            elif arg == "--rule" and i + 1 < len(args):
                rule = args[i + 1]
                i += 2
            elif arg == "--seed" and i + 1 < len(args):
                seed = int(args[i + 1])
                i += 2
            elif arg == "--density" and i + 1 < len(args):
                density = float(args[i + 1])
                i += 2
            elif arg == "--workers" and i + 1 < len(args):
                workers = int(args[i + 1])
                i += 2
            elif arg == "--snap" and i + 1 < len(args):
                snap_path = args[i + 1]
                i += 2
            elif arg == "--view" and i + 1 < len(args):
                view = args[i + 1]
                i += 2
            elif arg == "--colormap" and i + 1 < len(args):
                colormap = args[i + 1]
                i += 2
            elif arg in ("--verbose", "-v"):
                verbose = True
                i += 1
            elif arg == "--list":
                print("\nAvailable presets:\n")
                for key, name, desc in list_presets():
                    print(f"    {key:14s} {name:14s} {desc}")
                print(f"\nColormaps: {', '.join(COLORMAP_ORDER)}\n")
                return 0
            elif arg in ("--help", "-h"):
                print(__doc__)
                return 0
            elif arg in PRESET_ORDER:
                preset_key = arg
                i += 1
            else:
                print(f"Unknown argument: {arg}")
                print("Use --list to see available presets")
                return 1
    except ValueError as e:
        print(f"Invalid argument: {e}")
        return 1

    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    preset = get_preset(preset_key)
    width, height, depth = size

    print("Growing Life Tower")
    print(f"  Preset: {preset_key} ({preset['name']})")
    print(f"  Size: {width}x{height}x{depth}")
    print(f"  Rule: {rule or preset['rule']}")
    print()

    try:
        with VoxelField(width, height, depth) as field:
            alive = seed_field(field, preset, seed=seed, density=density)
            print(f"  Seeded {alive} cells")

            stepper = GenerationStepper(rule or preset["rule"], workers=workers)
            sequencer = GrowthSequencer(
                field,
                stepper=stepper,
                builder=LayerMeshBuilder(),
                on_started=lambda: print("  Growth started"),
                on_finished=lambda: print("  Growth finished"),
            )
            t0 = time.perf_counter()
            with stepper:
                ticks = grow(sequencer, progress_every=max(1, height // 8))
            elapsed = time.perf_counter() - t0

            stats = sequencer.stats
            print()
            print(f"  {ticks} ticks in {elapsed:.2f}s")
            print(f"  {stats['triangles']} triangles, {stats['vertices']} vertices")

            if snap_path:
                transform = placement_transform()
                lo, hi = world_bounds(transform, field.shape)
                renderer = SnapshotRenderer(field.shape, colormap=colormap, view=view)
                renderer.render(sequencer.meshes, transform)
                renderer.save(snap_path)
                print(f"  Bounds: {lo.tolist()} -> {hi.tolist()}")
                print(f"  Saved: {snap_path}")
    except (LifeTowerError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
