"""
Game of Life Step - Computes Layer h from Layer h-1

Supports arbitrary B/S (birth/survival) rule notation:
- B3/S23: Conway's Game of Life (default)
- B36/S23: HighLife (self-replicating)
- B3678/S34678: Day & Night

Cells beyond the layer edge count as dead. The grid is padded with
zeros, not wrapped, so patterns that reach the rim lose their outer
neighbours instead of re-entering from the opposite side.

Every cell of the output depends only on the previous layer, so the
layer can be cut into row bands and evaluated on worker threads. The
bands are joined before anything is written, which keeps the result
bit-identical for any worker count.
"""

import concurrent.futures
import logging
import time

import numpy as np
from scipy.ndimage import convolve

from .errors import DimensionMismatch

logger = logging.getLogger(__name__)

DEFAULT_RULE = "B3/S23"

KERNELS = {
    "moore": np.array([[1, 1, 1],
                       [1, 0, 1],
                       [1, 1, 1]], dtype=np.uint8),
    "vonneumann": np.array([[0, 1, 0],
                            [1, 0, 1],
                            [0, 1, 0]], dtype=np.uint8),
}


def parse_rule(rule_str):
    """Parse B/S notation like 'B3/S23' into (birth_set, survive_set).

    Raises:
        ValueError: if a part is missing or a count is not a digit 0-8
    """
    cleaned = rule_str.upper().replace(" ", "")
    birth = survive = None
    for part in cleaned.split("/"):
        if part.startswith("B"):
            birth = _parse_counts(part[1:], rule_str)
        elif part.startswith("S"):
            survive = _parse_counts(part[1:], rule_str)
        else:
            raise ValueError(f"Unrecognised rule part {part!r} in {rule_str!r}")
    if birth is None or survive is None:
        raise ValueError(f"Rule {rule_str!r} needs both a B and an S part")
    return birth, survive


def _parse_counts(digits, rule_str):
    counts = set()
    for c in digits:
        if c not in "012345678":
            raise ValueError(f"Invalid neighbour count {c!r} in rule {rule_str!r}")
        counts.add(int(c))
    return frozenset(counts)


def format_rule(birth, survive):
    """Inverse of parse_rule: ({3}, {2, 3}) -> 'B3/S23'."""
    return ("B" + "".join(str(n) for n in sorted(birth))
            + "/S" + "".join(str(n) for n in sorted(survive)))


def _lookup(counts):
    lut = np.zeros(9, dtype=bool)
    for n in counts:
        lut[n] = True
    return lut


def count_neighbors(cells, neighborhood="moore"):
    """Count live neighbours of every cell; out-of-bounds cells are dead.

    Args:
        cells: 2D bool or 0/1 array
        neighborhood: "moore" (8 neighbours) or "vonneumann" (4 neighbours)

    Returns:
        uint8 array of the same shape with counts in [0, 8]
    """
    try:
        kernel = KERNELS[neighborhood]
    except KeyError:
        raise ValueError(f"Unknown neighborhood: {neighborhood!r}. "
                         f"Choose from {sorted(KERNELS)}") from None
    grid = np.asarray(cells, dtype=np.uint8)
    return convolve(grid, kernel, mode="constant", cval=0)


def apply_rule(alive, neighbors, birth, survive):
    """Next-generation mask from the current mask and neighbour counts."""
    alive = np.asarray(alive, dtype=bool)
    return np.where(alive, _lookup(survive)[neighbors], _lookup(birth)[neighbors])


class GenerationStepper:
    """Pure layer-to-layer rule evaluation.

    No cell state is carried between calls. With workers > 1 the stepper
    starts one thread pool on first use and keeps it until close() (or
    the end of a with block).
    """

    def __init__(self, rule=DEFAULT_RULE, neighborhood="moore", workers=1):
        """
        Args:
            rule: B/S rule notation string
            neighborhood: "moore" (8 neighbours) or "vonneumann" (4 neighbours)
            workers: Number of threads a layer is split across (1 = inline)
        """
        if neighborhood not in KERNELS:
            raise ValueError(f"Unknown neighborhood: {neighborhood!r}. "
                             f"Choose from {sorted(KERNELS)}")
        if int(workers) < 1:
            raise ValueError(f"workers must be >= 1, got {workers!r}")

        self.birth, self.survive = parse_rule(rule)
        self.rule_str = format_rule(self.birth, self.survive)
        self.neighborhood = neighborhood
        self.workers = int(workers)

        self._pool = None

    def __repr__(self):
        return (f"GenerationStepper(rule={self.rule_str!r}, "
                f"neighborhood={self.neighborhood!r}, workers={self.workers})")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        """Shut down the worker pool, if one was started. Safe to call twice."""
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def get_params(self):
        return {
            "rule": self.rule_str,
            "neighborhood": self.neighborhood,
            "workers": self.workers,
        }

    def evaluate(self, cells):
        """Apply the rule to a whole 2D mask and return the next mask.

        The input array is never modified.
        """
        cells = np.asarray(cells, dtype=bool)
        depth = cells.shape[0]
        n_bands = min(self.workers, depth)
        if n_bands <= 1:
            return self._evaluate_band(cells, 0, depth)

        edges = np.linspace(0, depth, n_bands + 1).astype(int)
        bands = list(zip(edges[:-1], edges[1:]))
        if self._pool is None:
            self._pool = concurrent.futures.ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="life-step"
            )
            logger.debug("Started %d step worker(s)", self.workers)
        results = list(self._pool.map(lambda b: self._evaluate_band(cells, *b), bands))
        return np.concatenate(results, axis=0)

    def _evaluate_band(self, cells, z0, z1):
        """Rows [z0, z1) of the next generation, using a one-row halo."""
        lo = max(z0 - 1, 0)
        hi = min(z1 + 1, cells.shape[0])
        counts = count_neighbors(cells[lo:hi], self.neighborhood)[z0 - lo:z1 - lo]
        return apply_rule(cells[z0:z1], counts, self.birth, self.survive)

    def step(self, previous, output):
        """Compute output layer from previous layer.

        The output layer is written only after the whole generation has
        been evaluated; previous is read-only.

        Raises:
            DimensionMismatch: if the layers differ in width or depth
        """
        if previous.shape != output.shape:
            raise DimensionMismatch(
                f"layer {previous.y} is {previous.width}x{previous.depth} but "
                f"layer {output.y} is {output.width}x{output.depth}"
            )
        if previous.field is output.field and previous.y == output.y:
            raise ValueError(f"step needs two distinct layers, got layer {output.y} twice")

        t0 = time.perf_counter()
        nxt = self.evaluate(previous.alive_mask())
        output.write(nxt)

        logger.debug("Layer %d -> %d: %d alive (%.2f ms, %d worker(s))",
                     previous.y, output.y, int(np.count_nonzero(nxt)),
                     (time.perf_counter() - t0) * 1000.0, self.workers)
        return output
