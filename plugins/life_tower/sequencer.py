"""
Growth Sequencer - One Layer per Tick

Drives the tower: the first advance meshes the seeded layer 0, each
later advance steps the next generation and meshes it, and the advance
that produces the top layer moves the run to COMPLETE.

    SEEDING --advance--> GROWING --advance (top layer)--> COMPLETE
                          |   ^
                          +---+ advance

Any error aborts the advance before the height counter moves. The
half-written output layer is cleared again so a retry starts clean.

Usage:
    field = VoxelField(64, 64, 128)
    seed_random(field.layer(0), 0.5, seed=372198379)
    seq = GrowthSequencer(field)
    while seq.advance() is not GrowthState.COMPLETE:
        pass
"""

import enum
import logging

from .life import GenerationStepper
from .mesh_builder import LayerMeshBuilder

logger = logging.getLogger(__name__)


class GrowthState(enum.Enum):
    SEEDING = "seeding"
    GROWING = "growing"
    COMPLETE = "complete"


class GrowthSequencer:
    """Owns the run state; borrows the field, stepper and builder."""

    def __init__(self, field, stepper=None, builder=None,
                 on_started=None, on_finished=None):
        """
        Args:
            field: VoxelField whose layer 0 has been seeded
            stepper: GenerationStepper (default: Conway B3/S23)
            builder: LayerMeshBuilder (default: unit cube, split batches)
            on_started: Called once, after layer 0 is meshed
            on_finished: Called once, when the top layer is produced
        """
        self.field = field
        self.stepper = stepper if stepper is not None else GenerationStepper()
        self.builder = builder if builder is not None else LayerMeshBuilder()
        self.on_started = on_started
        self.on_finished = on_finished

        self.state = GrowthState.SEEDING
        self.height = 0
        self.advances = 0
        self._meshes = []

    def __repr__(self):
        return (f"GrowthSequencer(state={self.state.value}, "
                f"height={self.height}/{self.field.height})")

    @property
    def meshes(self):
        """Accumulated meshes in height order (a tuple snapshot)."""
        return tuple(self._meshes)

    @property
    def capacity(self):
        return self.field.height

    @property
    def is_complete(self):
        return self.state is GrowthState.COMPLETE

    def advance(self):
        """Produce at most one layer. Returns the resulting state."""
        if self.state is GrowthState.COMPLETE:
            return self.state

        if self.state is GrowthState.SEEDING:
            mesh = self._produce_seed()
        else:
            mesh = self._produce_next()

        self._meshes.append(mesh)
        self.height += 1
        self.advances += 1

        started = self.state is GrowthState.SEEDING
        finished = self.height >= self.capacity
        self.state = GrowthState.COMPLETE if finished else GrowthState.GROWING

        # State is final before listeners run; a raising listener cannot
        # leave the run half-transitioned.
        try:
            if started:
                logger.info("Growth started: %dx%d layers, capacity %d",
                            self.field.width, self.field.depth, self.capacity)
                if self.on_started is not None:
                    self.on_started()
        finally:
            if finished:
                logger.info("Growth finished at height %d (%d triangles)",
                            self.height, self.stats["triangles"])
                if self.on_finished is not None:
                    self.on_finished()

        return self.state

    def run(self, max_advances=None):
        """Advance until COMPLETE (or max_advances calls). Returns the meshes."""
        n = 0
        while not self.is_complete and (max_advances is None or n < max_advances):
            self.advance()
            n += 1
        return self.meshes

    def _produce_seed(self):
        layer = self.field.layer(0)
        mesh = self.builder.build(layer, 0)
        self.field.mark_produced(0)
        return mesh

    def _produce_next(self):
        previous = self.field.layer(self.height - 1)
        current = self.field.layer(self.height)
        try:
            self.stepper.step(previous, current)
            mesh = self.builder.build(current, self.height)
        except Exception:
            if not self.field.disposed:
                current.clear()
            raise
        self.field.mark_produced(self.height)
        return mesh

    @property
    def stats(self):
        """Return current run statistics."""
        return {
            "state": self.state.value,
            "height": self.height,
            "capacity": self.capacity,
            "advances": self.advances,
            "triangles": sum(m.triangle_count for m in self._meshes),
            "vertices": sum(m.vertex_count for m in self._meshes),
            "alive_per_layer": [m.cell_count for m in self._meshes],
        }
