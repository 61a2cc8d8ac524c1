"""
Layer Mesh Builder - Turns One Layer's Alive Cells into Triangles

Each alive cell at (x, z) of the layer at height h gets one copy of the
template geometry translated to (x, h, z). Dead cells emit nothing.

A renderer can only draw a limited number of vertices per mesh
(65535 with 16-bit index buffers). The builder therefore cuts a layer
into as many batches as needed; with split=False it refuses layers that
would not fit in a single batch instead of truncating them.
"""

import logging

import numpy as np

from .errors import MeshBudgetExceeded
from .mesh_template import MeshTemplate

logger = logging.getLogger(__name__)

MAX_VERTICES = 65535


def _readonly(arr):
    arr.flags.writeable = False
    return arr


class MeshBatch:
    """One renderer-sized chunk of triangles. Buffers are read-only."""

    def __init__(self, vertices, triangles, uv, normals):
        self.vertices = _readonly(vertices)
        self.triangles = _readonly(triangles)
        self.uv = _readonly(uv)
        self.normals = _readonly(normals)

    def __repr__(self):
        return f"MeshBatch({self.vertex_count} vertices, {self.triangle_count} triangles)"

    @property
    def vertex_count(self):
        return len(self.vertices)

    @property
    def triangle_count(self):
        return len(self.triangles) // 3


class GeneratedMesh:
    """Geometry for exactly one layer: zero or more batches plus the cells they came from."""

    def __init__(self, height, batches, cells, vertices_per_cell):
        self.height = height
        self.batches = tuple(batches)
        self.cells = _readonly(cells)
        self.vertices_per_cell = vertices_per_cell

    def __repr__(self):
        return (f"GeneratedMesh(height={self.height}, cells={self.cell_count}, "
                f"batches={len(self.batches)}, triangles={self.triangle_count})")

    def __len__(self):
        return len(self.batches)

    def __iter__(self):
        return iter(self.batches)

    @property
    def cell_count(self):
        return len(self.cells)

    @property
    def vertex_count(self):
        return sum(b.vertex_count for b in self.batches)

    @property
    def triangle_count(self):
        return sum(b.triangle_count for b in self.batches)

    @property
    def is_empty(self):
        return not self.batches


class LayerMeshBuilder:
    """Stateless apart from the shared, read-only template."""

    def __init__(self, template=None, max_vertices=MAX_VERTICES, split=True):
        """
        Args:
            template: MeshTemplate for one cell (default: unit cube)
            max_vertices: Vertex ceiling of a single batch
            split: Spread large layers over several batches
        """
        if max_vertices <= 0:
            raise ValueError(f"max_vertices must be positive, got {max_vertices!r}")
        self.template = template if template is not None else MeshTemplate.unit_cube()
        self.max_vertices = int(max_vertices)
        self.split = split

    @property
    def cells_per_batch(self):
        return self.max_vertices // self.template.vertex_count

    def build(self, layer, height=None):
        """Mesh every alive cell of `layer` at `height` (default: layer.y).

        Raises:
            MeshBudgetExceeded: if a batch would exceed max_vertices
        """
        if height is None:
            height = layer.y
        zs, xs = np.nonzero(layer.alive_mask())
        count = len(xs)
        cells = np.stack([xs, zs], axis=1).astype(np.int32)
        per_cell = self.template.vertex_count

        if count:
            needed = count * per_cell
            if self.cells_per_batch == 0:
                raise MeshBudgetExceeded(
                    f"one cell needs {per_cell} vertices, ceiling is {self.max_vertices}"
                )
            if not self.split and needed > self.max_vertices:
                raise MeshBudgetExceeded(
                    f"layer {height} needs {needed} vertices for {count} cells, "
                    f"ceiling is {self.max_vertices}"
                )

        batches = []
        step = max(self.cells_per_batch, 1)
        for start in range(0, count, step):
            end = min(start + step, count)
            batches.append(self._make_batch(xs[start:end], zs[start:end], height))

        mesh = GeneratedMesh(height, batches, cells, per_cell)
        logger.debug("Meshed layer %d: %d cells, %d batch(es), %d triangles",
                     height, count, len(batches), mesh.triangle_count)
        return mesh

    def _make_batch(self, xs, zs, height):
        t = self.template
        m = len(xs)
        origins = np.stack(
            [xs, np.full(m, height), zs], axis=1
        ).astype(np.float32)

        vertices = (t.vertices[None, :, :] + origins[:, None, :]).reshape(-1, 3)
        bases = (np.arange(m, dtype=np.int32) * t.vertex_count)[:, None]
        triangles = (t.triangles[None, :] + bases).reshape(-1)
        uv = np.tile(t.uv, (m, 1))
        normals = np.tile(t.normals, (m, 1))
        return MeshBatch(vertices, triangles.astype(np.int32), uv, normals)
