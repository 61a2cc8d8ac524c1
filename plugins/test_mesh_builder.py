#!/usr/bin/env python3
"""
Test script for mesh generation.

Verifies:
1. Unit cube template geometry (bounds, normals, winding)
2. One translated cube per alive cell, nothing for dead cells
3. Vertex ceiling: batches split, or MeshBudgetExceeded when splitting is off
4. Builder output is independent of earlier calls and read-only
"""

import numpy as np
import pytest

from life_tower.errors import MeshBudgetExceeded
from life_tower.mesh_builder import MAX_VERTICES, LayerMeshBuilder
from life_tower.mesh_template import MeshTemplate
from life_tower.seeding import seed_cells
from life_tower.voxel_field import VoxelField


def _layer_with(cells, size=(6, 1, 6)):
    field = VoxelField(*size)
    seed_cells(field.layer(0), cells)
    return field.layer(0)


def test_unit_cube_template():
    t = MeshTemplate.unit_cube()
    assert t.vertex_count == 24
    assert t.triangle_count == 12
    lo, hi = t.bounds
    assert np.allclose(lo, 0.0) and np.allclose(hi, 1.0), "Cube should fill [0, 1]^3"
    assert np.allclose(np.linalg.norm(t.normals, axis=1), 1.0)
    assert t.uv.shape == (24, 2)
    assert not t.vertices.flags.writeable


def test_unit_cube_faces_point_outwards():
    t = MeshTemplate.unit_cube()
    tris = t.triangles.reshape(-1, 3)
    for a, b, c in tris:
        va, vb, vc = t.vertices[a], t.vertices[b], t.vertices[c]
        face_normal = np.cross(vb - va, vc - va)
        centroid = (va + vb + vc) / 3.0
        assert np.dot(face_normal, centroid - 0.5) > 0, "Triangle winds inwards"
        assert np.dot(face_normal, t.normals[a]) > 0, "Winding disagrees with normal"


def test_template_validation():
    cube = MeshTemplate.unit_cube()
    with pytest.raises(ValueError):
        MeshTemplate(cube.vertices, [0, 1, 24], cube.uv, cube.normals)
    with pytest.raises(ValueError):
        MeshTemplate(cube.vertices, [0, 1], cube.uv, cube.normals)
    with pytest.raises(ValueError):
        MeshTemplate(cube.vertices, cube.triangles, cube.uv[:4], cube.normals)
    with pytest.raises(ValueError):
        MeshTemplate([], [], [], [])


def test_empty_layer_yields_empty_mesh():
    mesh = LayerMeshBuilder().build(_layer_with([]), 3)
    assert mesh.height == 3
    assert mesh.is_empty
    assert mesh.triangle_count == 0
    assert mesh.vertex_count == 0
    assert mesh.cell_count == 0


def test_single_cell_cube_placement():
    mesh = LayerMeshBuilder().build(_layer_with([(2, 1)]), 5)
    assert len(mesh) == 1
    batch = mesh.batches[0]
    assert batch.vertex_count == 24
    assert batch.triangle_count == 12
    assert np.allclose(batch.vertices.min(axis=0), (2, 5, 1))
    assert np.allclose(batch.vertices.max(axis=0), (3, 6, 2))
    assert mesh.cells.tolist() == [[2, 1]]


def test_height_defaults_to_layer_index():
    field = VoxelField(4, 3, 4)
    field.layer(0).set_alive(0, 0)
    mesh = LayerMeshBuilder().build(field.layer(0))
    assert mesh.height == 0


def test_indices_offset_per_cell():
    cells = [(0, 0), (3, 0), (5, 5)]
    mesh = LayerMeshBuilder().build(_layer_with(cells), 0)
    batch = mesh.batches[0]
    assert batch.vertex_count == 24 * len(cells)
    assert batch.triangles.min() == 0
    assert batch.triangles.max() == batch.vertex_count - 1
    second = batch.triangles[36:72]
    assert second.min() == 24 and second.max() == 47, "Second cube indexes its own vertices"


def test_split_into_batches():
    cells = [(x, 0) for x in range(5)]
    builder = LayerMeshBuilder(max_vertices=48)
    mesh = builder.build(_layer_with(cells), 0)
    assert [b.vertex_count for b in mesh.batches] == [48, 48, 24]
    for b in mesh.batches:
        assert b.vertex_count <= 48
        assert b.triangles.max() < b.vertex_count
    assert mesh.triangle_count == 12 * 5
    assert mesh.cell_count == 5


def test_budget_exceeded_without_split():
    builder = LayerMeshBuilder(max_vertices=48, split=False)
    builder.build(_layer_with([(0, 0), (1, 0)]), 0)
    with pytest.raises(MeshBudgetExceeded):
        builder.build(_layer_with([(0, 0), (1, 0), (2, 0)]), 0)


def test_budget_smaller_than_one_cell():
    builder = LayerMeshBuilder(max_vertices=10)
    assert builder.build(_layer_with([]), 0).is_empty
    with pytest.raises(MeshBudgetExceeded):
        builder.build(_layer_with([(0, 0)]), 0)


def test_default_ceiling_splits_large_layers():
    field = VoxelField(64, 1, 64)
    field.layer(0).write(np.ones((64, 64), dtype=bool))
    mesh = LayerMeshBuilder().build(field.layer(0), 0)
    assert all(b.vertex_count <= MAX_VERTICES for b in mesh.batches)
    assert mesh.cell_count == 64 * 64
    assert mesh.vertex_count == 64 * 64 * 24


def test_calls_are_independent():
    builder = LayerMeshBuilder()
    layer = _layer_with([(1, 1), (4, 2)])
    first = builder.build(layer, 2)
    builder.build(_layer_with([(0, 0)]), 7)
    again = builder.build(layer, 2)
    for a, b in zip(first.batches, again.batches):
        assert np.array_equal(a.vertices, b.vertices)
        assert np.array_equal(a.triangles, b.triangles)


def test_mesh_buffers_are_read_only():
    mesh = LayerMeshBuilder().build(_layer_with([(0, 0)]), 0)
    with pytest.raises(ValueError):
        mesh.batches[0].vertices[0, 0] = 99.0
    with pytest.raises(ValueError):
        mesh.cells[0, 0] = 3


if __name__ == "__main__":
    print("\n=== Testing Mesh Generation ===\n")

    test_unit_cube_template()
    test_unit_cube_faces_point_outwards()
    test_template_validation()
    test_empty_layer_yields_empty_mesh()
    test_single_cell_cube_placement()
    test_height_defaults_to_layer_index()
    test_indices_offset_per_cell()
    test_split_into_batches()
    test_budget_exceeded_without_split()
    test_budget_smaller_than_one_cell()
    test_default_ceiling_splits_large_layers()
    test_calls_are_independent()
    test_mesh_buffers_are_read_only()

    print("\n✓ All tests passed!\n")
