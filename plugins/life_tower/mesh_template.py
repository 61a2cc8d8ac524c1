"""
Mesh Template - Unit Cube Prototype for Alive Cells

A template is loaded once and shared read-only by every builder call.
Source geometry is usually centred on the origin (like a stock engine
cube spanning [-0.5, 0.5]^3); the template shifts it by `offset` so a
cell placed at integer (x, y, z) occupies [x, x+1] x [y, y+1] x [z, z+1].
"""

import numpy as np

# (normal, u, v) per face with u x v == normal, so (0, 1, 2) and (0, 2, 3)
# wind counter-clockwise seen from outside the cube.
_CUBE_FACES = (
    ((1, 0, 0), (0, 1, 0), (0, 0, 1)),
    ((-1, 0, 0), (0, 0, 1), (0, 1, 0)),
    ((0, 1, 0), (0, 0, 1), (1, 0, 0)),
    ((0, -1, 0), (1, 0, 0), (0, 0, 1)),
    ((0, 0, 1), (1, 0, 0), (0, 1, 0)),
    ((0, 0, -1), (0, 1, 0), (1, 0, 0)),
)

_FACE_UV = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))


def _frozen(array, dtype, shape_tail=None):
    arr = np.array(array, dtype=dtype)
    if shape_tail is not None and (arr.ndim != 2 or arr.shape[1] != shape_tail):
        raise ValueError(f"expected an (N, {shape_tail}) array, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


class MeshTemplate:
    """Read-only vertex/index/UV/normal buffers of one cell's geometry."""

    def __init__(self, vertices, triangles, uv, normals, offset=(0.5, 0.5, 0.5)):
        """
        Args:
            vertices: (N, 3) positions of the source mesh
            triangles: flat index list, three indices per triangle
            uv: (N, 2) texture coordinates
            normals: (N, 3) vertex normals
            offset: translation applied to the source positions
        """
        verts = np.array(vertices, dtype=np.float32)
        if verts.ndim != 2 or verts.shape[1] != 3 or len(verts) == 0:
            raise ValueError(f"vertices must be a non-empty (N, 3) array, got shape {verts.shape}")
        verts = verts + np.asarray(offset, dtype=np.float32)

        self.vertices = _frozen(verts, np.float32, 3)
        self.triangles = _frozen(np.asarray(triangles).reshape(-1), np.int32)
        self.uv = _frozen(uv, np.float32, 2)
        self.normals = _frozen(normals, np.float32, 3)

        n = len(self.vertices)
        if len(self.triangles) % 3:
            raise ValueError(f"triangle index count {len(self.triangles)} is not a multiple of 3")
        if len(self.triangles) and (self.triangles.min() < 0 or self.triangles.max() >= n):
            raise ValueError(f"triangle indices must lie in [0, {n})")
        if len(self.uv) != n or len(self.normals) != n:
            raise ValueError(
                f"uv ({len(self.uv)}) and normals ({len(self.normals)}) "
                f"must match the vertex count ({n})"
            )

    def __repr__(self):
        return f"MeshTemplate({self.vertex_count} vertices, {self.triangle_count} triangles)"

    @property
    def vertex_count(self):
        return len(self.vertices)

    @property
    def triangle_count(self):
        return len(self.triangles) // 3

    @property
    def bounds(self):
        """(min_xyz, max_xyz) of the offset geometry."""
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    @classmethod
    def unit_cube(cls):
        """24-vertex cube (four per face, flat normals) filling [0, 1]^3."""
        vertices, normals, uv, triangles = [], [], [], []
        for normal, u, v in _CUBE_FACES:
            n, u, v = (np.array(a, dtype=np.float32) for a in (normal, u, v))
            base = len(vertices)
            for su, sv in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
                vertices.append(0.5 * (n + su * u + sv * v))
                normals.append(n)
            uv.extend(_FACE_UV)
            triangles.extend((base, base + 1, base + 2, base, base + 2, base + 3))
        return cls(vertices, triangles, uv, normals)
