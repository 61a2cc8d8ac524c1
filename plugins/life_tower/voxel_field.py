"""
Voxel Field - Dense 3D Storage of Cell Flags

The field is a single contiguous uint8 flag store of size
width x height x depth, addressed as a stack of 2D layers. Indexing is
row-major with x varying fastest, then z, then y:

    index = x + width * (z + depth * y)

Height encodes simulated time: layer y holds generation y. Layers are
produced strictly in increasing y order and become read-only once the
field marks them produced.
"""

import enum
import logging

import numpy as np

from .errors import InvalidDimension, LayerFrozen, OutOfRange, UseAfterDispose

logger = logging.getLogger(__name__)


class LifeFlags(enum.IntFlag):
    """Per-cell flag bits. Only ALIVE is used by the core."""

    NONE = 0
    ALIVE = 1


_ALIVE = np.uint8(LifeFlags.ALIVE)


def _is_index(value):
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


class VoxelField:
    """Owns the flag storage for a width x height x depth growth volume.

    Usable as a context manager; storage is released on exit, including
    when the body raises.
    """

    def __init__(self, width, height, depth):
        """
        Args:
            width: Cells along x
            height: Height capacity (number of layers / generations)
            depth: Cells along z
        """
        for name, value in (("width", width), ("height", height), ("depth", depth)):
            if int(value) != value or value <= 0:
                raise InvalidDimension(f"{name} must be a positive integer, got {value!r}")

        self.width = int(width)
        self.height = int(height)
        self.depth = int(depth)
        self._storage = np.zeros(self.width * self.height * self.depth, dtype=np.uint8)
        self._produced = 0

        logger.debug("Allocated %dx%dx%d voxel field", self.width, self.height, self.depth)

    def __repr__(self):
        state = "disposed" if self.disposed else f"produced={self._produced}"
        return f"VoxelField({self.width}x{self.height}x{self.depth}, {state})"

    def __enter__(self):
        self._check_alive()
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self.disposed:
            self.dispose()
        return False

    @property
    def shape(self):
        """(width, height, depth)"""
        return (self.width, self.height, self.depth)

    @property
    def disposed(self):
        return self._storage is None

    @property
    def produced_height(self):
        """Number of layers produced so far; layers below this are frozen."""
        return self._produced

    @property
    def volume(self):
        """Read-only (height, depth, width) view of the whole flag store."""
        view = self._check_alive().reshape(self.height, self.depth, self.width)
        view.flags.writeable = False
        return view

    def index(self, x, y, z):
        """Flat storage index of cell (x, y, z)."""
        self._check_bounds(x, y, z)
        return x + self.width * (z + self.depth * y)

    def layer(self, y):
        """Return the Layer view at height y."""
        self._check_alive()
        if not isinstance(y, (int, np.integer)) or not 0 <= y < self.height:
            raise OutOfRange(f"layer {y!r} outside [0, {self.height})")
        return Layer(self, int(y))

    def is_frozen(self, y):
        return y < self._produced

    def mark_produced(self, y):
        """Freeze layer y. Layers must be produced strictly in order."""
        self._check_alive()
        if y != self._produced:
            raise OutOfRange(
                f"layer {y} cannot be produced next; expected layer {self._produced}"
            )
        if y >= self.height:
            raise OutOfRange(f"layer {y} outside [0, {self.height})")
        self._produced += 1

    def dispose(self):
        """Release the flag storage. Any later access is an error."""
        if self.disposed:
            raise UseAfterDispose("voxel field already disposed")
        self._storage = None
        logger.info("Voxel field %dx%dx%d disposed", self.width, self.height, self.depth)

    def _check_alive(self):
        if self._storage is None:
            raise UseAfterDispose("voxel field used after dispose")
        return self._storage

    def _check_bounds(self, x, y, z):
        if not all(_is_index(v) for v in (x, y, z)) or not (
                0 <= x < self.width and 0 <= y < self.height and 0 <= z < self.depth):
            raise OutOfRange(
                f"cell ({x}, {y}, {z}) outside field {self.width}x{self.height}x{self.depth}"
            )

    def _layer_slice(self, y):
        storage = self._check_alive()
        start = y * self.width * self.depth
        return storage[start:start + self.width * self.depth].reshape(self.depth, self.width)


class Layer:
    """Non-owning view of one height slice of a VoxelField.

    The 2D slice is addressed as (x, z) with x in [0, width) and z in
    [0, depth). The view is only valid while its field is alive.
    """

    def __init__(self, field, y):
        self.field = field
        self.y = y

    def __repr__(self):
        return f"Layer(y={self.y}, {self.width}x{self.depth})"

    @property
    def width(self):
        return self.field.width

    @property
    def depth(self):
        return self.field.depth

    @property
    def shape(self):
        """(depth, width), the shape of mask arrays for this layer."""
        return (self.field.depth, self.field.width)

    @property
    def frozen(self):
        return self.field.is_frozen(self.y)

    @property
    def cells(self):
        """Read-only (depth, width) view of the raw flag bytes."""
        view = self.field._layer_slice(self.y)
        view.flags.writeable = False
        return view

    def _flags(self):
        return self.field._layer_slice(self.y)

    def _writable(self):
        flags = self._flags()
        if self.frozen:
            raise LayerFrozen(f"layer {self.y} has already been produced")
        return flags

    def _check_xz(self, x, z):
        if not (_is_index(x) and _is_index(z)) or not (0 <= x < self.width and 0 <= z < self.depth):
            raise OutOfRange(
                f"cell ({x}, {z}) outside layer {self.width}x{self.depth}"
            )

    def add_flag(self, x, z, flag):
        flags = self._writable()
        self._check_xz(x, z)
        flags[z, x] |= np.uint8(flag)

    def has_flag(self, x, z, flag):
        flags = self._flags()
        self._check_xz(x, z)
        return bool(flags[z, x] & np.uint8(flag))

    def set_alive(self, *coords):
        """Set the ALIVE flag at (x, z), or at (x, y, z) with layer-local y == 0."""
        if len(coords) == 2:
            x, z = coords
        elif len(coords) == 3:
            x, y, z = coords
            if not _is_index(y) or y != 0:
                raise OutOfRange(f"layer-local y must be 0, got {y}")
        else:
            raise TypeError("set_alive() takes (x, z) or (x, y, z)")
        self.add_flag(x, z, LifeFlags.ALIVE)

    def set_alive_index(self, index):
        """Set ALIVE by flat in-layer index (x + z * width)."""
        flags = self._writable()
        if not _is_index(index) or not 0 <= index < flags.size:
            raise OutOfRange(f"index {index} outside [0, {flags.size})")
        flags.reshape(-1)[index] |= _ALIVE

    def is_alive(self, x, z):
        return self.has_flag(x, z, LifeFlags.ALIVE)

    def alive_mask(self):
        """Return a (depth, width) bool copy of the ALIVE bits."""
        return (self._flags() & _ALIVE) != 0

    def alive_cells(self):
        """List of (x, z) for every alive cell, in storage order."""
        zs, xs = np.nonzero(self.alive_mask())
        return [(int(x), int(z)) for z, x in zip(zs, xs)]

    @property
    def alive_count(self):
        return int(np.count_nonzero(self._flags() & _ALIVE))

    def write(self, mask):
        """Replace the ALIVE bits of this layer with a (depth, width) bool mask.

        Other flag bits are preserved.
        """
        flags = self._writable()
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != flags.shape:
            raise OutOfRange(f"mask shape {mask.shape} does not match layer {flags.shape}")
        flags &= ~_ALIVE
        flags |= mask.astype(np.uint8) * _ALIVE

    def clear(self):
        self._writable()[:] = 0
