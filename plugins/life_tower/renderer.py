"""
Tower Renderers - Presentation of the Accumulated Meshes

Every renderer implements one narrow call: accept the ordered mesh
sequence and a 4x4 placement transform, and present it. Renderers only
read the meshes; the buffers are read-only numpy arrays anyway.

- CapturingRenderer: records what was submitted (tests, headless hosts)
- SnapshotRenderer:  rasterises the tower to a PNG through a colormap
"""

from abc import ABC, abstractmethod
import itertools
import logging

import numpy as np
from PIL import Image

from .colormaps import apply_colormap, get_colormap

logger = logging.getLogger(__name__)


def placement_transform(translation=(0.0, 0.0, 0.0), scale=1.0):
    """Local-to-world matrix: uniform (or per-axis) scale, then translation."""
    m = np.diag(np.append(np.broadcast_to(np.asarray(scale, dtype=np.float64), (3,)), 1.0))
    m[:3, 3] = translation
    return m


def transform_points(transform, points):
    """Apply a 4x4 transform to an (N, 3) array of points."""
    pts = np.asarray(points, dtype=np.float64)
    homogeneous = np.hstack([pts, np.ones((len(pts), 1))])
    out = homogeneous @ np.asarray(transform, dtype=np.float64).T
    return out[:, :3] / out[:, 3:4]


def world_bounds(transform, shape):
    """World-space (min_xyz, max_xyz) of the whole growth volume.

    Args:
        transform: 4x4 local-to-world matrix
        shape: (width, height, depth) of the field
    """
    corners = np.array(list(itertools.product(*[(0, s) for s in shape])), dtype=np.float64)
    world = transform_points(transform, corners)
    return world.min(axis=0), world.max(axis=0)


class TowerRenderer(ABC):
    """Base class for presentation backends."""

    renderer_name = ""

    @abstractmethod
    def render(self, meshes, transform):
        """Present the meshes (ordered by height) with the given placement."""

    def close(self):
        """Release backend resources. Default: nothing to release."""


class CapturingRenderer(TowerRenderer):
    """Keeps every submission so callers can inspect what would be drawn."""

    renderer_name = "capture"

    def __init__(self):
        self.submissions = []

    def render(self, meshes, transform):
        self.submissions.append((tuple(meshes), np.array(transform, dtype=np.float64)))

    @property
    def last_meshes(self):
        return self.submissions[-1][0] if self.submissions else ()

    @property
    def last_transform(self):
        return self.submissions[-1][1] if self.submissions else None


class SnapshotRenderer(TowerRenderer):
    """Rasterises the tower in grid space and keeps the result as a PIL image.

    Views:
        plan:      top-down; each column coloured by its highest cell
        elevation: side view along +z; each (x, height) coloured by height
    """

    renderer_name = "snapshot"

    VIEWS = ("plan", "elevation")

    def __init__(self, shape, colormap="strata", view="plan", scale=4,
                 background=(12, 12, 16)):
        """
        Args:
            shape: (width, height, depth) of the field
            colormap: Name from colormaps.COLORMAPS
            view: "plan" or "elevation"
            scale: Integer pixel size of one cell
            background: RGB for empty pixels
        """
        if view not in self.VIEWS:
            raise ValueError(f"Unknown view: {view!r}. Choose from {self.VIEWS}")
        if int(scale) < 1:
            raise ValueError(f"scale must be >= 1, got {scale!r}")
        self.width, self.height, self.depth = shape
        self.lut = get_colormap(colormap)
        self.view = view
        self.scale = int(scale)
        self.background = background
        self.image = None

    def render(self, meshes, transform):
        """Rasterise the meshes in grid units, one cell per `scale` pixels.

        The image is a fixed plan or elevation of the grid, so `transform`
        is accepted for interface compatibility but does not change the
        picture. Use world_bounds() for the placed extent.
        """
        if self.view == "plan":
            levels = self._plan(meshes)
        else:
            levels = self._elevation(meshes)
        occupied = levels > 0
        values = (levels - 1) / max(self.height - 1, 1)
        rgb = apply_colormap(values, self.lut, mask=occupied, background=self.background)

        img = Image.fromarray(rgb)
        if self.scale > 1:
            img = img.resize((img.width * self.scale, img.height * self.scale),
                             Image.Resampling.NEAREST)
        self.image = img
        logger.debug("Snapshot (%s) of %d layer(s): %dx%d px",
                     self.view, len(meshes), img.width, img.height)
        return img

    def _plan(self, meshes):
        """(depth, width) array of highest height + 1, 0 where empty."""
        top = np.zeros((self.depth, self.width), dtype=np.float64)
        for mesh in meshes:
            if mesh.cell_count:
                xs, zs = mesh.cells[:, 0], mesh.cells[:, 1]
                np.maximum.at(top, (zs, xs), mesh.height + 1)
        return top

    def _elevation(self, meshes):
        """(height, width) array, ground row at the bottom of the image."""
        side = np.zeros((self.height, self.width), dtype=np.float64)
        for mesh in meshes:
            if mesh.cell_count:
                side[self.height - 1 - mesh.height, np.unique(mesh.cells[:, 0])] = mesh.height + 1
        return side

    def save(self, path):
        if self.image is None:
            raise RuntimeError("nothing rendered yet; call render() first")
        self.image.save(path)
        logger.info("Snapshot saved: %s", path)
        return path
