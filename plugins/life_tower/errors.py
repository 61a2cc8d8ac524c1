"""
Error Types for the Life Tower Core

Every failure the core can raise is local, synchronous and deterministic.
None of them are retried internally; they indicate a programming or
configuration mistake and propagate to the caller.
"""


class LifeTowerError(Exception):
    """Base class for all life tower errors."""


class InvalidDimension(LifeTowerError, ValueError):
    """A field was created with a non-positive width, height or depth."""


class OutOfRange(LifeTowerError, IndexError):
    """A coordinate or height index lies outside the allocated bounds."""


class DimensionMismatch(LifeTowerError, ValueError):
    """Two layers handed to the stepper differ in width or depth."""


class MeshBudgetExceeded(LifeTowerError, RuntimeError):
    """A single mesh batch would exceed the renderer vertex ceiling."""


class UseAfterDispose(LifeTowerError, RuntimeError):
    """A field (or a layer view of it) was used after dispose()."""


class LayerFrozen(LifeTowerError, RuntimeError):
    """A write targeted a layer that has already been produced."""
