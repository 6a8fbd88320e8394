"""Failures raised by the prediction store."""

from __future__ import annotations


class PersistenceError(RuntimeError):
    """Base class for store failures; nothing was committed when one is raised."""


class ConstraintViolationError(PersistenceError):
    """A write was rejected by a table constraint."""


class StoreUnavailableError(PersistenceError):
    """The database could not be opened, was locked for too long, or is corrupt."""


__all__ = ["ConstraintViolationError", "PersistenceError", "StoreUnavailableError"]
