# delgraph/errors.py
"""
Exception taxonomy.

DegenerateGeometryError is recoverable: the insertion drivers skip the
offending point and carry on. Everything else signals a caller bug or a
broken invariant and is meant to abort construction.
"""
from __future__ import annotations


class DelgraphError(Exception):
    """Base class for every error raised by delgraph."""


class DegenerateGeometryError(DelgraphError, ArithmeticError):
    """Collinear triangle, coplanar tetrahedron, coincident points, parallel constructions."""


class TopologyError(DelgraphError, ValueError):
    """A derived structure was requested over nodes that are not fully connected."""


class StaleHandleError(TopologyError):
    """A node, edge, face or simplex handle refers to a removed structure."""


class UnsupportedOperationError(DelgraphError, NotImplementedError):
    """Operation deliberately disabled (arbitrary node removal from a triangulation)."""


class InvalidStateError(DelgraphError, RuntimeError):
    """Driver method called in the wrong stage (e.g. insert after finalize)."""
