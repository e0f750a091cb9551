from __future__ import annotations


class ArenaError(Exception):
    """Base class for errors raised by the arena engine."""


class InvalidConstructionError(ArenaError, ValueError):
    """An arena, body or sensor was given parameters it cannot exist with."""


class TypeMismatchError(ArenaError, TypeError):
    """An object lacks the capabilities required where it was inserted or attached."""


class DetachedError(ArenaError, RuntimeError):
    """A body or sensor was used before being placed in an arena."""
