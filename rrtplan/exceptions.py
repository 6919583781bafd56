"""
Exception types raised by rrtplan.

Planning failure is not an exception: planners return None from plan().
"""


class RrtPlanError(Exception):
    """Base class for all rrtplan errors."""


class GeometryConstructionError(RrtPlanError, ValueError):
    """An obstacle shape cannot be built from the given points."""


class ConfigError(RrtPlanError, ValueError):
    """A configuration file or mapping is missing keys or is malformed."""


class TreeInvariantError(RrtPlanError, RuntimeError):
    """The parent-linked tree is inconsistent (dangling parent id or cycle)."""
