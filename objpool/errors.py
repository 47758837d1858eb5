"""Exceptions raised by the object pool."""


class PoolError(Exception):
    """Base class for all pool errors."""


class ConfigurationError(PoolError, ValueError):
    """Pool bounds are invalid (e.g. minimum exceeds maximum)."""


class CapacityExceededError(PoolError):
    """A new instance is needed but the configured maximum is reached."""


class ForeignObjectError(PoolError, ValueError):
    """An instance was returned to a pool that never created it."""
