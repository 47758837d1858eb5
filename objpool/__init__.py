"""objpool: reusable pool of expensively-constructed objects."""

from importlib.metadata import PackageNotFoundError, version

from objpool.errors import CapacityExceededError, ConfigurationError, ForeignObjectError, PoolError
from objpool.pool import Bound, Pool, PoolStats, Release

try:
    __version__ = version("objpool")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = [
    "__version__",
    "Bound",
    "CapacityExceededError",
    "ConfigurationError",
    "ForeignObjectError",
    "Pool",
    "PoolError",
    "PoolStats",
    "Release",
]
