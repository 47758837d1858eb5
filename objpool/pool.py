"""Generic object pool.

A pool lends out instances produced by a caller-supplied factory and takes
them back for reuse. Instances are created eagerly up to ``minimum`` and
lazily afterwards, one per borrow that finds nothing idle. The pool never
destroys an instance; every instance it has created stays in its managed set
for the pool's lifetime.

Not thread-safe: a pool instance assumes a single owner.
"""

import logging
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from objpool.errors import CapacityExceededError, ConfigurationError, ForeignObjectError

if TYPE_CHECKING:
    from objpool.config import PoolConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Bound(str, Enum):
    """What the pool's ``maximum`` limits when generating a new instance.

    IDLE compares the idle collection's size to ``maximum``, so instances
    that are currently borrowed do not count against it. MANAGED compares the
    number of instances ever created, which makes ``maximum`` a hard cap.
    """

    IDLE = "idle"
    MANAGED = "managed"


@dataclass(frozen=True)
class PoolStats:
    """Point-in-time counters for a pool."""

    borrowed: int
    returned: int
    available: int
    managed: int
    minimum: int | None
    maximum: int | None
    bound: Bound

    @property
    def outstanding(self) -> int:
        """Managed instances not currently idle.

        Goes negative after a double release, since the idle collection then
        holds the same instance more than once.
        """
        return self.managed - self.available


class Release(Generic[T]):
    """Capability that hands one borrowed instance back to its pool.

    Calling it is equivalent to ``pool.return_object(obj)``. It does not
    remember whether it was already called, so calling it twice puts the
    instance in the idle collection twice.
    """

    __slots__ = ("_pool", "_obj")

    def __init__(self, pool: "Pool[T]", obj: T):
        self._pool = pool
        self._obj = obj

    @property
    def obj(self) -> T:
        return self._obj

    def __call__(self) -> None:
        self._pool.return_object(self._obj)

    def __repr__(self) -> str:
        return f"Release(obj={self._obj!r})"


class Pool(Generic[T]):
    """Bounded (or unbounded) pool of reusable instances of ``T``.

    Example:
        pool = Pool(make_connection, minimum=2, maximum=8)
        conn, release = pool.borrow()
        try:
            conn.send(b"ping")
        finally:
            release()
    """

    def __init__(
        self,
        factory: Callable[[], T],
        minimum: int | None = None,
        maximum: int | None = None,
        *,
        bound: Bound | str = Bound.IDLE,
    ):
        """Create a pool and pre-populate it with ``minimum`` instances.

        Args:
            factory: Zero-argument callable returning a new instance
            minimum: Number of instances created up front (None = none)
            maximum: Capacity limit used when generating (None = unbounded)
            bound: Which count ``maximum`` is checked against (see Bound)

        Raises:
            ConfigurationError: If a bound is negative or minimum exceeds maximum
        """
        if not callable(factory):
            raise ConfigurationError("factory must be callable")
        for name, value in (("minimum", minimum), ("maximum", maximum)):
            if value is not None and value < 0:
                raise ConfigurationError(f"{name} cannot be negative")
        if minimum is not None and maximum is not None and minimum > maximum:
            raise ConfigurationError("minimum cannot exceed maximum")
        try:
            bound = Bound(bound)
        except ValueError:
            raise ConfigurationError(f"unknown bound {bound!r} (expected 'idle' or 'managed')") from None

        self._factory = factory
        self._minimum = minimum
        self._maximum = maximum
        self._bound = bound

        self._idle: deque[T] = deque()
        # id(obj) -> obj; the stored reference keeps each id stable
        self._managed: dict[int, T] = {}

        self._borrowed_total = 0
        self._returned_total = 0

        if minimum:
            for _ in range(minimum):
                self._generate()
            logger.info(f"Pre-populated pool with {minimum} instance(s)")

    @classmethod
    def from_config(cls, factory: Callable[[], T], config: "PoolConfig") -> "Pool[T]":
        """Build a pool from a validated PoolConfig."""
        return cls(factory, minimum=config.minimum, maximum=config.maximum, bound=config.bound)

    @property
    def available_count(self) -> int:
        """Number of idle instances ready to be borrowed."""
        return len(self._idle)

    @property
    def managed_count(self) -> int:
        """Number of instances this pool has ever created."""
        return len(self._managed)

    @property
    def minimum(self) -> int | None:
        return self._minimum

    @property
    def maximum(self) -> int | None:
        return self._maximum

    @property
    def bound(self) -> Bound:
        return self._bound

    def owns(self, obj: object) -> bool:
        """Check whether ``obj`` (by identity) was created by this pool."""
        return self._managed.get(id(obj)) is obj

    def _at_capacity(self) -> bool:
        if self._maximum is None:
            return False
        if self._bound is Bound.MANAGED:
            return len(self._managed) >= self._maximum
        return len(self._idle) >= self._maximum

    def _generate(self) -> T:
        """Create one instance and add it to the idle collection.

        Raises:
            CapacityExceededError: If the bound has been reached (nothing is created)
        """
        if self._at_capacity():
            raise CapacityExceededError("cannot generate new object for full pool")

        obj = self._factory()
        self._idle.append(obj)
        self._managed[id(obj)] = obj
        logger.debug(f"Generated instance #{len(self._managed)} ({type(obj).__name__})")
        return obj

    def borrow(self) -> tuple[T, Release[T]]:
        """Take the oldest idle instance, generating one if none is idle.

        Returns:
            Tuple of (instance, release capability for that instance)

        Raises:
            CapacityExceededError: If nothing is idle and the bound forbids generating
        """
        if self.available_count <= 0:
            self._generate()

        obj = self._idle.popleft()
        self._borrowed_total += 1
        logger.debug(f"Borrowed instance, {self.available_count} idle remaining")
        return obj, Release(self, obj)

    def return_object(self, obj: T) -> None:
        """Put a borrowed instance back at the end of the idle collection.

        Raises:
            ForeignObjectError: If this pool did not create ``obj``
        """
        if not self.owns(obj):
            raise ForeignObjectError("pool does not manage this object")

        self._idle.append(obj)
        self._returned_total += 1
        logger.debug(f"Returned instance, {self.available_count} idle")

    @contextmanager
    def lease(self) -> Iterator[T]:
        """Borrow an instance for the duration of a ``with`` block.

        The instance is returned when the block exits, including on error.
        """
        obj, release = self.borrow()
        try:
            yield obj
        finally:
            release()

    def stats(self) -> PoolStats:
        return PoolStats(
            borrowed=self._borrowed_total,
            returned=self._returned_total,
            available=len(self._idle),
            managed=len(self._managed),
            minimum=self._minimum,
            maximum=self._maximum,
            bound=self._bound,
        )

    def __len__(self) -> int:
        return len(self._idle)

    def __repr__(self) -> str:
        return (
            f"Pool(available={len(self._idle)}, managed={len(self._managed)}, "
            f"minimum={self._minimum}, maximum={self._maximum}, bound={self._bound.value})"
        )
