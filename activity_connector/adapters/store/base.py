"""Activity store interfaces.

Services depend on this abstraction rather than on the Redis client, so the
degrade-on-error policy is decided once, at the store boundary: every
operation returns a StoreResult instead of raising on infrastructure faults.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Outcome of a single store operation.

    Attributes:
        value: Data returned by the store, or the caller-supplied fallback
            when the operation failed.
        degraded: True when the store could not be reached or errored.
        error: Short description of the failure (never sent to clients).
    """

    value: T
    degraded: bool = False
    error: str | None = None

    @classmethod
    def ok(cls, value: T) -> "StoreResult[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, fallback: T, error: str) -> "StoreResult[T]":
        return cls(value=fallback, degraded=True, error=error)


class AbstractActivityStore(ABC):
    """Key-value primitives needed by the verifier, limiter and reader."""

    @abstractmethod
    async def get_value(self, key: str) -> StoreResult[str | None]:
        """Read a string key (None when absent)."""
        raise NotImplementedError

    @abstractmethod
    async def increment(self, key: str) -> StoreResult[int | None]:
        """Atomically increment a counter and return the new value."""
        raise NotImplementedError

    @abstractmethod
    async def expire(self, key: str, seconds: int) -> StoreResult[bool]:
        """Set a time-to-live on a key."""
        raise NotImplementedError

    @abstractmethod
    async def ttl(self, key: str) -> StoreResult[int | None]:
        """Remaining time-to-live in seconds (negative when none/absent)."""
        raise NotImplementedError

    @abstractmethod
    async def hash_values(self, key: str) -> StoreResult[dict[str, str]]:
        """Return every field/value pair of a hash."""
        raise NotImplementedError

    @abstractmethod
    async def list_length(self, key: str) -> StoreResult[int]:
        """Return the length of a list (0 when absent)."""
        raise NotImplementedError

    @abstractmethod
    async def list_range(self, key: str, start: int, end: int) -> StoreResult[list[str]]:
        """Return list elements in the inclusive index range [start, end]."""
        raise NotImplementedError

    @abstractmethod
    async def list_ranges(
        self, keys: list[str], start: int, end: int
    ) -> StoreResult[list[list[str]]]:
        """Read the same inclusive range from several lists in one round trip."""
        raise NotImplementedError

    @abstractmethod
    async def ping(self) -> StoreResult[bool]:
        """Check store connectivity."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release client resources (no-op by default)."""
        return None
