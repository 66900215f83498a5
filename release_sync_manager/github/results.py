"""Explicit results of GitHub lookups that may legitimately find nothing."""

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    """The lookup found the requested record."""

    value: T


@dataclass(frozen=True)
class NotFound:
    """The requested record does not exist (or is not of the requested kind)."""

    reason: str


@dataclass(frozen=True)
class LookupFailed:
    """The lookup could not be completed."""

    reason: str
    error: Exception | None = None


LookupResult: TypeAlias = Found[T] | NotFound | LookupFailed
