"""
Tagged result type used at every remote-call boundary.

The remote service answers fallible calls with either a success value or an error text.
These are decoded into `Ok` / `Err` once (in the actor), so callers only ever match on the type.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: str


Result = Ok[T] | Err
