"""
Result Envelopes
================
Every repository operation returns ``Ok`` or ``Err`` instead of raising.

Both variants expose ``data``, ``error`` and ``count`` so callers can branch
on ``result.error`` (or ``result.ok``); an ``Ok`` never carries an error and
an ``Err`` never carries data.
"""

import math
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar, Union

from marketplace.core.exceptions import RepositoryError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result. ``count`` is the backend total for list queries."""

    data: T
    count: Optional[int] = None

    @property
    def error(self) -> None:
        return None

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.data


@dataclass(frozen=True)
class Err:
    """Failed result wrapping the normalized error."""

    error: RepositoryError

    @property
    def data(self) -> None:
        return None

    @property
    def count(self) -> None:
        return None

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


RepositoryResult = Union[Ok[T], Err]
RepositoryListResult = Union[Ok[List[T]], Err]


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One page of rows plus the figures needed to render a pager."""

    data: List[T]
    count: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(cls, rows: List[T], count: int, page: int, page_size: int) -> "PaginatedResult[T]":
        return cls(
            data=rows,
            count=count,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(count / page_size) if page_size else 0,
        )

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1
