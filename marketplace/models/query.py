"""
Query Models
============
Filter predicates, sorting and query options shared by every repository.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional, Sequence, Union


class FilterOperator(str, Enum):
    """Predicate operators understood by the filter compiler."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    LIKE = "like"
    ILIKE = "ilike"  # case-insensitive LIKE
    IN = "in"
    IS = "is"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Column names are plain strings or members of an entity column enum
Column = Union[str, Enum]


def column_name(column: Column) -> str:
    """Resolve a column enum member or string to the backend column name."""
    if isinstance(column, Enum):
        return str(column.value)
    return column


@dataclass(frozen=True)
class Filter:
    """
    A single predicate narrowing a query.

    Attributes:
        column: Column name or entity column enum member
        operator: Comparison to apply
        value: Operand; a sequence for ``in``, None/True/False for ``is``
    """

    column: Column
    operator: FilterOperator
    value: Any = None

    @property
    def column_name(self) -> str:
        return column_name(self.column)

    @classmethod
    def eq(cls, column: Column, value: Any) -> "Filter":
        return cls(column, FilterOperator.EQ, value)

    @classmethod
    def neq(cls, column: Column, value: Any) -> "Filter":
        return cls(column, FilterOperator.NEQ, value)

    @classmethod
    def gt(cls, column: Column, value: Any) -> "Filter":
        return cls(column, FilterOperator.GT, value)

    @classmethod
    def gte(cls, column: Column, value: Any) -> "Filter":
        return cls(column, FilterOperator.GTE, value)

    @classmethod
    def lt(cls, column: Column, value: Any) -> "Filter":
        return cls(column, FilterOperator.LT, value)

    @classmethod
    def lte(cls, column: Column, value: Any) -> "Filter":
        return cls(column, FilterOperator.LTE, value)

    @classmethod
    def like(cls, column: Column, pattern: str) -> "Filter":
        return cls(column, FilterOperator.LIKE, pattern)

    @classmethod
    def ilike(cls, column: Column, pattern: str) -> "Filter":
        return cls(column, FilterOperator.ILIKE, pattern)

    @classmethod
    def in_(cls, column: Column, values: Sequence[Any]) -> "Filter":
        return cls(column, FilterOperator.IN, list(values))

    @classmethod
    def is_(cls, column: Column, value: Optional[bool]) -> "Filter":
        return cls(column, FilterOperator.IS, value)

    @classmethod
    def is_null(cls, column: Column) -> "Filter":
        return cls(column, FilterOperator.IS, None)


@dataclass(frozen=True)
class OrderBy:
    """Single-column sort."""

    column: Column
    ascending: bool = True

    @property
    def column_name(self) -> str:
        return column_name(self.column)


@dataclass
class QueryOptions:
    """
    Options for list queries.

    Attributes:
        select: Projection; the repository default when None
        filters: Predicates applied in order (implicit AND)
        order_by: Optional sort
        limit: Maximum rows
        offset: Rows to skip; paired with ``limit`` (10 when unset)
        single: Collapse the result to exactly one row
    """

    select: Optional[str] = None
    filters: List[Filter] = field(default_factory=list)
    order_by: Optional[OrderBy] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    single: bool = False

    def with_filters(self, *filters: Filter) -> "QueryOptions":
        """Copy with ``filters`` placed before the existing ones."""
        return replace(self, filters=[*filters, *self.filters])

    def with_page(self, limit: int, offset: int) -> "QueryOptions":
        return replace(self, limit=limit, offset=offset)
