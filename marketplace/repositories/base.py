"""
Base Repository
===============
Generic CRUD/query engine over one Supabase table.

Entity repositories inherit from ``BaseRepository`` and add named
projections and domain helpers. Every public coroutine returns an ``Ok`` or
``Err`` envelope; backend and runtime exceptions are converted in ``_run``
and never escape.
"""

import time
from datetime import date, datetime
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Sequence,
    Type,
    TypeVar,
    Union,
)
from uuid import UUID

from postgrest.exceptions import APIError
from pydantic import BaseModel
from supabase import AsyncClient

from marketplace.core.exceptions import (
    InvalidFilterError,
    InvalidPaginationError,
    NotFoundError,
    QueryError,
    RepositoryError,
    UnexpectedError,
)
from marketplace.core.logging import app_logger, get_logger
from marketplace.models.query import Column, Filter, FilterOperator, OrderBy, QueryOptions, column_name
from marketplace.repositories.results import (
    Err,
    Ok,
    PaginatedResult,
    RepositoryListResult,
    RepositoryResult,
)

logger = get_logger(__name__)

T = TypeVar("T")

# PostgREST: a .single() request matched zero (or several) rows
SINGLE_ROW_NOT_FOUND = "PGRST116"

# Rows fetched when an offset is given without a limit
DEFAULT_RANGE_SIZE = 10

# Reserved by the PostgREST `or` filter syntax
SEARCH_RESERVED = frozenset(',()"\\')

EntityId = Union[str, UUID]
Payload = Union[Mapping[str, Any], BaseModel]


def to_backend_value(value: Any) -> Any:
    """Convert enums, UUIDs and datetimes to the JSON values PostgREST expects."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Mapping):
        return {key: to_backend_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_backend_value(item) for item in value]
    return value


def projection(columns: str) -> str:
    """Collapse a multi-line select string to a single line."""
    return " ".join(columns.split())


class BaseRepository(Generic[T]):
    """
    Type-parameterized CRUD façade over one backend table.

    Args:
        client: Async Supabase client, one per request context
        table_name: Backend table
        default_select: Projection used when a call does not name one
        model: Pydantic read model rows are parsed into (raw dicts if None)
        columns: Column enum; filters and sorts on other columns are rejected
        page_size: Default ``limit`` for list helpers
        max_page_size: Upper bound applied to list limits and page sizes
    """

    def __init__(
        self,
        client: AsyncClient,
        table_name: str,
        default_select: str = "*",
        model: Optional[Type[T]] = None,
        columns: Optional[Type[Enum]] = None,
        page_size: int = 20,
        max_page_size: Optional[int] = None,
    ):
        self.client = client
        self.table_name = table_name
        self.default_select = projection(default_select)
        self.model = model
        self.columns = columns
        self.page_size = page_size
        self.max_page_size = max_page_size
        self._known_columns = {str(member.value) for member in columns} if columns else None

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _table(self):
        return self.client.table(self.table_name)

    def _parse(self, row: Optional[Dict[str, Any]]) -> T:
        if row is None or self.model is None:
            return row
        return self.model.model_validate(row)

    def _parse_many(self, rows: Optional[List[Dict[str, Any]]]) -> List[T]:
        return [self._parse(row) for row in rows or []]

    def _payload(self, data: Payload) -> Dict[str, Any]:
        if isinstance(data, BaseModel):
            return data.model_dump(mode="json", exclude_unset=True)
        return {key: to_backend_value(value) for key, value in dict(data).items()}

    def _not_found(self, identifier: Any = None) -> NotFoundError:
        if identifier is None:
            return NotFoundError(f"No matching row in '{self.table_name}'", table=self.table_name)
        return NotFoundError(
            f"No row in '{self.table_name}' with id '{identifier}'",
            table=self.table_name,
        )

    def _translate_api_error(self, error: APIError) -> RepositoryError:
        message = error.message or str(error)
        if error.code == SINGLE_ROW_NOT_FOUND:
            return NotFoundError(message, table=self.table_name, details={
                "table": self.table_name,
                "backend_code": error.code,
                "details": error.details,
            })
        return QueryError(
            message,
            table=self.table_name,
            backend_code=error.code,
            hint=error.hint,
            details={
                "table": self.table_name,
                "backend_code": error.code,
                "details": error.details,
            },
        )

    async def _run(
        self,
        operation: str,
        action: Callable[[], Awaitable[RepositoryResult]],
    ) -> RepositoryResult:
        """Execute ``action`` and normalize any failure into ``Err``."""
        start = time.perf_counter()
        try:
            result = await action()
        except APIError as e:
            result = Err(self._translate_api_error(e))
        except RepositoryError as e:
            result = Err(e)
        except Exception as e:
            app_logger.log_error(logger, e, context={"operation": operation, "table": self.table_name})
            result = Err(UnexpectedError(str(e) or e.__class__.__name__))

        app_logger.log_database_operation(
            logger,
            operation,
            self.table_name,
            success=result.ok,
            execution_time=time.perf_counter() - start,
            error=result.error,
        )
        return result

    def _check_column(self, column: Column) -> str:
        name = column_name(column)
        # Embedded-resource columns ("customer.full_name") are not checked
        if self._known_columns is not None and "." not in name and name not in self._known_columns:
            raise InvalidFilterError(
                f"Unknown column '{name}' for table '{self.table_name}'",
                column=name,
            )
        return name

    def _clamp(self, limit: int) -> int:
        if self.max_page_size is not None:
            return min(limit, self.max_page_size)
        return limit

    async def _reselect(self, ids: Sequence[Any]) -> List[Dict[str, Any]]:
        """Fetch rows by id in the default projection, preserving ``ids`` order."""
        response = await self._table().select(self.default_select).in_("id", list(ids)).execute()
        by_id = {str(row.get("id")): row for row in response.data or []}
        return [by_id[str(row_id)] for row_id in ids if str(row_id) in by_id]

    async def _returned_rows(self, rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """Rows from a write, re-selected when the default projection is narrower than ``*``."""
        rows = rows or []
        if not rows or self.default_select == "*":
            return rows
        return await self._reselect([row["id"] for row in rows])

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_by_id(self, id: EntityId, select: Optional[str] = None) -> RepositoryResult[T]:
        """Find a single record by ID."""

        async def action():
            response = await (
                self._table()
                .select(projection(select) if select else self.default_select)
                .eq("id", str(id))
                .single()
                .execute()
            )
            if response is None or response.data is None:
                return Err(self._not_found(id))
            return Ok(self._parse(response.data))

        return await self._run("find_by_id", action)

    async def find_one_by(self, column: Column, value: Any, select: Optional[str] = None) -> RepositoryResult[T]:
        """Find the single record whose ``column`` equals ``value``."""

        async def action():
            response = await (
                self._table()
                .select(projection(select) if select else self.default_select)
                .eq(self._check_column(column), to_backend_value(value))
                .single()
                .execute()
            )
            if response is None or response.data is None:
                return Err(self._not_found())
            return Ok(self._parse(response.data))

        return await self._run("find_one_by", action)

    async def find_by(
        self,
        column: Column,
        value: Any,
        options: Optional[QueryOptions] = None,
    ) -> RepositoryListResult[T]:
        """Find records matching a column value."""
        options = options or QueryOptions()
        return await self.find_all(options.with_filters(Filter.eq(column, value)))

    async def find_all(self, options: Optional[QueryOptions] = None) -> RepositoryListResult[T]:
        """
        Find all records with optional filtering.

        The query is built as projection -> filters -> sort -> limit ->
        offset range -> optional single-row collapse.
        """
        options = options or QueryOptions()

        async def action():
            select = projection(options.select) if options.select else self.default_select
            query = self._table().select(select, count="exact")
            query = self.apply_filters(query, options.filters)

            if options.order_by is not None:
                query = query.order(
                    self._check_column(options.order_by.column),
                    desc=not options.order_by.ascending,
                )

            if options.limit is not None:
                query = query.limit(options.limit)

            if options.offset is not None:
                size = options.limit if options.limit is not None else DEFAULT_RANGE_SIZE
                query = query.range(options.offset, options.offset + size - 1)

            if options.single:
                response = await query.single().execute()
                if response is None or response.data is None:
                    return Err(self._not_found())
                return Ok([self._parse(response.data)], count=1)

            response = await query.execute()
            return Ok(self._parse_many(response.data), count=response.count)

        return await self._run("find_all", action)

    async def find_paginated(
        self,
        page: int,
        page_size: int,
        options: Optional[QueryOptions] = None,
    ) -> RepositoryResult[PaginatedResult[T]]:
        """Find records with pagination (pages start at 1)."""
        if page < 1 or page_size < 1:
            return Err(InvalidPaginationError(
                f"page and page_size must be positive (got page={page}, page_size={page_size})",
                details={"page": page, "page_size": page_size},
            ))

        page_size = self._clamp(page_size)
        options = options or QueryOptions()
        result = await self.find_all(options.with_page(limit=page_size, offset=(page - 1) * page_size))
        return self._to_page(result, page, page_size)

    @staticmethod
    def _to_page(result: RepositoryListResult, page: int, page_size: int) -> RepositoryResult[PaginatedResult]:
        if result.error is not None:
            return result
        total = result.count if result.count is not None else len(result.data)
        return Ok(PaginatedResult.build(result.data, total, page, page_size))

    async def count(self, filters: Optional[Sequence[Filter]] = None) -> RepositoryResult[int]:
        """Count records matching optional filters (head request, no rows)."""

        async def action():
            query = self._table().select("*", count="exact", head=True)
            query = self.apply_filters(query, filters or [])
            response = await query.execute()
            return Ok(response.count or 0)

        return await self._run("count", action)

    async def exists(self, id: EntityId) -> RepositoryResult[bool]:
        """Check if a record exists."""

        async def action():
            response = await (
                self._table()
                .select("id", count="exact", head=True)
                .eq("id", str(id))
                .execute()
            )
            return Ok((response.count or 0) > 0)

        return await self._run("exists", action)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, data: Payload) -> RepositoryResult[T]:
        """Create a new record and return it with generated fields."""

        async def action():
            response = await self._table().insert(self._payload(data)).execute()
            rows = await self._returned_rows(response.data)
            if not rows:
                return Err(QueryError(f"Insert into '{self.table_name}' returned no rows", table=self.table_name))
            return Ok(self._parse(rows[0]))

        return await self._run("create", action)

    async def create_many(self, items: Sequence[Payload]) -> RepositoryListResult[T]:
        """Create multiple records in one request."""

        async def action():
            payload = [self._payload(item) for item in items]
            if not payload:
                return Ok([])
            response = await self._table().insert(payload).execute()
            rows = await self._returned_rows(response.data)
            return Ok(self._parse_many(rows))

        return await self._run("create_many", action)

    async def update(self, id: EntityId, data: Payload) -> RepositoryResult[T]:
        """Partially update a record by ID and return the updated row."""

        async def action():
            response = await self._table().update(self._payload(data)).eq("id", str(id)).execute()
            rows = await self._returned_rows(response.data)
            if not rows:
                return Err(self._not_found(id))
            return Ok(self._parse(rows[0]))

        return await self._run("update", action)

    async def update_where(self, column: Column, value: Any, data: Payload) -> RepositoryListResult[T]:
        """Update every record whose ``column`` equals ``value``."""

        async def action():
            response = await (
                self._table()
                .update(self._payload(data))
                .eq(self._check_column(column), to_backend_value(value))
                .execute()
            )
            rows = await self._returned_rows(response.data)
            return Ok(self._parse_many(rows))

        return await self._run("update_where", action)

    async def upsert(self, data: Payload, on_conflict: Optional[str] = None) -> RepositoryResult[T]:
        """Insert a record, or update it when ``on_conflict`` (default: primary key) collides."""

        async def action():
            kwargs = {"on_conflict": on_conflict} if on_conflict else {}
            response = await self._table().upsert(self._payload(data), **kwargs).execute()
            rows = await self._returned_rows(response.data)
            if not rows:
                return Err(QueryError(f"Upsert into '{self.table_name}' returned no rows", table=self.table_name))
            return Ok(self._parse(rows[0]))

        return await self._run("upsert", action)

    async def delete(self, id: EntityId) -> RepositoryResult[bool]:
        """Hard-delete a record by ID."""

        async def action():
            await self._table().delete().eq("id", str(id)).execute()
            return Ok(True)

        return await self._run("delete", action)

    async def delete_where(self, column: Column, value: Any) -> RepositoryResult[bool]:
        """Hard-delete every record whose ``column`` equals ``value``."""

        async def action():
            await self._table().delete().eq(self._check_column(column), to_backend_value(value)).execute()
            return Ok(True)

        return await self._run("delete_where", action)

    # ------------------------------------------------------------------
    # List composition helpers for entity repositories
    # ------------------------------------------------------------------

    @staticmethod
    def status_filter(column: Column, status: Any) -> Filter:
        """Equality for one status, membership for several."""
        if isinstance(status, (list, tuple, set, frozenset)):
            return Filter.in_(column, list(status))
        return Filter.eq(column, status)

    @staticmethod
    def sort_option(choices: Type[Enum], value: Any, name: str = "sort") -> Enum:
        """
        Coerce a caller-supplied sort key or direction to its enum.

        Raises:
            InvalidFilterError: ``value`` is not one of ``choices``
        """
        try:
            return choices(value)
        except ValueError:
            allowed = ", ".join(str(member.value) for member in choices)
            raise InvalidFilterError(f"Unknown {name} '{value}'. Must be one of: {allowed}", column=name)

    @staticmethod
    def search_clause(columns: Sequence[Column], term: str) -> Optional[str]:
        """
        PostgREST ``or`` clause matching ``term`` case-insensitively in any column.

        Characters with meaning in the ``or`` syntax are dropped from the term.
        """
        cleaned = "".join(ch for ch in (term or "") if ch not in SEARCH_RESERVED).strip()
        if not cleaned:
            return None
        return ",".join(f"{column_name(column)}.ilike.%{cleaned}%" for column in columns)

    async def _list(
        self,
        operation: str,
        select: str,
        filters: Sequence[Filter],
        sorts: Sequence[OrderBy],
        limit: int,
        offset: int = 0,
        search: Optional[str] = None,
    ) -> RepositoryListResult[T]:
        """Filters -> optional search -> sorts -> range, with an exact count."""
        if limit < 1 or offset < 0:
            return Err(InvalidPaginationError(
                f"limit must be positive and offset non-negative (got limit={limit}, offset={offset})",
                details={"limit": limit, "offset": offset},
            ))
        limit = self._clamp(limit)

        async def action():
            query = self._table().select(projection(select), count="exact")
            query = self.apply_filters(query, filters)
            if search:
                query = query.or_(search)
            for sort in sorts:
                query = query.order(self._check_column(sort.column), desc=not sort.ascending)
            query = query.range(offset, offset + limit - 1)
            response = await query.execute()
            return Ok(self._parse_many(response.data), count=response.count)

        return await self._run(operation, action)

    async def _fetch_rows(self, operation: str, select: str, filters: Sequence[Filter]) -> RepositoryListResult[Dict[str, Any]]:
        """Raw rows in a narrow projection, for in-memory aggregates."""

        async def action():
            query = self.apply_filters(self._table().select(projection(select)), filters)
            response = await query.execute()
            return Ok(response.data or [])

        return await self._run(operation, action)

    # ------------------------------------------------------------------
    # Filter compiler
    # ------------------------------------------------------------------

    def apply_filters(self, query, filters: Sequence[Filter]):
        """
        Narrow ``query`` by each filter in turn (implicit AND).

        Raises:
            InvalidFilterError: Unknown column or operator; ``_run`` turns
                this into an ``Err`` before any request is sent
        """
        for item in filters:
            column = self._check_column(item.column)
            value = to_backend_value(item.value)

            try:
                operator = FilterOperator(item.operator)
            except ValueError:
                raise InvalidFilterError(f"Unsupported operator '{item.operator}'", column=column)

            if operator is FilterOperator.EQ:
                query = query.eq(column, value)
            elif operator is FilterOperator.NEQ:
                query = query.neq(column, value)
            elif operator is FilterOperator.GT:
                query = query.gt(column, value)
            elif operator is FilterOperator.GTE:
                query = query.gte(column, value)
            elif operator is FilterOperator.LT:
                query = query.lt(column, value)
            elif operator is FilterOperator.LTE:
                query = query.lte(column, value)
            elif operator is FilterOperator.LIKE:
                query = query.like(column, value)
            elif operator is FilterOperator.ILIKE:
                query = query.ilike(column, value)
            elif operator is FilterOperator.IN:
                query = query.in_(column, list(value or []))
            elif operator is FilterOperator.IS:
                query = query.is_(column, "null" if value is None else value)

        return query


def create_repository(
    client: AsyncClient,
    table_name: str,
    default_select: str = "*",
    model: Optional[Type[T]] = None,
) -> BaseRepository[T]:
    """Repository for a table that needs no custom methods."""
    return BaseRepository(client, table_name, default_select=default_select, model=model)
