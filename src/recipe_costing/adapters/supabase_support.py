"""Helpers shared by the Supabase repositories."""

from collections.abc import Callable, Iterator, Sequence
from typing import Any, Protocol, TypeVar

import httpx
from postgrest.exceptions import APIError

from recipe_costing.errors import PersistenceError

T = TypeVar("T")

# PostgREST truncates every response at its max-rows setting (1000 by default).
PAGE_SIZE = 1000
# Codes per `in` filter, keeping GET URLs short.
CHUNK_SIZE = 200


class _Executable(Protocol):
    def execute(self) -> Any: ...


class _Pageable(_Executable, Protocol):
    def range(self, start: int, end: int) -> "_Pageable": ...


def execute(query: _Executable, action: str) -> Any:
    """Run a PostgREST query, wrapping client failures in PersistenceError."""
    try:
        return query.execute()
    except (APIError, httpx.HTTPError) as exc:
        raise PersistenceError(f"Failed to {action}: {exc}") from exc


def optional_float(value: object) -> float | None:
    """Read a nullable numeric column."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def optional_int(value: object) -> int | None:
    """Read a nullable integer column."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def fetch_all(
    build_query: Callable[[], _Pageable], action: str, page_size: int = PAGE_SIZE
) -> list[dict[str, Any]]:
    """Read every row of a query page by page.

    ``build_query`` must return a fresh, consistently ordered query each time.
    Paging stops at the first empty page, so a server cap below ``page_size``
    still yields every row.
    """
    rows: list[dict[str, Any]] = []
    while True:
        start = len(rows)
        response = execute(build_query().range(start, start + page_size - 1), action)
        page = response.data or []
        if not page:
            return rows
        rows.extend(page)


def chunked(items: Sequence[T], size: int = CHUNK_SIZE) -> Iterator[Sequence[T]]:
    """Split items into consecutive slices of at most ``size``."""
    step = max(size, 1)
    for start in range(0, len(items), step):
        yield items[start : start + step]
