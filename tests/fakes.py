"""In-memory stand-in for the Supabase query builder.

Supports the subset of the PostgREST builder the services use, so tests run
the services' real query chains against plain dict rows.
"""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any


class FakeResponse:
    """Mimics ``postgrest.APIResponse``."""

    def __init__(self, data: Any, count: int | None = None) -> None:
        self.data = data
        self.count = count


def _normalize(value: Any) -> Any:
    """Compare enums, UUIDs and datetimes the way PostgREST sees them (as text)."""
    if value is None or isinstance(value, bool | int | float):
        return value
    if hasattr(value, "value") and isinstance(value.value, str):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _stored(value: Any) -> Any:
    """JSON columns keep their structure; everything else is stored as PostgREST returns it."""
    return value if isinstance(value, dict | list) else _normalize(value)


class FakeQuery:
    """A single chained query against one table."""

    def __init__(self, client: "FakeSupabaseClient", table: str) -> None:
        self.client = client
        self.table_name = table
        self.operation = "select"
        self.payload: Any = None
        self.filters: list[Any] = []
        self.orderings: list[tuple[str, bool]] = []
        self.limit_count: int | None = None
        self.single_mode: str | None = None
        self.count_mode: str | None = None
        self.on_conflict: str | None = None
        self.ignore_duplicates = False

    # Operations

    def select(self, columns: str = "*", count: str | None = None) -> "FakeQuery":
        self.count_mode = count
        return self

    def insert(self, data: Any) -> "FakeQuery":
        self.operation = "insert"
        self.payload = data
        return self

    def update(self, data: dict[str, Any]) -> "FakeQuery":
        self.operation = "update"
        self.payload = data
        return self

    def upsert(
        self,
        data: Any,
        on_conflict: str = "",
        ignore_duplicates: bool = False,
    ) -> "FakeQuery":
        self.operation = "upsert"
        self.payload = data
        self.on_conflict = on_conflict or "id"
        self.ignore_duplicates = ignore_duplicates
        return self

    def delete(self) -> "FakeQuery":
        self.operation = "delete"
        return self

    # Filters

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: _normalize(row.get(column)) == _normalize(value))
        return self

    def neq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: _normalize(row.get(column)) != _normalize(value))
        return self

    def in_(self, column: str, values: list[Any]) -> "FakeQuery":
        wanted = {_normalize(v) for v in values}
        self.filters.append(lambda row: _normalize(row.get(column)) in wanted)
        return self

    def is_(self, column: str, value: Any) -> "FakeQuery":
        if value in (None, "null"):
            self.filters.append(lambda row: row.get(column) is None)
        else:
            self.filters.append(lambda row: _normalize(row.get(column)) == _normalize(value))
        return self

    def gte(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(
            lambda row: row.get(column) is not None and _normalize(row.get(column)) >= _normalize(value)
        )
        return self

    def lt(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(
            lambda row: row.get(column) is not None and _normalize(row.get(column)) < _normalize(value)
        )
        return self

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        needle = pattern.strip("%").lower()
        self.filters.append(lambda row: needle in str(row.get(column) or "").lower())
        return self

    # Modifiers

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.orderings.append((column, desc))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.limit_count = count
        return self

    def single(self) -> "FakeQuery":
        self.single_mode = "single"
        return self

    def maybe_single(self) -> "FakeQuery":
        self.single_mode = "maybe_single"
        return self

    # Execution

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(f(row) for f in self.filters)

    def _stamp(self, row: dict[str, Any]) -> dict[str, Any]:
        row = dict(row)
        now = datetime.now(timezone.utc).isoformat()
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        return {k: _stored(v) for k, v in row.items()}

    def execute(self) -> FakeResponse | None:
        self.client.queries.append((self.table_name, self.operation))
        rows = self.client.tables.setdefault(self.table_name, [])

        if self.operation == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self._stamp(item) for item in items]
            rows.extend(inserted)
            return FakeResponse(copy.deepcopy(inserted))

        if self.operation == "upsert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
            written = []
            for item in items:
                existing = next(
                    (
                        r
                        for r in rows
                        if all(_normalize(r.get(k)) == _normalize(item.get(k)) for k in keys)
                    ),
                    None,
                )
                if existing is None:
                    new_row = self._stamp(item)
                    rows.append(new_row)
                    written.append(new_row)
                elif not self.ignore_duplicates:
                    existing.update({k: _stored(v) for k, v in item.items() if k != "id"})
                    written.append(existing)
            return FakeResponse(copy.deepcopy(written))

        if self.operation == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update({k: _stored(v) for k, v in self.payload.items()})
                    updated.append(row)
            return FakeResponse(copy.deepcopy(updated))

        if self.operation == "delete":
            deleted = [row for row in rows if self._matches(row)]
            self.client.tables[self.table_name] = [row for row in rows if not self._matches(row)]
            return FakeResponse(copy.deepcopy(deleted))

        result = [row for row in rows if self._matches(row)]
        for column, desc in reversed(self.orderings):
            result.sort(
                key=lambda r: (r.get(column) is None, r.get(column) if r.get(column) is not None else 0),
                reverse=desc,
            )
        total = len(result)
        if self.limit_count is not None:
            result = result[: self.limit_count]

        if self.single_mode == "maybe_single":
            if not result:
                return None
            return FakeResponse(copy.deepcopy(result[0]))
        if self.single_mode == "single":
            if len(result) != 1:
                raise LookupError(f"Expected one row from {self.table_name}, got {len(result)}")
            return FakeResponse(copy.deepcopy(result[0]))

        return FakeResponse(copy.deepcopy(result), count=total if self.count_mode else None)


class FakeSupabaseClient:
    """Minimal Supabase client holding tables as lists of dicts."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.queries: list[tuple[str, str]] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, *rows: dict[str, Any]) -> list[dict[str, Any]]:
        """Insert rows directly and return them with generated ids."""
        return self.table(table).insert(list(rows)).execute().data

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.get(table, [])

    def queried(self, table: str) -> bool:
        return any(name == table for name, _ in self.queries)
