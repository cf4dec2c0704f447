"""Helpers for rows kept in a user-defined order within a meeting or company."""

from typing import Any

from src.api.middleware.error_handler import ValidationError


def next_order(client: Any, table: str, column: str, value: str) -> int:
    """Order value that places a new row after every existing row.

    Args:
        client: Supabase client.
        table: Table holding the ordered rows.
        column: Scope column, e.g. ``meeting_id``.
        value: Scope value.

    Returns:
        int: ``max(order) + 1``, or 0 for the first row.
    """
    response = (
        client.table(table)
        .select("order")
        .eq(column, value)
        .order("order", desc=True)
        .limit(1)
        .execute()
    )
    return response.data[0]["order"] + 1 if response.data else 0


def verify_scoped_ids(client: Any, table: str, column: str, value: str, ids: list[str], label: str) -> None:
    """Raise unless every id is a distinct row of ``table`` within the scope.

    Raises:
        ValidationError: On duplicates or ids outside the scope.
    """
    if len(set(ids)) != len(ids):
        raise ValidationError(f"Duplicate {label} ids")
    rows = (
        client.table(table)
        .select("id")
        .eq(column, value)
        .in_("id", ids)
        .execute()
    ).data or []
    if len(rows) != len(ids):
        raise ValidationError(f"One or more {label}s not found")


def apply_order(client: Any, table: str, ids: list[str]) -> None:
    """Write each row's position in ``ids`` as its order."""
    for index, row_id in enumerate(ids):
        client.table(table).update({"order": index}).eq("id", row_id).execute()
