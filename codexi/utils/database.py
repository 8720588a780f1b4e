from typing import Optional

from supabase import AsyncClient

from .logger import logger

DUPLICATE = "duplicate"


# Filter operator -> PostgREST builder method
_FILTER_METHODS = {
    "eq": "eq",
    "neq": "neq",
    "in": "in_",
    "is": "is_",
    "gt": "gt",
    "lt": "lt",
    "gte": "gte",
    "lte": "lte",
    "like": "like",
    "ilike": "ilike",
}


def _apply_filters(query, filters: dict | None):
    """Chain PostgREST filters onto *query*.

    Keys are column names. Plain values mean equality; a tuple
    ``(operator, value)`` picks any operator in ``_FILTER_METHODS``.
    """
    for column, condition in (filters or {}).items():
        operator, value = condition if isinstance(condition, tuple) else ("eq", condition)
        method = _FILTER_METHODS.get(operator)
        if method is None:
            raise ValueError(f"Unsupported filter operator: {operator}")
        query = getattr(query, method)(column, value)
    return query


async def insert_data(
    supabase: AsyncClient,
    table_name: str,
    data: dict,
):
    """Insert one row and return the stored representation.

    Returns the string ``"duplicate"`` when a unique constraint rejects the
    row; any other failure is logged and re-raised.
    """
    try:
        response = await supabase.table(table_name).insert(data).execute()
    except Exception as e:
        # supabase errors are badly structured and must cast to string and parsed
        if "duplicate" in str(e).lower():
            return DUPLICATE
        logger.error(f"Error during insert to {table_name}: {e}")
        raise

    rows = getattr(response, "data", None) or []
    return rows[0] if rows else data


async def query_data(
    supabase: AsyncClient,
    table_name: str,
    filters: dict = None,
    order_by: tuple = None,
    select_fields: str = "*",
    limit: Optional[int] = None,
    count: Optional[str] = None,
):
    """
    Query a Supabase table with dynamic filters, ordering, limit, and count.

    :param table_name: Name of the table to query.
    :param filters: Column → value, or column → (operator, value); see ``_apply_filters``.
    :param order_by: Tuple (column_name, desc) where desc=True means descending order.
    :param select_fields: Fields to select (default is "*").
    :param limit: Optional integer to limit the number of results.
    :param count: Optional string to specify count method (e.g., 'exact').
    :return: Query result from Supabase.
    """
    query = supabase.table(table_name).select(select_fields, count=count)
    query = _apply_filters(query, filters)

    if order_by:
        column, desc = order_by
        query = query.order(column, desc=desc)

    if limit:
        query = query.limit(limit)

    return await query.execute()


async def update_data(
    supabase: AsyncClient,
    table_name: str,
    *,
    update_values: dict,
    filters: dict,
    error_message: str = "Update failed",
) -> list[dict]:
    """Update rows matching *filters* and return the updated rows."""
    if not filters:
        # An unfiltered PATCH would touch the whole table
        raise ValueError("update_data requires at least one filter")
    try:
        query = _apply_filters(supabase.table(table_name).update(update_values), filters)
        response = await query.execute()
    except Exception as e:
        logger.error(f"{error_message} ({table_name}): {e}")
        raise
    return getattr(response, "data", None) or []


async def query_one(
    supabase: AsyncClient,
    table_name: str,
    match: dict | None = None,
    order_by: tuple | None = None,
    select_fields: str = "*",
):
    """Return the first (or *None*) row that matches the filters."""
    resp = await query_data(
        supabase,
        table_name,
        filters=match or {},
        order_by=order_by,
        select_fields=select_fields,
        limit=1,
    )
    rows = getattr(resp, "data", None) or []
    return rows[0] if rows else None


async def query_many(
    supabase: AsyncClient,
    table_name: str,
    match: dict | None = None,
    order_by: tuple | None = None,
    select_fields: str = "*",
    limit: int | None = None,
):
    """Return a list of rows that match the filters (empty list if none)."""
    resp = await query_data(
        supabase,
        table_name,
        filters=match or {},
        order_by=order_by,
        select_fields=select_fields,
        limit=limit,
    )
    return getattr(resp, "data", None) or []
