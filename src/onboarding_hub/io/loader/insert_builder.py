from typing import Any, Dict, List, Optional, Set, Tuple

from .sql_utils import quote_ident, quote_qualified


def _ensure_list_of_dicts(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Validate and normalize row data."""
    if not isinstance(rows, list):
        raise ValueError("Rows must be a list")

    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"Row {i} must be a dictionary")

    return rows


def get_column_order(rows: List[Dict[str, Any]]) -> List[str]:
    """
    Column order for a batch: first-seen order across rows.

    Records of one collection all dump the same keys in model field order, so
    this is the model's field order.
    """
    seen: Set[str] = set()
    ordered: List[str] = []
    for row in rows:
        for col in row:
            if col not in seen:
                seen.add(col)
                ordered.append(col)
    return ordered


def build_insert_sql(
    table: str,
    cols: List[str],
    rows: List[Dict[str, Any]],
    schema: Optional[str] = None,
) -> Tuple[Optional[str], List[Dict[str, Any]]]:
    """
    Build a named-parameter INSERT for ``sqlalchemy.text`` executemany.

    Bind names are positional (``:c0``, ``:c1`` ...) so any column name can be
    quoted without constraining the bind syntax.

    Args:
        table: Target table name
        cols: Column names in desired order
        rows: List of dictionaries with row data
        schema: Optional schema qualifier

    Returns:
        Tuple of (sql_string, one parameter dict per row)

    Example:
        >>> sql, params = build_insert_sql(
        ...     "RegistrationReferences",
        ...     ["id", "code"],
        ...     [{"id": 1, "code": "PT0A1B2C3D"}],
        ... )
        >>> sql
        'INSERT INTO "RegistrationReferences" ("id","code") VALUES (:c0,:c1)'
        >>> params
        [{'c0': 1, 'c1': 'PT0A1B2C3D'}]
    """
    if not table:
        raise ValueError("Table name is required")
    if not cols:
        raise ValueError("Column list cannot be empty")

    rows = _ensure_list_of_dicts(rows)
    if not rows:
        return None, []

    quoted_table = quote_qualified(schema, table)
    col_list = ",".join(quote_ident(col) for col in cols)
    binds = [f"c{i}" for i in range(len(cols))]
    value_template = "(" + ",".join(f":{bind}" for bind in binds) + ")"

    sql = f"INSERT INTO {quoted_table} ({col_list}) VALUES {value_template}"

    params = [
        {bind: row.get(col) for bind, col in zip(binds, cols)}  # None if key missing
        for row in rows
    ]
    return sql, params
