from typing import Optional


def quote_ident(name: str) -> str:
    """
    Quote an SQL identifier with double quotes and escape internal quotes.

    Identifiers are quoted so camelCase column names such as "nameEn" keep
    their case on PostgreSQL.

    Args:
        name: Identifier to quote (table, column name)

    Returns:
        Properly quoted identifier

    Raises:
        ValueError: If name is empty or too long
    """
    if not name or not isinstance(name, str):
        raise ValueError("Identifier name must be non-empty string")

    if len(name) > 63:  # PostgreSQL limit
        raise ValueError("Identifier too long (max 63 characters)")

    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def quote_qualified(schema: Optional[str], table: str) -> str:
    """
    Quote a table identifier with optional schema qualification.

    Examples:
        >>> quote_qualified("public", "RegistrationReferences")
        '"public"."RegistrationReferences"'
        >>> quote_qualified(None, "RegistrationReferences")
        '"RegistrationReferences"'
        >>> quote_qualified("", "RegistrationReferences")
        '"RegistrationReferences"'
    """
    if not table or not isinstance(table, str):
        raise ValueError("Table name must be non-empty string")

    if schema and str(schema).strip():
        return f"{quote_ident(str(schema))}.{quote_ident(table)}"
    return quote_ident(table)
