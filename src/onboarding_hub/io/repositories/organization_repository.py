"""
Organization and code lookups used while synthesizing onboarding records.

Both classes work on a caller-supplied SQLAlchemy connection so they share
the pipeline's single transaction.

Usage:
    with engine.begin() as conn:
        organizations = OrganizationRepository(conn, schema="public")
        org_id = organizations.lookup_or_create("Acme Corp")

        codes = SqlCodeRegistry(conn, schema="public")
        codes.exists("PT0A1B2C3D")
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

import sqlalchemy as sa
from sqlalchemy.engine import Connection

from onboarding_hub.domain.onboarding.constants import (
    ORGANIZATIONS,
    PORTAL_USER_CHANGE_REQUESTS,
    REGISTRATION_REFERENCES,
)
from onboarding_hub.io.loader.sql_utils import quote_ident, quote_qualified
from onboarding_hub.utils.logging import get_logger

logger = get_logger(__name__)


class OrganizationRepository:
    """
    Get-or-create access to the Organizations table (id, name).

    Lookups are by exact name. Resolved ids are cached for the lifetime of the
    repository, i.e. one pipeline run.
    """

    def __init__(
        self,
        conn: Connection,
        schema: Optional[str] = None,
        table: str = ORGANIZATIONS,
    ):
        self.conn = conn
        self.table = quote_qualified(schema, table)
        self._cache: Dict[str, int] = {}

    def lookup(self, name: str) -> Optional[int]:
        """Return the id of the organization named exactly ``name``, if any."""
        result = self.conn.execute(
            sa.text(
                f"""
                SELECT {quote_ident("id")}
                FROM {self.table}
                WHERE {quote_ident("name")} = :name
                ORDER BY {quote_ident("id")}
                LIMIT 1
                """
            ),
            {"name": name},
        )
        return result.scalar()

    def lookup_or_create(self, name: str) -> int:
        """
        Resolve an organization id, inserting the organization when absent.

        Re-running with the same names reuses the existing rows.
        """
        if name in self._cache:
            return self._cache[name]

        org_id = self.lookup(name)
        if org_id is None:
            self.conn.execute(
                sa.text(
                    f"INSERT INTO {self.table} ({quote_ident('name')}) VALUES (:name)"
                ),
                {"name": name},
            )
            org_id = self.lookup(name)
            if org_id is None:
                raise RuntimeError(f"Organization '{name}' not found after insert")
            logger.info("database.organization.created", name=name, organization_id=org_id)
        else:
            logger.debug("database.organization.found", name=name, organization_id=org_id)

        self._cache[name] = org_id
        return org_id


class SqlCodeRegistry:
    """Checks whether a code is already used by a persisted reference or change request."""

    def __init__(
        self,
        conn: Connection,
        schema: Optional[str] = None,
        tables: Sequence[str] = (REGISTRATION_REFERENCES, PORTAL_USER_CHANGE_REQUESTS),
    ):
        self.conn = conn
        self.tables = [quote_qualified(schema, table) for table in tables]

    def exists(self, code: str) -> bool:
        for table in self.tables:
            result = self.conn.execute(
                sa.text(
                    f"SELECT 1 FROM {table} WHERE {quote_ident('code')} = :code LIMIT 1"
                ),
                {"code": code},
            )
            if result.first() is not None:
                return True
        return False
