"""
Unit tests for OrganizationRepository and SqlCodeRegistry.
"""

from unittest.mock import MagicMock

import pytest
import sqlalchemy as sa

from onboarding_hub.io.repositories import OrganizationRepository, SqlCodeRegistry


def insert_reference(conn, ref_id, code):
    conn.execute(
        sa.text(
            'INSERT INTO "RegistrationReferences" ("id", "code", "createdAt", "updatedAt") '
            "VALUES (:id, :code, '2024-01-01', '2024-01-01')"
        ),
        {"id": ref_id, "code": code},
    )


class TestOrganizationRepository:
    """Organization get-or-create against SQLite."""

    def test_creates_missing_organization(self, sqlite_engine):
        with sqlite_engine.begin() as conn:
            repo = OrganizationRepository(conn)
            assert repo.lookup("Acme Corp") is None

            org_id = repo.lookup_or_create("Acme Corp")

            assert org_id == 1
            assert repo.lookup("Acme Corp") == 1

    def test_reuses_existing_organization(self, sqlite_engine):
        with sqlite_engine.begin() as conn:
            conn.execute(sa.text('INSERT INTO "Organizations" ("name") VALUES (\'beta.co\')'))
            conn.execute(sa.text('INSERT INTO "Organizations" ("name") VALUES (\'Acme Corp\')'))

        with sqlite_engine.begin() as conn:
            repo = OrganizationRepository(conn)
            assert repo.lookup_or_create("Acme Corp") == 2
            assert repo.lookup_or_create("Gamma") == 3

        with sqlite_engine.connect() as conn:
            count = conn.execute(sa.text('SELECT COUNT(*) FROM "Organizations"')).scalar()
        assert count == 3

    def test_exact_name_match_only(self, sqlite_engine):
        with sqlite_engine.begin() as conn:
            repo = OrganizationRepository(conn)
            first = repo.lookup_or_create("Acme Corp")
            second = repo.lookup_or_create("ACME CORP")

        assert first != second

    def test_results_are_cached(self):
        conn = MagicMock()
        result = MagicMock()
        result.scalar.return_value = 42
        conn.execute.return_value = result

        repo = OrganizationRepository(conn, schema="obh")

        assert repo.lookup_or_create("Acme Corp") == 42
        assert repo.lookup_or_create("Acme Corp") == 42
        assert conn.execute.call_count == 1

    def test_schema_qualified_table(self):
        conn = MagicMock()
        conn.execute.return_value.scalar.return_value = 7

        OrganizationRepository(conn, schema="obh").lookup("Acme Corp")

        sql = str(conn.execute.call_args[0][0])
        assert '"obh"."Organizations"' in sql
        assert conn.execute.call_args[0][1] == {"name": "Acme Corp"}

    def test_missing_after_insert_raises(self):
        conn = MagicMock()
        conn.execute.return_value.scalar.return_value = None

        with pytest.raises(RuntimeError, match="not found after insert"):
            OrganizationRepository(conn).lookup_or_create("Ghost")


class TestSqlCodeRegistry:
    """Persisted code lookups."""

    def test_unknown_code(self, sqlite_engine):
        with sqlite_engine.connect() as conn:
            assert SqlCodeRegistry(conn).exists("PT00000001") is False

    def test_reference_code_exists(self, sqlite_engine):
        with sqlite_engine.begin() as conn:
            insert_reference(conn, 1, "PT00000001")
            registry = SqlCodeRegistry(conn)

            assert registry.exists("PT00000001") is True
            assert registry.exists("PT00000002") is False

    def test_change_request_code_exists(self, sqlite_engine):
        with sqlite_engine.begin() as conn:
            conn.execute(
                sa.text(
                    'INSERT INTO "PortalUserChangeRequests" '
                    '("id", "code", "referenceId", "organizationId", "createdAt", "updatedAt") '
                    "VALUES (1, 'USERCR0000000A', 1, 1, '2024-01-01', '2024-01-01')"
                )
            )

            assert SqlCodeRegistry(conn).exists("USERCR0000000A") is True

    def test_custom_tables(self, sqlite_engine):
        with sqlite_engine.begin() as conn:
            insert_reference(conn, 1, "PT00000001")

            registry = SqlCodeRegistry(conn, tables=("PortalUserChangeRequests",))
            assert registry.exists("PT00000001") is False
