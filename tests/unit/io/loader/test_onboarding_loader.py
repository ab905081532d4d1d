"""Unit tests for OnboardingWarehouseLoader against a SQLite database."""

from datetime import datetime

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError

from onboarding_hub.domain.onboarding.constants import COLLECTION_LOAD_ORDER
from onboarding_hub.domain.onboarding.models import (
    ChangeRequestRecord,
    OnboardingBatches,
    ReferenceRecord,
)
from onboarding_hub.io.loader import OnboardingLoaderError, OnboardingWarehouseLoader

NOW = datetime(2024, 1, 15, 9, 30)


def references(count):
    return [
        ReferenceRecord(id=i, code=f"PT{i:08X}", created_at=NOW, updated_at=NOW)
        for i in range(1, count + 1)
    ]


def count_rows(engine, table):
    with engine.connect() as conn:
        return conn.execute(sa.text(f'SELECT COUNT(*) FROM "{table}"')).scalar()


class TestInit:
    def test_rejects_non_positive_batch_size(self):
        with pytest.raises(OnboardingLoaderError):
            OnboardingWarehouseLoader(batch_size=-1)

    def test_explicit_schema_and_batch_size(self):
        loader = OnboardingWarehouseLoader(schema="obh", batch_size=7)
        assert (loader.schema, loader.batch_size) == ("obh", 7)


class TestInsertRows:
    def test_chunked_insert(self, sqlite_engine):
        loader = OnboardingWarehouseLoader(batch_size=2)
        rows = [record.to_row() for record in references(5)]

        with sqlite_engine.begin() as conn:
            inserted = loader.insert_rows(conn, "RegistrationReferences", rows)

        assert inserted == 5
        assert count_rows(sqlite_engine, "RegistrationReferences") == 5

    def test_empty_rows(self, sqlite_engine):
        with sqlite_engine.begin() as conn:
            assert OnboardingWarehouseLoader().insert_rows(conn, "RegistrationReferences", []) == 0

    def test_camel_case_columns_persisted(self, sqlite_engine):
        loader = OnboardingWarehouseLoader()
        with sqlite_engine.begin() as conn:
            loader.insert_rows(
                conn, "RegistrationReferences", [references(1)[0].to_row()]
            )

        with sqlite_engine.connect() as conn:
            row = conn.execute(
                sa.text('SELECT "code", "requestType", "status" FROM "RegistrationReferences"')
            ).one()
        assert tuple(row) == ("PT00000001", "CREATE", "PENDING_CEO_APPROVAL")


class TestInsertBatches:
    def test_inserts_in_load_order(self, sqlite_engine):
        batches = OnboardingBatches(
            references=references(3),
            change_requests=[
                ChangeRequestRecord(
                    id=i,
                    code=f"USERCR{i:08X}",
                    reference_id=i,
                    organization_id=10 + i,
                    created_at=NOW,
                    updated_at=NOW,
                )
                for i in range(1, 4)
            ],
        )
        loader = OnboardingWarehouseLoader(batch_size=2)

        with sqlite_engine.begin() as conn:
            result = loader.insert_batches(conn, batches)

        assert result.success is True
        assert result.rows_inserted == 6
        assert list(result.rows_by_table) == COLLECTION_LOAD_ORDER
        assert result.rows_by_table["RegistrationReferences"] == 3
        assert result.rows_by_table["PortalUserChangeRequests"] == 3
        assert result.rows_by_table["PortalCeoProfiles"] == 0
        assert result.query_count == 4
        assert count_rows(sqlite_engine, "PortalUserChangeRequests") == 3

    def test_accepts_row_mapping(self, sqlite_engine):
        rows = {"RegistrationReferences": [r.to_row() for r in references(2)]}

        with sqlite_engine.begin() as conn:
            result = OnboardingWarehouseLoader().insert_batches(conn, rows)

        assert result.rows_inserted == 2

    def test_unknown_collection(self, sqlite_engine):
        with sqlite_engine.begin() as conn:
            with pytest.raises(OnboardingLoaderError, match="Bogus"):
                OnboardingWarehouseLoader().insert_batches(conn, {"Bogus": [{"a": 1}]})

    def test_database_error_propagates_and_rolls_back(self, sqlite_engine):
        duplicate_codes = [
            ReferenceRecord(id=1, code="PTAAAAAAAA", created_at=NOW, updated_at=NOW),
            ReferenceRecord(id=2, code="PTAAAAAAAA", created_at=NOW, updated_at=NOW),
        ]
        loader = OnboardingWarehouseLoader(batch_size=1)

        with pytest.raises(IntegrityError):
            with sqlite_engine.begin() as conn:
                loader.insert_batches(conn, OnboardingBatches(references=duplicate_codes))

        assert count_rows(sqlite_engine, "RegistrationReferences") == 0
