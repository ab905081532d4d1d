"""
Transactional loader for onboarding batches.

All nine collections are inserted on ONE caller-supplied SQLAlchemy connection,
in load order, so every foreign key points at an already-inserted row. The
caller owns the transaction (``engine.begin()``): when any statement fails the
exception propagates unchanged and the caller's transaction rolls back, so
either every collection is written or none is.
"""

import math
import time
import uuid
from typing import Any, Dict, List, Mapping, Optional, Union

import sqlalchemy as sa
from sqlalchemy.engine import Connection

from onboarding_hub.config import get_settings
from onboarding_hub.domain.onboarding.constants import COLLECTION_LOAD_ORDER
from onboarding_hub.domain.onboarding.models import OnboardingBatches
from onboarding_hub.io.loader.insert_builder import build_insert_sql, get_column_order
from onboarding_hub.io.loader.models import LoadResult, OnboardingLoaderError
from onboarding_hub.utils.logging import get_logger

logger = get_logger(__name__)

RowBatches = Mapping[str, List[Dict[str, Any]]]


class OnboardingWarehouseLoader:
    """Inserts onboarding batches in load order with chunked executemany."""

    def __init__(
        self,
        schema: Optional[str] = None,
        batch_size: Optional[int] = None,
    ):
        settings = get_settings()
        self.schema = schema if schema is not None else settings.database_schema
        self.batch_size = batch_size or settings.DB_BATCH_SIZE
        if self.batch_size < 1:
            raise OnboardingLoaderError("batch_size must be at least 1")

        logger.debug(
            "database.onboarding_loader.initialized",
            schema=self.schema,
            batch_size=self.batch_size,
        )

    def _chunks(self, rows: List[Dict[str, Any]]):
        for start in range(0, len(rows), self.batch_size):
            yield rows[start : start + self.batch_size]

    def insert_rows(
        self, conn: Connection, table: str, rows: List[Dict[str, Any]]
    ) -> int:
        """
        Insert one collection's rows.

        Returns:
            Number of rows inserted (0 for an empty batch).
        """
        if not rows:
            logger.debug("database.insert.skipped", table=table, reason="empty_batch")
            return 0

        cols = get_column_order(rows)
        inserted = 0
        for chunk in self._chunks(rows):
            sql, params = build_insert_sql(table, cols, chunk, schema=self.schema)
            if sql is None:
                continue
            conn.execute(sa.text(sql), params)
            inserted += len(params)

        logger.info("database.insert.completed", table=table, rows=inserted)
        return inserted

    def insert_batches(
        self,
        conn: Connection,
        batches: Union[OnboardingBatches, RowBatches],
    ) -> LoadResult:
        """
        Insert every collection in load order on ``conn``.

        Args:
            conn: Connection inside the caller's transaction
            batches: OnboardingBatches, or rows already keyed by collection name

        Returns:
            LoadResult with per-table row counts.

        Raises:
            OnboardingLoaderError: If ``batches`` names an unknown collection.
            Any database error from the driver propagates unchanged.
        """
        rows_by_collection: RowBatches = (
            batches.as_rows() if isinstance(batches, OnboardingBatches) else batches
        )
        unknown = sorted(set(rows_by_collection) - set(COLLECTION_LOAD_ORDER))
        if unknown:
            raise OnboardingLoaderError(f"Unknown collection(s): {', '.join(unknown)}")

        execution_id = uuid.uuid4().hex
        start_time = time.perf_counter()
        logger.info(
            "database.onboarding_load.started",
            execution_id=execution_id,
            schema=self.schema,
            collections=len(rows_by_collection),
        )

        rows_by_table: Dict[str, int] = {}
        query_count = 0
        try:
            for table in COLLECTION_LOAD_ORDER:
                rows = list(rows_by_collection.get(table, []))
                rows_by_table[table] = self.insert_rows(conn, table, rows)
                query_count += math.ceil(len(rows) / self.batch_size)
        except Exception as exc:
            logger.error(
                "database.onboarding_load.failed",
                execution_id=execution_id,
                table=table,
                error=str(exc),
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        total = sum(rows_by_table.values())
        logger.info(
            "database.onboarding_load.completed",
            execution_id=execution_id,
            rows_inserted=total,
            duration_ms=duration_ms,
        )
        return LoadResult(
            success=True,
            rows_inserted=total,
            duration_ms=duration_ms,
            execution_id=execution_id,
            query_count=query_count,
            rows_by_table=rows_by_table,
        )
