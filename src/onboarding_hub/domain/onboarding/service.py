"""Onboarding domain - Service.

Runs the onboarding pipeline:

    workbook sheets -> extract -> link -> synthesize -> assemble -> load

``build_onboarding_batches`` is the pure part: it works on already-loaded
sheets with injected collaborators and writes nothing. ``run_onboarding``
adds the I/O: it reads the workbook, opens a single database transaction,
resolves organizations and code conflicts on that transaction and inserts
every collection before committing.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional, Union

import sqlalchemy as sa
from sqlalchemy.engine import Engine

from onboarding_hub.config.settings import Settings, get_settings
from onboarding_hub.config.sheet_mapping_loader import (
    SheetMappingConfig,
    load_sheet_mapping_config,
)
from onboarding_hub.infrastructure.identity import (
    EntityKind,
    EntityLinker,
    LinkIndex,
    build_link_index,
)
from onboarding_hub.infrastructure.validation import ExtractionReport
from onboarding_hub.io.loader import LoadResult, OnboardingWarehouseLoader
from onboarding_hub.io.readers import ExcelReader
from onboarding_hub.io.repositories import OrganizationRepository, SqlCodeRegistry
from onboarding_hub.utils.logging import get_logger, run_context

from .assembler import assemble
from .extractor import RawSheet, extract_sheets
from .models import OnboardingBatches
from .synthesizer import (
    CodeGenerator,
    CodeRegistry,
    InMemoryCodeRegistry,
    InMemoryOrganizationDirectory,
    OrganizationDirectory,
    synthesize,
)

logger = get_logger(__name__)


@dataclass
class OnboardingResult:
    """
    Outcome of one pipeline run.

    Attributes:
        batches: Assembled records per target collection
        report: Recoverable issues met during the run
        link_index: Company index the run was linked against
        load_result: Insert summary, None when nothing was written
    """

    batches: OnboardingBatches
    report: ExtractionReport
    link_index: LinkIndex
    load_result: Optional[LoadResult] = None


def build_onboarding_batches(
    sheets: Mapping[str, RawSheet],
    *,
    mapping_config: SheetMappingConfig,
    organizations: OrganizationDirectory,
    code_registry: CodeRegistry,
    code_generator: CodeGenerator,
    now: datetime,
    settings: Settings,
) -> OnboardingResult:
    """
    Turn loaded workbook sheets into onboarding batches.

    Args:
        sheets: sheet name -> ordered rows (header -> raw cell value)
        mapping_config: Sheet aliases and column mappings
        organizations: Organization id lookup-or-create collaborator
        code_registry: Persisted-code lookup for conflict retries
        code_generator: Reference/change-request code source
        now: Run timestamp
        settings: Prefixes, attempt budget and default role id

    Returns:
        OnboardingResult without load_result.

    Raises:
        CodeGenerationError: When a unique code cannot be generated.
    """
    report = ExtractionReport()
    extracted = extract_sheets(sheets, mapping_config, report)

    index = build_link_index(extracted[EntityKind.COMPANY], report)
    linker = EntityLinker(index, report)
    ceo_rows = linker.resolve_all(extracted[EntityKind.CEO])
    org_admin_rows = linker.resolve_all(extracted[EntityKind.ORG_ADMIN])
    user_request_rows = linker.resolve_all(extracted[EntityKind.USER_REQUEST])

    synthesis = synthesize(
        index,
        organizations=organizations,
        code_registry=code_registry,
        code_generator=code_generator,
        now=now,
        reference_prefix=settings.reference_code_prefix,
        change_request_prefix=settings.change_request_code_prefix,
        max_attempts=settings.code_generation_max_attempts,
    )

    batches = assemble(
        index,
        synthesis,
        ceo_rows=ceo_rows,
        org_admin_rows=org_admin_rows,
        user_request_rows=user_request_rows,
        now=now,
        default_role_id=settings.default_role_id,
        report=report,
    )

    logger.info(
        "onboarding.pipeline.batches_built",
        companies=len(index),
        issues=report.counts(),
    )
    return OnboardingResult(batches=batches, report=report, link_index=index)


def run_onboarding(
    excel_path: Union[str, Path],
    *,
    settings: Optional[Settings] = None,
    dry_run: bool = False,
    engine: Optional[Engine] = None,
    strict: bool = False,
    mapping_config: Optional[SheetMappingConfig] = None,
    now: Optional[datetime] = None,
) -> OnboardingResult:
    """
    Read a workbook and load its onboarding records in one transaction.

    Args:
        excel_path: Onboarding workbook
        settings: Settings (defaults to get_settings())
        dry_run: Build with in-memory collaborators and write nothing
        engine: SQLAlchemy engine (defaults to one built from settings)
        strict: Abort before writing when any row was dropped
        mapping_config: Sheet mappings (defaults to the configured YAML)
        now: Run timestamp (defaults to the current UTC time)

    Returns:
        OnboardingResult; load_result is set unless dry_run.

    Raises:
        ExcelReadError: Workbook unreadable
        CodeGenerationError: Unique code not found (nothing written)
        IncompleteExtractionError: strict and rows were dropped (nothing written)
        Any database error propagates after the transaction rolls back.
    """
    settings = settings or get_settings()
    mapping_config = mapping_config or load_sheet_mapping_config(
        Path(settings.sheet_mappings_config)
    )
    now = now or datetime.now(timezone.utc)
    code_generator = CodeGenerator(seed=settings.code_seed)

    with run_context(workbook=str(excel_path), dry_run=dry_run):
        sheets = ExcelReader().read_workbook(excel_path)
        logger.info("onboarding.pipeline.started", sheets=list(sheets))

        if dry_run:
            result = build_onboarding_batches(
                sheets,
                mapping_config=mapping_config,
                organizations=InMemoryOrganizationDirectory(),
                code_registry=InMemoryCodeRegistry(),
                code_generator=code_generator,
                now=now,
                settings=settings,
            )
            if strict:
                result.report.raise_if_incomplete()
            logger.info("onboarding.pipeline.dry_run_completed", **result.batches.counts())
            return result

        engine = engine or sa.create_engine(settings.get_database_connection_string())
        loader = OnboardingWarehouseLoader(
            schema=settings.database_schema, batch_size=settings.DB_BATCH_SIZE
        )

        with engine.begin() as conn:
            result = build_onboarding_batches(
                sheets,
                mapping_config=mapping_config,
                organizations=OrganizationRepository(conn, schema=settings.database_schema),
                code_registry=SqlCodeRegistry(conn, schema=settings.database_schema),
                code_generator=code_generator,
                now=now,
                settings=settings,
            )
            if strict:
                result.report.raise_if_incomplete()
            result.load_result = loader.insert_batches(conn, result.batches)

        logger.info(
            "onboarding.pipeline.completed",
            rows_inserted=result.load_result.rows_inserted,
            execution_id=result.load_result.execution_id,
        )
        return result
