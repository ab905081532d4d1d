"""Pytest configuration and shared onboarding fixtures.

IMPORTANT: .obh_env is loaded FIRST with override=True so tests read their
configuration from that file rather than from the calling shell.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

_OBH_ENV_FILE = Path(__file__).parent.parent / ".obh_env"
if _OBH_ENV_FILE.exists():
    load_dotenv(_OBH_ENV_FILE, override=True)

from datetime import datetime
from typing import Any, Dict, List

import pandas as pd
import pytest
import sqlalchemy as sa

from onboarding_hub.config.settings import Settings
from onboarding_hub.config.sheet_mapping_loader import DEFAULT_SHEET_MAPPINGS
from onboarding_hub.domain.onboarding.constants import (
    ORGANIZATIONS,
    PORTAL_CEO_PROFILES,
    PORTAL_COMPANY_PROFILES,
    PORTAL_USER_CHANGE_REQUESTS,
    PORTAL_USER_PROFILES,
    PORTAL_USER_REQUEST_LISTS,
    REGISTRATION_CEO_PROFILES,
    REGISTRATION_COMPANY_PROFILES,
    REGISTRATION_ORG_ADMIN_PROFILES,
    REGISTRATION_REFERENCES,
)
from onboarding_hub.domain.onboarding.models import (
    CeoProfileRecord,
    ChangeRequestRecord,
    CompanyProfileRecord,
    OrgAdminProfileRecord,
    PortalCeoProfileRecord,
    PortalCompanyProfileRecord,
    PortalUserProfileRecord,
    ReferenceRecord,
    UserRequestRecord,
)
from onboarding_hub.io.loader.sql_utils import quote_ident

COLLECTION_MODELS = {
    REGISTRATION_REFERENCES: ReferenceRecord,
    REGISTRATION_COMPANY_PROFILES: CompanyProfileRecord,
    REGISTRATION_CEO_PROFILES: CeoProfileRecord,
    REGISTRATION_ORG_ADMIN_PROFILES: OrgAdminProfileRecord,
    PORTAL_USER_CHANGE_REQUESTS: ChangeRequestRecord,
    PORTAL_USER_REQUEST_LISTS: UserRequestRecord,
    PORTAL_USER_PROFILES: PortalUserProfileRecord,
    PORTAL_COMPANY_PROFILES: PortalCompanyProfileRecord,
    PORTAL_CEO_PROFILES: PortalCeoProfileRecord,
}


def _headers(entity: str) -> List[str]:
    return list(DEFAULT_SHEET_MAPPINGS[entity]["columns"].values())  # type: ignore[union-attr]


def sheet_row(entity: str, **values: Any) -> Dict[str, Any]:
    """Workbook row with every mapped header present (None unless given)."""
    row: Dict[str, Any] = {header: None for header in _headers(entity)}
    row.update(values)
    return row


def create_onboarding_schema(conn, skip: tuple = ()) -> None:
    """Create the Organizations table and every target collection."""
    conn.execute(
        sa.text(
            f"CREATE TABLE {quote_ident(ORGANIZATIONS)} ("
            f"{quote_ident('id')} INTEGER PRIMARY KEY AUTOINCREMENT, "
            f"{quote_ident('name')} TEXT NOT NULL)"
        )
    )
    for table, model in COLLECTION_MODELS.items():
        if table in skip:
            continue
        columns = []
        for name, field in model.model_fields.items():
            column = quote_ident(field.alias or name)
            if name == "id":
                column += " INTEGER PRIMARY KEY"
            elif name == "code":
                column += " TEXT UNIQUE"
            columns.append(column)
        conn.execute(sa.text(f"CREATE TABLE {quote_ident(table)} ({', '.join(columns)})"))


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 15, 9, 30, 0)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, code_seed=1234, DB_BATCH_SIZE=2)


@pytest.fixture
def onboarding_sheets() -> Dict[str, List[Dict[str, Any]]]:
    """
    Two companies, one CEO, one organization admin and three user rows.

    - CEO "Acme" links to Acme Corp (id 1) through its remark
    - Admin "admin@beta.co" links to beta.co (id 2) through its email domain
    - "user@nomatch.io" links to nothing
    - Two users name Acme Corp explicitly
    """
    return {
        "Company Profile": [
            sheet_row(
                "company",
                nameEn="Acme Corp",
                nameTh="แอคมี คอร์ป",
                addressEn="1 Main Road",
                sector="Retail",
                code="ACM",
                phone=21234567,
                contactPersonNameEn="Carol Contact",
                contactPersonPhone="0811111111",
                contactPersonEmail="carol@acme.com",
            ),
            sheet_row(
                "company",
                nameEn="beta.co",
                sector="Software",
                contactPersonNameEn="Dan Contact",
                contactPersonEmail="dan@beta.co",
            ),
        ],
        "Ceo Profile": [
            sheet_row(
                "ceo",
                Remark="Acme",
                fullNameEn="Alice Acme",
                positionEn="Chief Executive Officer",
                email="alice@acme.com",
            ),
        ],
        "Organization Admin Profile": [
            sheet_row(
                "org_admin",
                email="admin@beta.co",
                fullNameEn="Bob Beta",
                EffectiveDate=datetime(2024, 2, 1),
                lineId="bob.line",
                allowOpenChat="yes",
                isAllowOpenChatChanged=True,
            ),
        ],
        "User Request List": [
            sheet_row(
                "user_request",
                email="user@nomatch.io",
                fullNameEn="Nobody",
                accessType="",
                role="User",
            ),
            sheet_row(
                "user_request",
                Company="Acme Corp",
                email="eve@acme.com",
                fullNameEn="Eve Acme",
                accessType="openchat",
                status="update",
                role="Publisher",
            ),
            sheet_row(
                "user_request",
                Company="ACME CORP",
                email="frank@acme.com",
                fullNameEn="Frank Acme",
                accessType="",
                role="admin",
            ),
        ],
    }


@pytest.fixture
def onboarding_workbook(tmp_path, onboarding_sheets) -> Path:
    """The onboarding_sheets fixture written as an .xlsx workbook."""
    path = tmp_path / "onboarding.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in onboarding_sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, index=False)
    return path


@pytest.fixture
def sqlite_engine(tmp_path):
    """File-backed SQLite engine with the onboarding schema created."""
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'onboarding.db'}")
    with engine.begin() as conn:
        create_onboarding_schema(conn)
    yield engine
    engine.dispose()


@pytest.fixture
def make_sheet_row():
    return sheet_row


@pytest.fixture
def onboarding_schema():
    return create_onboarding_schema
