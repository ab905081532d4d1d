"""Onboarding domain - Record Assembler.

Turns linked source rows into the immutable records of every target
collection, applying the default policy:

- missing text fields -> ""
- lineId / openChatName -> None
- accessType -> PORTAL, status -> ADD, allowOpenChat -> NO
- isAllowOpenChatChanged -> False
- effectiveDate -> run timestamp when absent or unparseable
- role label -> closed role table, anything else -> default role id

Portal-side records are projections of the assembled Registration-side
records plus the resolved organization id; nothing here re-runs linkage.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from onboarding_hub.infrastructure.identity.types import (
    LinkIndex,
    LinkResult,
    SourceRow,
)
from onboarding_hub.infrastructure.validation.extraction_report import (
    ExtractionReport,
)
from onboarding_hub.utils.logging import get_logger

from .constants import DEFAULT_ROLE_ID, ROLE_IDS
from .helpers import parse_bool, parse_datetime, text_or_empty, to_text
from .models import (
    AccessType,
    AllowOpenChat,
    CeoProfileRecord,
    ChangeStatus,
    CompanyProfileRecord,
    OnboardingBatches,
    OrgAdminProfileRecord,
    PortalCeoProfileRecord,
    PortalCompanyProfileRecord,
    PortalUserProfileRecord,
    UserRequestRecord,
)
from .synthesizer import SynthesisResult

logger = get_logger(__name__)

LinkedRows = Sequence[Tuple[SourceRow, LinkResult]]

_PERSON_FIELDS = (
    "full_name_th",
    "full_name_en",
    "position_th",
    "position_en",
    "phone",
    "email",
)
_COMPANY_FIELDS = (
    "name_th",
    "name_en",
    "sector",
    "code",
    "address_th",
    "address_en",
    "phone",
)


def resolve_role(label: Any, default_role_id: int = DEFAULT_ROLE_ID) -> int:
    """Map a role label ("User", "Publisher") to its id, case-insensitively."""
    text = to_text(label)
    if text is None:
        return default_role_id
    return ROLE_IDS.get(text.lower(), default_role_id)


def _person_fields(row: SourceRow) -> Dict[str, str]:
    return {name: text_or_empty(row.get(name)) for name in _PERSON_FIELDS}


def _timestamps(now: datetime) -> Dict[str, datetime]:
    return {"created_at": now, "updated_at": now}


def _effective_date(
    row: SourceRow, now: datetime, report: Optional[ExtractionReport]
) -> datetime:
    raw = row.get("effective_date")
    parsed = parse_datetime(raw)
    if parsed is not None:
        return parsed
    if report is not None and to_text(raw) is not None:
        report.add_parse_gap(
            f"Unparseable effective date {raw!r}; run timestamp used",
            row=row,
            detail={"field": "effective_date"},
        )
    return now


def assemble_company_profiles(
    index: LinkIndex, now: datetime
) -> List[CompanyProfileRecord]:
    return [
        CompanyProfileRecord(
            id=entry.company_id,
            reference_id=entry.company_id,
            **{name: text_or_empty(entry.row.get(name)) for name in _COMPANY_FIELDS},
            **_timestamps(now),
        )
        for entry in index
    ]


def assemble_ceo_profiles(linked: LinkedRows, now: datetime) -> List[CeoProfileRecord]:
    return [
        CeoProfileRecord(
            reference_id=link.reference_id,
            **_person_fields(row),
            **_timestamps(now),
        )
        for row, link in linked
    ]


def assemble_org_admin_profiles(
    linked: LinkedRows,
    now: datetime,
    report: Optional[ExtractionReport] = None,
) -> List[OrgAdminProfileRecord]:
    records = []
    for row, link in linked:
        records.append(
            OrgAdminProfileRecord(
                reference_id=link.reference_id,
                effective_date=_effective_date(row, now, report),
                allow_open_chat=AllowOpenChat.parse(row.get("allow_open_chat")),
                line_id=to_text(row.get("line_id")),
                open_chat_name=to_text(row.get("open_chat_name")),
                is_allow_open_chat_changed=bool(
                    parse_bool(row.get("is_allow_open_chat_changed"))
                ),
                **_person_fields(row),
                **_timestamps(now),
            )
        )
    return records


def assemble_user_requests(
    linked: LinkedRows,
    now: datetime,
    default_role_id: int = DEFAULT_ROLE_ID,
) -> List[UserRequestRecord]:
    """User request rows; requestId is the company's change request id."""
    return [
        UserRequestRecord(
            request_id=link.company_id,
            role_id=resolve_role(row.get("role"), default_role_id),
            line_id=to_text(row.get("line_id")),
            open_chat_name=to_text(row.get("open_chat_name")),
            access_type=AccessType.parse(row.get("access_type")),
            status=ChangeStatus.parse(row.get("status")),
            **_person_fields(row),
            **_timestamps(now),
        )
        for row, link in linked
    ]


def project_portal_user_profiles(
    user_requests: Sequence[UserRequestRecord],
    organization_ids: Dict[int, int],
    now: datetime,
) -> List[PortalUserProfileRecord]:
    """userId is the 1-based position of the user in the request list."""
    return [
        PortalUserProfileRecord(
            user_id=position,
            organization_id=organization_ids[request.request_id],
            full_name_th=request.full_name_th,
            full_name_en=request.full_name_en,
            position_th=request.position_th,
            position_en=request.position_en,
            phone=request.phone,
            line_id=request.line_id,
            open_chat_name=request.open_chat_name,
            **_timestamps(now),
        )
        for position, request in enumerate(user_requests, start=1)
    ]


def project_portal_company_profiles(
    company_profiles: Sequence[CompanyProfileRecord],
    organization_ids: Dict[int, int],
    now: datetime,
) -> List[PortalCompanyProfileRecord]:
    return [
        PortalCompanyProfileRecord(
            organization_id=organization_ids[profile.id],
            reference_id=profile.reference_id,
            last_reviewed_at=now,
            **{name: getattr(profile, name) for name in _COMPANY_FIELDS},
            **_timestamps(now),
        )
        for profile in company_profiles
    ]


def project_portal_ceo_profiles(
    ceo_profiles: Sequence[CeoProfileRecord],
    organization_ids: Dict[int, int],
    now: datetime,
) -> List[PortalCeoProfileRecord]:
    return [
        PortalCeoProfileRecord(
            organization_id=organization_ids[profile.reference_id],
            **{name: getattr(profile, name) for name in _PERSON_FIELDS},
            **_timestamps(now),
        )
        for profile in ceo_profiles
    ]


def assemble(
    index: LinkIndex,
    synthesis: SynthesisResult,
    *,
    ceo_rows: LinkedRows,
    org_admin_rows: LinkedRows,
    user_request_rows: LinkedRows,
    now: datetime,
    default_role_id: int = DEFAULT_ROLE_ID,
    report: Optional[ExtractionReport] = None,
) -> OnboardingBatches:
    """
    Assemble all nine target batches.

    Args:
        index: Frozen company index (defines company ids)
        synthesis: References, change requests and organization ids
        ceo_rows: Linked CEO rows
        org_admin_rows: Linked organization admin rows
        user_request_rows: Linked user request rows
        now: Run timestamp
        default_role_id: Role id for unrecognized role labels
        report: Optional report for unparseable cell values

    Returns:
        OnboardingBatches with Portal projections filled in.
    """
    company_profiles = assemble_company_profiles(index, now)
    ceo_profiles = assemble_ceo_profiles(ceo_rows, now)
    org_admin_profiles = assemble_org_admin_profiles(org_admin_rows, now, report)
    user_requests = assemble_user_requests(user_request_rows, now, default_role_id)

    batches = OnboardingBatches(
        references=list(synthesis.references),
        company_profiles=company_profiles,
        ceo_profiles=ceo_profiles,
        org_admin_profiles=org_admin_profiles,
        change_requests=list(synthesis.change_requests),
        user_requests=user_requests,
        portal_user_profiles=project_portal_user_profiles(
            user_requests, synthesis.organization_ids, now
        ),
        portal_company_profiles=project_portal_company_profiles(
            company_profiles, synthesis.organization_ids, now
        ),
        portal_ceo_profiles=project_portal_ceo_profiles(
            ceo_profiles, synthesis.organization_ids, now
        ),
    )
    logger.info("onboarding.assembler.completed", **batches.counts())
    return batches
