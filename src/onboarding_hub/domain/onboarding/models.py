"""Onboarding domain - Models.

Closed value enumerations plus the immutable records written to each target
collection. Field names are snake_case in Python and dump to the camelCase
column names of the target schema via ``to_row()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .constants import (
    CHANGE_REQUEST_TYPE_INTERNAL,
    COLLECTION_LOAD_ORDER,
    PORTAL_CEO_PROFILES,
    PORTAL_COMPANY_PROFILES,
    PORTAL_USER_CHANGE_REQUESTS,
    PORTAL_USER_PROFILES,
    PORTAL_USER_REQUEST_LISTS,
    REFERENCE_REQUEST_TYPE_CREATE,
    REFERENCE_STATUS_PENDING_CEO_APPROVAL,
    REGISTRATION_CEO_PROFILES,
    REGISTRATION_COMPANY_PROFILES,
    REGISTRATION_ORG_ADMIN_PROFILES,
    REGISTRATION_REFERENCES,
)
from .helpers import parse_bool


class _ClosedEnum(str, Enum):
    """String enum whose ``parse()`` never raises; unknown input yields the default."""

    @classmethod
    def default(cls) -> "_ClosedEnum":
        raise NotImplementedError

    @classmethod
    def parse(cls, value: Any) -> "_ClosedEnum":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            candidate = value.strip().upper()
            for member in cls:
                if member.value == candidate:
                    return member
        return cls.default()


class AccessType(_ClosedEnum):
    """Channels a portal user is granted. Defaults to PORTAL."""

    BOTH = "BOTH"
    OPENCHAT = "OPENCHAT"
    PORTAL = "PORTAL"

    @classmethod
    def default(cls) -> "AccessType":
        return cls.PORTAL


class ChangeStatus(_ClosedEnum):
    """Requested change for a user row. Defaults to ADD."""

    ADD = "ADD"
    DELETE = "DELETE"
    UNCHANGE = "UNCHANGE"
    UPDATE = "UPDATE"

    @classmethod
    def default(cls) -> "ChangeStatus":
        return cls.ADD


class AllowOpenChat(_ClosedEnum):
    """Whether an organization admin may use open chat. Defaults to NO."""

    YES = "YES"
    NO = "NO"

    @classmethod
    def default(cls) -> "AllowOpenChat":
        return cls.NO

    @classmethod
    def parse(cls, value: Any) -> "AllowOpenChat":
        """Also accept boolean cells and truthy spellings such as TRUE, 1 or y."""
        member = super().parse(value)
        if member is cls.NO and not isinstance(value, cls) and parse_bool(value):
            return cls.YES
        return member


class OnboardingRecord(BaseModel):
    """Base for persisted records: frozen, camelCase aliases, enum values on dump."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )

    def to_row(self) -> Dict[str, Any]:
        """Dump with target column names."""
        return self.model_dump(by_alias=True)


class TimestampedRecord(OnboardingRecord):
    created_at: datetime
    updated_at: datetime


class PersonRecord(TimestampedRecord):
    """Bilingual person fields shared by CEO, org-admin and user rows."""

    full_name_th: str = ""
    full_name_en: str = ""
    position_th: str = ""
    position_en: str = ""
    phone: str = ""
    email: str = ""


class ReferenceRecord(TimestampedRecord):
    id: int = Field(..., ge=1)
    code: str
    status: str = REFERENCE_STATUS_PENDING_CEO_APPROVAL
    request_type: str = REFERENCE_REQUEST_TYPE_CREATE
    contact_person_phone: str = ""
    contact_person_email: str = ""
    contact_person_name_en: str = ""
    contact_person_name_th: str = ""


class CompanyProfileRecord(TimestampedRecord):
    id: int = Field(..., ge=1)
    name_th: str = ""
    name_en: str = ""
    sector: str = ""
    code: str = ""
    address_th: str = ""
    address_en: str = ""
    phone: str = ""
    reference_id: int = Field(..., ge=1)


class CeoProfileRecord(PersonRecord):
    reference_id: int = Field(..., ge=1)


class OrgAdminProfileRecord(PersonRecord):
    reference_id: int = Field(..., ge=1)
    effective_date: datetime
    allow_open_chat: AllowOpenChat = AllowOpenChat.NO
    line_id: Optional[str] = None
    open_chat_name: Optional[str] = None
    is_allow_open_chat_changed: bool = False


class ChangeRequestRecord(TimestampedRecord):
    id: int = Field(..., ge=1)
    code: str
    type: str = CHANGE_REQUEST_TYPE_INTERNAL
    reference_id: int = Field(..., ge=1)
    organization_id: int


class UserRequestRecord(PersonRecord):
    request_id: int = Field(..., ge=1)
    role_id: int
    line_id: Optional[str] = None
    open_chat_name: Optional[str] = None
    access_type: AccessType = AccessType.PORTAL
    status: ChangeStatus = ChangeStatus.ADD


class PortalUserProfileRecord(TimestampedRecord):
    user_id: int = Field(..., ge=1)
    organization_id: int
    full_name_th: str = ""
    full_name_en: str = ""
    position_th: str = ""
    position_en: str = ""
    phone: str = ""
    line_id: Optional[str] = None
    open_chat_name: Optional[str] = None


class PortalCompanyProfileRecord(TimestampedRecord):
    organization_id: int
    reference_id: int = Field(..., ge=1)
    name_th: str = ""
    name_en: str = ""
    sector: str = ""
    code: str = ""
    address_th: str = ""
    address_en: str = ""
    phone: str = ""
    last_reviewed_at: datetime


class PortalCeoProfileRecord(PersonRecord):
    organization_id: int


@dataclass
class OnboardingBatches:
    """One ordered batch of records per target collection."""

    references: List[ReferenceRecord] = field(default_factory=list)
    company_profiles: List[CompanyProfileRecord] = field(default_factory=list)
    ceo_profiles: List[CeoProfileRecord] = field(default_factory=list)
    org_admin_profiles: List[OrgAdminProfileRecord] = field(default_factory=list)
    change_requests: List[ChangeRequestRecord] = field(default_factory=list)
    user_requests: List[UserRequestRecord] = field(default_factory=list)
    portal_user_profiles: List[PortalUserProfileRecord] = field(default_factory=list)
    portal_company_profiles: List[PortalCompanyProfileRecord] = field(
        default_factory=list
    )
    portal_ceo_profiles: List[PortalCeoProfileRecord] = field(default_factory=list)

    def by_collection(self) -> Dict[str, List[OnboardingRecord]]:
        """Batches keyed by collection name, in load order."""
        batches: Dict[str, List[OnboardingRecord]] = {
            REGISTRATION_REFERENCES: list(self.references),
            REGISTRATION_COMPANY_PROFILES: list(self.company_profiles),
            REGISTRATION_CEO_PROFILES: list(self.ceo_profiles),
            REGISTRATION_ORG_ADMIN_PROFILES: list(self.org_admin_profiles),
            PORTAL_USER_CHANGE_REQUESTS: list(self.change_requests),
            PORTAL_USER_REQUEST_LISTS: list(self.user_requests),
            PORTAL_USER_PROFILES: list(self.portal_user_profiles),
            PORTAL_COMPANY_PROFILES: list(self.portal_company_profiles),
            PORTAL_CEO_PROFILES: list(self.portal_ceo_profiles),
        }
        return {name: batches[name] for name in COLLECTION_LOAD_ORDER}

    def as_rows(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            name: [record.to_row() for record in records]
            for name, records in self.by_collection().items()
        }

    def counts(self) -> Dict[str, int]:
        return {name: len(records) for name, records in self.by_collection().items()}


__all__ = [
    "AccessType",
    "AllowOpenChat",
    "CeoProfileRecord",
    "ChangeRequestRecord",
    "ChangeStatus",
    "CompanyProfileRecord",
    "OnboardingBatches",
    "OnboardingRecord",
    "OrgAdminProfileRecord",
    "PersonRecord",
    "PortalCeoProfileRecord",
    "PortalCompanyProfileRecord",
    "PortalUserProfileRecord",
    "ReferenceRecord",
    "TimestampedRecord",
    "UserRequestRecord",
]
