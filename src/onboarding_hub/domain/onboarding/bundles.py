"""Onboarding domain - registration bundles.

Regroups assembled batches per company into registration documents of the
shape consumed by the registration API:

    {"companyProfile": {...}, "ceoProfile": {...} | None,
     "orgAdminProfile": {...} | None, "userRequestList": [...]}

Values are JSON-ready (dates as ISO-8601 strings).
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

from .models import OnboardingBatches, OnboardingRecord

_BOOKKEEPING_FIELDS = {"created_at", "updated_at", "reference_id", "request_id", "id"}
_CONTACT_FIELDS = (
    "contact_person_phone",
    "contact_person_email",
    "contact_person_name_en",
    "contact_person_name_th",
)


def _document(record: OnboardingRecord) -> Dict[str, Any]:
    return record.model_dump(by_alias=True, mode="json", exclude=_BOOKKEEPING_FIELDS)


def _first(records: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    return records[0] if records else None


def build_registration_bundles(batches: OnboardingBatches) -> List[Dict[str, Any]]:
    """
    One bundle per company, in company id order.

    A company with several CEO or admin rows keeps the first of each; every
    user request is listed.
    """
    references = {reference.id: reference for reference in batches.references}

    ceos: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
    for ceo in batches.ceo_profiles:
        ceos[ceo.reference_id].append(_document(ceo))

    admins: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
    for admin in batches.org_admin_profiles:
        admins[admin.reference_id].append(_document(admin))

    users: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
    for user in batches.user_requests:
        users[user.request_id].append(_document(user))

    bundles: List[Dict[str, Any]] = []
    for profile in batches.company_profiles:
        company = _document(profile)
        reference = references.get(profile.reference_id)
        if reference is not None:
            company.update(
                reference.model_dump(
                    by_alias=True, mode="json", include=set(_CONTACT_FIELDS)
                )
            )
        bundles.append(
            {
                "companyProfile": company,
                "ceoProfile": _first(ceos[profile.id]),
                "orgAdminProfile": _first(admins[profile.id]),
                "userRequestList": users[profile.id],
            }
        )
    return bundles
