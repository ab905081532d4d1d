"""Onboarding domain constants: target collections, workflow values, role table."""

from typing import Dict, List

# Target collections, in the order they must be inserted so every foreign key
# points at an already-inserted row.
REGISTRATION_REFERENCES = "RegistrationReferences"
REGISTRATION_COMPANY_PROFILES = "RegistrationCompanyProfiles"
REGISTRATION_CEO_PROFILES = "RegistrationCeoProfiles"
REGISTRATION_ORG_ADMIN_PROFILES = "RegistrationOrgAdminProfiles"
PORTAL_USER_CHANGE_REQUESTS = "PortalUserChangeRequests"
PORTAL_USER_REQUEST_LISTS = "PortalUserRequestLists"
PORTAL_USER_PROFILES = "PortalUserProfiles"
PORTAL_COMPANY_PROFILES = "PortalCompanyProfiles"
PORTAL_CEO_PROFILES = "PortalCeoProfiles"

COLLECTION_LOAD_ORDER: List[str] = [
    REGISTRATION_REFERENCES,
    REGISTRATION_COMPANY_PROFILES,
    REGISTRATION_CEO_PROFILES,
    REGISTRATION_ORG_ADMIN_PROFILES,
    PORTAL_USER_CHANGE_REQUESTS,
    PORTAL_USER_REQUEST_LISTS,
    PORTAL_USER_PROFILES,
    PORTAL_COMPANY_PROFILES,
    PORTAL_CEO_PROFILES,
]

ORGANIZATIONS = "Organizations"

# Workflow values assigned to synthesized records
REFERENCE_STATUS_PENDING_CEO_APPROVAL = "PENDING_CEO_APPROVAL"
REFERENCE_REQUEST_TYPE_CREATE = "CREATE"
CHANGE_REQUEST_TYPE_INTERNAL = "INTERNAL"

# <prefix><8 uppercase hex>
CODE_HEX_LENGTH = 8

# Role label (case-insensitive) -> role id. Anything else gets the configured default.
ROLE_IDS: Dict[str, int] = {
    "user": 3,
    "publisher": 4,
}
DEFAULT_ROLE_ID = 3
