"""
Onboarding domain: workbook rows -> linked, synthesized, assembled records.

The pipeline entry points live in ``onboarding_hub.domain.onboarding.service``
(``build_onboarding_batches``, ``run_onboarding``); this package exports the
record models and constants shared with the I/O layer.
"""

from .constants import COLLECTION_LOAD_ORDER, ROLE_IDS
from .models import (
    AccessType,
    AllowOpenChat,
    ChangeStatus,
    OnboardingBatches,
)

__all__ = [
    "AccessType",
    "AllowOpenChat",
    "COLLECTION_LOAD_ORDER",
    "ChangeStatus",
    "OnboardingBatches",
    "ROLE_IDS",
]
