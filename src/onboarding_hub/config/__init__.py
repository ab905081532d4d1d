"""Configuration management for OnboardingHub.

Usage:
    >>> from onboarding_hub.config import get_settings
    >>> settings = get_settings()
    >>> settings.reference_code_prefix
    'PT'
"""

from onboarding_hub.config.settings import Settings, get_settings
from onboarding_hub.config.sheet_mapping_loader import (
    EntitySheetMapping,
    SheetMappingConfig,
    SheetMappingError,
    default_sheet_mapping_config,
    load_sheet_mapping_config,
)

__all__ = [
    "EntitySheetMapping",
    "Settings",
    "SheetMappingConfig",
    "SheetMappingError",
    "default_sheet_mapping_config",
    "get_settings",
    "load_sheet_mapping_config",
]
