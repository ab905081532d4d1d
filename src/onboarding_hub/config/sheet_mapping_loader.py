"""
YAML loader for workbook sheet aliases and column mappings.

Each entity kind (company, ceo, org_admin, user_request) declares the canonical
sheet name it is read from, the alternative sheet titles seen in source
workbooks, and a mapping of target field -> source column header.

Behavior:
- Missing file: built-in defaults are used (no exception)
- Empty file: built-in defaults are used
- Entity present in the file: replaces the built-in entry for that entity
- Invalid YAML or shape: SheetMappingError
"""

import os
from pathlib import Path
from typing import Dict, List, Literal, Optional

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = structlog.get_logger(__name__)

EntityName = Literal["company", "ceo", "org_admin", "user_request"]

# Environment variable for a custom mapping file
SHEET_MAPPINGS_ENV_VAR = "OBH_SHEET_MAPPINGS"


class SheetMappingError(ValueError):
    """Raised when the sheet mapping configuration cannot be used."""


class EntitySheetMapping(BaseModel):
    """Where one entity kind lives in the workbook and how its columns map."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sheet: str = Field(..., min_length=1, description="Canonical sheet name")
    aliases: List[str] = Field(
        default_factory=list, description="Alternative sheet titles"
    )
    columns: Dict[str, str] = Field(
        ..., min_length=1, description="target field -> source column header"
    )

    @field_validator("columns")
    @classmethod
    def strip_column_names(cls, v: Dict[str, str]) -> Dict[str, str]:
        cleaned: Dict[str, str] = {}
        for target, source in v.items():
            target, source = str(target).strip(), str(source).strip()
            if not target or not source:
                raise ValueError("column mapping entries must be non-empty")
            cleaned[target] = source
        return cleaned

    def sheet_names(self) -> List[str]:
        """Canonical name first, then aliases in declared order."""
        return [self.sheet, *self.aliases]


class SheetMappingConfig(BaseModel):
    """Sheet mapping for all four entity kinds."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    entities: Dict[EntityName, EntitySheetMapping]

    def for_entity(self, entity: str) -> EntitySheetMapping:
        try:
            return self.entities[entity]  # type: ignore[index]
        except KeyError:
            raise SheetMappingError(f"No sheet mapping for entity '{entity}'")


DEFAULT_SHEET_MAPPINGS: Dict[str, Dict[str, object]] = {
    "company": {
        "sheet": "RegistrationCompanyProfiles",
        "aliases": ["Company Profile", "Company"],
        "columns": {
            "name_en": "nameEn",
            "name_th": "nameTh",
            "address_en": "addressEn",
            "address_th": "addressTh",
            "sector": "sector",
            "code": "code",
            "phone": "phone",
            "contact_person_name_en": "contactPersonNameEn",
            "contact_person_name_th": "contactPersonNameTh",
            "contact_person_phone": "contactPersonPhone",
            "contact_person_email": "contactPersonEmail",
        },
    },
    "ceo": {
        "sheet": "RegistrationCeoProfiles",
        "aliases": ["Ceo Profile", "Ceo"],
        "columns": {
            "remark": "Remark",
            "full_name_en": "fullNameEn",
            "full_name_th": "fullNameTh",
            "position_en": "positionEn",
            "position_th": "positionTh",
            "phone": "phone",
            "email": "email",
        },
    },
    "org_admin": {
        "sheet": "RegistrationOrgAdminProfiles",
        "aliases": ["Organization Admin Profile", "OrgAdmin"],
        "columns": {
            "company": "Company",
            "full_name_en": "fullNameEn",
            "full_name_th": "fullNameTh",
            "position_en": "positionEn",
            "position_th": "positionTh",
            "phone": "phone",
            "email": "email",
            "effective_date": "EffectiveDate",
            "line_id": "lineId",
            "open_chat_name": "openChatName",
            "allow_open_chat": "allowOpenChat",
            "is_allow_open_chat_changed": "isAllowOpenChatChanged",
        },
    },
    "user_request": {
        "sheet": "PortalUserRequestLists",
        "aliases": ["User Request List", "UserList"],
        "columns": {
            "company": "Company",
            "full_name_en": "fullNameEn",
            "full_name_th": "fullNameTh",
            "position_en": "positionEn",
            "position_th": "positionTh",
            "phone": "phone",
            "email": "email",
            "line_id": "lineId",
            "open_chat_name": "openChatName",
            "access_type": "accessType",
            "status": "status",
            "role": "role",
        },
    },
}


def default_sheet_mapping_config() -> SheetMappingConfig:
    """Built-in mapping matching the standard onboarding template."""
    return SheetMappingConfig(entities=DEFAULT_SHEET_MAPPINGS)  # type: ignore[arg-type]


def _resolve_config_path(config_path: Optional[Path]) -> Optional[Path]:
    if config_path is not None:
        return config_path
    env_path = os.environ.get(SHEET_MAPPINGS_ENV_VAR)
    if env_path:
        return Path(env_path)
    return None


def load_sheet_mapping_config(config_path: Optional[Path] = None) -> SheetMappingConfig:
    """
    Load sheet mappings from YAML, layered over the built-in defaults.

    Args:
        config_path: Optional YAML path. Falls back to OBH_SHEET_MAPPINGS, and
            to the built-in defaults when neither is given or the file is absent.

    Returns:
        Validated SheetMappingConfig.

    Raises:
        SheetMappingError: If the YAML is invalid or fails validation.
    """
    path = _resolve_config_path(config_path)
    if path is None or not path.exists():
        logger.debug(
            "sheet_mapping_loader.using_defaults",
            config_path=str(path) if path else None,
        )
        return default_sheet_mapping_config()

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(
            "sheet_mapping_loader.yaml_parse_error",
            config_path=str(path),
            error=str(e),
        )
        raise SheetMappingError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        logger.debug("sheet_mapping_loader.empty_file", config_path=str(path))
        return default_sheet_mapping_config()

    if not isinstance(content, dict) or not isinstance(content.get("entities"), dict):
        logger.error(
            "sheet_mapping_loader.invalid_format",
            config_path=str(path),
            actual_type=type(content).__name__,
        )
        raise SheetMappingError(
            f"Invalid sheet mapping format in {path}: expected an 'entities' mapping"
        )

    merged: Dict[str, object] = dict(DEFAULT_SHEET_MAPPINGS)
    merged.update(content["entities"])

    try:
        config = SheetMappingConfig(entities=merged)  # type: ignore[arg-type]
    except ValidationError as e:
        logger.error(
            "sheet_mapping_loader.validation_failed",
            config_path=str(path),
            error=str(e),
        )
        raise SheetMappingError(f"Sheet mapping validation failed for {path}: {e}") from e

    logger.info(
        "sheet_mapping_loader.loaded",
        config_path=str(path),
        overridden_entities=sorted(content["entities"].keys()),
    )
    return config
