"""Onboarding domain - Reference/Request Synthesizer.

For every company accepted into the LinkIndex, in discovery order, this stage
creates one RegistrationReference and one PortalUserChangeRequest, both with
id = the company's discovery rank, and resolves the company's external
organization id. It completes for all companies before any person record is
assembled.

Codes are ``<prefix><8 uppercase hex>``. A generated code that is already
persisted (per the CodeRegistry) or already issued in this run is discarded
and regenerated, up to ``max_attempts`` times.
"""

import random
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Set

from onboarding_hub.infrastructure.identity.linker import COMPANY_NAME_FIELD
from onboarding_hub.infrastructure.identity.types import LinkIndex
from onboarding_hub.utils.logging import get_logger

from .constants import CODE_HEX_LENGTH
from .helpers import text_or_empty
from .models import ChangeRequestRecord, ReferenceRecord

logger = get_logger(__name__)


class CodeGenerationError(Exception):
    """Raised when no conflict-free code is found within the attempt budget."""

    def __init__(self, prefix: str, attempts: int):
        self.prefix = prefix
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique '{prefix}' code after {attempts} attempt(s)"
        )


class CodeRegistry(Protocol):
    """Knows which codes are already persisted."""

    def exists(self, code: str) -> bool:
        ...


class OrganizationDirectory(Protocol):
    """Resolves an organization id by exact name, creating it when absent."""

    def lookup_or_create(self, name: str) -> int:
        ...


class InMemoryCodeRegistry:
    """CodeRegistry backed by a set; used for dry runs and tests."""

    def __init__(self, codes: Optional[Set[str]] = None) -> None:
        self.codes: Set[str] = set(codes or ())

    def exists(self, code: str) -> bool:
        return code in self.codes


class InMemoryOrganizationDirectory:
    """OrganizationDirectory that hands out sequential ids from ``start``."""

    def __init__(self, start: int = 1) -> None:
        self._ids: Dict[str, int] = {}
        self._next_id = start

    def lookup_or_create(self, name: str) -> int:
        if name not in self._ids:
            self._ids[name] = self._next_id
            self._next_id += 1
        return self._ids[name]

    @property
    def organizations(self) -> Dict[str, int]:
        return dict(self._ids)


class CodeGenerator:
    """
    Produces ``<prefix><8 uppercase hex>`` codes.

    Uses the operating system's cryptographic source unless a seed is given,
    in which case the sequence is reproducible.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed) if seed is not None else None

    def _hex(self) -> str:
        if self._rng is None:
            return secrets.token_hex(CODE_HEX_LENGTH // 2)
        return f"{self._rng.getrandbits(CODE_HEX_LENGTH * 4):0{CODE_HEX_LENGTH}x}"

    def generate(self, prefix: str) -> str:
        return f"{prefix}{self._hex().upper()}"


def generate_unique_code(
    generator: CodeGenerator,
    prefix: str,
    registry: CodeRegistry,
    issued: Set[str],
    max_attempts: int,
) -> str:
    """
    Generate a code that is neither persisted nor already issued in this run.

    The returned code is added to ``issued``.

    Raises:
        CodeGenerationError: When every attempt collides.
    """
    for attempt in range(1, max_attempts + 1):
        code = generator.generate(prefix)
        if code in issued or registry.exists(code):
            logger.warning(
                "onboarding.synthesizer.code_conflict",
                prefix=prefix,
                attempt=attempt,
                max_attempts=max_attempts,
            )
            continue
        issued.add(code)
        return code

    logger.error(
        "onboarding.synthesizer.code_generation_failed",
        prefix=prefix,
        attempts=max_attempts,
    )
    raise CodeGenerationError(prefix, max_attempts)


@dataclass
class SynthesisResult:
    """
    Attributes:
        references: One ReferenceRecord per company, id order
        change_requests: One ChangeRequestRecord per company, id order
        organization_ids: company id -> external organization id
    """

    references: List[ReferenceRecord] = field(default_factory=list)
    change_requests: List[ChangeRequestRecord] = field(default_factory=list)
    organization_ids: Dict[int, int] = field(default_factory=dict)


def synthesize(
    index: LinkIndex,
    *,
    organizations: OrganizationDirectory,
    code_registry: CodeRegistry,
    code_generator: CodeGenerator,
    now: datetime,
    reference_prefix: str = "PT",
    change_request_prefix: str = "USERCR",
    max_attempts: int = 5,
) -> SynthesisResult:
    """
    Create reference and change-request records for every indexed company.

    Args:
        index: Frozen company index for this run
        organizations: Organization id lookup-or-create collaborator
        code_registry: Persisted-code lookup used to avoid collisions
        code_generator: Code source (seeded for deterministic runs)
        now: Run timestamp used for createdAt/updatedAt
        reference_prefix: Prefix for reference codes
        change_request_prefix: Prefix for change request codes
        max_attempts: Code generation attempts per code

    Returns:
        SynthesisResult in company id order.

    Raises:
        CodeGenerationError: Before any record is persisted, when a code
            cannot be made unique.
    """
    result = SynthesisResult()
    issued: Set[str] = set()

    for entry in index:
        company = entry.row
        rank = entry.company_id

        result.references.append(
            ReferenceRecord(
                id=rank,
                code=generate_unique_code(
                    code_generator, reference_prefix, code_registry, issued, max_attempts
                ),
                contact_person_phone=text_or_empty(company.get("contact_person_phone")),
                contact_person_email=text_or_empty(company.get("contact_person_email")),
                contact_person_name_en=text_or_empty(
                    company.get("contact_person_name_en")
                ),
                contact_person_name_th=text_or_empty(
                    company.get("contact_person_name_th")
                ),
                created_at=now,
                updated_at=now,
            )
        )

        organization_id = organizations.lookup_or_create(
            text_or_empty(company.get(COMPANY_NAME_FIELD))
        )
        result.organization_ids[rank] = organization_id

        result.change_requests.append(
            ChangeRequestRecord(
                id=rank,
                code=generate_unique_code(
                    code_generator,
                    change_request_prefix,
                    code_registry,
                    issued,
                    max_attempts,
                ),
                reference_id=rank,
                organization_id=organization_id,
                created_at=now,
                updated_at=now,
            )
        )

    logger.info(
        "onboarding.synthesizer.completed",
        company_count=len(result.references),
        organization_count=len(set(result.organization_ids.values())),
    )
    return result
