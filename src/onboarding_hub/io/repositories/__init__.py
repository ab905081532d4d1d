"""Database repositories used by the onboarding pipeline."""

from .organization_repository import OrganizationRepository, SqlCodeRegistry

__all__ = ["OrganizationRepository", "SqlCodeRegistry"]
