"""
Onboarding batch loader for OnboardingHub.

Inserts assembled collections inside one caller-owned SQLAlchemy transaction,
with quoted identifiers and chunked parameterized inserts.
"""

from .insert_builder import build_insert_sql, get_column_order
from .models import LoadResult, OnboardingLoaderError
from .onboarding_loader import OnboardingWarehouseLoader
from .sql_utils import quote_ident, quote_qualified

__all__ = [
    "LoadResult",
    "OnboardingLoaderError",
    "OnboardingWarehouseLoader",
    "build_insert_sql",
    "get_column_order",
    "quote_ident",
    "quote_qualified",
]
