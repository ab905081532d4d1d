"""
Company identity key normalization.

Every identity comparison in the linker goes through these two functions, so
the same spelling variants always collapse to the same key:

- "Acme Corp", " acme corp ", "ACME-Corp." -> "acmecorp"
- "admin@beta.co.th" -> "beta"

Both functions are total: they never raise and return None when no usable key
can be derived.
"""

import math
import re
from typing import Any, Optional

# Whitespace, dots and hyphens carry no identity in company names
_STRIP_PATTERN = re.compile(r"[\s.\-]")


def normalize_name(text: Any) -> Optional[str]:
    """
    Canonicalize a free-text company name into a comparable key.

    Operations (in order):
    1. Trim surrounding whitespace
    2. Lowercase
    3. Remove all whitespace, dots and hyphens

    Args:
        text: Raw company name. Non-string scalars (e.g. numeric cells) are
            stringified first.

    Returns:
        Normalized key, or None for absent input or input that normalizes to
        an empty string.

    Examples:
        >>> normalize_name("Acme Corp")
        'acmecorp'
        >>> normalize_name("beta.co")
        'betaco'
        >>> normalize_name("  ") is None
        True
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, float) and math.isnan(text):
        return None

    name = text if isinstance(text, str) else str(text)
    name = _STRIP_PATTERN.sub("", name.strip().lower())

    return name or None


def company_key_from_email(email: Any) -> Optional[str]:
    """
    Derive a company key from the domain of an email address.

    The domain is the text after the first "@"; the key is the part of the
    domain before its first "." run through normalize_name.

    Examples:
        >>> company_key_from_email("admin@beta.co")
        'beta'
        >>> company_key_from_email("somchai@jitta.co.th")
        'jitta'
        >>> company_key_from_email("not-an-email") is None
        True
    """
    if not isinstance(email, str) or "@" not in email:
        return None

    domain = email.split("@")[1]
    if not domain:
        return None

    return normalize_name(domain.split(".")[0])
