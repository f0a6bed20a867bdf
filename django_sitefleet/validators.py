import re

from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _

from .conf import settings

TENANT_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$|^[a-z0-9]$")

CONTENT_TYPE_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]{0,49}$")

# Column width of the name fields; the effective limit is max_tenant_name_length().
MAX_TENANT_NAME_LENGTH = 63

# PostgreSQL truncates longer identifiers and MySQL refuses names above 64.
MAX_STORE_NAME_LENGTH = 63


def max_tenant_name_length() -> int:
    """Longest tenant name whose store name still fits ``MAX_STORE_NAME_LENGTH``."""
    return min(MAX_TENANT_NAME_LENGTH, MAX_STORE_NAME_LENGTH - len(settings.STORE_PREFIX))


def is_valid_tenant_name(name) -> bool:
    return (
        isinstance(name, str)
        and len(name) <= max_tenant_name_length()
        and TENANT_NAME_PATTERN.match(name) is not None
    )


def validate_tenant_name(value):
    """
    Validate a tenant name (the subdomain the site is served on):
    - Only lowercase letters, digits, and hyphens.
    - Cannot start or end with a hyphen.
    - Short enough that the prefixed store name stays within 63 characters
      (58 with the default ``site_`` prefix).
    """
    if not is_valid_tenant_name(value):
        raise ValidationError(
            _(
                "%(value)s is not a valid tenant name. Use at most %(limit)d "
                "lowercase letters, digits and hyphens; it cannot start or end "
                "with a hyphen."
            ),
            code="invalid_tenant_name",
            params={"value": value, "limit": max_tenant_name_length()},
        )


def is_valid_content_type_name(name) -> bool:
    return CONTENT_TYPE_NAME_PATTERN.match(name or "") is not None
