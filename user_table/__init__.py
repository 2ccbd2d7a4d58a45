"""
User Table Population
=====================

Backfills the canonical wiki ``user`` table with stub accounts built from the
user id and name columns embedded in other tables, and links ``actor`` rows to
the accounts it finds.
"""

from .config import IdentityScheme, PopulateConfig
from .exceptions import (
    ConfigurationError,
    CursorStalledError,
    InvalidTableError,
    TablesWithActorSchemeError,
    UnsupportedDatabaseError,
    UsageError,
    UserTableError,
)
from .ip_utils import is_ip_address

__all__ = [
    'IdentityScheme',
    'PopulateConfig',
    'UserTableError',
    'ConfigurationError',
    'UsageError',
    'InvalidTableError',
    'TablesWithActorSchemeError',
    'UnsupportedDatabaseError',
    'CursorStalledError',
    'is_ip_address',
]
