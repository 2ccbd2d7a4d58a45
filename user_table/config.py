import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv
from sqlalchemy.engine import make_url

from .exceptions import ConfigurationError

AUTO_SCHEME = 'auto'


class IdentityScheme(Enum):
    """How the wiki schema records who did what."""

    LEGACY = 'legacy'  # user id and name stored on every content row
    ACTOR = 'actor'    # content rows point at the actor table


def parse_identity_scheme(value: Union[str, IdentityScheme, None]) -> Optional[IdentityScheme]:
    """
    Parse an identity scheme setting.

    Args:
        value: 'legacy', 'actor', 'auto', an IdentityScheme or None

    Returns:
        The matching IdentityScheme, or None when the scheme should be
        detected from the database.
    """
    if value is None or isinstance(value, IdentityScheme):
        return value

    normalized = value.strip().lower()
    if normalized in ('', AUTO_SCHEME):
        return None
    try:
        return IdentityScheme(normalized)
    except ValueError:
        choices = ', '.join([AUTO_SCHEME] + [scheme.value for scheme in IdentityScheme])
        raise ConfigurationError(f"Unknown identity scheme '{value}', expected one of: {choices}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'")


@dataclass(frozen=True)
class PopulateConfig:
    """
    Settings for one user table population run.

    Built once at startup and handed to the adapter, the drivers and the
    orchestrator. Nothing downstream reads the environment.
    """

    database_url: str
    database_name: Optional[str] = None
    identity_scheme: Optional[IdentityScheme] = None
    batch_size: int = 200
    progress_interval: int = 500
    min_user_id: int = 0
    pool_size: int = 5
    max_overflow: int = 10
    sql_echo: bool = False

    def __post_init__(self):
        if not self.database_url:
            raise ConfigurationError("DATABASE_URL environment variable is required")
        if self.batch_size <= 0:
            raise ConfigurationError("batch_size must be > 0")
        if self.progress_interval <= 0:
            raise ConfigurationError("progress_interval must be > 0")
        if self.pool_size <= 0:
            raise ConfigurationError("pool_size must be > 0")
        if self.max_overflow < 0:
            raise ConfigurationError("max_overflow must be >= 0")

    @property
    def effective_database_url(self) -> str:
        """Database URL with the --db override applied, if any."""
        if not self.database_name:
            return self.database_url
        url = make_url(self.database_url).set(database=self.database_name)
        return url.render_as_string(hide_password=False)

    @classmethod
    def from_env(cls, **overrides: Any) -> 'PopulateConfig':
        """
        Build configuration from environment variables (and .env).

        Keyword overrides take precedence; overrides set to None are ignored
        so parsed command-line arguments can be passed straight through.
        """
        load_dotenv()

        settings: Dict[str, Any] = {
            'database_url': os.getenv('DATABASE_URL', ''),
            'database_name': os.getenv('WIKI_DB_NAME') or None,
            'identity_scheme': os.getenv('WIKI_IDENTITY_SCHEME', AUTO_SCHEME),
            'batch_size': _env_int('POPULATE_BATCH_SIZE', 200),
            'progress_interval': _env_int('POPULATE_PROGRESS_INTERVAL', 500),
            'min_user_id': _env_int('POPULATE_MIN_USER_ID', 0),
            'pool_size': _env_int('DB_POOL_SIZE', 5),
            'max_overflow': _env_int('DB_MAX_OVERFLOW', 10),
            'sql_echo': os.getenv('ENABLE_SQL_LOGGING', 'false').lower() == 'true',
        }
        settings.update({key: value for key, value in overrides.items() if value is not None})
        settings['identity_scheme'] = parse_identity_scheme(settings['identity_scheme'])

        return cls(**settings)
