"""
Registry of tables that embed a user id and user name.

The registry is static. Which entries are usable depends on the identity
scheme: the legacy scheme uses every table except ``actor``, the actor scheme
uses ``actor`` alone.
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, NamedTuple, Optional

from .config import IdentityScheme
from .exceptions import InvalidTableError, TablesWithActorSchemeError

ACTOR_TABLE = 'actor'


class UserColumns(NamedTuple):
    """Columns holding the user id and user name in a source table."""

    id_column: str
    name_column: str


VALID_TABLES: 'OrderedDict[str, UserColumns]' = OrderedDict([
    ('revision', UserColumns('rev_user', 'rev_user_text')),
    ('logging', UserColumns('log_user', 'log_user_text')),
    ('image', UserColumns('img_user', 'img_user_text')),
    ('oldimage', UserColumns('oi_user', 'oi_user_text')),
    ('filearchive', UserColumns('fa_user', 'fa_user_text')),
    ('archive', UserColumns('ar_user', 'ar_user_text')),
    ('ipblocks', UserColumns('ipb_by', 'ipb_by_text')),
    (ACTOR_TABLE, UserColumns('actor_id', 'actor_name')),
])


def tables_for_scheme(scheme: IdentityScheme) -> Dict[str, UserColumns]:
    """Return the registry entries usable under the given identity scheme."""
    if scheme is IdentityScheme.ACTOR:
        return OrderedDict([(ACTOR_TABLE, VALID_TABLES[ACTOR_TABLE])])
    return OrderedDict(
        (name, columns) for name, columns in VALID_TABLES.items() if name != ACTOR_TABLE
    )


def get_user_columns(table: str, scheme: Optional[IdentityScheme] = None) -> UserColumns:
    """
    Resolve the id and name columns for a table.

    Args:
        table: Source table name
        scheme: Restrict the lookup to the tables valid for this scheme

    Raises:
        InvalidTableError: If the table is not a valid source table
    """
    registry = VALID_TABLES if scheme is None else tables_for_scheme(scheme)
    if table not in registry:
        raise InvalidTableError([table])
    return registry[table]


def parse_table_list(value: Optional[str]) -> Optional[List[str]]:
    """
    Split a pipe separated table list, as given on the command line.

    A blank value becomes a single empty name, which no scheme accepts.
    """
    if value is None:
        return None
    tables = [table.strip() for table in value.split('|') if table.strip()]
    return tables or ['']


def select_tables(scheme: IdentityScheme, requested: Optional[Iterable[str]] = None) -> List[str]:
    """
    Decide which tables a run should populate users from.

    Args:
        scheme: Identity scheme in use
        requested: Tables asked for by the operator, or None for all

    Returns:
        Table names in processing order

    Raises:
        TablesWithActorSchemeError: If tables were requested under the actor scheme
        InvalidTableError: If any requested table is not valid for the scheme
    """
    registry = tables_for_scheme(scheme)

    if scheme is IdentityScheme.ACTOR:
        if requested is not None:
            raise TablesWithActorSchemeError()
        return list(registry)

    if requested is None:
        return list(registry)

    requested = list(requested)
    invalid = [table for table in requested if table not in registry]
    if invalid:
        raise InvalidTableError(invalid)

    # Keep the operator's order, drop repeats
    return list(OrderedDict.fromkeys(requested))
