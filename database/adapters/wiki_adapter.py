"""
Database adapter for the wiki user table population job.

This adapter wraps the SQLAlchemy engine and exposes the handful of store
operations the population passes need: an anti-join scan for ids missing
from the user table, a conflict-tolerant stub user insert, an exact name
lookup, and a keyed actor update.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

import pandas as pd
from sqlalchemy import Engine, create_engine, inspect, insert, select, text, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool
from sqlalchemy.sql.base import Executable

from database.schema import SOURCE_TABLES, actor_table, user_table
from user_table.config import PopulateConfig
from user_table.exceptions import UnsupportedDatabaseError
from user_table.registry import get_user_columns

logger = logging.getLogger(__name__)

# Stub accounts carry no credentials, email or real name
STUB_USER_DEFAULTS = {
    'user_real_name': '',
    'user_password': '',
    'user_newpassword': '',
    'user_email': '',
    'user_token': '',
}


def wiki_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a datetime as a 14 character wiki timestamp (UTC)."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime('%Y%m%d%H%M%S')


class WikiDatabaseAdapter:
    """
    Adapter for the wiki database used by the user table population job.

    Each write runs on its own connection and commits immediately, so an
    interrupted run leaves only complete rows behind and can simply be
    started again.
    """

    def __init__(self, database_url: str, pool_size: int = 5, max_overflow: int = 10,
                 echo: bool = False):
        """
        Initialize the database connection.

        Args:
            database_url (str): SQLAlchemy connection URL
            pool_size (int): Number of connections to keep in the pool
            max_overflow (int): Maximum overflow connections beyond pool_size
            echo (bool): Log every SQL statement
        """
        self.database_url = database_url
        self.engine = self._create_engine(database_url, pool_size, max_overflow, echo)

        # Fail fast on bad credentials or a wrong database name
        self._test_connection()

        logger.info(f"Wiki database adapter initialized ({self.dialect_name})")

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def _create_engine(self, database_url: str, pool_size: int, max_overflow: int,
                       echo: bool) -> Engine:
        """
        Create the SQLAlchemy engine.

        SQLite manages its own pooling; server databases get a QueuePool that
        pre-pings connections, since a full run can take hours.
        """
        if make_url(database_url).get_backend_name() == 'sqlite':
            return create_engine(database_url, echo=echo)

        return create_engine(
            database_url,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
            echo=echo,
        )

    def _test_connection(self) -> None:
        """Check connectivity and warn when the user table is missing."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))

            if not self.has_table(user_table.name):
                logger.warning(f"⚠️ Table '{user_table.name}' not found in database")

        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            raise ConnectionError(f"Cannot connect to database: {e}")

    # =========================================================================
    # SCHEMA INSPECTION
    # =========================================================================

    def has_table(self, table_name: str) -> bool:
        """Check whether a table exists in the connected database."""
        return inspect(self.engine).has_table(table_name)

    def has_column(self, table_name: str, column_name: str) -> bool:
        """Check whether a table exists and has the given column."""
        inspector = inspect(self.engine)
        if not inspector.has_table(table_name):
            return False
        return any(column['name'] == column_name for column in inspector.get_columns(table_name))

    # =========================================================================
    # QUERY OPERATIONS (Reading Data)
    # =========================================================================

    def query_to_dataframe(self, query: Union[str, Executable],
                           params: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
        """
        Execute a query and return the results as a pandas DataFrame.

        Args:
            query: Raw SQL string or SQLAlchemy selectable
            params (Dict, optional): Bound parameters for raw SQL

        Returns:
            pd.DataFrame: Query results
        """
        if isinstance(query, str):
            query = text(query)
        try:
            df = pd.read_sql_query(sql=query, con=self.engine, params=params)
            logger.debug(f"Query returned {len(df)} rows")
            return df

        except SQLAlchemyError as e:
            logger.error(f"Query failed: {e}")
            raise

    def fetch_users_missing_from(self, table_name: str, after: Optional[int],
                                 limit: int) -> pd.DataFrame:
        """
        Fetch distinct (id, name) pairs whose id has no row in the user table.

        Args:
            table_name (str): Registry table to scan
            after (int, optional): Only ids strictly greater than this
            limit (int): Maximum number of rows

        Returns:
            pd.DataFrame: Columns source_id and source_name, ordered by source_id
        """
        columns = get_user_columns(table_name)
        source = SOURCE_TABLES[table_name]
        id_column = source.c[columns.id_column]
        name_column = source.c[columns.name_column]
        source_id = id_column.label('source_id')

        query = (
            select(source_id, name_column.label('source_name'))
            .distinct()
            .select_from(source.outerjoin(user_table, user_table.c.user_id == id_column))
            .where(user_table.c.user_id.is_(None))
            .order_by(source_id)
            .limit(limit)
        )
        if after is not None:
            query = query.where(id_column > after)

        return self.query_to_dataframe(query)

    def fetch_unlinked_actors(self, after: Optional[int], limit: int) -> pd.DataFrame:
        """
        Fetch actors that have no associated user id.

        Returns:
            pd.DataFrame: Columns actor_id and actor_name, ordered by actor_id
        """
        query = (
            select(actor_table.c.actor_id, actor_table.c.actor_name)
            .where(actor_table.c.actor_user.is_(None))
            .order_by(actor_table.c.actor_id)
            .limit(limit)
        )
        if after is not None:
            query = query.where(actor_table.c.actor_id > after)

        return self.query_to_dataframe(query)

    def find_stub_users_by_name(self, user_name: str) -> pd.DataFrame:
        """
        Find users with exactly this name and an empty password.

        An empty password marks an account created from historical data
        rather than a real registration.

        Returns:
            pd.DataFrame: Columns user_id and user_name, lowest user_id first
        """
        query = (
            select(user_table.c.user_id, user_table.c.user_name)
            .where(user_table.c.user_name == user_name)
            .where(user_table.c.user_password == '')
            .order_by(user_table.c.user_id)
        )
        return self.query_to_dataframe(query)

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def _insert_ignore(self, table):
        """Build an INSERT that silently skips rows hitting a unique key."""
        dialect = self.dialect_name
        if dialect == 'postgresql':
            return postgresql.insert(table).on_conflict_do_nothing()
        if dialect == 'sqlite':
            return sqlite.insert(table).on_conflict_do_nothing()
        if dialect in ('mysql', 'mariadb'):
            return insert(table).prefix_with('IGNORE')
        raise UnsupportedDatabaseError(
            f"No conflict-tolerant insert available for dialect '{dialect}'"
        )

    def insert_stub_user(self, user_id: int, user_name: str,
                         touched: Optional[str] = None) -> bool:
        """
        Insert a stub user unless the id (or name) already exists.

        Renames can leave the same id under different names in different
        tables; the first stored name wins.

        Returns:
            bool: True if a row was inserted
        """
        values = dict(STUB_USER_DEFAULTS)
        values.update({
            'user_id': user_id,
            'user_name': user_name,
            'user_touched': touched or wiki_timestamp(),
        })

        try:
            with self.engine.connect() as conn:
                result = conn.execute(self._insert_ignore(user_table).values(**values))
                conn.commit()

            return result.rowcount > 0

        except SQLAlchemyError as e:
            logger.error(f"Failed to insert user {user_name} ({user_id}): {e}")
            raise

    def link_actor_to_user(self, actor_id: int, user_id: int) -> bool:
        """
        Set actor_user on an actor that is still unlinked.

        Returns:
            bool: True if the actor row was updated
        """
        statement = (
            update(actor_table)
            .where(actor_table.c.actor_id == actor_id)
            .where(actor_table.c.actor_user.is_(None))
            .values(actor_user=user_id)
        )

        try:
            with self.engine.connect() as conn:
                result = conn.execute(statement)
                conn.commit()

            return result.rowcount > 0

        except SQLAlchemyError as e:
            logger.error(f"Failed to link actor {actor_id} to user {user_id}: {e}")
            raise

    def close(self) -> None:
        """Close the database connection pool."""
        if self.engine:
            self.engine.dispose()
            logger.info("Wiki database adapter closed")


def create_wiki_db_adapter(config: PopulateConfig) -> WikiDatabaseAdapter:
    """Create the database adapter from a population config."""
    return WikiDatabaseAdapter(
        database_url=config.effective_database_url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        echo=config.sql_echo,
    )
