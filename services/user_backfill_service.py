"""
User Backfill Service

Creates stub user accounts from the user id and name columns of a source
table (revision, logging, image, ...). Only ids with no user row are read,
IP addresses are skipped, and inserts that hit an existing id or name are
dropped silently, so the pass can be repeated as often as needed.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from database.adapters.wiki_adapter import WikiDatabaseAdapter, wiki_timestamp
from database.batched_cursor import BatchedCursorScanner
from user_table.config import IdentityScheme, PopulateConfig
from user_table.ip_utils import is_ip_address
from user_table.registry import get_user_columns

logger = logging.getLogger(__name__)


class UserBackfillService:
    """Populates the user table from one registry table at a time."""

    def __init__(self, db_adapter: WikiDatabaseAdapter, config: PopulateConfig,
                 scheme: Optional[IdentityScheme] = None):
        """
        Args:
            db_adapter: Connected wiki database adapter
            config: Run configuration (batch size, progress interval, start id)
            scheme: When set, only tables valid for this scheme are accepted
        """
        self.db_adapter = db_adapter
        self.config = config
        self.scheme = scheme

    def populate_from_table(self, table: str) -> int:
        """
        Insert stub users for every id in the table that has no user row.

        Args:
            table: Registry table name

        Returns:
            Number of users inserted

        Raises:
            InvalidTableError: If the table is not a valid source table
            SQLAlchemyError: On any database failure (fatal for the run)
        """
        columns = get_user_columns(table, self.scheme)
        logger.info(
            f"👥 Populating users from table {table} "
            f"({columns.id_column}, {columns.name_column})..."
        )

        scanner = BatchedCursorScanner(
            fetch_page=lambda after, limit: self.db_adapter.fetch_users_missing_from(
                table, after, limit
            ),
            key_column='source_id',
            batch_size=self.config.batch_size,
            start_after=self.config.min_user_id,
        )

        count = 0
        skipped_ips = 0
        touched = wiki_timestamp()

        try:
            for row in scanner:
                user_id = int(row.source_id)
                user_name = row.source_name

                # Anonymous edits are recorded under the editor's IP
                if is_ip_address(user_name):
                    skipped_ips += 1
                    continue

                if self.db_adapter.insert_stub_user(user_id, user_name, touched=touched):
                    count += 1
                    if count % self.config.progress_interval == 0:
                        logger.info(f"📈 {count} insertions...")

        except SQLAlchemyError as e:
            logger.error(
                f"❌ Populating users from {table} failed after {count} insertions "
                f"(cursor at {scanner.cursor}): {e}"
            )
            raise

        logger.debug(
            f"{table}: {scanner.rows_fetched} rows in {scanner.pages_fetched} pages, "
            f"{skipped_ips} IP addresses skipped"
        )
        logger.info(f"✅ Done: {count} insertions.")
        return count
