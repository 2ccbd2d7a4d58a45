"""
User Table Population Service

Runs the whole population job: works out which identity scheme the wiki
uses, picks the source tables, backfills stub users from each table in turn,
and, under the actor scheme, links actors to the users found.

Key behaviour:
- The identity scheme is resolved once, before anything is scanned
- A table list is a usage error under the actor scheme
- Tables are processed strictly one after another
- Every insert and update commits on its own, so a failed run can be rerun
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from database.adapters.wiki_adapter import WikiDatabaseAdapter, create_wiki_db_adapter
from services.actor_link_service import ActorLinkService
from services.user_backfill_service import UserBackfillService
from user_table.config import IdentityScheme, PopulateConfig
from user_table.exceptions import ConfigurationError
from user_table.registry import ACTOR_TABLE, select_tables, tables_for_scheme

logger = logging.getLogger(__name__)


class UserTablePopulationService:
    """
    Orchestrates user backfill and actor linking for one database.
    """

    def __init__(self, config: PopulateConfig, db_adapter: Optional[WikiDatabaseAdapter] = None):
        """
        Args:
            config: Run configuration
            db_adapter: Adapter to use; one is created from config when omitted
        """
        self.config = config
        self._owns_adapter = db_adapter is None
        self.db_adapter = db_adapter or create_wiki_db_adapter(config)
        logger.info("✨ User table population service initialized")

    def resolve_identity_scheme(self) -> IdentityScheme:
        """
        Return the configured identity scheme, detecting it when set to auto.

        Detection picks the legacy scheme when there is no actor table and the
        actor scheme when the legacy user id columns have been dropped. Wikis
        mid-migration carry both, and their active scheme cannot be read from
        the schema.

        Raises:
            ConfigurationError: If both the actor table and the legacy user
                columns are present
        """
        if self.config.identity_scheme is not None:
            return self.config.identity_scheme

        if not self.db_adapter.has_table(ACTOR_TABLE):
            scheme = IdentityScheme.LEGACY
        elif self._has_legacy_user_columns():
            raise ConfigurationError(
                "Both the actor table and legacy user columns exist; set "
                "--identity-scheme or WIKI_IDENTITY_SCHEME to legacy or actor"
            )
        else:
            scheme = IdentityScheme.ACTOR
        logger.info(f"🔍 Detected {scheme.value} identity scheme")
        return scheme

    def _has_legacy_user_columns(self) -> bool:
        for table, columns in tables_for_scheme(IdentityScheme.LEGACY).items():
            if self.db_adapter.has_column(table, columns.id_column):
                logger.debug(f"Found legacy user column {table}.{columns.id_column}")
                return True
        return False

    def plan(self, tables: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Resolve the scheme and validate the table list without touching data.

        Raises:
            UsageError: If the table list is invalid for the scheme
            ConfigurationError: If the identity scheme cannot be detected
        """
        scheme = self.resolve_identity_scheme()
        selected = select_tables(scheme, tables)
        return {'identity_scheme': scheme, 'tables': selected}

    def run(self, tables: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Populate the user table and, under the actor scheme, link actors.

        Args:
            tables: Tables to populate from (legacy scheme only), or None for all

        Returns:
            Run statistics

        Raises:
            UsageError: Before any scan, if the table list is invalid
            ConfigurationError: Before any scan, if the scheme cannot be detected
            SQLAlchemyError: On database failure; the run stops
        """
        plan = self.plan(tables)
        scheme: IdentityScheme = plan['identity_scheme']
        selected: List[str] = plan['tables']

        start_time = time.time()
        stats: Dict[str, Any] = {
            'identity_scheme': scheme.value,
            'tables': {},
            'total_insertions': 0,
            'actors_linked': 0,
            'duration_seconds': 0.0,
        }

        logger.info(f"🚀 Populating user table from {len(selected)} table(s): {', '.join(selected)}")

        try:
            backfill = UserBackfillService(self.db_adapter, self.config, scheme)
            for table in selected:
                inserted = backfill.populate_from_table(table)
                stats['tables'][table] = inserted
                stats['total_insertions'] += inserted

            if scheme is IdentityScheme.ACTOR:
                linker = ActorLinkService(self.db_adapter, self.config)
                stats['actors_linked'] = linker.link_actors()

        except Exception as e:
            logger.error(f"❌ Fatal error: {e}", exc_info=True)
            raise

        stats['duration_seconds'] = round(time.time() - start_time, 2)

        logger.info("=" * 80)
        logger.info(f"🎉 USER TABLE POPULATION COMPLETE ({stats['duration_seconds']:.2f}s)")
        logger.info(f"🧭 Identity scheme: {stats['identity_scheme']}")
        for table, inserted in stats['tables'].items():
            logger.info(f"📊 {table}: {inserted} insertions")
        logger.info(f"✅ Total insertions: {stats['total_insertions']}")
        if scheme is IdentityScheme.ACTOR:
            logger.info(f"🔗 Actors linked: {stats['actors_linked']}")
        logger.info("=" * 80)

        return stats

    def close(self) -> None:
        """Release the database adapter if this service created it."""
        if self._owns_adapter:
            self.db_adapter.close()
