"""
Actor Link Service

Fills actor.actor_user for actors that have no user yet, by looking up a stub
user (empty password) with exactly the actor's name. Accounts with a password
are never linked by name: a real account sharing a name with an imported
actor is not the same person.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from database.adapters.wiki_adapter import WikiDatabaseAdapter
from database.batched_cursor import BatchedCursorScanner
from user_table.config import PopulateConfig

logger = logging.getLogger(__name__)


class ActorLinkService:
    """Links unlinked actor rows to matching stub users."""

    def __init__(self, db_adapter: WikiDatabaseAdapter, config: PopulateConfig):
        self.db_adapter = db_adapter
        self.config = config

    def link_actors(self) -> int:
        """
        Set actor_user on every unlinked actor with a matching stub user.

        Actors without a match are left alone and picked up by a later run.
        When several stub users share the name, the lowest user id wins.

        Returns:
            Number of actors updated
        """
        logger.info("🔗 Populating user IDs in actor table...")

        scanner = BatchedCursorScanner(
            fetch_page=self.db_adapter.fetch_unlinked_actors,
            key_column='actor_id',
            batch_size=self.config.batch_size,
        )

        count = 0

        try:
            for actor in scanner:
                actor_id = int(actor.actor_id)
                actor_name = actor.actor_name

                candidates = self.db_adapter.find_stub_users_by_name(actor_name)
                if candidates.empty:
                    continue

                if len(candidates) > 1:
                    logger.warning(
                        f"⚠️ {len(candidates)} stub users named {actor_name}, "
                        f"using lowest user ID {int(candidates.iloc[0]['user_id'])}"
                    )

                user_id = int(candidates.iloc[0]['user_id'])
                if not self.db_adapter.link_actor_to_user(actor_id, user_id):
                    continue

                logger.info(f"Updating actor {actor_name} ({actor_id}) with user ID {user_id}")
                count += 1
                if count % self.config.progress_interval == 0:
                    logger.info(f"📈 {count} actors updated...")

        except SQLAlchemyError as e:
            logger.error(
                f"❌ Linking actors failed after {count} updates "
                f"(cursor at {scanner.cursor}): {e}"
            )
            raise

        logger.info(f"✅ Done: {count} actors updated.")
        return count
