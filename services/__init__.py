from .actor_link_service import ActorLinkService
from .user_backfill_service import UserBackfillService
from .user_table_population_service import UserTablePopulationService

__all__ = ['ActorLinkService', 'UserBackfillService', 'UserTablePopulationService']
