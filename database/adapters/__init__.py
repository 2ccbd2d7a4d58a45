from .wiki_adapter import WikiDatabaseAdapter, create_wiki_db_adapter

__all__ = ['WikiDatabaseAdapter', 'create_wiki_db_adapter']
