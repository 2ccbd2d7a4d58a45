"""Shared fixtures: a throwaway SQLite wiki database built from the schema metadata."""

import pytest
from sqlalchemy import select

from database.adapters.wiki_adapter import WikiDatabaseAdapter
from database.schema import actor_table, metadata, user_table
from user_table.config import IdentityScheme, PopulateConfig


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'wiki.db'}"


@pytest.fixture
def wiki_db(database_url):
    """Adapter on a database holding every table, actor included."""
    adapter = WikiDatabaseAdapter(database_url)
    metadata.create_all(adapter.engine)
    yield adapter
    adapter.close()


@pytest.fixture
def legacy_wiki_db(database_url):
    """Adapter on a database without an actor table."""
    adapter = WikiDatabaseAdapter(database_url)
    tables = [table for table in metadata.sorted_tables if table.name != actor_table.name]
    metadata.create_all(adapter.engine, tables=tables)
    yield adapter
    adapter.close()


@pytest.fixture
def actor_wiki_db(database_url):
    """Adapter on a migrated database: actor table, legacy tables dropped."""
    adapter = WikiDatabaseAdapter(database_url)
    metadata.create_all(adapter.engine, tables=[user_table, actor_table])
    yield adapter
    adapter.close()


@pytest.fixture
def make_config(database_url):
    def _make(**overrides):
        settings = {'database_url': database_url, 'identity_scheme': IdentityScheme.LEGACY}
        settings.update(overrides)
        return PopulateConfig(**settings)
    return _make


@pytest.fixture
def seed():
    """Insert rows into a wiki table: seed('revision', [{...}, ...])."""
    def _seed(adapter, table_name, rows):
        with adapter.engine.begin() as conn:
            conn.execute(metadata.tables[table_name].insert(), rows)
    return _seed


@pytest.fixture
def stored_users():
    """Return {user_id: user_name} for every row in the user table."""
    def _users(adapter):
        with adapter.engine.connect() as conn:
            rows = conn.execute(select(user_table.c.user_id, user_table.c.user_name)).all()
        return {row.user_id: row.user_name for row in rows}
    return _users


@pytest.fixture
def stored_actor_links():
    """Return {actor_id: actor_user} for every row in the actor table."""
    def _links(adapter):
        with adapter.engine.connect() as conn:
            rows = conn.execute(select(actor_table.c.actor_id, actor_table.c.actor_user)).all()
        return {row.actor_id: row.actor_user for row in rows}
    return _links
