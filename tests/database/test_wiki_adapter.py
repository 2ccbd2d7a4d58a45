"""
Tests for WikiDatabaseAdapter against a temporary SQLite database.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.dialects import mysql, postgresql

from database.adapters.wiki_adapter import WikiDatabaseAdapter, create_wiki_db_adapter, wiki_timestamp
from database.schema import user_table
from user_table.config import PopulateConfig
from user_table.exceptions import InvalidTableError, UnsupportedDatabaseError


class TestConnection:

    def test_connects_and_inspects_tables(self, wiki_db):
        assert wiki_db.dialect_name == 'sqlite'
        assert wiki_db.has_table('user')
        assert wiki_db.has_table('revision')
        assert not wiki_db.has_table('page')

    def test_inspects_columns(self, wiki_db):
        assert wiki_db.has_column('revision', 'rev_user')
        assert not wiki_db.has_column('revision', 'rev_actor')
        assert not wiki_db.has_column('page', 'page_id')

    def test_unreachable_database_raises_connection_error(self, tmp_path):
        missing = tmp_path / 'no' / 'such' / 'dir' / 'wiki.db'

        with pytest.raises(ConnectionError):
            WikiDatabaseAdapter(f"sqlite:///{missing}")

    def test_factory_applies_database_name_override(self, tmp_path):
        other = tmp_path / 'other.db'
        config = PopulateConfig(
            database_url=f"sqlite:///{tmp_path / 'default.db'}",
            database_name=str(other),
        )

        adapter = create_wiki_db_adapter(config)
        try:
            assert adapter.engine.url.database == str(other)
        finally:
            adapter.close()


class TestFetchUsersMissingFrom:

    def test_distinct_ordered_and_excludes_existing_users(self, wiki_db, seed):
        seed(wiki_db, 'revision', [
            {'rev_user': 30, 'rev_user_text': 'Carol'},
            {'rev_user': 10, 'rev_user_text': 'Bob'},
            {'rev_user': 10, 'rev_user_text': 'Bob'},
            {'rev_user': 20, 'rev_user_text': 'Dave'},
        ])
        wiki_db.insert_stub_user(20, 'Dave')

        df = wiki_db.fetch_users_missing_from('revision', None, 100)

        assert list(df.columns) == ['source_id', 'source_name']
        assert list(df['source_id']) == [10, 30]
        assert list(df['source_name']) == ['Bob', 'Carol']

    def test_after_and_limit(self, wiki_db, seed):
        seed(wiki_db, 'logging', [
            {'log_user': user_id, 'log_user_text': f"User{user_id}"} for user_id in range(1, 8)
        ])

        df = wiki_db.fetch_users_missing_from('logging', 3, 2)

        assert list(df['source_id']) == [4, 5]

    def test_uses_registry_columns(self, wiki_db, seed):
        seed(wiki_db, 'ipblocks', [{'ipb_by': 4, 'ipb_by_text': 'Admin'}])

        df = wiki_db.fetch_users_missing_from('ipblocks', 0, 10)

        assert df.to_dict('records') == [{'source_id': 4, 'source_name': 'Admin'}]

    def test_unknown_table(self, wiki_db):
        with pytest.raises(InvalidTableError):
            wiki_db.fetch_users_missing_from('page', None, 10)


class TestInsertStubUser:

    def test_inserts_stub_defaults(self, wiki_db):
        assert wiki_db.insert_stub_user(42, 'Alice', touched='20200819000000') is True

        df = wiki_db.query_to_dataframe('SELECT * FROM user WHERE user_id = :id', {'id': 42})
        row = df.iloc[0]
        assert row['user_name'] == 'Alice'
        assert row['user_real_name'] == ''
        assert row['user_password'] == ''
        assert row['user_newpassword'] == ''
        assert row['user_email'] == ''
        assert row['user_token'] == ''
        assert row['user_touched'] == '20200819000000'

    def test_default_touched_is_wiki_timestamp(self, wiki_db):
        wiki_db.insert_stub_user(1, 'Alice')

        df = wiki_db.query_to_dataframe('SELECT user_touched FROM user')
        touched = df.iloc[0]['user_touched']
        assert len(touched) == 14
        assert touched.isdigit()

    def test_duplicate_id_is_ignored(self, wiki_db, stored_users):
        assert wiki_db.insert_stub_user(7, 'OldName') is True
        assert wiki_db.insert_stub_user(7, 'NewName') is False

        assert stored_users(wiki_db) == {7: 'OldName'}

    def test_duplicate_name_is_ignored(self, wiki_db, stored_users):
        wiki_db.insert_stub_user(7, 'Alice')

        assert wiki_db.insert_stub_user(8, 'Alice') is False
        assert stored_users(wiki_db) == {7: 'Alice'}


class TestInsertIgnoreDialects:

    def test_postgresql_renders_on_conflict(self, wiki_db, monkeypatch):
        monkeypatch.setattr(WikiDatabaseAdapter, 'dialect_name', property(lambda self: 'postgresql'))

        statement = wiki_db._insert_ignore(user_table)
        sql = str(statement.compile(dialect=postgresql.dialect()))

        assert 'ON CONFLICT DO NOTHING' in sql

    def test_mysql_renders_insert_ignore(self, wiki_db, monkeypatch):
        monkeypatch.setattr(WikiDatabaseAdapter, 'dialect_name', property(lambda self: 'mysql'))

        statement = wiki_db._insert_ignore(user_table)
        sql = str(statement.compile(dialect=mysql.dialect()))

        assert sql.startswith('INSERT IGNORE')

    def test_unsupported_dialect(self, wiki_db, monkeypatch):
        monkeypatch.setattr(WikiDatabaseAdapter, 'dialect_name', property(lambda self: 'oracle'))

        with pytest.raises(UnsupportedDatabaseError):
            wiki_db._insert_ignore(user_table)


class TestActorOperations:

    def test_find_stub_users_ignores_accounts_with_password(self, wiki_db, seed):
        seed(wiki_db, 'user', [
            {'user_id': 42, 'user_name': 'Alice', 'user_password': '', 'user_touched': '20200101000000'},
            {'user_id': 43, 'user_name': 'Bob', 'user_password': ':B:salt:hash', 'user_touched': '20200101000000'},
        ])

        assert list(wiki_db.find_stub_users_by_name('Alice')['user_id']) == [42]
        assert wiki_db.find_stub_users_by_name('Bob').empty
        assert wiki_db.find_stub_users_by_name('alice').empty

    def test_fetch_unlinked_actors(self, wiki_db, seed):
        seed(wiki_db, 'actor', [
            {'actor_id': 1, 'actor_name': 'Alice', 'actor_user': None},
            {'actor_id': 2, 'actor_name': 'Bob', 'actor_user': 99},
            {'actor_id': 3, 'actor_name': 'Carol', 'actor_user': None},
        ])

        assert list(wiki_db.fetch_unlinked_actors(None, 10)['actor_id']) == [1, 3]
        assert list(wiki_db.fetch_unlinked_actors(1, 10)['actor_id']) == [3]
        assert list(wiki_db.fetch_unlinked_actors(None, 1)['actor_id']) == [1]

    def test_link_actor_to_user(self, wiki_db, seed, stored_actor_links):
        seed(wiki_db, 'actor', [{'actor_id': 5, 'actor_name': 'Alice', 'actor_user': None}])

        assert wiki_db.link_actor_to_user(5, 42) is True
        assert wiki_db.link_actor_to_user(5, 43) is False
        assert stored_actor_links(wiki_db) == {5: 42}


def test_wiki_timestamp():
    moment = datetime(2020, 8, 19, 12, 30, 5, tzinfo=timezone.utc)

    assert wiki_timestamp(moment) == '20200819123005'
