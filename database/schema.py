"""
SQLAlchemy table definitions for the wiki tables the population job touches.

Only the columns read or written here are declared, plus each table's own
key. These definitions build queries and test fixtures; they are not a
migration source.
"""

from sqlalchemy import Column, Integer, MetaData, String, Table

from user_table.registry import VALID_TABLES

metadata = MetaData()

user_table = Table(
    'user', metadata,
    Column('user_id', Integer, primary_key=True, autoincrement=False),
    Column('user_name', String(255), nullable=False, unique=True),
    Column('user_real_name', String(255), nullable=False, default=''),
    Column('user_password', String(255), nullable=False, default=''),
    Column('user_newpassword', String(255), nullable=False, default=''),
    Column('user_email', String(255), nullable=False, default=''),
    Column('user_touched', String(14), nullable=False),
    Column('user_token', String(32), nullable=False, default=''),
)

actor_table = Table(
    'actor', metadata,
    Column('actor_id', Integer, primary_key=True),
    Column('actor_user', Integer, nullable=True, unique=True),
    Column('actor_name', String(255), nullable=False, unique=True),
)

revision_table = Table(
    'revision', metadata,
    Column('rev_id', Integer, primary_key=True),
    Column('rev_user', Integer, nullable=False, default=0, index=True),
    Column('rev_user_text', String(255), nullable=False, default=''),
)

logging_table = Table(
    'logging', metadata,
    Column('log_id', Integer, primary_key=True),
    Column('log_user', Integer, nullable=False, default=0, index=True),
    Column('log_user_text', String(255), nullable=False, default=''),
)

image_table = Table(
    'image', metadata,
    Column('img_name', String(255), primary_key=True),
    Column('img_user', Integer, nullable=False, default=0, index=True),
    Column('img_user_text', String(255), nullable=False, default=''),
)

oldimage_table = Table(
    'oldimage', metadata,
    Column('oi_archive_name', String(255), primary_key=True),
    Column('oi_user', Integer, nullable=False, default=0, index=True),
    Column('oi_user_text', String(255), nullable=False, default=''),
)

filearchive_table = Table(
    'filearchive', metadata,
    Column('fa_id', Integer, primary_key=True),
    Column('fa_user', Integer, nullable=False, default=0, index=True),
    Column('fa_user_text', String(255), nullable=False, default=''),
)

archive_table = Table(
    'archive', metadata,
    Column('ar_id', Integer, primary_key=True),
    Column('ar_user', Integer, nullable=False, default=0, index=True),
    Column('ar_user_text', String(255), nullable=False, default=''),
)

ipblocks_table = Table(
    'ipblocks', metadata,
    Column('ipb_id', Integer, primary_key=True),
    Column('ipb_by', Integer, nullable=False, default=0, index=True),
    Column('ipb_by_text', String(255), nullable=False, default=''),
)

# Every registry table must have a definition here
SOURCE_TABLES = {name: metadata.tables[name] for name in VALID_TABLES}
