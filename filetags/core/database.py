"""Database configuration."""
import logging
from pathlib import Path

from sqlalchemy import Engine, create_engine, event, inspect, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    """Turn on SQLite foreign key enforcement so association rows cascade."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the embedded SQLite store.

    In-memory URLs share a single connection so every session sees the
    same database. File URLs get their parent directory created first.

    Args:
        database_url: SQLAlchemy URL, e.g. ``sqlite:///data/tags.db``
        echo: Log every SQL statement

    Returns:
        Configured engine with foreign keys enabled
    """
    url = make_url(database_url)
    # request handlers run in a threadpool
    kwargs = {"echo": echo, "connect_args": {"check_same_thread": False}}

    if url.database in (None, "", ":memory:"):
        kwargs["poolclass"] = StaticPool
    else:
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, **kwargs)
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def init_db(engine: Engine) -> None:
    """Create tables and indexes, upgrading older stores in place.

    Safe to run against an already initialized database. A ``tags`` table
    created before the usage counter existed gets the ``count`` column
    added and populated from the current associations.
    """
    # Register models on Base.metadata
    from filetags import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    # create_all skips indexes of tables that already existed
    for table in Base.metadata.sorted_tables:
        for index in table.indexes:
            index.create(bind=engine, checkfirst=True)

    columns = {column["name"] for column in inspect(engine).get_columns("tags")}
    if "count" not in columns:
        logger.info("Adding missing tags.count column to existing store")
        with engine.begin() as conn:
            conn.execute(text("ALTER TABLE tags ADD COLUMN count INTEGER NOT NULL DEFAULT 0"))
            conn.execute(
                text(
                    "UPDATE tags SET count = ("
                    "SELECT COUNT(DISTINCT fileId) FROM files_tags WHERE files_tags.tagId = tags.id)"
                )
            )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory whose objects stay readable after commit."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
