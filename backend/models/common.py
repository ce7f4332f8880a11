"""Common database utilities and base models"""

import functools
from typing import Generator

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine


def enable_sqlite_foreign_keys(engine: Engine) -> Engine:
    """SQLite ignores ON DELETE CASCADE unless the pragma is set per connection"""
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


@functools.cache
def get_engine() -> Engine:  # pragma: no cover
    from settings import DATABASE_URL

    connect_args = {}
    if DATABASE_URL.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return enable_sqlite_foreign_keys(
        create_engine(DATABASE_URL, connect_args=connect_args)
    )


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def get_session() -> Generator[Session, None, None]:  # pragma: no cover
    """Get database session for FastAPI dependency, always closes session."""
    session = Session(get_engine(), expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


def parse_bool(bool_str: str | bool):
    if isinstance(bool_str, str):
        return bool_str.lower() in ("true", "1")
    return bool(bool_str)
