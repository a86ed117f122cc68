from flask import g
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

# Bound by init_engine(); one engine (and its connection pool) per process
SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)


def init_engine(database_url: str, pool_size: int = 20, max_overflow: int = 10) -> Engine:
    if database_url.startswith('sqlite'):
        options = {'connect_args': {'check_same_thread': False}}
        if database_url in ('sqlite://', 'sqlite:///:memory:'):
            # A single shared connection, otherwise every checkout sees an empty DB
            options['poolclass'] = StaticPool
        engine = create_engine(database_url, **options)
        event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
    else:
        engine = create_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
        )

    SessionLocal.configure(bind=engine)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def create_tables(engine: Engine):
    Base.metadata.create_all(engine)


def get_db() -> Session:
    """Request-scoped session, opened lazily on first use"""
    if 'db' not in g:
        g.db = SessionLocal()
    return g.db


def close_db(exc=None):
    db = g.pop('db', None)
    if db is not None:
        if exc is not None:
            db.rollback()
        db.close()
