from contextlib import contextmanager
from fastapi import Depends
import pytz
from sqlalchemy import DateTime, TypeDecorator, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from urllib.parse import quote_plus
from lending_api.config import settings


def build_database_url() -> str:
    """PostgreSQL when a database name is configured, otherwise a local SQLite file."""
    if not settings.db_name:
        return f"sqlite:///{settings.sqlite_path}"

    db_user = quote_plus(settings.db_user or "")
    db_password = quote_plus(settings.db_password or "")
    return f"postgresql://{db_user}:{db_password}@{settings.db_host}:{settings.db_port}/{settings.db_name}"


def _enable_sqlite_locking(engine: Engine):
    # pysqlite's own transaction handling is turned off so every transaction
    # starts with BEGIN IMMEDIATE: writers queue on the busy timeout instead
    # of failing with "database is locked" on lock upgrade.
    @event.listens_for(engine, "connect")
    def on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False, "timeout": settings.sqlite_timeout},
        )
        _enable_sqlite_locking(engine)
        return engine

    # SSL connection arguments
    connect_args = {}
    if settings.db_ssl_mode != "disable":
        connect_args["sslmode"] = settings.db_ssl_mode
        if settings.db_ssl_cert:
            connect_args["sslcert"] = settings.db_ssl_cert
        if settings.db_ssl_key:
            connect_args["sslkey"] = settings.db_ssl_key
        if settings.db_ssl_root_cert:
            connect_args["sslrootcert"] = settings.db_ssl_root_cert

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=10,
        max_overflow=20,
        echo=False,
        connect_args=connect_args
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    # Objects stay readable after commit; services hand them back to routes
    # once their unit of work has closed.
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


DATABASE_URL = build_database_url()

engine = create_db_engine(DATABASE_URL)

SessionLocal = create_session_factory(engine)

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """Timezone-aware timestamp stored as UTC.

    SQLite keeps no offset, so values are normalized to UTC on the way in and
    tagged as UTC on the way out. Naive input is taken to be UTC already.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return pytz.utc.localize(value)
        return value.astimezone(pytz.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return pytz.utc.localize(value)
        return value.astimezone(pytz.utc)


@contextmanager
def session_scope(session_factory: sessionmaker):
    """Unit of work: commit on success, roll back everything on any error."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    return SessionLocal


def get_db(session_factory: sessionmaker = Depends(get_session_factory)):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
