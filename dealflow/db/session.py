from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dealflow.core.config import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine with per-backend connection settings."""
    url = make_url(database_url)
    backend = url.get_backend_name()

    if backend.startswith("postgresql"):
        options = f"-c timezone=utc -c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
        return create_engine(
            database_url, pool_pre_ping=True, connect_args={"options": options}
        )

    if backend == "sqlite":
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **kwargs)
        _enable_sqlite_savepoints(engine)
        return engine

    return create_engine(database_url, pool_pre_ping=True)


def _enable_sqlite_savepoints(engine: Engine) -> None:
    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; let SQLAlchemy emit it.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
