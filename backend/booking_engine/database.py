from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import settings


def create_db_engine(url: str, **kwargs) -> Engine:
    """
    Create an engine with the connection hooks the booking commit relies on.

    SQLite has no row locks, so every transaction is opened with
    BEGIN IMMEDIATE: the write lock is taken up front and concurrent
    check-and-insert sequences run one after another.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True, **kwargs)

    connect_args = kwargs.pop("connect_args", {})
    # check_same_thread=False is required for SQLite across FastAPI threads
    connect_args.setdefault("check_same_thread", False)
    connect_args.setdefault("timeout", 30)

    engine = create_engine(url, connect_args=connect_args, **kwargs)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _):
        # Hand transaction control to SQLAlchemy (pysqlite emits BEGIN lazily otherwise)
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = create_db_engine(settings.resolved_database_url)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
