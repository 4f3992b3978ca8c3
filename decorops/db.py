# decorops/db.py
from __future__ import annotations
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, scoped_session, declarative_base
from .config import config

_connect_args = (
    {"timeout": config.DB_BUSY_TIMEOUT, "check_same_thread": False}
    if config.DATABASE_URL.startswith("sqlite") else {}
)

engine = create_engine(
    config.DATABASE_URL,
    future=True,
    echo=config.SQL_ECHO,
    pool_pre_ping=True,
    connect_args=_connect_args,
)
SessionLocal = scoped_session(sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True))
Base = declarative_base()

if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_conn, _record):
        # FK enforcement is off by default in SQLite
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

def init_db():
    # Fallback bootstrap so the app is usable even before Alembic runs.
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)

def drop_db():
    from . import models  # noqa: F401
    Base.metadata.drop_all(bind=engine)
