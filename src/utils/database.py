from contextvars import ContextVar

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from src.utils.config import settings


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url or url == "sqlite://":
        # a single shared connection, otherwise every session sees an empty database
        options["poolclass"] = StaticPool
    return options


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

import src.entities  # noqa: E402,F401

async def get_db() -> Session :
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_session_context : ContextVar[Session] = ContextVar("db_session_context")
