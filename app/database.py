from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from app.services.text import SQLITE_FOLD_FUNCTION, SQLITE_TITLE_COLLATION, compare_titles, fold

Base = declarative_base()


def _register_sqlite_text_functions(dbapi_connection, connection_record):
    # SQLite's own lower()/LIKE only fold ASCII
    dbapi_connection.create_function(SQLITE_FOLD_FUNCTION, 1, fold, deterministic=True)
    dbapi_connection.create_collation(SQLITE_TITLE_COLLATION, compare_titles)


def create_db_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        # Route handlers run in FastAPI's threadpool
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **kwargs)
        event.listen(engine, "connect", _register_sqlite_text_functions)
        return engine
    return create_engine(database_url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_db(engine: Engine):
    # Registers the Job table on Base.metadata
    from app.models import jobs  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
