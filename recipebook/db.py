from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import get_settings

settings = get_settings()


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def use_unicode_lower(engine):
    """Replace SQLite's lower(), which only folds ASCII letters, on every new connection."""

    @event.listens_for(engine, "connect")
    def _register_lower(dbapi_conn, connection_record):
        dbapi_conn.create_function("lower", 1, _unicode_lower)


# check_same_thread is only understood by sqlite
is_sqlite = settings.database_url.startswith("sqlite")
connect_args = {"check_same_thread": False} if is_sqlite else {}

engine = create_engine(settings.database_url, connect_args=connect_args)
if is_sqlite:
    use_unicode_lower(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    # models must be imported so their tables are registered on Base
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
