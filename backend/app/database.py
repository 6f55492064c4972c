from sqlalchemy import create_engine, event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from app.config import get_settings

settings = get_settings()

# SQLite braucht check_same_thread=False für FastAPI
connect_args = {"check_same_thread": False} if "sqlite" in settings.database_url else {}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite prüft Fremdschlüssel nur mit PRAGMA foreign_keys."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db():
    """Dependency für FastAPI - gibt eine Datenbank-Session zurück."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dialect_name(db) -> str:
    """Name des SQL-Dialekts einer Session, z.B. "sqlite" oder "postgresql"."""
    return db.get_bind().dialect.name


def dialect_insert(db):
    """``insert`` mit ``on_conflict_*`` für den Dialekt der Session."""
    if dialect_name(db) == "postgresql":
        return postgresql.insert
    return sqlite.insert
