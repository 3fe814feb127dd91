"""
Database engine, session factory and the request-scoped session dependency.
"""
import sqlite3

from sqlalchemy import String, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.sql.functions import FunctionElement

from .config import get_settings

settings = get_settings()


class casefold(FunctionElement):
    """Unicode case folding of a text expression.

    Renders as ``lower()`` on most backends. SQLite's ``lower()`` only folds
    ASCII, so there it calls ``py_casefold``, registered on every connection.
    """
    type = String()
    name = "casefold"
    inherit_cache = True


@compiles(casefold)
def _compile_casefold(element, compiler, **kw):
    return "lower(%s)" % compiler.process(element.clauses, **kw)


@compiles(casefold, "sqlite")
def _compile_casefold_sqlite(element, compiler, **kw):
    return "py_casefold(%s)" % compiler.process(element.clauses, **kw)


def _py_casefold(value):
    return value.casefold() if value is not None else None


@event.listens_for(Engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    if isinstance(dbapi_conn, sqlite3.Connection):
        dbapi_conn.create_function("py_casefold", 1, _py_casefold)


connect_args = {}
if settings.database_url.startswith("sqlite"):
    # SQLite connections are shared with the threadpool FastAPI runs sync routes on
    connect_args["check_same_thread"] = False

engine = create_engine(settings.database_url, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a DB session and close it after use."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
