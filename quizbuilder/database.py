import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from quizbuilder.config import Config

# Create SessionLocal class; bound to an engine by init_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False)

# Create Base class
Base = declarative_base()

engine = None


def init_engine(database_url=Config.SQLALCHEMY_DATABASE_URI):
    """Create the engine for ``database_url`` and bind SessionLocal to it."""
    global engine

    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # An in-memory database only lives as long as its single connection
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            os.makedirs(os.path.dirname(database_url.replace("sqlite:///", "", 1)) or ".", exist_ok=True)
    elif database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql+psycopg2://", 1)

    engine = create_engine(database_url, **kwargs)
    SessionLocal.configure(bind=engine)
    return engine


def create_tables():
    # Import models to ensure they're registered with Base
    from quizbuilder import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
