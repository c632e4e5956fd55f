"""
Database session management
"""
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from funding_intake.database.connection import DatabasePool
from funding_intake.database.models import Base

# Session factory - initialized after the pool is ready
SessionLocal: Optional[sessionmaker] = None


def init_session_factory() -> None:
    """
    Initialize the session factory with the database engine.
    Should be called after DatabasePool.initialize()
    """
    global SessionLocal
    if SessionLocal is None:
        engine = DatabasePool.get_engine()
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the tables defined in models (currently the rotation cursor table)"""
    engine = DatabasePool.get_engine()
    Base.metadata.create_all(bind=engine)


def get_session() -> Session:
    """
    Get a new database session from the pool.

    Raises:
        RuntimeError: If session factory is not initialized
    """
    if SessionLocal is None:
        init_session_factory()

    if SessionLocal is None:
        raise RuntimeError("Session factory not initialized. Call DatabasePool.initialize() first.")

    return SessionLocal()


def reset_session_factory() -> None:
    """Drop the factory so the next get_session() rebinds to a fresh pool"""
    global SessionLocal
    SessionLocal = None
