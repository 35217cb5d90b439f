"""
Database Configuration

Supports both SQLite (development) and PostgreSQL (production).
Custom roles, permission definitions and users live here.
"""
import logging
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from .config import settings

LOGGER = logging.getLogger(__name__)

# Create database directory if using SQLite
if settings.is_sqlite and ":memory:" not in settings.DATABASE_URL:
    db_path = Path(settings.DATABASE_URL.replace("sqlite:///", ""))
    db_path.parent.mkdir(parents=True, exist_ok=True)

# Engine configuration
if settings.is_sqlite:
    # SQLite configuration (for development)
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=settings.DEBUG
    )
else:
    # PostgreSQL configuration (for production)
    engine = create_engine(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        echo=settings.DEBUG
    )

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency that provides a database session.

    Usage:
        @app.get("/roles")
        def list_roles(db: Session = Depends(get_db)):
            return db.query(CustomRole).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Initialize the database (create all tables)"""
    # Import all models to register them with Base
    from crm_access.models import User, CustomRole, PermissionDefinition, RolePermission

    Base.metadata.create_all(bind=bind or engine)
    LOGGER.info("Database initialized: %s", settings.DATABASE_URL)
