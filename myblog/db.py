"""
Database connection and setup
SQLite database with SQLAlchemy
"""
import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from config.settings import settings
from myblog import crud
from myblog.models import Base

logger = logging.getLogger("blog.db")

DATABASE_URL = settings.database_url

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},  # Needed for SQLite
    echo=False  # Set to True to see SQL queries
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None, seed: Optional[bool] = None):
    """
    Initialize database - create the posts table
    Safe to call multiple times (won't recreate existing tables)
    An empty database gets the sample posts when seed is True
    (defaults to settings.seed_sample_posts at call time)
    """
    bind = bind if bind is not None else engine
    if seed is None:
        seed = settings.seed_sample_posts
    Base.metadata.create_all(bind=bind)
    if seed:
        db = sessionmaker(autocommit=False, autoflush=False, bind=bind)()
        try:
            inserted = crud.seed_sample_posts(db)
            if inserted:
                logger.info(f"Inserted {inserted} sample posts")
        finally:
            db.close()
    logger.info(f"Database initialized at: {bind.url}")


def get_db():
    """
    Get database session - use in FastAPI dependencies
    Yields a session and closes it when done
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
