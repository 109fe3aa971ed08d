import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from config import DATABASE_URL, LOG_LEVEL
import logging

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Only use connect_args if we are using SQLite
engine_args = {}
if DATABASE_URL.startswith("sqlite"):
    engine_args["connect_args"] = {"check_same_thread": False}
else:
    # Production settings for PostgreSQL
    engine_args.update({
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,
    })

try:
    engine = create_engine(
        DATABASE_URL,
        **engine_args,
        echo=False,
    )
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
except Exception as e:
    logger.error(f"Failed to create engine: {e}")
    raise

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a database session and closes it after use."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create the data/ directory for file-backed SQLite, then create all tables."""
    bind = bind or engine
    url = str(bind.url)
    if url.startswith("sqlite:///") and not url.startswith("sqlite:///:memory:"):
        db_dir = os.path.dirname(url[len("sqlite:///"):])
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    # Import all models so they register with Base.metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("Database initialized successfully.")
