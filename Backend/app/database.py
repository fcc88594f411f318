import importlib
import logging
import traceback

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base

from app.config import DATABASE_URL, LOG_LEVEL

logger = logging.getLogger(__name__)
logging.basicConfig(level=LOG_LEVEL)

# ---------------------------------------------------------------------------
# SQLAlchemy Configuration for ORM Models
# ---------------------------------------------------------------------------
engine_kwargs = {"echo": False, "pool_pre_ping": True}
if DATABASE_URL.startswith("sqlite"):
    # sync routes run in a thread pool
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs.update(pool_size=10, max_overflow=20)

engine = create_engine(DATABASE_URL, **engine_kwargs)

Base = declarative_base()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------------------------------------------------------------------------
# init_db: import ORM models, wire the change feed, create missing tables
# ---------------------------------------------------------------------------

# keep these in sync with files inside app/models
MODEL_MODULES = [
    "job_model",
]


def init_db():
    for mod in MODEL_MODULES:
        importlib.import_module(f"app.models.{mod}")
        logger.info(f"Imported model module: app.models.{mod}")

    from app.services.change_feed import attach_change_feed, job_feed
    attach_change_feed(SessionLocal, job_feed)

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))
    except SQLAlchemyError:
        logger.error("ERROR: Could not create tables on %s", engine.url.render_as_string(hide_password=True))
        logger.debug(traceback.format_exc())
