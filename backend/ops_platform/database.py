import logging
from datetime import datetime, timezone

from sqlalchemy import Enum, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ops_platform.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str):
    """Create an engine for the given URL.

    SQLite needs check_same_thread disabled because FastAPI runs sync
    dependencies in a threadpool.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        return create_engine(database_url, connect_args=connect_args)

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=20,
        max_overflow=10,
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # Import models so every table is registered on Base.metadata
    import ops_platform.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")


def utcnow() -> datetime:
    """Naive UTC now, the format every DateTime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def value_enum(enum_cls) -> Enum:
    """Enum column type that stores member values ("confirmed") not names."""
    return Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=20,
    )
