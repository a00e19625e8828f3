from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from srs_engine.config import settings


def make_engine(database_url: str = None, echo: bool = None):
    """Create an engine; SQLite connections are shared across worker threads"""
    url = database_url or settings.database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        echo=settings.database_echo if echo is None else echo,
        connect_args=connect_args,
        pool_pre_ping=True
    )


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
Base = declarative_base()


def init_db(bind=None):
    """Create all tables"""
    # Register models on Base.metadata
    import srs_engine.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
