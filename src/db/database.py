"""Generate database session"""

from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings
from src.db.schema import Base


def build_engine(settings: Settings) -> Engine:
    """Engine for the configured URL. Tables are created if missing."""
    if settings.database_url.startswith("sqlite"):
        # One in-memory database must be shared by all sessions, otherwise each connection sees an empty one
        pool_options = (
            {"poolclass": StaticPool}
            if ":memory:" in settings.database_url
            else {}
        )
        engine = create_engine(
            settings.database_url,
            echo=settings.database_echo,
            connect_args={"check_same_thread": False},
            **pool_options,
        )
    else:
        engine = create_engine(settings.database_url, echo=settings.database_echo)

    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine)
