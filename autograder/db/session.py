# autograder/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from autograder.core.config import settings

# SQLite needs check_same_thread disabled when sessions cross threads
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    from autograder import models  # noqa
    from autograder.db.base import Base

    Base.metadata.create_all(bind=engine)
