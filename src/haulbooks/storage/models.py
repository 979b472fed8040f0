"""SQLAlchemy models for the haulbooks local cache."""

from datetime import datetime, UTC
from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class CacheEntry(Base):
    """One serialized collection."""

    __tablename__ = "cache_entries"

    key = Column(String, primary_key=True)
    payload = Column(Text, nullable=False, default="[]")
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
