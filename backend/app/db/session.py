"""
Database engine and sessions.

Request handlers get a session through get_db; scheduler jobs and scripts open their own
SessionLocal and close it when the run ends. Stats recomputes hold a per-pair advisory lock
for one short transaction, so the pool must cover API traffic plus the two daily jobs.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.config import settings

engine = create_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
    pool_recycle=300,
    pool_timeout=30,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
