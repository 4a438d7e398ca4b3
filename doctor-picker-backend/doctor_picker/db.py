"""
db.py
=====
SQLite catalog holding the reference cities, specialties and doctors.
"""

import os
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from .config import DB_PATH

CATALOG_DIR = os.path.dirname(DB_PATH)
if CATALOG_DIR:
    os.makedirs(CATALOG_DIR, exist_ok=True)

CATALOG_URL = f"sqlite:///{DB_PATH}"

# Catalog reads run in worker threads, so SQLite's thread check is off
engine = create_engine(CATALOG_URL, connect_args={"check_same_thread": False})

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def catalog_session():
    """A catalog session for the length of a with-block."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db():
    """FastAPI dependency for the catalog endpoints."""
    with catalog_session() as db:
        yield db


def init_db(Base):
    """Create any missing catalog tables."""
    Base.metadata.create_all(bind=engine)
