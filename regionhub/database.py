# regionhub/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from regionhub.config import settings

# 1. Database URL from settings (.env or environment), SQLite file by default
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# 2. Some hosts hand out postgres:// URLs, SQLAlchemy requires postgresql://
if SQLALCHEMY_DATABASE_URL and SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)


def make_engine(url: str):
    # SQLite needs cross-thread access and a busy timeout, PostgreSQL needs neither
    if "sqlite" in url:
        connect_args = {"check_same_thread": False, "timeout": settings.LOCK_TIMEOUT_SECONDS}
    else:
        connect_args = {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine(SQLALCHEMY_DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    # Import models so every table is registered on Base.metadata
    import regionhub.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
