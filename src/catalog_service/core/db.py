from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings


def build_engine(database_url: str, statement_timeout_ms: int = 0):
    connect_args = {}
    if database_url.startswith("postgresql") and statement_timeout_ms > 0:
        # server-side deadline for every statement on this connection
        connect_args["options"] = f"-c statement_timeout={statement_timeout_ms}"
    elif database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(settings.database_url, settings.db_statement_timeout_ms)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
