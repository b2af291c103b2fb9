from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import DATABASE_URL, DB_WRITE_TIMEOUT


def engine_connect_args(url: str, timeout: int = DB_WRITE_TIMEOUT) -> dict:
    """Driver arguments that bound how long a single write may block."""
    if url.startswith("sqlite"):
        # check_same_thread off because flet handlers run on worker threads
        return {"check_same_thread": False, "timeout": timeout}
    if url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={timeout * 1000}"}
    return {}


engine = create_engine(DATABASE_URL, future=True, connect_args=engine_connect_args(DATABASE_URL))

# SessionLocal factory: expire_on_commit=False avoids needing refresh() in many places
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)

Base = declarative_base()
