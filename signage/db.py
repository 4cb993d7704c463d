import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy import text

DATABASE_URL = os.getenv("SIGNAGE_DATABASE_URL", "sqlite:///./signage.db")

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_sqlite_schema():
    """
    Lightweight runtime schema patching for SQLite.

    `Base.metadata.create_all()` won't add new columns to existing tables.
    Older local databases predate pairing (no access token) and resolution.
    """
    if not DATABASE_URL.startswith("sqlite"):
        return

    with engine.begin() as conn:
        cols = conn.execute(text("PRAGMA table_info(displays)")).fetchall()
        col_names = {row[1] for row in cols}  # (cid, name, type, notnull, dflt_value, pk)
        if not cols:
            return
        if "access_token" not in col_names:
            conn.execute(text("ALTER TABLE displays ADD COLUMN access_token VARCHAR(64)"))
        if "is_linked" not in col_names:
            conn.execute(text("ALTER TABLE displays ADD COLUMN is_linked BOOLEAN DEFAULT 0"))
        if "last_check_in" not in col_names:
            conn.execute(text("ALTER TABLE displays ADD COLUMN last_check_in DATETIME"))
        if "resolution" not in col_names:
            conn.execute(text("ALTER TABLE displays ADD COLUMN resolution VARCHAR(20) DEFAULT '1080p'"))

        conn.execute(text("UPDATE displays SET is_linked=0 WHERE is_linked IS NULL"))
        conn.execute(
            text(
                "UPDATE displays SET resolution='1080p' "
                "WHERE resolution IS NULL OR trim(resolution)=''"
            )
        )
        # A display that never finished pairing must not keep a half-written token.
        conn.execute(
            text(
                "UPDATE displays SET access_token=NULL "
                "WHERE is_linked=0 AND access_token IS NOT NULL"
            )
        )
        conn.execute(
            text(
                "CREATE UNIQUE INDEX IF NOT EXISTS ux_displays_access_token "
                "ON displays(access_token) "
                "WHERE access_token IS NOT NULL"
            )
        )
