import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from docverify.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- AREAS / HOUSEHOLDS / MEMBERS
-- Owned by the membership registry; read-only for verification.
-- ============================================================
CREATE TABLE IF NOT EXISTS areas (
    id   TEXT PRIMARY KEY,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS households (
    id      TEXT PRIMARY KEY,
    area_id TEXT NOT NULL REFERENCES areas(id),
    label   TEXT
);

CREATE INDEX IF NOT EXISTS idx_households_area ON households(area_id);

CREATE TABLE IF NOT EXISTS members (
    id           TEXT PRIMARY KEY,
    household_id TEXT NOT NULL REFERENCES households(id),
    name         TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_members_household ON members(household_id);

-- ============================================================
-- DOCUMENTS
-- ============================================================
CREATE TABLE IF NOT EXISTS documents (
    id              TEXT PRIMARY KEY,
    owner_id        TEXT NOT NULL REFERENCES members(id),
    kind            TEXT NOT NULL
                    CHECK(kind IN ('BAPTISM','CONFIRMATION','MARRIAGE','OTHER')),
    title           TEXT,
    file_name       TEXT NOT NULL,
    file_ref        TEXT NOT NULL,
    mime_type       TEXT,
    file_size_bytes INTEGER,
    status          TEXT NOT NULL DEFAULT 'PENDING'
                    CHECK(status IN ('PENDING','APPROVED','REJECTED')),
    review_note     TEXT,
    submitted_at    TEXT NOT NULL,
    submitted_by    TEXT NOT NULL,
    decided_at      TEXT,
    decided_by      TEXT,
    version         INTEGER NOT NULL DEFAULT 1 CHECK(version >= 1),
    CHECK(kind != 'OTHER' OR (title IS NOT NULL AND length(trim(title)) > 0)),
    CHECK(status != 'REJECTED' OR (review_note IS NOT NULL AND length(trim(review_note)) > 0)),
    CHECK((decided_at IS NULL) = (status = 'PENDING'))
);

CREATE INDEX IF NOT EXISTS idx_documents_owner ON documents(owner_id);
CREATE INDEX IF NOT EXISTS idx_documents_status ON documents(status);

-- One active document per mandatory slot
CREATE UNIQUE INDEX IF NOT EXISTS idx_documents_active_slot
    ON documents(owner_id, kind)
    WHERE kind != 'OTHER' AND status IN ('PENDING','APPROVED');

-- ============================================================
-- DOCUMENT HISTORY
-- ============================================================
CREATE TABLE IF NOT EXISTS document_history (
    id          TEXT PRIMARY KEY,
    document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    action      TEXT NOT NULL
                CHECK(action IN ('SUBMITTED','APPROVED','REJECTED','REPLACED')),
    actor       TEXT NOT NULL,
    note        TEXT,
    file_name   TEXT,
    version     INTEGER NOT NULL,
    occurred_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_document_history_document ON document_history(document_id);
"""


MIGRATIONS = [
    # v0.2: upload metadata
    "ALTER TABLE documents ADD COLUMN mime_type TEXT",
    "ALTER TABLE documents ADD COLUMN file_size_bytes INTEGER",
]


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    # Run migrations idempotently (ALTER TABLE fails if column exists)
    for migration in MIGRATIONS:
        try:
            conn.execute(migration)
            conn.commit()
        except sqlite3.OperationalError:
            pass  # column already exists
    conn.close()
