import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from docverify.config import settings
from docverify.database import get_db, init_db
from docverify.main import app
from docverify.models.area import Area, Household, Member


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def tmp_data_dir(tmp_path):
    data_dir = tmp_path / "DocVerify"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def test_db(tmp_data_dir):
    db_path = tmp_data_dir / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def seeded(test_db):
    """Two areas: area-a with members m-a1 and m-a2, area-b with member m-b1."""
    db = test_db()
    db.add_all([
        Area(id="area-a", name="Rayon A"),
        Area(id="area-b", name="Rayon B"),
    ])
    db.flush()
    db.add_all([
        Household(id="hh-a", area_id="area-a", label="Household A"),
        Household(id="hh-b", area_id="area-b", label="Household B"),
    ])
    db.flush()
    db.add_all([
        Member(id="m-a1", household_id="hh-a", name="Maria"),
        Member(id="m-a2", household_id="hh-a", name="Yohanes"),
        Member(id="m-b1", household_id="hh-b", name="Petrus"),
    ])
    db.commit()
    db.close()
    return test_db


@pytest.fixture
def session(seeded):
    db = seeded()
    yield db
    db.close()


@pytest.fixture
def client(tmp_data_dir, seeded):
    original_data_dir = settings.data_dir
    settings.data_dir = tmp_data_dir
    c = TestClient(app)
    yield c
    settings.data_dir = original_data_dir


def member_headers(member_id: str) -> dict:
    return {"X-Caller-Id": f"user-{member_id}", "X-Caller-Role": "MEMBER", "X-Member-Id": member_id}


def reviewer_headers(area_id: str | None, caller_id: str = "reviewer") -> dict:
    headers = {"X-Caller-Id": f"{caller_id}-{area_id}", "X-Caller-Role": "AREA_REVIEWER"}
    if area_id:
        headers["X-Area-Id"] = area_id
    return headers


def admin_headers(caller_id: str = "admin") -> dict:
    return {"X-Caller-Id": caller_id, "X-Caller-Role": "GLOBAL_REVIEWER"}
