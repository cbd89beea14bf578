import os

# Settings are read at import time: no Redis, process-local rate limiting
os.environ["REDIS_URL"] = ""
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from collections.abc import Generator
from datetime import date, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from interview_schedule.database import get_db, init_db, make_engine
from interview_schedule.main import app
from interview_schedule.models import AvailabilitySlot, Owner
from interview_schedule.services.rate_limit import get_rate_limiter
from interview_schedule.services.slots import store
from interview_schedule.utils.tokens import generate_schedule_token

STAFF_USER_ID = 7


@pytest.fixture
def engine(tmp_path: Path) -> Generator[Engine, None, None]:
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def day() -> date:
    """A day safely in the future."""
    return date.today() + timedelta(days=7)


@pytest.fixture
def make_owner(db: Session):
    def _make(name: str = "Ada Candidate", **kwargs) -> Owner:
        kwargs.setdefault("managed_by", STAFF_USER_ID)
        kwargs.setdefault("onsite_block_minutes", 60)
        kwargs.setdefault("online_block_minutes", 30)
        owner = Owner(name=name, schedule_token=generate_schedule_token(), **kwargs)
        db.add(owner)
        db.commit()
        db.refresh(owner)
        return owner

    return _make


@pytest.fixture
def owner(make_owner) -> Owner:
    return make_owner()


@pytest.fixture
def add_slots(db: Session):
    """add_slots(owner, day, [("09:00", "09:30", "online"), ...]) -> rows"""

    def _add(owner: Owner, slot_date: date, intervals) -> list[AvailabilitySlot]:
        rows = store.create_slots(db, owner.id, [
            {
                "date": slot_date,
                "start_time": start,
                "end_time": end,
                "interview_type": interview_type,
            }
            for start, end, interview_type in intervals
        ])
        db.commit()
        return rows

    return _add


@pytest.fixture
def client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    get_rate_limiter.cache_clear()
    yield TestClient(app)
    app.dependency_overrides.clear()
    get_rate_limiter.cache_clear()


@pytest.fixture
def staff_headers() -> dict[str, str]:
    return {"X-User-Id": str(STAFF_USER_ID)}
