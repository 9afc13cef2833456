import os

# Settings are cached on first import; point them at SQLite before that happens.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PAYMENT_WEBHOOK_SECRET", "test-payment-secret")

from datetime import time  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import booking_engine.models  # noqa: E402,F401
from booking_engine.core.deps import get_db  # noqa: E402
from booking_engine.db.base import Base  # noqa: E402
from booking_engine.models.resource import Resource  # noqa: E402
from booking_engine.models.working_hours import WorkingHoursRule  # noqa: E402
from factories import RESOURCE_DEFAULTS  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def make_resource(db: Session):
    def _make(rules: list[tuple[int, time, time]] | None = None, **overrides) -> Resource:
        data = dict(RESOURCE_DEFAULTS)
        data.update(overrides)
        resource = Resource(**data)
        db.add(resource)
        db.flush()
        for weekday, start, end in rules or []:
            db.add(WorkingHoursRule(resource_id=resource.id, weekday=weekday, start_time=start, end_time=end))
        db.commit()
        db.refresh(resource)
        return resource

    return _make


@pytest.fixture
def client(db: Session):
    from booking_engine.main import app

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
