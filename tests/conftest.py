"""Pytest configuration for the orderdesk test suite."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("ADMIN_GROUP", "admin")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

import orderdesk.models  # noqa: F401
from orderdesk.core.database import Base, build_session_factory
from orderdesk.services.record_store import RecordStore


def build_store(db_path) -> RecordStore:
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(bind=sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return RecordStore(build_session_factory(engine))


@pytest.fixture
def store(tmp_path) -> RecordStore:
    return build_store(tmp_path / "records.db")
