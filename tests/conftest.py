"""Pytest configuration and fixtures."""
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from filetags.core.database import create_session_factory
from filetags.main import create_app
from filetags.services.tag_store import TagStore


@pytest.fixture(scope="function")
def store() -> Generator[TagStore, None, None]:
    """Fresh in-memory tag store for each test."""
    tag_store = TagStore("sqlite://").open()
    try:
        yield tag_store
    finally:
        tag_store.close()


@pytest.fixture(scope="function")
def db(store: TagStore) -> Generator[Session, None, None]:
    """Session on the test store's engine."""
    session = create_session_factory(store.engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(store: TagStore) -> Generator[TestClient, None, None]:
    """Create a test client serving the test store."""
    app = create_app(store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[..., str]:
    """Factory writing a real file and returning its path as a string."""

    def _make_file(relative: str, content: str = "") -> str:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content or relative)
        return str(path)

    return _make_file
