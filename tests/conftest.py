from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import fakeredis
import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="session", autouse=True)
def _init_spaces_from_test_fixtures() -> None:
    """Initialize spaces from `tests/assets` and forbid the built-in fallback board.

    This keeps tests hermetic and prevents coupling to the repo's real game data.
    """

    os.environ["PATHWAY_STRICT_ASSETS"] = "1"

    from app.assets.singleton import init_spaces, reset_spaces_for_tests

    reset_spaces_for_tests()

    # Point the loader at a fake project root: tests/ contains an assets/ dir.
    test_root = Path(__file__).resolve().parent
    init_spaces(project_root=test_root)


@pytest.fixture()
def spaces():
    from app.assets.singleton import get_spaces

    return get_spaces()


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """FastAPI TestClient wired to an in-memory fakeredis."""

    from app.api.deps import get_redis
    from app.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
