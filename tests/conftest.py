from __future__ import annotations

"""Pytest fixtures for FastAPI integration tests.

Supabase is replaced by the in-memory stub in ``tests/supabase_stub.py`` so
the request pipeline runs end-to-end without network or database round-trips.
"""

import os
import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

# ---------------------------------------------------------------------------
# Runtime env for the application
# ---------------------------------------------------------------------------

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test_key")
os.environ.setdefault("APP_ENV", "test")
os.environ.pop("SUPABASE_JWT_SECRET", None)

# Ensure project root on PYTHONPATH so `import codexi` works when pytest is run
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from codexi.main import create_app, limiter  # noqa: E402
from tests.supabase_stub import SupabaseStub  # noqa: E402

OWNER = "user_owner"
OTHER = "user_other"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture()
def supabase() -> SupabaseStub:
    return SupabaseStub()


@pytest.fixture()
def app(supabase) -> FastAPI:
    return create_app(supabase=supabase)


@pytest.fixture()
def api_client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def owner_headers(supabase) -> dict[str, str]:
    return {"Authorization": f"Bearer {supabase.login(OWNER)}"}


@pytest.fixture()
def other_headers(supabase) -> dict[str, str]:
    return {"Authorization": f"Bearer {supabase.login(OTHER)}"}
