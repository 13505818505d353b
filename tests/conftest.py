# tests/conftest.py
import os
import time

# app.main reads settings at import time
os.environ.setdefault("SUPABASE_URL", "https://proj.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "anon-key")

import pytest
from jose import jwt

from app.core.config import Settings
from app.core.local_storage import DatabaseLocalStorage
from app.database import create_db_and_tables, create_local_engine
from app.storefront import build_storefront
from tests.fakes import FakeHttp, FakeSupabase, MemoryLocalStorage

USER_ID = "0b7c3f1e-5d2a-4c8e-9f6b-1a2b3c4d5e6f"
USER_EMAIL = "client@example.com"


def make_token(expires_in: int = 3600) -> str:
    return jwt.encode(
        {"sub": USER_ID, "exp": int(time.time()) + expires_in},
        "test-secret",
        algorithm="HS256",
    )


@pytest.fixture
def settings():
    return Settings(
        SUPABASE_URL="https://proj.supabase.co",
        SUPABASE_KEY="anon-key",
        SITE_URL="https://shop.example.com",
        LOCAL_STORAGE_URL="sqlite://",
        ORDER_POLL_RETRIES=3,
        ORDER_POLL_DELAY_SECONDS=2.0,
    )


@pytest.fixture
def client():
    fake = FakeSupabase(token=make_token())
    fake.auth.add_account(USER_EMAIL, "secret", USER_ID)
    return fake


@pytest.fixture
def storage():
    return MemoryLocalStorage()


@pytest.fixture
def engine():
    engine = create_local_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_storage(engine):
    return DatabaseLocalStorage(engine, quota_bytes=1024)


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def storefront(settings, client, storage, http, sleeps):
    return build_storefront(settings, client, storage, http, sleep=sleeps.append)


@pytest.fixture
def signed_in(storefront):
    """Storefront with a customer session open."""
    result = storefront.gate.sign_in(USER_EMAIL, "secret")
    assert result.success
    return storefront
