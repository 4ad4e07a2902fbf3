import pytest
from fastapi.testclient import TestClient
from app.config.settings import settings
from app.database.supabase_client import SupabaseClient
from tests.fakes import WEBHOOK_SECRET, FakeSupabase


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeSupabase()
    monkeypatch.setattr(SupabaseClient, "get_client", lambda: db)
    monkeypatch.setattr(SupabaseClient, "get_service_client", lambda: db)
    monkeypatch.setattr(SupabaseClient, "get_session_client", db.session_client)
    monkeypatch.setattr(SupabaseClient, "get_user_client", lambda token: db)
    return db


@pytest.fixture
def test_settings(monkeypatch):
    monkeypatch.setattr(settings, "stripe_webhook_secret", WEBHOOK_SECRET)
    monkeypatch.setattr(settings, "stripe_price_talent_monthly", "price_monthly")
    monkeypatch.setattr(settings, "stripe_price_talent_annual", "price_annual")
    monkeypatch.setattr(settings, "internal_email_api_key", "internal-test-key")
    monkeypatch.setattr(settings, "resend_api_key", None)
    monkeypatch.setattr(settings, "environment", "development")
    monkeypatch.setattr(settings, "site_url", "http://localhost:3000")
    return settings


@pytest.fixture
def client(fake_db, test_settings):
    from app.main import app
    app.dependency_overrides.clear()
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
