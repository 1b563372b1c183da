import pytest
from pydantic import ValidationError

from core.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("MAX_PAYOUT_ATTEMPTS", raising=False)
    settings = Settings(_env_file=None)
    assert settings.max_payout_attempts == 3
    assert settings.admin_page_size == 10


def test_env_aliases(monkeypatch):
    monkeypatch.setenv("BACKEND_API_URL", "https://api.example.com/api/")
    monkeypatch.setenv("MAX_PAYOUT_ATTEMPTS", "5")
    settings = Settings(_env_file=None)
    assert settings.backend_api_url == "https://api.example.com/api"
    assert settings.max_payout_attempts == 5


def test_invalid_attempts_limit():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, MAX_PAYOUT_ATTEMPTS=0)
