import pytest

from checkin.config import DEFAULT_BASE_URL, _clean, load_settings, normalize_base_url

ENV_VARS = [
    "CHECKIN_BASE_URL",
    "CHECKIN_MODE",
    "CHECKIN_TOKEN_FILE",
    "CHECKIN_WALLET_FILE",
    "CHECKIN_INTERVAL_HOURS",
    "CHECKIN_TIMEOUT_SEC",
    "CHECKIN_USER_AGENT",
    "CHECKIN_COUNTDOWN",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the test run
    monkeypatch.setattr("checkin.config.load_dotenv", lambda **kwargs: False)


def test_clean():
    assert _clean('  "quoted"  ') == "quoted"
    assert _clean("''") is None
    assert _clean(None) is None


def test_normalize_base_url():
    assert normalize_base_url("api.example.com/") == "https://api.example.com"


def test_defaults():
    settings = load_settings()
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.mode == "token"
    assert settings.interval_hours == 24
    assert settings.timeout_sec is None
    assert settings.countdown is True
    assert settings.credential_file() == "token.txt"


def test_overrides(monkeypatch):
    monkeypatch.setenv("CHECKIN_MODE", "WALLET")
    monkeypatch.setenv("CHECKIN_WALLET_FILE", "'keys.txt'")
    monkeypatch.setenv("CHECKIN_INTERVAL_HOURS", "12")
    monkeypatch.setenv("CHECKIN_TIMEOUT_SEC", "30")
    monkeypatch.setenv("CHECKIN_COUNTDOWN", "no")

    settings = load_settings()

    assert settings.mode == "wallet"
    assert settings.credential_file() == "keys.txt"
    assert settings.interval_hours == 12
    assert settings.timeout_sec == 30
    assert settings.countdown is False


def test_invalid_mode(monkeypatch):
    monkeypatch.setenv("CHECKIN_MODE", "email")
    with pytest.raises(RuntimeError):
        load_settings()
