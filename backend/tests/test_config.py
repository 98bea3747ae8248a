from wastebin.config import get_settings


def test_settings_read_environment_at_call_time(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///override.db")
    monkeypatch.setenv("WASTEBIN_TITLE", "mybin")
    monkeypatch.setenv("WASTEBIN_MAX_BODY_SIZE", "42")
    monkeypatch.setenv("WASTEBIN_SCRYPT_N", "1024")

    settings = get_settings()

    assert settings.database_url == "sqlite:///override.db"
    assert settings.title == "mybin"
    assert settings.max_body_size == 42
    assert settings.scrypt.n == 1024


def test_database_url_built_from_db_variables(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DB_USER", "u")
    monkeypatch.setenv("DB_PASS", "p")
    monkeypatch.setenv("DB_HOST", "db")
    monkeypatch.setenv("DB_PORT", "6543")
    monkeypatch.setenv("DB_NAME", "pastes")

    assert get_settings().database_url == "postgresql://u:p@db:6543/pastes"
