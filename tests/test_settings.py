from todo_api.settings import get_settings


def test_defaults(monkeypatch):
    for name in (
        "PERSISTENCE_BACKEND",
        "MONGODB_URI",
        "MONGODB_DATABASE",
        "MONGODB_COLLECTION",
        "MONGODB_TIMEOUT_MS",
        "CORS_ALLOW_ORIGINS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.persistence_backend == "memory"
    assert settings.mongodb_uri == "mongodb://localhost:27017"
    assert settings.mongodb_database == "todos"
    assert settings.mongodb_collection == "todos"
    assert settings.mongodb_timeout_ms == 5000
    assert settings.cors_allow_origins == ["*"]
    assert settings.log_level == "INFO"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "Mongo")
    monkeypatch.setenv("MONGODB_URI", "mongodb://db:27017")
    monkeypatch.setenv("MONGODB_TIMEOUT_MS", "250")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = get_settings()
    assert settings.persistence_backend == "mongo"
    assert settings.mongodb_uri == "mongodb://db:27017"
    assert settings.mongodb_timeout_ms == 250
    assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"


def test_invalid_values_fall_back(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "postgres")
    monkeypatch.setenv("MONGODB_TIMEOUT_MS", "soon")
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    settings = get_settings()
    assert settings.persistence_backend == "memory"
    assert settings.mongodb_timeout_ms == 5000
    assert settings.log_level == "INFO"
