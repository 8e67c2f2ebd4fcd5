import os

from pageflow.utils.config_loader import (
    DEFAULT_DATABASE_URL,
    Config,
    MAX_UPLOAD_BYTES,
    load_config,
    load_environment,
)


def test_defaults_without_env_or_file():
    config = load_config()

    assert config.database_url == DEFAULT_DATABASE_URL
    assert config.max_upload_bytes == MAX_UPLOAD_BYTES == 5 * 1024 * 1024
    assert config.dataforseo_location_code == 2840
    assert config.enrichment_workers == 2


def test_yaml_file_overrides_defaults(monkeypatch, tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "pageflow:\n"
        "  enrichment_timeout: 12.5\n"
        "  dataforseo_language_code: de\n"
        "  metrics_port: 9100\n"
    )
    monkeypatch.setenv("PAGEFLOW_CONFIG", str(config_file))

    config = load_config()

    assert config.enrichment_timeout == 12.5
    assert config.dataforseo_language_code == "de"
    assert config.metrics_port == 9100


def test_environment_wins_over_yaml(monkeypatch, tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("pageflow:\n  enrichment_workers: 3\n  log_level: DEBUG\n")
    monkeypatch.setenv("PAGEFLOW_CONFIG", str(config_file))
    monkeypatch.setenv("ENRICHMENT_WORKERS", "8")
    monkeypatch.setenv("DATABASE_URL", "postgresql://user:pass@db:5432/pages")

    config = load_config()

    assert config.enrichment_workers == 8
    assert config.log_level == "DEBUG"
    assert config.database_url == "postgresql://user:pass@db:5432/pages"


def test_invalid_number_keeps_default(monkeypatch):
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "five megabytes")

    assert load_config().max_upload_bytes == MAX_UPLOAD_BYTES


def test_invalid_number_in_any_env_spelling_keeps_default(monkeypatch):
    monkeypatch.setenv("METRICS_PORT", "not-a-port")
    monkeypatch.setenv("PAGEFLOW_METRICS_PORT", "not-a-port")
    monkeypatch.setenv("PAGEFLOW_ENRICHMENT_WORKERS", "many")

    config = load_config()

    assert config.metrics_port == 8000
    assert config.enrichment_workers == 2


def test_config_ignores_environment_when_built_directly(monkeypatch):
    monkeypatch.setenv("ENRICHMENT_WORKERS", "lots")

    assert Config(metrics_port=9000).metrics_port == 9000
    assert Config().enrichment_workers == 2


def test_env_file_is_loaded(monkeypatch, tmp_path):
    env_file = tmp_path / "pageflow.env"
    env_file.write_text("DATAFORSEO_LOGIN=api-user\nMETRICS_PORT=9200\n")
    monkeypatch.setenv("PAGEFLOW_ENV_FILE", str(env_file))
    monkeypatch.delenv("DATAFORSEO_LOGIN", raising=False)

    try:
        config = load_config()
    finally:
        os.environ.pop("DATAFORSEO_LOGIN", None)
        os.environ.pop("METRICS_PORT", None)

    assert config.dataforseo_login == "api-user"
    assert config.metrics_port == 9200


def test_load_environment_from_custom_file(monkeypatch, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("TEST_CUSTOM_URL=https://example.com\nTEST_WORKERS=4\n")

    loaded = load_environment(env_file, override=True)

    assert loaded is True
    assert os.getenv("TEST_CUSTOM_URL") == "https://example.com"
    assert os.getenv("TEST_WORKERS") == "4"


def test_load_environment_missing_file(tmp_path):
    assert load_environment(tmp_path / "missing.env") is False
