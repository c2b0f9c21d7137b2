"""
Tests for configuration loading and validation.
"""

import pytest

from marketplace.core.config_validator import ConfigurationError, ConfigValidator, load_config
from marketplace.core.environments import DevelopmentConfig, ProductionConfig, StagingConfig


@pytest.fixture
def clean_env(monkeypatch):
    """Base credentials only, no optional overrides from the shell."""
    for name in ("SUPABASE_SERVICE_KEY", "DEBUG", "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE",
                 "DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "ENFORCE_ORDER_TRANSITIONS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SUPABASE_URL", "http://localhost:54321")
    monkeypatch.setenv("SUPABASE_KEY", "test-anon-key")
    return monkeypatch


class TestEnvironments:
    def test_development_defaults(self, clean_env):
        config = load_config("development")

        assert isinstance(config, DevelopmentConfig)
        assert config.debug is True
        assert config.log_format == "text"
        assert config.default_page_size == 20
        assert config.max_page_size == 100
        assert config.enforce_order_transitions is False

    def test_staging_enforces_transitions(self, clean_env):
        config = load_config("staging")

        assert isinstance(config, StagingConfig)
        assert config.environment == "staging"
        assert config.enforce_order_transitions is True
        assert config.log_format == "json"

    def test_production_requires_service_key(self, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://project.supabase.co")

        with pytest.raises(ConfigurationError, match="supabase_service_key"):
            load_config("production")

    def test_production_loads_with_service_key(self, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://project.supabase.co/")
        clean_env.setenv("SUPABASE_SERVICE_KEY", "service-secret")

        config = load_config("production")

        assert isinstance(config, ProductionConfig)
        assert config.supabase_url == "https://project.supabase.co"
        assert config.debug is False

    def test_production_rejects_debug(self, clean_env):
        with pytest.raises(ConfigurationError, match="Debug mode must be disabled"):
            load_config(
                "production",
                supabase_url="https://project.supabase.co",
                supabase_service_key="service-secret",
                debug=True,
            )

    def test_production_requires_https(self, clean_env):
        with pytest.raises(ConfigurationError, match="https"):
            load_config("production", supabase_service_key="service-secret")

    def test_environment_read_from_variable(self, clean_env):
        clean_env.setenv("ENVIRONMENT", "staging")

        config = ConfigValidator.validate_and_load()

        assert isinstance(config, StagingConfig)

    def test_unknown_environment(self, clean_env):
        with pytest.raises(ConfigurationError, match="Invalid environment 'qa'"):
            load_config("qa")


class TestValidation:
    def test_missing_key(self, clean_env):
        clean_env.delenv("SUPABASE_KEY")

        with pytest.raises(ConfigurationError, match="supabase_key"):
            load_config("staging")

    def test_url_scheme(self, clean_env):
        with pytest.raises(ConfigurationError, match="supabase_url"):
            load_config("staging", supabase_url="project.supabase.co")

    def test_log_level_normalized(self, clean_env):
        config = load_config("staging", log_level="warning")

        assert config.log_level == "WARNING"

    def test_invalid_log_format(self, clean_env):
        with pytest.raises(ConfigurationError, match="log_format"):
            load_config("staging", log_format="xml")

    def test_service_key_must_differ_from_anon_key(self, clean_env):
        with pytest.raises(ConfigurationError, match="must differ"):
            load_config("development", supabase_service_key="test-anon-key")

    def test_default_page_size_within_maximum(self, clean_env):
        with pytest.raises(ConfigurationError, match="cannot exceed"):
            load_config("development", default_page_size=50, max_page_size=25)

    def test_page_sizes_positive(self, clean_env):
        with pytest.raises(ConfigurationError, match="default_page_size"):
            load_config("development", default_page_size=0)

    def test_settings_loaded_on_import(self, clean_env):
        from marketplace.core.config import settings

        assert settings.supabase_key == "test-anon-key"
