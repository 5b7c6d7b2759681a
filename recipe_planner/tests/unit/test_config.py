"""Unit tests for Config environment handling.

Each setting is tested for:
- Default values when no environment variables set
- Environment variable overrides
- Invalid value handling (fallback to defaults with warning)
"""

import logging
from pathlib import Path

from recipe_planner.utils.config import Config, get_config, reset_config


class TestEnvironment:
    def test_environment_from_env(self):
        assert Config().environment == "test"

    def test_explicit_environment(self):
        config = Config("development")
        assert config.is_development
        assert not config.is_production

    def test_invalid_environment_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv("RECIPE_PLANNER_ENV", "staging")
        with caplog.at_level(logging.WARNING):
            config = Config()
        assert config.environment == "production"
        assert "Invalid RECIPE_PLANNER_ENV" in caplog.text


class TestDatabaseLocation:
    def test_test_environment_is_in_memory(self):
        config = Config("test")
        assert config.database_path is None
        assert config.database_url == "sqlite:///:memory:"
        assert not config.database_exists()

    def test_production_uses_home_directory(self):
        config = Config("production")
        assert config.database_path == Path.home() / ".recipe_planner" / "recipe_planner.db"

    def test_db_path_override(self, monkeypatch, tmp_path):
        db_file = tmp_path / "custom.db"
        monkeypatch.setenv("RECIPE_PLANNER_DB_PATH", str(db_file))

        config = Config("production")

        assert config.database_path == db_file
        assert config.database_url == f"sqlite:///{db_file.as_posix()}"

    def test_legacy_db_path_accepted(self, monkeypatch, tmp_path):
        db_file = tmp_path / "legacy.db"
        monkeypatch.setenv("DB_PATH", str(db_file))
        assert Config("production").database_path == db_file

    def test_database_url_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("RECIPE_PLANNER_DB_PATH", str(tmp_path / "ignored.db"))
        monkeypatch.setenv("RECIPE_PLANNER_DATABASE_URL", "postgresql://localhost/recipes")
        assert Config().database_url == "postgresql://localhost/recipes"

    def test_ensure_directories_creates_parent(self, monkeypatch, tmp_path):
        db_file = tmp_path / "nested" / "dir" / "recipes.db"
        monkeypatch.setenv("RECIPE_PLANNER_DB_PATH", str(db_file))

        Config().ensure_directories()

        assert db_file.parent.is_dir()


class TestSettings:
    def test_defaults(self):
        config = Config()
        assert config.db_timeout == 30
        assert config.sql_echo is False
        assert config.log_level == "INFO"

    def test_db_timeout_env_override(self, monkeypatch):
        monkeypatch.setenv("RECIPE_PLANNER_DB_TIMEOUT", "60")
        assert Config().db_timeout == 60

    def test_db_timeout_invalid_uses_default(self, monkeypatch, caplog):
        monkeypatch.setenv("RECIPE_PLANNER_DB_TIMEOUT", "soon")
        with caplog.at_level(logging.WARNING):
            assert Config().db_timeout == 30
        assert "Invalid RECIPE_PLANNER_DB_TIMEOUT" in caplog.text

    def test_sql_echo_env_override(self, monkeypatch):
        monkeypatch.setenv("RECIPE_PLANNER_SQL_ECHO", "yes")
        assert Config().sql_echo is True

    def test_sql_echo_invalid_uses_default(self, monkeypatch, caplog):
        monkeypatch.setenv("RECIPE_PLANNER_SQL_ECHO", "maybe")
        with caplog.at_level(logging.WARNING):
            assert Config().sql_echo is False
        assert "Invalid RECIPE_PLANNER_SQL_ECHO" in caplog.text

    def test_log_level_env_override(self, monkeypatch):
        monkeypatch.setenv("RECIPE_PLANNER_LOG_LEVEL", "debug")
        assert Config().log_level == "DEBUG"

    def test_log_level_invalid_uses_default(self, monkeypatch, caplog):
        monkeypatch.setenv("RECIPE_PLANNER_LOG_LEVEL", "LOUD")
        with caplog.at_level(logging.WARNING):
            assert Config().log_level == "INFO"
        assert "Invalid RECIPE_PLANNER_LOG_LEVEL" in caplog.text


class TestSingleton:
    def test_get_config_returns_same_instance(self):
        assert get_config() is get_config()

    def test_reset_config_creates_new_instance(self):
        first = get_config()
        reset_config()
        assert get_config() is not first
