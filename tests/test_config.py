# ==============================================
# Tests for Configuration
# ==============================================

import pytest

from dump2mongo.config import AppConfig, LoadConfig, load_config
from dump2mongo.errors import ConfigError


@pytest.fixture
def env_file(tmp_path):
    def _write(text):
        path = tmp_path / ".env"
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


class TestLoadConfig:
    """Tests for .env / environment loading."""

    def test_defaults(self, clean_env, tmp_path):
        config = load_config(env_file=str(tmp_path / "missing.env"))
        assert config.mongo.uri == "mongodb://localhost:27017/db"
        assert config.mongo.timeout_ms == 30000
        assert config.dump_path == "shops.sql"
        assert config.load.clear_collections is True
        assert config.load.batch_size == 500
        assert config.load.report_interval_ms == 1000
        assert config.log_level == "info"
        assert config.validate_schema is True

    def test_values_from_env_file(self, clean_env, env_file):
        path = env_file(
            "MONGODB_URI=mongodb://db.internal:27017/shop\n"
            "BATCH_SIZE=50\n"
            "CLEAR_COLLECTIONS=false\n"
            "LOG_LEVEL=Verbose\n"
            "VALIDATE_SCHEMA=no\n"
        )
        config = load_config(env_file=path)
        assert config.mongo.uri == "mongodb://db.internal:27017/shop"
        assert config.load.batch_size == 50
        assert config.load.clear_collections is False
        assert config.log_level == "verbose"
        assert config.validate_schema is False

    def test_arguments_win_over_environment(self, clean_env, env_file):
        path = env_file("MONGODB_URI=mongodb://env:27017/a\nSQL_DUMP_PATH=env.sql\n")
        config = load_config("cli.sql", "mongodb://cli:27017/b", env_file=path)
        assert config.dump_path == "cli.sql"
        assert config.mongo.uri == "mongodb://cli:27017/b"

    def test_each_call_is_fresh(self, clean_env, tmp_path):
        missing = str(tmp_path / "missing.env")
        first = load_config(env_file=missing)
        first.load.batch_size = 1
        assert load_config(env_file=missing).load.batch_size == 500

    @pytest.mark.parametrize("line", [
        "BATCH_SIZE=0",
        "BATCH_SIZE=many",
        "REPORT_INTERVAL_MS=-1",
        "MONGO_TIMEOUT_MS=0",
        "LOG_LEVEL=chatty",
        "CLEAR_COLLECTIONS=maybe",
    ])
    def test_invalid_values(self, clean_env, env_file, line):
        with pytest.raises(ConfigError):
            load_config(env_file=env_file(line + "\n"))


class TestValidate:
    """Tests for AppConfig.validate()."""

    def test_valid_config_returned(self):
        config = AppConfig()
        assert config.validate() is config

    def test_zero_interval_allowed(self):
        AppConfig(load=LoadConfig(report_interval_ms=0)).validate()

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            AppConfig(load=LoadConfig(batch_size=-5)).validate()
