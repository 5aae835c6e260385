# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   that are passed explicitly to every component.
#
# CLASSES:
# --------
# - MongoConfig (dataclass)
#     uri: str           (default "mongodb://localhost:27017/db")
#     timeout_ms: int    (default 30000)
#
# - LoadConfig (dataclass)
#     clear_collections: bool   (default True)
#     batch_size: int           (default 500)
#     report_interval_ms: int   (default 1000)
#
# - AppConfig (dataclass)
#     mongo: MongoConfig
#     load: LoadConfig
#     dump_path: str            (default "shops.sql")
#     log_level: str            (default "info")
#     validate_schema: bool     (default True)
#
# FUNCTION:
# ---------
# - load_config(dump_path=None, uri=None, env_file=None) -> AppConfig
#     Load .env using python-dotenv, construct and validate AppConfig.
#     Explicit arguments (from the command line) win over the environment.
#     Every call builds a fresh AppConfig; there is no module-level state.
#
# USAGE:
# ------
#   from dump2mongo.config import load_config
#   config = load_config("dump.sql")
#   print(config.mongo.uri)
#   print(config.load.batch_size)
#
# ==============================================

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv

from dump2mongo.errors import ConfigError
from dump2mongo.logger import LOG_LEVELS


TRUE_VARIANTS = {"1", "true", "yes", "on"}
FALSE_VARIANTS = {"0", "false", "no", "off"}


@dataclass
class MongoConfig:
    """MongoDB connection configuration."""
    uri: str = "mongodb://localhost:27017/db"
    timeout_ms: int = 30000


@dataclass
class LoadConfig:
    """How row data is written."""
    clear_collections: bool = True
    batch_size: int = 500
    report_interval_ms: int = 1000


@dataclass
class AppConfig:
    """Main application configuration."""
    mongo: MongoConfig = field(default_factory=MongoConfig)
    load: LoadConfig = field(default_factory=LoadConfig)
    dump_path: str = "shops.sql"
    log_level: str = "info"
    validate_schema: bool = True

    def validate(self) -> "AppConfig":
        """Raise ConfigError on any out-of-range value; return self."""
        if self.load.batch_size <= 0:
            raise ConfigError(f"batch size must be positive, got {self.load.batch_size}")
        if self.load.report_interval_ms < 0:
            raise ConfigError(
                f"report interval must not be negative, got {self.load.report_interval_ms}"
            )
        if self.mongo.timeout_ms <= 0:
            raise ConfigError(f"connection timeout must be positive, got {self.mongo.timeout_ms}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(
                f"log level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )
        if not self.mongo.uri:
            raise ConfigError("MongoDB connection string is empty")
        return self


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in TRUE_VARIANTS:
        return True
    if value in FALSE_VARIANTS:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def load_config(
    dump_path: Optional[str] = None,
    uri: Optional[str] = None,
    env_file: Optional[str] = None,
) -> AppConfig:
    """
    Load configuration from environment variables / .env file.

    Args:
        dump_path: Overrides SQL_DUMP_PATH (first CLI argument)
        uri: Overrides MONGODB_URI (second CLI argument)
        env_file: .env file to read; defaults to ./.env

    Returns:
        AppConfig: validated application configuration
    """
    env_path = Path(env_file) if env_file else Path.cwd() / ".env"
    load_dotenv(dotenv_path=env_path)

    mongo_config = MongoConfig(
        uri=uri or os.getenv("MONGODB_URI", "mongodb://localhost:27017/db"),
        timeout_ms=_env_int("MONGO_TIMEOUT_MS", 30000),
    )

    load = LoadConfig(
        clear_collections=_env_bool("CLEAR_COLLECTIONS", True),
        batch_size=_env_int("BATCH_SIZE", 500),
        report_interval_ms=_env_int("REPORT_INTERVAL_MS", 1000),
    )

    config = AppConfig(
        mongo=mongo_config,
        load=load,
        dump_path=dump_path or os.getenv("SQL_DUMP_PATH", "shops.sql"),
        log_level=os.getenv("LOG_LEVEL", "info").strip().lower(),
        validate_schema=_env_bool("VALIDATE_SCHEMA", True),
    )
    return config.validate()
