"""Application configuration for habitblocks."""

from __future__ import annotations

import os
from typing import Dict, Type

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class BaseConfig:
    """Base configuration loaded for all environments."""

    DATA_DIR = os.environ.get("HABITBLOCKS_DATA_DIR", "instance/habit-data")

    # Document keys inside the store; kept compatible with existing data files.
    HISTORY_DOCUMENT = os.environ.get("HABITBLOCKS_HISTORY_DOCUMENT", "habit_blocks.json")
    INIT_DOCUMENT = os.environ.get("HABITBLOCKS_INIT_DOCUMENT", "habit_init.json")
    CONFIG_DOCUMENT = os.environ.get("HABITBLOCKS_CONFIG_DOCUMENT", "habit_config.json")
    DOCUMENT_VERSION = "2.0"

    DEFAULT_HABIT_NAME = os.environ.get("HABITBLOCKS_DEFAULT_HABIT", "🏋️ Gym")
    GRID_TOTAL_DAYS = _env_int("HABITBLOCKS_GRID_TOTAL_DAYS", 365)
    STREAK_SCAN_LIMIT = _env_int("HABITBLOCKS_STREAK_SCAN_LIMIT", 365)
    MAX_SETUP_HABITS = _env_int("HABITBLOCKS_MAX_SETUP_HABITS", 5)

    LOG_LEVEL = os.environ.get("HABITBLOCKS_LOGLEVEL", "INFO")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ENV = "development"
    LOG_LEVEL = os.environ.get("HABITBLOCKS_LOGLEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    TESTING = True
    ENV = "testing"
    DATA_DIR = os.environ.get("HABITBLOCKS_TEST_DATA_DIR", "instance/test-habit-data")
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    ENV = "production"


config_by_name: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    # CI pipelines set APP_ENV=ci; map to testing defaults.
    "ci": TestingConfig,
}
