"""HabitBlocks tracker factory and bootstrap."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from habitblocks.config import config_by_name
from habitblocks.domains.habits.services.tracker_service import HabitTracker
from habitblocks.platform.storage import DocumentStore, JsonFileDocumentStore


def create_tracker(config_name: Optional[str] = None, store: Optional[DocumentStore] = None) -> HabitTracker:
    """Create a configured habit tracker.

    Without an explicit ``store`` the documents live as JSON files under the
    configured ``DATA_DIR``; a relative directory is resolved against the
    project root.
    """
    env_name = (
        config_name or os.environ.get("HABITBLOCKS_ENV") or os.environ.get("APP_ENV") or "development"
    ).lower()
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    logging.basicConfig(level=config_cls.LOG_LEVEL)

    if store is None:
        data_dir = Path(config_cls.DATA_DIR)
        if not data_dir.is_absolute():
            data_dir = Path(__file__).resolve().parent.parent / data_dir
        store = JsonFileDocumentStore(data_dir)
    logging.getLogger(__name__).debug("Habit tracker created for %s environment", env_name)
    return HabitTracker(store, config=config_cls)


__all__ = ["HabitTracker", "create_tracker"]
