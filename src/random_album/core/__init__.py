"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Database operations (SQLite)
- Persisted key/value settings
- Output and logging (Loguru, Rich)
"""

# Configuration
from .config import (
    Config,
    load_config,
    save_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
    ensure_directories,
)

# Database
from .database import (
    get_database_path,
    get_db_connection,
    init_database,
    migrate_database,
    batch_upsert_tracks,
    get_known_mtimes,
    prune_tracks,
    record_play,
    get_library_stats,
)

# Settings
from .settings import SettingsStore, SqliteSettingsStore

# Output
from .console import get_console, print_table
from .output import log, setup_loguru

__all__ = [
    # Config
    "Config",
    "load_config",
    "save_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    "ensure_directories",
    # Database
    "get_database_path",
    "get_db_connection",
    "init_database",
    "migrate_database",
    "batch_upsert_tracks",
    "get_known_mtimes",
    "prune_tracks",
    "record_play",
    "get_library_stats",
    # Settings
    "SettingsStore",
    "SqliteSettingsStore",
    # Output
    "get_console",
    "print_table",
    "log",
    "setup_loguru",
]
