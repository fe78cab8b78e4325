"""
Persistent key/value settings backed by the ``settings`` table.

Values are plain strings; callers own the encoding (``"true"``/``"false"``
booleans, comma-joined lists).
"""

from typing import Protocol

from .database import get_db_connection


class SettingsStore(Protocol):
    """Read/write access to persisted configuration values."""

    def read_config(self, key: str, default: str) -> str: ...

    def write_config(self, key: str, value: str) -> None: ...


class SqliteSettingsStore:
    """SettingsStore that writes through to SQLite on every change."""

    def read_config(self, key: str, default: str) -> str:
        with get_db_connection() as conn:
            row = conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else default

    def write_config(self, key: str, value: str) -> None:
        with get_db_connection() as conn:
            conn.execute(
                """
                INSERT INTO settings (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )
            conn.commit()


def encode_bool(value: bool) -> str:
    return "true" if value else "false"


def decode_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def encode_list(values) -> str:
    return ",".join(str(v) for v in values)


def decode_list(value: str) -> list[str]:
    """Split a comma-joined value, dropping empty tokens."""
    return [token.strip() for token in value.split(",") if token.strip()]
