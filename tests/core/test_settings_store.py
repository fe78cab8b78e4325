"""Tests for the SQLite settings store and value encoding."""

import pytest

from random_album.core.settings import (
    SqliteSettingsStore,
    decode_bool,
    decode_list,
    encode_bool,
    encode_list,
)


class TestSqliteSettingsStore:
    def test_default_when_missing(self, temp_db):
        assert SqliteSettingsStore().read_config("enabled", "true") == "true"

    def test_write_then_overwrite(self, temp_db):
        store = SqliteSettingsStore()
        store.write_config("path_filter", "/music/")
        store.write_config("path_filter", "/jazz/")

        assert store.read_config("path_filter", "") == "/jazz/"
        # A fresh store sees the same value
        assert SqliteSettingsStore().read_config("path_filter", "") == "/jazz/"


class TestEncoding:
    def test_bools(self):
        assert encode_bool(True) == "true"
        assert encode_bool(False) == "false"
        assert decode_bool(" TRUE ") is True
        assert decode_bool("yes") is False

    @pytest.mark.parametrize("value,expected", [("", []), ("1, 2,,3", ["1", "2", "3"])])
    def test_decode_list(self, value, expected):
        assert decode_list(value) == expected

    def test_encode_list(self):
        assert encode_list([5, 7]) == "5,7"
