"""Tests for the settings, config, genres and history command handlers."""

from unittest.mock import patch

from random_album.commands.settings import (
    build_criteria,
    handle_config_command,
    handle_genres_command,
    handle_history_command,
    handle_settings_command,
)
from random_album.core.config import Config, load_config
from random_album.domain.selection.models import FilterCriteria, SubFilter


class TestBuildCriteria:
    def test_keeps_current_values(self):
        current = FilterCriteria(path_filter="/a/", genre_ids=frozenset({1}))
        assert build_criteria(current) == current

    def test_adds_genres_and_toggles(self):
        current = FilterCriteria(
            genre_ids=frozenset({1}), sub_filters=frozenset({SubFilter.NEVER_PLAYED})
        )

        criteria = build_criteria(
            current,
            path_filter="",
            genre_ids=[5, 7],
            sub_filter_changes={SubFilter.NEVER_PLAYED: False, SubFilter.ZERO_PLAY_COUNT: True},
        )

        assert criteria == FilterCriteria(
            path_filter="",
            genre_ids=frozenset({1, 5, 7}),
            sub_filters=frozenset({SubFilter.ZERO_PLAY_COUNT}),
        )

    def test_clear_genres(self):
        current = FilterCriteria(genre_ids=frozenset({1, 2}))
        assert build_criteria(current, clear_genres=True, genre_ids=[3]).genre_ids == frozenset({3})


class TestSettingsCommand:
    def test_show_only_writes_nothing(self, settings_store):
        assert handle_settings_command(store=settings_store) == 0
        assert settings_store.writes == []

    def test_applies_changes(self, settings_store, capsys):
        result = handle_settings_command(
            enabled=False,
            path_filter="/music/",
            genre_ids=[5, 7],
            sub_filter_changes={SubFilter.NOT_PLAYED_LAST_YEAR: True},
            store=settings_store,
        )

        assert result == 0
        assert settings_store.values["enabled"] == "false"
        assert settings_store.values["path_filter"] == "/music/"
        assert settings_store.values["genres_filter"] == "5,7"
        assert settings_store.values["filter_not_played_last_year"] == "true"
        assert "Settings saved" in capsys.readouterr().out


class TestHistoryCommand:
    def test_clear(self, make_settings):
        store = make_settings({"last_played": "1,2,3"})
        assert handle_history_command(clear=True, store=store) == 0
        assert store.values["last_played"] == ""

    def test_show(self, make_settings):
        store = make_settings({"last_played": "1,2"})
        with patch("random_album.commands.settings.print_table", return_value=2) as mock_print:
            assert handle_history_command(store=store) == 0

        title, columns, rows = mock_print.call_args.args
        assert list(rows) == [(1, 1), (2, 2)]


class TestGenresCommand:
    @patch("random_album.commands.settings.SqliteCollection")
    def test_lists_genres(self, mock_collection):
        mock_collection.return_value.query_genres.return_value = [(2, "Jazz"), (1, "Rock")]
        with patch("random_album.commands.settings.print_table") as mock_print:
            assert handle_genres_command() == 0
        mock_print.assert_called_once_with("Genres", ["Id", "Name"], [(2, "Jazz"), (1, "Rock")])

    @patch("random_album.commands.settings.SqliteCollection")
    def test_empty_collection(self, mock_collection, capsys):
        mock_collection.return_value.query_genres.return_value = []
        assert handle_genres_command() == 0
        assert "scan" in capsys.readouterr().err


class TestConfigCommand:
    def test_show_only_writes_nothing(self, tmp_path):
        config_path = tmp_path / "config.toml"

        assert handle_config_command(Config(), config_path) == 0
        assert not config_path.exists()

    def test_saves_timings(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config = Config()

        assert handle_config_command(config, config_path, debounce_ms=250) == 0

        reloaded = load_config(config_path)
        assert reloaded.random_album.debounce_ms == 250
        assert reloaded.random_album.stop_check_window_ms == 10000
        assert config.random_album.debounce_ms == 250

    def test_invalid_timing_rejected(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config = Config()

        assert handle_config_command(config, config_path, stop_check_window_ms=0) == 1
        assert not config_path.exists()
        assert config.random_album.stop_check_window_ms == 10000

    @patch("random_album.commands.settings.save_config", return_value=False)
    def test_write_failure(self, mock_save, tmp_path):
        assert handle_config_command(Config(), tmp_path / "config.toml", debounce_ms=50) == 1
