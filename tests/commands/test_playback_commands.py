"""Tests for the play and enqueue command handlers."""

from unittest.mock import patch

import pytest

from random_album.commands.playback import handle_enqueue_command, handle_play_command
from random_album.core.config import Config, PlayerConfig
from random_album.domain.playback.sequencer import LoadedAlbum
from random_album.domain.selection.exceptions import NoCandidateFound
from random_album.domain.selection.models import TrackLocator


@pytest.fixture
def config(tmp_path):
    socket_path = tmp_path / "mpv.sock"
    socket_path.touch()
    return Config(player=PlayerConfig(mpv_socket_path=str(socket_path)))


LOADED = LoadedAlbum(3, [TrackLocator(1, 1, "/music/a/01.mp3")])


class TestPlayCommand:
    @patch("random_album.commands.playback.build_sequencer")
    def test_replaces_queue(self, mock_build, config, capsys):
        mock_build.return_value.manual_replace.return_value = LOADED

        assert handle_play_command(config) == 0

        mock_build.assert_called_once_with(config, config.player.mpv_socket_path)
        assert "Playing album 3" in capsys.readouterr().out

    @patch("random_album.commands.playback.build_sequencer")
    def test_no_candidate_reports_error(self, mock_build, config, capsys):
        mock_build.return_value.manual_replace.side_effect = NoCandidateFound()

        assert handle_play_command(config) == 1
        assert "No album matches" in capsys.readouterr().err

    @patch("random_album.commands.playback.build_sequencer")
    def test_requires_running_player(self, mock_build, tmp_path, capsys):
        config = Config(player=PlayerConfig(mpv_socket_path=str(tmp_path / "missing.sock")))

        assert handle_play_command(config) == 1
        mock_build.assert_not_called()
        assert "random-album run" in capsys.readouterr().err


class TestEnqueueCommand:
    @patch("random_album.commands.playback.build_sequencer")
    def test_appends(self, mock_build, config, capsys):
        mock_build.return_value.manual_enqueue.return_value = LOADED

        assert handle_enqueue_command(config) == 0

        mock_build.return_value.manual_replace.assert_not_called()
        assert "Queued album 3" in capsys.readouterr().out

    @patch("random_album.commands.playback.build_sequencer")
    def test_no_candidate(self, mock_build, config):
        mock_build.return_value.manual_enqueue.side_effect = NoCandidateFound()
        assert handle_enqueue_command(config) == 1
