"""Tests for selection models: recency window, locators and criteria."""

from datetime import datetime

import pytest

from random_album.domain.selection.models import (
    RECENCY_WINDOW_SIZE,
    FilterCriteria,
    RecencyWindow,
    SubFilter,
    TrackLocator,
    parse_album_id,
)


class TestRecencyWindow:
    def test_push_keeps_most_recent_ten(self):
        window = RecencyWindow()
        for album_id in range(25):
            window.push(album_id)

        assert len(window) == RECENCY_WINDOW_SIZE
        assert list(window) == list(range(15, 25))

    def test_push_returns_evicted_entry(self):
        window = RecencyWindow(range(10))
        assert window.push(99) == 0
        assert window.push(100) == 1
        assert RecencyWindow().push(1) is None

    def test_membership(self):
        window = RecencyWindow([3, "abc"])
        assert 3 in window
        assert "abc" in window
        assert 4 not in window

    def test_clear(self):
        window = RecencyWindow([1, 2, 3])
        window.clear()
        assert len(window) == 0

    def test_config_round_trip_preserves_order(self):
        window = RecencyWindow([7, 3, "x9", 12])
        restored = RecencyWindow.from_config(window.to_config())
        assert list(restored) == [7, 3, "x9", 12]

    def test_from_config_skips_empty_tokens(self):
        assert list(RecencyWindow.from_config("")) == []
        assert list(RecencyWindow.from_config("4,, 5,")) == [4, 5]

    def test_from_config_truncates_to_newest(self):
        value = ",".join(str(i) for i in range(14))
        assert list(RecencyWindow.from_config(value)) == list(range(4, 14))


class TestParseAlbumId:
    @pytest.mark.parametrize(
        "token,expected",
        [("42", 42), (" 7 ", 7), ("-3", -3), ("abc", "abc"), ("12a", "12a")],
    )
    def test_parse(self, token, expected):
        assert parse_album_id(token) == expected


class TestTrackLocator:
    def test_sorts_by_disc_then_track(self):
        tracks = [
            TrackLocator(2, 1, "/m/d2t1.mp3"),
            TrackLocator(1, 10, "/m/d1t10.mp3"),
            TrackLocator(1, 2, "/m/d1t2.mp3"),
        ]
        assert [t.url for t in sorted(tracks)] == [
            "/m/d1t2.mp3",
            "/m/d1t10.mp3",
            "/m/d2t1.mp3",
        ]

    def test_from_row_treats_missing_numbers_as_zero(self):
        assert TrackLocator.from_row("/m/a.mp3", None, None) == TrackLocator(0, 0, "/m/a.mp3")


class TestFilterCriteria:
    def test_no_sub_filters_means_no_predicate(self):
        assert FilterCriteria(path_filter="/music/").play_history_predicate() is None

    def test_predicate_carries_sub_filters_and_time(self):
        now = datetime(2024, 6, 1, 12, 0, 0)
        criteria = FilterCriteria(sub_filters=frozenset({SubFilter.NEVER_PLAYED}))

        predicate = criteria.play_history_predicate(now)

        assert predicate.sub_filters == frozenset({SubFilter.NEVER_PLAYED})
        assert predicate.reference_time == now

    def test_last_year_cutoff_is_365_days(self):
        now = datetime(2024, 6, 1, 12, 0, 0)
        predicate = FilterCriteria(
            sub_filters=frozenset({SubFilter.NOT_PLAYED_LAST_YEAR})
        ).play_history_predicate(now)

        assert int(now.timestamp()) - predicate.last_year_cutoff == 365 * 24 * 3600

    def test_criteria_is_immutable(self):
        criteria = FilterCriteria()
        with pytest.raises(AttributeError):
            criteria.path_filter = "/x/"
