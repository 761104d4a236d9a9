"""Tests for shared ordering and upload helpers."""

import re
from datetime import datetime, timedelta, timezone

import pytest

from packages.shared.files import (
    ALLOWED_MIME_TYPES,
    categorize_mime_type,
    is_allowed_mime_type,
    unique_storage_name,
)
from packages.shared.ordering import RecencyKey, sort_by_recent_activity

BASE = datetime(2025, 1, 1)


def _at(seconds):
    return BASE + timedelta(seconds=seconds)


class TestRecencyOrdering:
    """Two-tier customer ordering."""

    def test_followed_up_before_never_followed_up(self):
        """Test a customer with any follow-up outranks a newer customer without one."""
        items = [
            ("new-no-follow-up", RecencyKey(created_at=_at(100))),
            ("old-followed-up", RecencyKey(created_at=_at(0), latest_follow_up_at=_at(1))),
        ]
        ordered = sort_by_recent_activity(items, key=lambda item: item[1])
        assert [name for name, _ in ordered] == ["old-followed-up", "new-no-follow-up"]

    def test_example_ordering(self):
        """Test latest follow-up desc, then creation time desc."""
        items = {
            "A": RecencyKey(created_at=_at(0), latest_follow_up_at=_at(10)),
            "B": RecencyKey(created_at=_at(0), latest_follow_up_at=_at(20)),
            "C": RecencyKey(created_at=_at(5)),
            "D": RecencyKey(created_at=_at(1)),
        }
        ordered = sort_by_recent_activity(items, key=lambda name: items[name])
        assert ordered == ["B", "A", "C", "D"]

    def test_aware_and_naive_timestamps_agree(self):
        """Test aware UTC timestamps sort the same as naive UTC ones."""
        naive = RecencyKey(created_at=_at(0), latest_follow_up_at=_at(30))
        aware = RecencyKey(
            created_at=_at(0),
            latest_follow_up_at=_at(20).replace(tzinfo=timezone.utc),
        )
        ordered = sort_by_recent_activity([aware, naive], key=lambda k: k)
        assert ordered == [naive, aware]

    def test_empty(self):
        assert sort_by_recent_activity([], key=lambda k: k) == []

    def test_has_follow_up(self):
        assert RecencyKey(created_at=BASE, latest_follow_up_at=BASE).has_follow_up
        assert not RecencyKey(created_at=BASE).has_follow_up


class TestFileRules:
    """Upload allow-list and naming."""

    @pytest.mark.parametrize(
        "mime,category",
        [
            ("image/jpeg", "image"),
            ("image/webp", "image"),
            ("application/pdf", "pdf"),
            ("application/msword", "document"),
            ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "document"),
            ("application/vnd.ms-excel", "spreadsheet"),
            ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "spreadsheet"),
            ("text/plain", "text"),
            ("application/zip", "other"),
        ],
    )
    def test_categorize(self, mime, category):
        assert categorize_mime_type(mime) == category

    def test_allow_list(self):
        """Test the allow-list accepts exactly the supported types."""
        assert len(ALLOWED_MIME_TYPES) == 10
        assert is_allowed_mime_type("IMAGE/PNG")
        assert not is_allowed_mime_type("application/x-msdownload")
        assert not is_allowed_mime_type(None)

    def test_unique_storage_name(self):
        """Test names keep the extension and differ between calls."""
        first = unique_storage_name("Quote.PDF", now_ms=1700000000000)
        second = unique_storage_name("Quote.PDF", now_ms=1700000000000)
        assert re.fullmatch(r"1700000000000_[0-9a-f]{16}\.pdf", first)
        assert first != second

    def test_unique_storage_name_without_extension(self):
        assert "." not in unique_storage_name("README")
