"""Tests for shared helpers."""

from autobackup._utils import clamp, format_bytes, iso_timestamp, short_id


def test_iso_timestamp():
    assert iso_timestamp(1_700_000_000_000) == "2023-11-14T22:13:20.000Z"
    assert iso_timestamp(1_700_000_000_007) == "2023-11-14T22:13:20.007Z"
    assert iso_timestamp(0) == "1970-01-01T00:00:00.000Z"


def test_short_id():
    ids = {short_id() for _ in range(100)}

    assert len(ids) == 100
    assert all(len(i) == 8 and i.isalnum() for i in ids)


def test_clamp():
    assert clamp(5, 1, 10, 3) == 5
    assert clamp(0, 1, 10, 3) == 1
    assert clamp(99, 1, 10, 3) == 10
    assert clamp("7", 1, 10, 3) == 7
    assert clamp(None, 1, 10, 3) == 3
    assert clamp("often", 1, 10, 3) == 3
    assert clamp(float("inf"), 1, 10, 3) == 3
    assert clamp(float("-inf"), 1, 10, 3) == 3
    assert clamp(float("nan"), 1, 10, 3) == 3


def test_format_bytes():
    assert format_bytes(0) == "0 B"
    assert format_bytes(512) == "512 B"
    assert format_bytes(1536) == "1.5 KB"
    assert format_bytes(100 * 1024 * 1024) == "100 MB"
