from datetime import datetime, timezone

from spaces_client.utils.time import to_epoch_millis


def test_epoch_millis_from_iso_string():
    assert to_epoch_millis("2024-01-01T00:00:00.123Z") == 1_704_067_200_123


def test_epoch_millis_passthrough_and_digit_strings():
    assert to_epoch_millis(1_704_067_200_123) == 1_704_067_200_123
    assert to_epoch_millis("1704067200123") == 1_704_067_200_123


def test_epoch_millis_from_datetime():
    value = datetime(2024, 1, 1, 0, 0, 1, tzinfo=timezone.utc)
    assert to_epoch_millis(value) == 1_704_067_201_000
