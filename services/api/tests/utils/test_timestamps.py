from datetime import datetime, timezone

from services.api.src.dorkfi.utils.timestamps import truncate_to_hour


class TestTruncateToHour:
    def test_truncates_minutes_and_seconds(self):
        ts = 1700000725  # 2023-11-14 22:25:25 UTC
        result = truncate_to_hour(ts)
        expected = datetime(2023, 11, 14, 22, 0, 0, tzinfo=timezone.utc)
        assert result == expected

    def test_preserves_exact_hour(self):
        ts = 1699999200  # 2023-11-14 22:00:00 UTC
        result = truncate_to_hour(ts)
        expected = datetime(2023, 11, 14, 22, 0, 0, tzinfo=timezone.utc)
        assert result == expected

    def test_last_second_of_hour(self):
        ts = 1700002799  # 2023-11-14 22:59:59 UTC
        result = truncate_to_hour(ts)
        assert result.hour == 22
        assert result.tzinfo == timezone.utc
