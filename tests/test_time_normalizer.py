import unittest
from datetime import UTC, datetime, timedelta, timezone

from algoradar.errors import ConfigurationError
from algoradar.time_normalizer import (
    format_display_date,
    format_display_time,
    has_explicit_offset,
    parse_timestamp,
    resolve_timezone,
)

IST = timezone(timedelta(hours=5, minutes=30))


class ResolveTimezoneTests(unittest.TestCase):
    def test_empty_values_mean_host_local(self) -> None:
        self.assertIsNone(resolve_timezone(None))
        self.assertIsNone(resolve_timezone("  "))

    def test_utc_aliases(self) -> None:
        for name in ("UTC", "utc", "Z", "GMT", "Etc/UTC"):
            self.assertIs(resolve_timezone(name), UTC)

    def test_fixed_offsets(self) -> None:
        self.assertEqual(resolve_timezone("+05:30").utcoffset(None), timedelta(hours=5, minutes=30))
        self.assertEqual(resolve_timezone("UTC-0300").utcoffset(None), timedelta(hours=-3))

    def test_unknown_zone_is_a_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            resolve_timezone("Not/AZone")


class ParseTimestampTests(unittest.TestCase):
    def test_naive_string_defaults_to_utc(self) -> None:
        self.assertEqual(
            parse_timestamp("2026-03-01T14:35:00"),
            datetime(2026, 3, 1, 14, 35, tzinfo=UTC),
        )

    def test_naive_string_uses_assumed_zone(self) -> None:
        self.assertEqual(
            parse_timestamp("2026-03-01T14:35:00", IST),
            datetime(2026, 3, 1, 9, 5, tzinfo=UTC),
        )

    def test_explicit_offsets_win_over_assumed_zone(self) -> None:
        expected = datetime(2026, 3, 1, 9, 5, tzinfo=UTC)
        self.assertEqual(parse_timestamp("2026-03-01T09:05:00Z", IST), expected)
        self.assertEqual(parse_timestamp("2026-03-01T14:35:00+05:30"), expected)
        self.assertEqual(parse_timestamp("2026-03-01T14:35:00+0530"), expected)

    def test_unparseable_values_return_none(self) -> None:
        for raw in (None, "", "not a date", 12345, "2026-13-45T99:00:00"):
            self.assertIsNone(parse_timestamp(raw))

    def test_has_explicit_offset(self) -> None:
        self.assertTrue(has_explicit_offset("2026-03-01T14:35:00Z"))
        self.assertTrue(has_explicit_offset("2026-03-01T14:35:00-04:00"))
        self.assertFalse(has_explicit_offset("2026-03-01T14:35:00"))


class DisplayFormatTests(unittest.TestCase):
    def test_display_strings_follow_display_zone(self) -> None:
        value = datetime(2026, 3, 1, 20, 0, tzinfo=UTC)

        self.assertEqual(format_display_date(value, UTC), "01-03-2026")
        self.assertEqual(format_display_time(value, UTC), "20:00")
        self.assertEqual(format_display_date(value, IST), "02-03-2026")
        self.assertEqual(format_display_time(value, IST), "01:30")


if __name__ == "__main__":
    unittest.main()
