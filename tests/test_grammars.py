"""Tests for the timestamp grammars and their priority order."""

import re
from datetime import timedelta

import pytest

from anylog.grammars import (
    CATALOG,
    CLOCK,
    COMMON_LOG,
    CTIME,
    ISO8601,
    ISO8601_LOCAL,
    MONTH_DAY_YEAR,
    RFC5424,
    SYSLOG,
    SYSLOG_PRI,
    UE4,
    Grammar,
    get_grammar,
)
from anylog.matcher import match_line
from anylog.models import RawTimestamp

# (expected grammar, line, expected prefix, expected separator)
SAMPLES = [
    ("iso8601", "2015-05-13 17:39:16 +0200: Repaired 'Library/Printers/Canon'",
     "2015-05-13 17:39:16 +0200:", " "),
    ("iso8601", "2024-06-01T12:00:00.250Z app started", "2024-06-01T12:00:00.250Z", " "),
    ("iso8601", "[2024-06-01T12:00:00+02:00] boot", "[2024-06-01T12:00:00+02:00]", " "),
    ("rfc5424", "<34>1 2003-10-11T22:14:15.003Z mymachine su - ID47 - 'su root' failed",
     "<34>1 2003-10-11T22:14:15.003Z", " "),
    ("common_log", '[10/Oct/2000:13:55:36 -0700] "GET /apache_pb.gif HTTP/1.0" 200 2326',
     "[10/Oct/2000:13:55:36 -0700]", " "),
    ("ue4", "[2018.10.29-16.56.37:542][  0]LogInit: Selected Device Profile: [WindowsNoEditor]",
     "[2018.10.29-16.56.37:542][  0]", ""),
    ("ctime", "Tue Nov 21 00:30:05 2017 More stuff here", "Tue Nov 21 00:30:05 2017", " "),
    ("ctime", "Mon Oct  5 11:40:10 2015\t[INFO] PDApp.ExternalGateway - NativePlatformHandler destructed",
     "Mon Oct  5 11:40:10 2015", "\t"),
    ("ctime", "[Sun Feb 25 06:11:12.043123448 2018] [:notice] [pid 1:tid 2] process manager initialized",
     "[Sun Feb 25 06:11:12.043123448 2018]", " "),
    ("month_day_year", "Jan 03, 2016 22:29:55 [0x70000073b000] DEBUG - Responding HTTP/1.1 200",
     "Jan 03, 2016 22:29:55", " "),
    ("syslog_pri", "<13>Jan  5 14:30:01 myhost sshd[12345]: Accepted publickey for user",
     "<13>Jan  5 14:30:01", " "),
    ("syslog", "Jun  1 12:00:00 host app[123]: boot ok", "Jun  1 12:00:00", " "),
    ("syslog", "Mon Nov 20 00:31:19.005 <kernel> en0: Received EAPOL packet (length = 161)",
     "Mon Nov 20 00:31:19.005", " "),
    ("iso8601_local", "2024-01-15 10:30:00,125 INFO auth-service Application started",
     "2024-01-15 10:30:00,125", " "),
    ("clock", "22:07:10 server  | detected binary path: /usr/local/bin/uwsgi", "22:07:10", " "),
]


class TestCatalog:
    def test_priority_order(self):
        assert [g.name for g in CATALOG] == [
            "iso8601", "rfc5424", "common_log", "ue4", "ctime",
            "month_day_year", "syslog_pri", "syslog", "iso8601_local", "clock",
        ]

    def test_names_unique(self):
        names = [g.name for g in CATALOG]
        assert len(names) == len(set(names))

    def test_catalog_is_immutable(self):
        assert isinstance(CATALOG, tuple)
        with pytest.raises(AttributeError):
            CATALOG[0].name = "other"

    def test_get_grammar(self):
        assert get_grammar("syslog") is SYSLOG
        with pytest.raises(KeyError):
            get_grammar("nope")


class TestPrecedence:
    @pytest.mark.parametrize("name,line,prefix,separator", SAMPLES)
    def test_first_match_is_expected_grammar(self, name, line, prefix, separator):
        grammar, match = match_line(line)
        assert grammar.name == name
        assert match.consumed == len(prefix) + len(separator)
        assert match.separator == separator

    @pytest.mark.parametrize("name,line,prefix,separator", SAMPLES)
    def test_no_higher_ranked_grammar_matches(self, name, line, prefix, separator):
        rank = [g.name for g in CATALOG].index(name)
        for higher in CATALOG[:rank]:
            assert higher.try_parse(line) is None, higher.name

    def test_ctime_must_precede_syslog(self):
        """syslog alone would leave the year in the message."""
        line = "Tue Nov 21 00:30:05 2017 More stuff here"
        loose = SYSLOG.try_parse(line)
        strict = CTIME.try_parse(line)
        assert loose is not None and strict is not None
        assert line[loose.consumed:] == "2017 More stuff here"
        assert line[strict.consumed:] == "More stuff here"

    def test_iso8601_must_precede_iso8601_local(self):
        line = "2015-05-13 17:39:16 +0200: Repaired"
        loose = ISO8601_LOCAL.try_parse(line)
        assert loose is not None
        assert line[loose.consumed:] == "+0200: Repaired"
        assert ISO8601.try_parse(line).raw.offset == timedelta(hours=2)

    def test_appending_grammar_does_not_change_existing_matches(self):
        extended = CATALOG + (Grammar("syslog_again", SYSLOG.pattern),)
        for _, line, _, _ in SAMPLES:
            assert match_line(line, extended) == match_line(line)

    def test_appended_grammar_used_only_when_nothing_else_matches(self):
        pattern = re.compile(
            r'^(?P<prefix>(?P<hour>\d{2})h(?P<minute>\d{2})m(?P<second>\d{2})s)(?P<sep> |$)'
        )
        extended = CATALOG + (Grammar("hms", pattern),)
        grammar, match = match_line("12h30m05s done", extended)
        assert grammar.name == "hms"
        assert match.raw.minute == 30
        assert match_line("12h30m05s done") is None


class TestIso8601:
    def test_fields(self):
        match = ISO8601.try_parse("2024-06-01T12:00:00.250Z app started")
        assert match.raw == RawTimestamp(
            year=2024, month=6, day=1, hour=12, minute=0, second=0,
            fraction="250", offset=timedelta(0),
        )

    @pytest.mark.parametrize("tz,expected", [
        ("Z", timedelta(0)),
        ("+02:00", timedelta(hours=2)),
        ("+0200", timedelta(hours=2)),
        ("+02", timedelta(hours=2)),
        ("-0530", -timedelta(hours=5, minutes=30)),
        (" +0100", timedelta(hours=1)),
    ])
    def test_offset_forms(self, tz, expected):
        match = ISO8601.try_parse(f"2024-06-01T12:00:00{tz} x")
        assert match is not None
        assert match.raw.offset == expected

    def test_spaced_bare_hour_is_not_a_zone(self):
        assert ISO8601.try_parse("2024-06-01 12:00:00 -10 items left") is None
        grammar, match = match_line("2024-06-01 12:00:00 -10 items left")
        assert grammar is ISO8601_LOCAL
        assert match.raw.offset is None
        assert match.consumed == len("2024-06-01 12:00:00 ")

    def test_attached_bare_hour_is_a_zone(self):
        match = ISO8601.try_parse("2024-06-01 12:00:00-10 items left")
        assert match.raw.offset == -timedelta(hours=10)

    def test_comma_fraction(self):
        match = ISO8601.try_parse("2024-06-01 12:00:00,5+00:00 x")
        assert match.raw.fraction == "5"

    def test_requires_zone(self):
        assert ISO8601.try_parse("2024-06-01T12:00:00 x") is None

    def test_rejects_out_of_range_offset(self):
        assert ISO8601.try_parse("2024-06-01T12:00:00+25:00 x") is None
        assert ISO8601.try_parse("2024-06-01T12:00:00+02:75 x") is None

    def test_rejects_invalid_month(self):
        assert ISO8601.try_parse("2024-13-01T12:00:00Z x") is None

    def test_unbalanced_brackets(self):
        assert ISO8601.try_parse("[2024-06-01T12:00:00Z x") is None
        assert ISO8601.try_parse("2024-06-01T12:00:00Z] x") is None


class TestRfc5424:
    def test_fields(self):
        match = RFC5424.try_parse("<165>1 2003-08-24T05:14:15.000003-07:00 192.0.2.1 myproc 8710 - - msg")
        assert match.raw.year == 2003
        assert match.raw.fraction == "000003"
        assert match.raw.offset == -timedelta(hours=7)

    def test_nil_timestamp_not_matched(self):
        assert RFC5424.try_parse("<34>1 - mymachine su - ID47 - msg") is None


class TestCommonLog:
    def test_fields(self):
        match = COMMON_LOG.try_parse('[10/Oct/2000:13:55:36 -0700] "GET / HTTP/1.0" 200 2326')
        assert match.raw == RawTimestamp(
            year=2000, month=10, day=10, hour=13, minute=55, second=36,
            offset=-timedelta(hours=7),
        )

    def test_without_brackets(self):
        assert COMMON_LOG.try_parse("17/May/2015:08:05:32 +0000 GET /downloads") is not None

    def test_requires_offset(self):
        assert COMMON_LOG.try_parse("[10/Oct/2000:13:55:36] GET /") is None


class TestUe4:
    def test_fields_are_utc(self):
        match = UE4.try_parse("[2018.10.29-16.56.37:542][  0]LogInit: Selected Device Profile")
        assert match.raw.offset == timedelta(0)
        assert match.raw.microsecond == 542000
        assert match.separator == ""

    def test_wide_frame_counter(self):
        assert UE4.try_parse("[2018.10.29-16.56.37:542][123]LogTemp: tick") is not None

    def test_invalid_date_rejected(self):
        assert UE4.try_parse("[2018.02.30-16.56.37:542][  0]LogInit: x") is None


class TestCtimeAndMonthDayYear:
    def test_ctime_padded_day(self):
        match = CTIME.try_parse("Mon Oct  5 11:40:10 2015\t[INFO] x")
        assert (match.raw.year, match.raw.month, match.raw.day) == (2015, 10, 5)
        assert match.raw.offset is None

    def test_ctime_long_fraction(self):
        match = CTIME.try_parse("[Sun Feb 25 06:11:12.043123448 2018] [:notice] x")
        assert match.raw.microsecond == 43123

    def test_month_day_year_without_comma(self):
        match = MONTH_DAY_YEAR.try_parse("Jan 03 2016 22:29:55 DEBUG x")
        assert (match.raw.year, match.raw.month, match.raw.day) == (2016, 1, 3)


class TestSyslog:
    def test_no_year_no_zone(self):
        match = SYSLOG.try_parse("Jun  1 12:00:00 host app[123]: boot ok")
        assert match.raw.year is None
        assert match.raw.offset is None
        assert (match.raw.month, match.raw.day) == (6, 1)

    def test_feb_29_accepted_without_year(self):
        assert SYSLOG.try_parse("Feb 29 12:00:00 host x") is not None

    def test_day_out_of_range_rejected(self):
        assert SYSLOG.try_parse("Apr 31 12:00:00 host x") is None

    def test_leap_second_rejected(self):
        assert SYSLOG.try_parse("Jun 30 23:59:60 host x") is None

    def test_month_names_are_case_sensitive(self):
        assert SYSLOG.try_parse("jun  1 12:00:00 host x") is None

    def test_end_of_line_separator(self):
        match = SYSLOG.try_parse("Jun  1 12:00:00")
        assert match.separator == ""
        assert match.consumed == len("Jun  1 12:00:00")

    def test_priority_prefix(self):
        match = SYSLOG_PRI.try_parse("<13>Jan  5 14:30:01 myhost sshd[12345]: Accepted")
        assert (match.raw.month, match.raw.day, match.raw.hour) == (1, 5, 14)
        assert SYSLOG.try_parse("<13>Jan  5 14:30:01 myhost") is None


class TestClock:
    def test_no_date(self):
        match = CLOCK.try_parse("22:07:10 server  | detected binary path")
        assert match.raw.month is None
        assert match.raw.day is None
        assert (match.raw.hour, match.raw.minute, match.raw.second) == (22, 7, 10)

    def test_bracketed_with_fraction(self):
        match = CLOCK.try_parse("[08:15:00.123] worker ready")
        assert match.raw.microsecond == 123000

    def test_invalid_minute_rejected(self):
        assert CLOCK.try_parse("12:61:00 x") is None

    def test_requires_separator(self):
        assert CLOCK.try_parse("12:00:00x") is None

    def test_single_digit_hour(self):
        match = CLOCK.try_parse("9:05:01 worker ready")
        assert (match.raw.hour, match.raw.minute, match.raw.second) == (9, 5, 1)
        assert match.consumed == len("9:05:01 ")

    def test_non_ascii_digits_rejected(self):
        assert CLOCK.try_parse("١٢:٠٠:٠٠ msg") is None
        assert match_line("١٢:٠٠:٠٠ msg") is None
