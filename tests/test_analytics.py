"""
Tests for the analytics engine.

These tests verify:
- Outcome and status histograms with placeholder labels
- Hourly histogram and busiest hour in the display time zone
- Duration buckets over positive durations only
- 30-day series
- Per-agent funnel rates
"""

from datetime import date, timedelta, timezone

from leadpulse.analyzer import (
    DURATION_BUCKETS,
    agent_breakdown,
    analyze,
    busiest_hour,
    parse_timestamp,
)
from leadpulse.analyzer.analytics import duration_bucket


TODAY = date(2025, 6, 10)
EASTERN_SUMMER = timezone(timedelta(hours=-4))
CENTRAL_SUMMER = timezone(timedelta(hours=-5))


# =============================================================================
# HELPER TESTS
# =============================================================================

class TestHelpers:
    """Test timestamp parsing and bucketing."""

    def test_parse_zulu_timestamp(self):
        parsed = parse_timestamp("2025-06-10T14:30:00.000Z")
        assert parsed.hour == 14
        assert parsed.tzinfo is not None

    def test_parse_into_display_zone(self):
        parsed = parse_timestamp("2025-06-10T14:30:00.000Z", EASTERN_SUMMER)
        assert parsed.hour == 10

    def test_naive_timestamp_taken_as_utc(self):
        assert parse_timestamp("2025-06-10T14:30:00").utcoffset() == timezone.utc.utcoffset(None)

    def test_unparseable_timestamp(self):
        assert parse_timestamp("") is None
        assert parse_timestamp("yesterday") is None

    def test_duration_bucket_boundaries(self):
        assert duration_bucket(1) == "0-30s"
        assert duration_bucket(30) == "0-30s"
        assert duration_bucket(31) == "30-60s"
        assert duration_bucket(120) == "1-2m"
        assert duration_bucket(300) == "2-5m"
        assert duration_bucket(600) == "5-10m"
        assert duration_bucket(601) == "10m+"

    def test_busiest_hour_prefers_earliest_tie(self):
        hourly = [0] * 24
        hourly[9] = 4
        hourly[15] = 4
        assert busiest_hour(hourly) == 9
        assert busiest_hour([0] * 24) == 0


# =============================================================================
# ANALYZE TESTS
# =============================================================================

class TestAnalyze:
    """Test the full analytics payload."""

    def test_empty_table(self):
        result = analyze([], TODAY)

        assert result["totalRecords"] == 0
        assert result["avgDuration"] == 0
        assert result["bestHour"] == 0
        assert result["hourly"] == [0] * 24
        assert result["outcomeCounts"] == {}
        assert result["durationBuckets"] == {label: 0 for label, _ in DURATION_BUCKETS}
        assert len(result["daily"]) == 30

    def test_placeholder_labels(self, make_record):
        records = [make_record("r1", call_outcome="", status=""), make_record("r2", call_outcome="BOOKED", status="Booked")]

        result = analyze(records, TODAY)

        assert result["outcomeCounts"] == {"No Outcome": 1, "BOOKED": 1}
        assert result["statusCounts"] == {"Unknown": 1, "Booked": 1}

    def test_hourly_and_best_hour(self, make_record):
        records = [
            make_record("r1", last_call_date="2025-06-10T14:05:00.000Z"),
            make_record("r2", last_call_date="2025-06-10T14:55:00.000Z"),
            make_record("r3", last_call_date="2025-06-10T09:00:00.000Z"),
            make_record("r4"),
        ]

        result = analyze(records, TODAY)

        assert result["hourly"][14] == 2
        assert result["hourly"][9] == 1
        assert sum(result["hourly"]) == 3
        assert result["bestHour"] == 14

    def test_hourly_in_display_zone(self, make_record):
        records = [make_record("r1", last_call_date="2025-06-10T14:05:00.000Z")]
        result = analyze(records, TODAY, tz=CENTRAL_SUMMER)
        assert result["bestHour"] == 9

    def test_duration_buckets_and_average(self, make_record):
        records = [
            make_record("r1", probed_duration=20),
            make_record("r2", probed_duration=45),
            make_record("r3", probed_duration=700),
            make_record("r4", probed_duration=0),
        ]

        result = analyze(records, TODAY)

        assert result["durationBuckets"]["0-30s"] == 1
        assert result["durationBuckets"]["30-60s"] == 1
        assert result["durationBuckets"]["10m+"] == 1
        assert sum(result["durationBuckets"].values()) == 3
        assert result["avgDuration"] == 255

    def test_daily_window(self, make_record):
        records = [
            make_record("r1", status="Booked", last_call_date="2025-06-10T10:00:00.000Z"),
            make_record("r2", last_call_date="2025-05-12T10:00:00.000Z"),
            make_record("r3", last_call_date="2025-05-11T10:00:00.000Z"),
        ]

        daily = analyze(records, TODAY)["daily"]

        assert list(daily)[0] == "2025-05-12"
        assert list(daily)[-1] == "2025-06-10"
        assert daily["2025-06-10"] == {"calls": 1, "booked": 1}
        assert daily["2025-05-12"] == {"calls": 1, "booked": 0}
        assert "2025-05-11" not in daily


# =============================================================================
# AGENT BREAKDOWN TESTS
# =============================================================================

class TestAgentBreakdown:
    """Test the per-agent funnel."""

    def test_rates(self, make_record):
        records = [
            make_record("r1", agent_name="Rebate Program", call_outcome="BOOKED", probed_duration=100),
            make_record("r2", agent_name="Rebate Program", call_outcome="VOICEMAIL", probed_duration=20),
            make_record("r3", agent_name="Rebate Program", call_outcome="NOT_INTERESTED"),
            make_record("r4", agent_name="Rebate Program", call_outcome="NO_ANSWER"),
        ]

        stats = agent_breakdown(records)["Rebate Program"]

        assert stats["calls"] == 4
        assert stats["booked"] == 1
        assert stats["voicemail"] == 1
        assert stats["noAnswer"] == 1
        assert stats["notInterested"] == 1
        assert stats["contactRate"] == "50.0"
        assert stats["bookRate"] == "50.0"
        assert stats["avgDuration"] == 60

    def test_no_contacts_gives_zero_book_rate(self, make_record):
        records = [make_record("r1", agent_name="Reduced Energy", call_outcome="VOICEMAIL")]

        stats = agent_breakdown(records)["Reduced Energy"]

        assert stats["contactRate"] == "0.0"
        assert stats["bookRate"] == "0.0"
        assert stats["avgDuration"] == 0

    def test_agents_keyed_by_name(self, make_record):
        records = [
            make_record("r1", agent_name="Rebate Program"),
            make_record("r2", agent_name="Reduced Energy"),
            make_record("r3", agent_name="Rebate Program"),
        ]
        breakdown = agent_breakdown(records)
        assert {name: s["calls"] for name, s in breakdown.items()} == {"Rebate Program": 2, "Reduced Energy": 1}
