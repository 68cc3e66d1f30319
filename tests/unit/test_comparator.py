"""
Unit tests for day-over-day comparison
"""

import pytest
from core.exceptions import OutOfRangeHourError
from monitoring.transformers.comparator import (
    MetricComparator,
    calculate_percentage_difference,
    compare,
)
from monitoring.transformers.aggregator import aggregate
from schemas.metrics import METRIC_FIELDS, AggregatedBucket, RawEventRow


def bucket(brand, date, hour, **metrics):
    return AggregatedBucket(brand=brand, date=date, hour=hour, date_hour=f"{date}{hour}", **metrics)


class TestPercentageDifference:
    """Test percentage formatting and zero baselines"""

    @pytest.mark.parametrize(
        "value1,value2,expected",
        [
            (0, 0, "0%"),
            (7, 0, "+100%"),
            (0, 7, "-100%"),
            (15, 10, "50.00%"),
            (5, 10, "-50.00%"),
            (20, 100, "-80.00%"),
            (60, 10, "500.00%"),
            (10, 3, "233.33%"),
            (10, 10, "0.00%"),
        ],
    )
    def test_values(self, value1, value2, expected):
        assert calculate_percentage_difference(value1, value2) == expected


class TestMetricComparator:
    """Test bucket pairing and emission order"""

    def test_emits_every_metric_for_matching_hours(self):
        buckets = [
            bucket("X", "2024-06-01", "10", page_view_totalUsers=100),
            bucket("X", "2024-06-02", "10", page_view_totalUsers=20),
        ]

        records = compare(buckets)

        assert [r.metric for r in records] == list(METRIC_FIELDS)
        page_views = next(r for r in records if r.metric == "page_view_totalUsers")
        assert page_views.to_row() == ["X", "2024-06-02", "2024-06-01", 10, "page_view_totalUsers", 20, 100, "-80.00%"]
        assert all(r.percent_diff == "0%" for r in records if r.metric != "page_view_totalUsers")

    def test_missing_counterpart_hour_is_skipped(self):
        buckets = [
            bucket("B", "2024-06-02", "05", NRC_sessions=40),
            bucket("B", "2024-06-02", "06", NRC_sessions=40),
            bucket("B", "2024-06-01", "06", NRC_sessions=10),
        ]

        records = compare(buckets)

        assert {r.hour for r in records} == {6}
        assert len(records) == len(METRIC_FIELDS)

    def test_every_adjacent_date_pair_newest_first(self):
        dates = ["2024-01-02", "2024-01-03", "2024-01-01"]
        buckets = [bucket("B", d, "00", NRC_totalUsers=1) for d in dates]

        records = compare(buckets)
        pairs = []
        for record in records:
            if (record.date1, record.date2) not in pairs:
                pairs.append((record.date1, record.date2))

        assert pairs == [("2024-01-03", "2024-01-02"), ("2024-01-02", "2024-01-01")]

    def test_single_date_produces_nothing(self):
        assert compare([bucket("B", "2024-01-01", "00")]) == []

    def test_hours_ascending_within_a_pair(self):
        buckets = []
        for date in ("2024-06-01", "2024-06-02"):
            for hour in ("13", "02", "07"):
                buckets.append(bucket("B", date, hour))

        hours = []
        for record in compare(buckets):
            if not hours or hours[-1] != record.hour:
                hours.append(record.hour)

        assert hours == [2, 7, 13]

    def test_brands_in_first_seen_order(self):
        buckets = [
            bucket("Z", "2024-06-01", "01"),
            bucket("A", "2024-06-01", "01"),
            bucket("A", "2024-06-02", "01"),
            bucket("Z", "2024-06-02", "01"),
        ]

        brands = []
        for record in compare(buckets):
            if record.brand not in brands:
                brands.append(record.brand)

        assert brands == ["Z", "A"]

    def test_padded_and_unpadded_hours_match(self):
        buckets = [
            bucket("B", "2024-06-01", "5", NDC_eventCount=2),
            bucket("B", "2024-06-02", "05", NDC_eventCount=4),
        ]

        records = compare(buckets)

        assert records[0].hour == 5
        assert next(r for r in records if r.metric == "NDC_eventCount").percent_diff == "100.00%"

    def test_duplicate_bucket_is_logged_as_warning(self, caplog):
        buckets = [
            bucket("B", "2024-06-01", "5", NRC_totalUsers=70),
            bucket("B", "2024-06-01", "05", NRC_totalUsers=30),
            bucket("B", "2024-06-02", "05", NRC_totalUsers=100),
        ]

        with caplog.at_level("WARNING", logger="monitoring.transformers.comparator"):
            records = compare(buckets)

        assert "Duplicate bucket for B 2024-06-01 hour 5" in caplog.text
        assert next(r for r in records if r.metric == "NRC_totalUsers").value2 == 30

    def test_aggregated_mixed_padding_compares_full_sum(self):
        rows = [
            RawEventRow(brand="B", event_type="NRC", date="2024-06-01", hour="05", total_users=30),
            RawEventRow(brand="B", event_type="NRC", date="2024-06-01", hour="5", total_users=70),
            RawEventRow(brand="B", event_type="NRC", date="2024-06-02", hour="05", total_users=100),
        ]

        records = compare(aggregate(rows))

        users = next(r for r in records if r.metric == "NRC_totalUsers")
        assert (users.value1, users.value2, users.percent_diff) == (100, 100, "0.00%")

    def test_out_of_range_hours_are_reported(self):
        comparator = MetricComparator()
        buckets = [
            bucket("B", "2024-06-01", "24"),
            bucket("B", "2024-06-02", "24"),
            bucket("B", "2024-06-02", "xx"),
            bucket("B", "2024-06-01", "-1"),
        ]

        records = comparator.compare(buckets)

        assert records == []
        assert len(comparator.anomalies) == 4
        assert all(isinstance(a, OutOfRangeHourError) for a in comparator.anomalies)
        assert comparator.anomalies[2].context["hour"] == "xx"

    def test_anomalies_reset_between_runs(self):
        comparator = MetricComparator()
        comparator.compare([bucket("B", "2024-06-01", "99")])
        comparator.compare([bucket("B", "2024-06-01", "01")])

        assert comparator.anomalies == []
