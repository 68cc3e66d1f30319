"""
Unit tests for the alert classifier
"""

import pytest
from core.exceptions import UnparsablePercentageError
from monitoring.transformers.alert_classifier import AlertClassifier, classify, parse_percentage
from schemas.metrics import AlertRecord, ComparisonRecord


def comparison(value1, value2, percent_diff, metric="NRC_eventCount", hour=8):
    return ComparisonRecord(
        brand="Y",
        date1="2024-06-02",
        date2="2024-06-01",
        hour=hour,
        metric=metric,
        value1=value1,
        value2=value2,
        percent_diff=percent_diff,
    )


class TestParsePercentage:

    @pytest.mark.parametrize(
        "text,expected",
        [("-300%", -3.0), ("+500%", 5.0), ("0%", 0.0), ("-80.00%", -0.8), ("233.33%", 2.3333)],
    )
    def test_hundred_scaled(self, text, expected):
        assert parse_percentage(text) == pytest.approx(expected)

    def test_rejects_text(self):
        with pytest.raises(ValueError):
            parse_percentage("n/a%")

    @pytest.mark.parametrize("text", ["nan%", "inf%", "-Infinity%"])
    def test_rejects_non_finite(self, text):
        with pytest.raises(ValueError):
            parse_percentage(text)


class TestAlertClassifier:
    """Test thresholds and noise floor"""

    def setup_method(self):
        self.classifier = AlertClassifier(drop_threshold=-3, spike_threshold=5, noise_floor=10)

    @pytest.mark.parametrize(
        "value1,value2,percent_diff",
        [
            (0, 12, "-100%"),      # drop to zero from a meaningful base
            (60, 10, "500.00%"),   # spike
            (110, 10, "1000.00%"),
            (10, 40, "-300%"),     # drop at the threshold
        ],
    )
    def test_flagged(self, value1, value2, percent_diff):
        assert self.classifier.is_alert(comparison(value1, value2, percent_diff))

    @pytest.mark.parametrize(
        "value1,value2,percent_diff",
        [
            (2, 1, "+100%"),       # below noise floor
            (0, 5, "-100%"),       # drop to zero from a small base
            (50, 10, "400.00%"),   # spike below threshold
            (20, 100, "-80.00%"),  # large relative drop, not alert-worthy
            (12, 0, "+100%"),      # new traffic from a zero baseline
            (9, 1, "800.00%"),     # spike with value1 below floor
            (60, 9, "566.67%"),    # spike with value2 below floor
            (0, 0, "0%"),
        ],
    )
    def test_not_flagged(self, value1, value2, percent_diff):
        assert not self.classifier.is_alert(comparison(value1, value2, percent_diff))

    def test_classify_keeps_comparator_order(self):
        records = [
            comparison(60, 10, "500.00%", metric="NRC_eventCount"),
            comparison(1, 1, "0.00%", metric="NRC_sessions"),
            comparison(0, 12, "-100%", metric="NDC_totalUsers"),
            comparison(0, 5, "-100%", metric="RDC_totalUsers"),
        ]

        alerts = self.classifier.classify(records)

        assert [a.metric for a in alerts] == ["NRC_eventCount", "NDC_totalUsers"]
        assert all(isinstance(a, AlertRecord) for a in alerts)
        assert alerts[0].to_row() == records[0].to_row()

    def test_unparsable_percentage_is_not_flagged(self):
        records = [comparison(100, 10, "n/a"), comparison(60, 10, "500.00%")]

        alerts = self.classifier.classify(records)

        assert len(alerts) == 1
        assert len(self.classifier.anomalies) == 1
        anomaly = self.classifier.anomalies[0]
        assert isinstance(anomaly, UnparsablePercentageError)
        assert anomaly.context["percent_diff"] == "n/a"

    def test_non_finite_percentage_is_reported(self):
        alerts = self.classifier.classify([comparison(0, 12, "nan%")])

        assert alerts == []
        assert [a.context["percent_diff"] for a in self.classifier.anomalies] == ["nan%"]

    def test_custom_thresholds(self):
        strict = AlertClassifier(drop_threshold=-0.5, spike_threshold=1, noise_floor=50)

        assert strict.is_alert(comparison(60, 200, "-70.00%"))
        assert not strict.is_alert(comparison(20, 100, "-80.00%"))

    def test_defaults_come_from_settings(self):
        classifier = AlertClassifier()

        assert classifier.drop_threshold == -3
        assert classifier.spike_threshold == 5
        assert classifier.noise_floor == 10

    def test_module_level_classify(self):
        assert classify([comparison(0, 12, "-100%")])[0].direction == "decrease"
