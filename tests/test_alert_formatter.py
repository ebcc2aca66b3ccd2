"""
Unit tests for the alert formatter.
"""

from fakes import make_offer
from p2p_rate_alert.components.alert_formatter import AlertFormatter


class TestAlertFormatter:
    """Test cases for AlertFormatter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.formatter = AlertFormatter()

    def test_format_alert(self):
        """Test the full message layout."""
        offer = make_offer(advertiser="alice", amount="1200.50")

        message = self.formatter.format_alert(
            offer, 150.0, 151.2, 0.8, ["LINE Pay", "Bank Transfer"]
        )

        assert message == (
            "advertiser 'alice' has a good offer.\n"
            "\tFX rate: 150.000000\n"
            "\tOffer rate: 151.200000\n"
            "\tDistance: 0.800000\n"
            "\tAmount: 1200.50\n"
            "\tMethods: LINE Pay, Bank Transfer"
        )

    def test_negative_surplus(self):
        """Test that offers below the reference rate show a negative distance."""
        message = self.formatter.format_alert(make_offer(), 150.0, 148.5, -1.0, ["LINE Pay"])

        assert "Distance: -1.000000" in message
