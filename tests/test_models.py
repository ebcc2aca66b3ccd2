"""
Tests for the data models.
"""

import pytest

from p2p_rate_alert.models import (
    BlackList,
    Configuration,
    DeliveryResult,
    Offer,
    RuntimeSettings,
)
from p2p_rate_alert.utils.error_handling import OfferParseError

VALID_ENV = {
    "CONFIG_FILEPATH": "/var/lib/p2p/config.json",
    "TELEGRAM_BOT_TOKEN": "123456:ABC",
    "SLACK_NOTIFICATION_WEBHOOK_URL": "https://hooks.slack.com/services/T/B/X",
    "FASTFOREX_API_KEY": "ff-key",
    "TELEGRAM_AUTHORIZED_USERS": "42",
}


class TestBlackList:
    """Test cases for BlackList."""

    def test_add_and_contains(self):
        black_list = BlackList()

        assert black_list.add("abc", "bank") is True
        assert black_list.add("abc", "bank") is False
        assert black_list.bank == ["abc"]
        assert black_list.contains("abc")
        assert not black_list.contains("xyz")

    def test_unknown_channel(self):
        with pytest.raises(ValueError, match="Unknown blacklist channel"):
            BlackList().add("abc", "paypay")

    def test_from_dict_drops_duplicates_and_blanks(self):
        black_list = BlackList.from_dict({"line": ["a", "a", " ", "b"], "bank": None})

        assert black_list.line == ["a", "b"]
        assert black_list.bank == []

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(ValueError, match="blackList"):
            BlackList.from_dict(["abc"])

    def test_from_dict_rejects_string_channel(self):
        with pytest.raises(ValueError, match="bank"):
            BlackList.from_dict({"bank": "abc"})


class TestConfiguration:
    """Test cases for Configuration."""

    def test_defaults(self):
        config = Configuration.from_dict({})

        assert config.max_surplus_percentage == 1.0
        assert config.target_currency == "JPY"
        assert config.validate()

    def test_serialised_keys(self):
        config = Configuration(
            black_list=BlackList(line=["x"], bank=["y"]),
            max_surplus_percentage=0.5,
            target_currency="USD",
        )

        assert config.to_dict() == {
            "blackList": {"line": ["x"], "bank": ["y"]},
            "maxSurplusPercentage": 0.5,
            "targetCurrency": "USD",
        }

    def test_currency_upper_cased(self):
        assert Configuration.from_dict({"targetCurrency": " jpy "}).target_currency == "JPY"

    def test_invalid_currency(self):
        with pytest.raises(ValueError, match="3-letter"):
            Configuration(target_currency="YEN!").validate()

    def test_non_numeric_surplus(self):
        with pytest.raises(ValueError):
            Configuration.from_dict({"maxSurplusPercentage": "lots"})


class TestOffer:
    """Test cases for Offer."""

    def test_from_api_tolerates_missing_fields(self):
        offer = Offer.from_api({"adv": {"price": "150"}})

        assert offer.advertiser == ""
        assert offer.payment_methods == []
        assert offer.parse_price() == 150.0

    def test_parse_price_error(self):
        offer = Offer(advertiser="alice", price="1,50", surplus_amount="1")

        with pytest.raises(OfferParseError, match="alice"):
            offer.parse_price()

    @pytest.mark.parametrize("price", ["NaN", "nan", "inf", "-Infinity"])
    def test_parse_price_rejects_non_finite(self, price):
        offer = Offer(advertiser="alice", price=price, surplus_amount="1")

        with pytest.raises(OfferParseError, match="alice"):
            offer.parse_price()


class TestRuntimeSettings:
    """Test cases for RuntimeSettings."""

    def test_from_env(self):
        settings = RuntimeSettings.from_env(
            {**VALID_ENV, "TELEGRAM_AUTHORIZED_USERS": "1, 2,,3"}
        )

        assert settings.config_path == "/var/lib/p2p/config.json"
        assert settings.notification_platform == "slack"
        assert settings.forex_provider == "fastforex"
        assert settings.forex_api_key == "ff-key"
        assert settings.authorized_users == ["1", "2", "3"]
        assert settings.validate()

    def test_alphavantage_key(self):
        settings = RuntimeSettings.from_env(
            {**VALID_ENV, "FOREX_PROVIDER": "AlphaVantage", "ALPHAVANTAGE_API_KEY": "av"}
        )

        assert settings.forex_provider == "alphavantage"
        assert settings.forex_api_key == "av"

    @pytest.mark.parametrize(
        "missing",
        [
            "CONFIG_FILEPATH",
            "TELEGRAM_BOT_TOKEN",
            "TELEGRAM_AUTHORIZED_USERS",
            "SLACK_NOTIFICATION_WEBHOOK_URL",
            "FASTFOREX_API_KEY",
        ],
    )
    def test_missing_variable_named(self, missing):
        env = {k: v for k, v in VALID_ENV.items() if k != missing}

        with pytest.raises(ValueError, match=missing):
            RuntimeSettings.from_env(env).validate()

    def test_telegram_notifications_need_chat_id(self):
        env = {**VALID_ENV, "NOTIFICATION_PLATFORM": "telegram"}

        with pytest.raises(ValueError, match="TELEGRAM_CHAT_ID"):
            RuntimeSettings.from_env(env).validate()

        settings = RuntimeSettings.from_env({**env, "TELEGRAM_CHAT_ID": "-100"})
        assert settings.notification_config() == {
            "bot_token": "123456:ABC",
            "chat_id": "-100",
        }

    def test_invalid_webhook(self):
        env = {**VALID_ENV, "SLACK_NOTIFICATION_WEBHOOK_URL": "http://example.com"}

        with pytest.raises(ValueError, match="webhook"):
            RuntimeSettings.from_env(env).validate()


class TestDeliveryResult:
    """Test cases for DeliveryResult."""

    def test_failed_always_carries_error(self):
        result = DeliveryResult.failed("")

        assert result.success is False
        assert result.error_message == "notification not delivered"

    def test_failed_error_capped(self):
        assert len(DeliveryResult.failed("x" * 900).error_message) == 500

    def test_delivered(self):
        result = DeliveryResult.delivered()

        assert result.success is True
        assert result.error_message is None
