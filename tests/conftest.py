"""
Pytest configuration and shared fixtures.

This module provides the sample data and collaborators used throughout
the P2P rate alert test suite.
"""

import logging

import pytest

from fakes import InMemoryConfigurationManager, RecordingErrorSink, make_offer

import p2p_rate_alert.utils.logging as logging_module
from p2p_rate_alert.models.config import BlackList, Configuration
from p2p_rate_alert.utils.logging import ROOT_LOGGER_NAME, LoggingManager


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach log handlers and forget the global manager after each test."""
    yield
    logging_module._logging_manager = None
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.NOTSET)
    for name in [ROOT_LOGGER_NAME] + [
        f"{ROOT_LOGGER_NAME}.{c}" for c in LoggingManager.COMPONENTS
    ]:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


@pytest.fixture
def sample_offer():
    """Create a sample Offer payable with LINE Pay."""
    return make_offer()


@pytest.fixture
def sample_config():
    """Create a sample Configuration."""
    return Configuration(
        black_list=BlackList(line=["mallory"], bank=["abc"]),
        max_surplus_percentage=1.0,
        target_currency="JPY",
    )


@pytest.fixture
def config_manager(sample_config):
    """Create an in-memory configuration manager."""
    return InMemoryConfigurationManager(sample_config)


@pytest.fixture
def error_sink():
    """Create a recording error sink."""
    return RecordingErrorSink()


@pytest.fixture
def temp_config_file(tmp_path):
    """Path to a not yet existing JSON configuration file."""
    return tmp_path / "conf" / "config.json"


@pytest.fixture
def sample_binance_payload():
    """One page of the Binance P2P search response."""
    return {
        "code": "000000",
        "success": True,
        "data": [
            {
                "adv": {
                    "advNo": "11500000001",
                    "price": "151.20",
                    "surplusAmount": "1200.50",
                    "tradeMethods": [
                        {"identifier": "LINEPay", "tradeMethodName": "LINE Pay"},
                        {"identifier": "BANK", "tradeMethodName": "Bank Transfer"},
                    ],
                },
                "advertiser": {"nickName": "alice"},
            },
            {
                "adv": {
                    "advNo": "11500000002",
                    "price": "153.50",
                    "surplusAmount": "80.00",
                    "tradeMethods": [
                        {"identifier": "BANK", "tradeMethodName": "Bank Transfer"}
                    ],
                },
                "advertiser": {"nickName": "bob"},
            },
        ],
    }
