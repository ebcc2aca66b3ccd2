"""
Data models for the P2P rate alert system.

This module contains the data classes used throughout the application for
representing configuration, offers, commands and delivery results.
"""

from .command import BotCommand, CommandResult
from .config import BlackList, Configuration, RuntimeSettings
from .delivery import DeliveryResult
from .offer import Offer, PaymentMethod

__all__ = [
    "BlackList",
    "Configuration",
    "RuntimeSettings",
    "Offer",
    "PaymentMethod",
    "BotCommand",
    "CommandResult",
    "DeliveryResult",
]
