"""
P2P Rate Alert System

Watches the reference USD exchange rate, scans Binance P2P USDT offers
against it and alerts an operator about attractive, usable offers.
"""

__version__ = "0.1.0"
__author__ = "P2P Rate Alert Team"
