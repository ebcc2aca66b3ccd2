"""
Core components for the P2P rate alert system.

This module contains the rate poller, the offer scanner with its
eligibility pipeline and spam filter, the control plane, and the clients
for the external services.
"""

from .control_plane import ControlPlane, PauseFlag
from .eligibility import EligibilityPipeline, PaymentWindowRule
from .offer_scanner import OfferScanner, compute_surplus
from .rate_poller import RatePoller
from .spam_filter import SpamFilterStore

__all__ = [
    "ControlPlane",
    "PauseFlag",
    "EligibilityPipeline",
    "PaymentWindowRule",
    "OfferScanner",
    "compute_surplus",
    "RatePoller",
    "SpamFilterStore",
]
