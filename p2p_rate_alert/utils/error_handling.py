"""
Error handling utilities for the P2P rate alert system.

This module defines the exception taxonomy, the error tracker that keeps
error statistics, and the error sink that every periodic task reports to.
"""

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from .handoff import Handoff
from .logging import get_logger


class P2PAlertError(Exception):
    """Base class for errors raised by the alert system."""


class FetchError(P2PAlertError):
    """A rate or offer collaborator failed (network, status code, payload)."""


class OfferParseError(P2PAlertError):
    """A numeric field of a single offer could not be parsed."""


class DispatchError(P2PAlertError):
    """A notification could not be delivered."""


class CommandError(P2PAlertError):
    """An operator command was malformed; the message is shown to the operator."""


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""

    NETWORK = "network"
    PARSING = "parsing"
    MESSAGE_DELIVERY = "message_delivery"
    CONFIGURATION = "configuration"
    COMMAND = "command"
    SYSTEM = "system"


DEFAULT_SEVERITY = {
    ErrorCategory.NETWORK: ErrorSeverity.MEDIUM,
    ErrorCategory.PARSING: ErrorSeverity.LOW,
    ErrorCategory.MESSAGE_DELIVERY: ErrorSeverity.HIGH,
    ErrorCategory.CONFIGURATION: ErrorSeverity.HIGH,
    ErrorCategory.COMMAND: ErrorSeverity.LOW,
    ErrorCategory.SYSTEM: ErrorSeverity.CRITICAL,
}


@dataclass
class ErrorInfo:
    """Information about an error occurrence."""

    timestamp: datetime
    component: str
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    exception_type: str
    traceback: str
    context: Dict[str, Any]


@dataclass
class ReportedError:
    """An error travelling from a periodic task to the error sink."""

    component: str
    category: ErrorCategory
    error: BaseException
    context: Dict[str, Any] = field(default_factory=dict)


class ErrorTracker:
    """
    Tracks errors and provides statistics for monitoring.
    """

    def __init__(self, max_errors: int = 1000):
        """
        Initialize error tracker.

        Args:
            max_errors: Maximum number of errors to keep in memory
        """
        self.max_errors = max_errors
        self.errors: List[ErrorInfo] = []
        self.error_counts: Dict[str, int] = {}
        self.logger = get_logger("error.sink")

    def record_error(
        self,
        component: str,
        category: ErrorCategory,
        message: str,
        exception: Optional[BaseException] = None,
        severity: Optional[ErrorSeverity] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ErrorInfo:
        """
        Record an error occurrence and log it.

        Args:
            component: Component where error occurred
            category: Error category
            message: Error message
            exception: Exception object if available
            severity: Error severity, derived from the category when omitted
            context: Additional context information

        Returns:
            ErrorInfo object
        """
        severity = severity or DEFAULT_SEVERITY[category]
        error_info = ErrorInfo(
            timestamp=datetime.now(),
            component=component,
            category=category,
            severity=severity,
            message=message,
            exception_type=type(exception).__name__ if exception else "Unknown",
            traceback="".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )
            )
            if exception
            else "",
            context=context or {},
        )

        self.errors.append(error_info)
        if len(self.errors) > self.max_errors:
            self.errors.pop(0)

        error_key = f"{component}.{category.value}"
        self.error_counts[error_key] = self.error_counts.get(error_key, 0) + 1

        self.logger.error(
            f"Error recorded: {message}",
            extra={
                "source": component,
                "category": category.value,
                "severity": severity.value,
                "exception_type": error_info.exception_type,
                "context": error_info.context,
            },
            exc_info=exception
            if exception is not None and exception.__traceback__ is not None
            else False,
        )

        return error_info

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics."""
        last_hour = datetime.now() - timedelta(hours=1)

        return {
            "total_errors": len(self.errors),
            "errors_last_hour": len(
                [e for e in self.errors if e.timestamp >= last_hour]
            ),
            "error_counts": self.error_counts.copy(),
            "category_breakdown": {
                category.value: len([e for e in self.errors if e.category == category])
                for category in ErrorCategory
            },
        }


class ErrorSink:
    """
    Single consumer for errors reported by the periodic tasks.

    The sink is passive: it logs and counts, it never retries.
    """

    def __init__(self, tracker: Optional[ErrorTracker] = None):
        self.tracker = tracker or ErrorTracker()
        self.channel: Handoff[ReportedError] = Handoff("errors")

    async def report(
        self,
        component: str,
        category: ErrorCategory,
        error: BaseException,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Hand an error to the sink, waiting until it has been taken."""
        await self.channel.send(
            ReportedError(
                component=component,
                category=category,
                error=error,
                context=context or {},
            )
        )

    def consume(self, reported: ReportedError) -> ErrorInfo:
        return self.tracker.record_error(
            component=reported.component,
            category=reported.category,
            message=str(reported.error) or type(reported.error).__name__,
            exception=reported.error,
            context=reported.context,
        )

    async def run(self) -> None:
        """Consume errors until the channel is closed."""
        async for reported in self.channel:
            self.consume(reported)

    def close(self) -> None:
        self.channel.close()
