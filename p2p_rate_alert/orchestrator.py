"""
Main application orchestrator for the P2P rate alert system.

This module wires the components together, runs the long-lived tasks
(error sink, spam filter eviction, rate poller, offer scanner and the
Telegram command listener) and shuts them down in order.
"""

import asyncio
import signal
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from .components.binance_client import BinanceP2PClient
from .components.control_plane import ControlPlane, PauseFlag
from .components.eligibility import EligibilityPipeline
from .components.forex_client import create_rate_client
from .components.message_dispatcher import MessageDispatcherFactory
from .components.offer_scanner import OfferScanner
from .components.rate_poller import MIN_POLL_INTERVAL_SECONDS, RatePoller
from .components.spam_filter import SpamFilterStore
from .components.telegram_bot_handler import TelegramBotHandler
from .interfaces import (
    ICommandListener,
    IConfigurationManager,
    IMessageDispatcher,
    IOfferSource,
    IRateSource,
)
from .models.config import RuntimeSettings
from .services.config_manager import FileConfigurationManager
from .utils.error_handling import ErrorSink, ErrorTracker
from .utils.handoff import Handoff
from .utils.logging import get_logger


class ApplicationOrchestrator:
    """
    Main application orchestrator that coordinates all system components.

    Collaborators that are not passed in are built from the runtime
    settings during initialize().
    """

    def __init__(
        self,
        settings: RuntimeSettings,
        config_manager: Optional[IConfigurationManager] = None,
        rate_source: Optional[IRateSource] = None,
        offer_source: Optional[IOfferSource] = None,
        dispatcher: Optional[IMessageDispatcher] = None,
        command_listener: Optional[ICommandListener] = None,
        spam_filter: Optional[SpamFilterStore] = None,
        pause_flag: Optional[PauseFlag] = None,
        min_poll_interval: float = MIN_POLL_INTERVAL_SECONDS,
        shutdown_grace: float = 5.0,
    ):
        """
        Initialize the application orchestrator.

        Args:
            settings: Process settings read from the environment
            config_manager: Configuration persistence, built from settings if None
            rate_source: Reference rate client, built from settings if None
            offer_source: P2P offer client, Binance if None
            dispatcher: Notification dispatcher, built from settings if None
            command_listener: Operator command channel, Telegram if None
            spam_filter: Spam filter store shared with the scanner
            pause_flag: Pause flag shared by the control plane and the poller
            min_poll_interval: Lower bound for the rate polling interval
            shutdown_grace: Seconds each task gets to stop before cancellation
        """
        self.logger = get_logger("orchestrator")

        self.settings = settings
        self.min_poll_interval = min_poll_interval
        self.shutdown_grace = shutdown_grace

        self._config_manager = config_manager
        self._rate_source = rate_source
        self._offer_source = offer_source
        self._dispatcher = dispatcher
        self._command_listener = command_listener

        self.spam_filter = spam_filter or SpamFilterStore()
        self.pause_flag = pause_flag or PauseFlag()
        self.error_tracker = ErrorTracker()

        self.control_plane: Optional[ControlPlane] = None
        self.rate_poller: Optional[RatePoller] = None
        self.offer_scanner: Optional[OfferScanner] = None
        self.error_sink: Optional[ErrorSink] = None
        self.rate_handoff: Optional[Handoff[float]] = None

        self._running = False
        self._shutdown_event = asyncio.Event()
        self._tasks: Dict[str, asyncio.Task] = {}
        self._startup_time: Optional[datetime] = None
        self._component_health: Dict[str, bool] = {}

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        signal.signal(signal.SIGINT, self._signal_handler)
        if sys.platform != "win32":
            signal.signal(signal.SIGTERM, self._signal_handler)
        else:
            signal.signal(signal.SIGBREAK, self._signal_handler)

        self._loop = asyncio.get_running_loop()

    def _signal_handler(self, signum: int, frame) -> None:
        """Handle shutdown signals."""
        self.logger.info(
            "Received shutdown signal, initiating graceful shutdown",
            extra={"signal": signum},
        )
        self._loop.call_soon_threadsafe(self._shutdown_event.set)

    async def initialize(self) -> None:
        """
        Build every component.

        Raises:
            ValueError: If a required setting is missing or unsupported
            OSError: If the configuration file cannot be created or opened
        """
        self.logger.info("Initializing P2P rate alert system...")

        if self._config_manager is None:
            self._config_manager = FileConfigurationManager(self.settings.config_path)
        self._component_health["config_manager"] = True

        config = self._config_manager.get_config()
        self.logger.info(
            "Configuration loaded",
            extra={
                "target_currency": config.target_currency,
                "max_surplus_percentage": config.max_surplus_percentage,
            },
        )

        if self._rate_source is None:
            self._rate_source = create_rate_client(
                self.settings.forex_provider, self.settings.forex_api_key or ""
            )
        if self._offer_source is None:
            self._offer_source = BinanceP2PClient()
        if self._dispatcher is None:
            self._dispatcher = MessageDispatcherFactory.create_dispatcher(
                self.settings.notification_platform,
                self.settings.notification_config(),
            )

        self.control_plane = ControlPlane(self._config_manager, self.pause_flag)
        if self._command_listener is None:
            self._command_listener = TelegramBotHandler(
                self.settings.telegram_bot_token,
                self.settings.authorized_users,
                self.control_plane,
            )

        self.error_sink = ErrorSink(self.error_tracker)
        self.rate_handoff = Handoff("rates")

        self.rate_poller = RatePoller(
            rate_source=self._rate_source,
            config_manager=self._config_manager,
            pause_flag=self.pause_flag,
            rate_handoff=self.rate_handoff,
            error_sink=self.error_sink,
            min_interval=self.min_poll_interval,
        )
        self.offer_scanner = OfferScanner(
            offer_source=self._offer_source,
            dispatcher=self._dispatcher,
            config_manager=self._config_manager,
            pipeline=EligibilityPipeline(self.spam_filter),
            spam_filter=self.spam_filter,
            error_sink=self.error_sink,
        )

        await self._validate_dispatcher()

        self._startup_time = datetime.now()
        self.logger.info("System initialization completed successfully")

    async def _validate_dispatcher(self) -> None:
        """Check the notification channel; a failure is only a warning."""
        loop = asyncio.get_running_loop()
        try:
            healthy = await loop.run_in_executor(None, self._dispatcher.test_connection)
        except Exception as e:
            self.logger.warning(f"Message dispatcher connection test failed: {e}")
            healthy = False

        self._component_health["message_dispatcher"] = bool(healthy)
        if not healthy:
            self.logger.warning("Message dispatcher connection test failed")

    def _spawn(self, name: str, coro) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        task.add_done_callback(self._on_task_done)
        self._tasks[name] = task
        self._component_health[name] = True
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        name = task.get_name()
        self._component_health[name] = False

        if task.cancelled():
            return

        error = task.exception()
        if error is not None:
            self.logger.critical(
                f"Task {name} failed, shutting down",
                exc_info=error,
            )
            self._shutdown_event.set()

    async def start(self) -> None:
        """Start every task and wait for the shutdown signal."""
        if self._running:
            self.logger.warning("System is already running")
            return

        self._running = True
        self.logger.info("Starting tasks...")

        self._spawn("error_sink", self.error_sink.run())
        self._spawn("spam_filter", self.spam_filter.run(self._shutdown_event))
        self._spawn("offer_scanner", self.offer_scanner.run(self.rate_handoff))
        self._spawn("rate_poller", self.rate_poller.run(self._shutdown_event))

        await self._command_listener.start_polling()
        self._component_health["command_listener"] = True

        await self._shutdown_event.wait()

    async def _stop_tasks(self, *names: str) -> None:
        tasks = [self._tasks[name] for name in names if name in self._tasks]
        if not tasks:
            return

        _, pending = await asyncio.wait(tasks, timeout=self.shutdown_grace)
        for task in pending:
            self.logger.warning(f"Task {task.get_name()} did not stop in time, cancelling")
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)

    async def shutdown(self) -> None:
        """
        Gracefully shutdown the system.

        Producers stop before the channel they write to is closed; each
        channel is closed exactly once.
        """
        if not self._running:
            return

        self.logger.info("Initiating graceful shutdown...")
        self._running = False
        self._shutdown_event.set()

        try:
            await self._command_listener.stop_polling()
            self._component_health["command_listener"] = False
        except Exception as e:
            self.logger.error(f"Error stopping command listener: {e}", exc_info=True)

        await self._stop_tasks("rate_poller", "spam_filter")
        self.rate_handoff.close()

        await self._stop_tasks("offer_scanner")
        self.error_sink.close()

        await self._stop_tasks("error_sink")

        uptime = datetime.now() - self._startup_time if self._startup_time else None
        self.logger.info(
            f"System shutdown complete. Uptime: {uptime}",
            extra={"error_stats": self.error_tracker.get_error_stats()},
        )

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    def get_system_status(self) -> Dict[str, Any]:
        """Get current system status information."""
        return {
            "running": self._running,
            "paused": self.pause_flag.paused,
            "startup_time": self._startup_time.isoformat()
            if self._startup_time
            else None,
            "uptime": str(datetime.now() - self._startup_time)
            if self._startup_time
            else None,
            "component_health": self._component_health.copy(),
            "spam_filter_entries": len(self.spam_filter),
            "error_stats": self.error_tracker.get_error_stats(),
        }

    async def run(self, install_signal_handlers: bool = True) -> None:
        """
        Run the complete application lifecycle.

        Initialization errors propagate to the caller.
        """
        await self.initialize()

        if install_signal_handlers:
            self._setup_signal_handlers()

        try:
            await self.start()
        finally:
            await self.shutdown()
