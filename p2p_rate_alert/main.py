"""
Main entry point for the P2P rate alert system.
"""

import asyncio
import sys

from .models.config import RuntimeSettings
from .orchestrator import ApplicationOrchestrator
from .utils.logging import get_logger, setup_logging


async def async_main(settings: RuntimeSettings):
    """Async main application entry point."""
    logger = get_logger("orchestrator")

    logger.info(
        "Starting P2P rate alert system",
        extra={
            "config_path": settings.config_path,
            "notification_platform": settings.notification_platform,
            "forex_provider": settings.forex_provider,
        },
    )

    orchestrator = ApplicationOrchestrator(settings)
    await orchestrator.run()


def main():
    """Main application entry point."""
    settings = RuntimeSettings.from_env()

    try:
        setup_logging(log_dir=settings.log_dir, log_level=settings.log_level)
    except (AttributeError, OSError) as e:
        print(f"Fatal error: cannot set up logging: {e}")
        sys.exit(1)

    logger = get_logger("orchestrator")

    try:
        settings.validate()
        asyncio.run(async_main(settings))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
    except Exception as e:
        logger.critical("Application failed", extra={"error": str(e)}, exc_info=True)
        print(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
