"""Main entry point for klok-bot."""

import asyncio
import signal
import sys

from dotenv import load_dotenv

from klokbot import Application, ConfigError, load_accounts, load_messages, load_settings
from klokbot.config import PROJECT_ROOT
from klokbot.logging_config import get_logger, setup_logging

logger = get_logger("klokbot.main")


async def run(application: Application) -> None:
    """Run until SIGINT or SIGTERM."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows: KeyboardInterrupt still ends asyncio.run
            pass

    await application.start()
    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down")
        await application.stop()


def main():
    """Run the application."""
    load_dotenv(PROJECT_ROOT / ".env")
    setup_logging()

    try:
        settings = load_settings()
        accounts = load_accounts(settings.tokens_file)
        messages = load_messages(settings.messages_file)
    except ConfigError as e:
        logger.error("Startup failed: %s", e)
        sys.exit(1)

    logger.info(
        "Running Klok multi-account bot: %s account(s), %s message(s), every %ss",
        len(accounts),
        len(messages),
        settings.chat_interval,
    )

    application = Application(settings, accounts, messages)
    try:
        asyncio.run(run(application))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
