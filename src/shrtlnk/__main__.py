"""
Main entry point for the shrtlnk front end.

This module initializes and runs the server. It sets up logging, creates the shared
HTTP client session, performs the startup load of the routing configuration, and
handles graceful shutdown when the application is terminated.
"""

import asyncio
import logging

import aiohttp

from shrtlnk.config import ServerContext, get_context
from shrtlnk.config.http_config import get_http_session
from shrtlnk.config.logging_config import configure_logging
from shrtlnk.server import Application


async def main(context: ServerContext) -> None:
    """
    Set up and run the server.

    This function initializes all components:
    1. Creates the HTTP session shared by reverse-proxy pages
    2. Loads the routing configuration (a failure here aborts startup)
    3. Installs the SIGHUP reload trigger
    4. Serves until cancelled, then releases all resources

    Args:
        context: Process settings.

    Returns:
        None
    """
    logger: logging.Logger = logging.getLogger(__name__)
    logger.info("Starting application...")

    http_session: aiohttp.ClientSession = get_http_session(context)
    logger.info("configured: http_session")

    app: Application = Application(context.config_file, http_session)

    try:
        await app.load()
        app.install_signal_handlers()
        await app.serve()

    except asyncio.CancelledError:
        logger.info("Application shutdown requested.")
    finally:
        logger.info("Shutting down resources...")
        await app.stop()
        await http_session.close()
        logger.info("Shutdown complete.")


def run() -> None:
    """Console script entry point."""
    try:
        shrtlnk_context: ServerContext = get_context()

        configure_logging(shrtlnk_context)

        asyncio.run(main(shrtlnk_context))
    except KeyboardInterrupt:
        logging.info("Shutdown initiated by user (Ctrl+C).")


if __name__ == "__main__":
    run()
