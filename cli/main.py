"""CLI entry point."""

import sys
import os

from common.logging_config import get_logger, setup_logging
from cli.repl import repl_loop

LOGGED_COMPONENTS = ('cli', 'master', 'volume', 'common')


def main() -> None:
    """Entry point for CLI."""
    log_level = 'DEBUG' if '--debug' in sys.argv else os.getenv('LOG_LEVEL', 'WARNING')

    for component in LOGGED_COMPONENTS:
        setup_logging(component, log_level=log_level)
    logger = get_logger('cli')

    if '--debug' in sys.argv:
        logger.info("Debug logging enabled")
        sys.argv.remove('--debug')

    logger.info("CLI starting...")
    try:
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
