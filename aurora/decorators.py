import functools
import click
import sys
from .cli_logger import logger

def handle_exceptions(func):
    """A decorator to handle common exceptions for CLI commands."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.exceptions.Exit:
            raise
        except click.Abort:
            logger.warning("\nCommand aborted by user.")
            sys.exit(130)
        except click.ClickException as e:
            logger.error(f"CLI Error: {e}")
            logger.exception(*sys.exc_info())
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error(f"\nAn unexpected error occurred: {e}")
            logger.info("Please check the log file for more details and report this issue to the aurora developers if it persists.")
            logger.exception(*sys.exc_info())
            sys.exit(1)
    return wrapper
