import click
import importlib.metadata
from ..cli_logger import logger

@click.command()
def version():
    """Print the version of aurora."""
    try:
        ver = importlib.metadata.version("aurora")
        click.echo(f"aurora version {ver}")
    except importlib.metadata.PackageNotFoundError:
        logger.error("Error: Could not determine the version of aurora. Is it installed correctly?")
