import click
import json
from .. import config as config_module
from ..cli_logger import logger

@click.group()
@click.pass_context
def config(ctx):
    """View or change settings in aurora.toml."""
    pass

@config.command("list")
@click.pass_context
def list_settings(ctx):
    """List the effective settings, defaults included."""
    settings = config_module.load_settings(path=ctx.obj["config_dir"])
    click.echo(json.dumps(settings, indent=4))

@config.command()
@click.argument('key')
@click.pass_context
def get(ctx, key):
    """Get a setting."""
    settings = config_module.load_settings(path=ctx.obj["config_dir"])
    if key not in settings:
        logger.error(f"Error: Key '{key}' not found in aurora.toml")
        return
    click.echo(settings[key])

@config.command("set")
@click.argument('key')
@click.argument('value')
@click.pass_context
def set_value(ctx, key, value):
    """Set a setting in aurora.toml."""
    if key not in config_module.DEFAULT_SETTINGS:
        logger.error(f"Error: Unknown setting '{key}'. Known settings: {', '.join(config_module.DEFAULT_SETTINGS)}")
        return
    if key == "makepkg" and value not in config_module.MAKEPKG_MODES:
        logger.error(f"Error: makepkg must be one of {', '.join(config_module.MAKEPKG_MODES)}")
        return
    if key == "clone_depth":
        try:
            value = int(value)
        except ValueError:
            logger.error("Error: clone_depth must be an integer")
            return

    conf = config_module.load_config(path=ctx.obj["config_dir"])
    conf[key] = value
    if config_module.save_config(conf, path=ctx.obj["config_dir"]):
        logger.info(f"Set '{key}' to '{value}'")

@config.command()
@click.argument('key')
@click.pass_context
def unset(ctx, key):
    """Remove a setting from aurora.toml, restoring its default."""
    conf = config_module.load_config(path=ctx.obj["config_dir"])
    if key not in conf:
        logger.error(f"Error: Key '{key}' not found in aurora.toml")
        return
    del conf[key]
    if config_module.save_config(conf, path=ctx.obj["config_dir"]):
        logger.info(f"Unset '{key}'")
