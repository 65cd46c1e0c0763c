import click
from . import config as config_module
from .commands.clean import clean
from .commands.config import config
from .commands.install import install
from .commands.log import log
from .commands.version import version


@click.group()
@click.option("--config-dir", default=config_module.CONFIG_DIR, show_default=True,
              help="Directory holding aurora.toml.")
@click.pass_context
def cli(ctx, config_dir):
    """aurora: build and install packages from source."""
    ctx.obj = {"config_dir": config_dir}

cli.add_command(install)
cli.add_command(clean)
cli.add_command(config)
cli.add_command(log)
cli.add_command(version)


if __name__ == '__main__':
    cli()
