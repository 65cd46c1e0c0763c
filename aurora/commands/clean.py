import click
import os
from .. import config as config_module
from ..cli_logger import logger
from ..decorators import handle_exceptions
from ..errors import WorkspaceError
from ..utils.file_manager import builds_root, build_dir_for, purge_build_dir


@click.command()
@click.argument("packages", nargs=-1)
@click.pass_context
@handle_exceptions
def clean(ctx, packages):
    """Remove package checkouts from the workspace (all of them if none are named)."""
    settings = config_module.load_settings(path=ctx.obj["config_dir"])
    builds = builds_root(settings["workspace_dir"])

    if not packages:
        if not os.path.isdir(builds):
            logger.info("Workspace is already clean.")
            return
        packages = sorted(os.listdir(builds))

    items_removed = 0
    for package in packages:
        try:
            if purge_build_dir(build_dir_for(settings["workspace_dir"], package)):
                items_removed += 1
            else:
                logger.info(f"No build directory for {package}.")
        except WorkspaceError as e:
            logger.error(e.message)

    if items_removed > 0:
        logger.success(f"Cleaning complete. Removed {items_removed} items.")
    else:
        logger.info("Workspace is already clean.")
