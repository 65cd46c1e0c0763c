import click
import sys
from .. import config as config_module
from ..cli_logger import logger
from ..decorators import handle_exceptions
from ..installer import PackageRequest, install_packages


def confirm_build(package_name, build_file_path):
    """Show the build file in a pager and ask whether to go ahead."""
    click.echo(f"~> Build file for {package_name}: {build_file_path}")
    try:
        with open(build_file_path, "r", encoding="utf-8", errors="replace") as f:
            click.echo_via_pager(f.read())
    except IOError as e:
        logger.warning(f"Could not display {build_file_path}: {e}")
    return click.confirm("~> Proceed with build?", default=True)


@click.command()
@click.argument("packages", nargs=-1, required=True)
@click.option("--flags", "-f", multiple=True, help="Extra flag passed to the build system. Repeat for several flags.")
@click.option("--yes", "-y", is_flag=True, help="Do not show build files or ask for confirmation.")
@click.pass_context
@handle_exceptions
def install(ctx, packages, flags, yes):
    """Build and install one or more packages.

    PACKAGE is a repository name on the configured git host, a git URL, or a
    URL of a source archive.
    """
    settings = config_module.load_settings(path=ctx.obj["config_dir"])
    package_requests = [PackageRequest(name, tuple(flags), yes) for name in packages]

    outcomes = install_packages(package_requests, settings, confirm=None if yes else confirm_build)

    if len(outcomes) > 1:
        logger.info("Summary:")
    for outcome in outcomes:
        if outcome.ok:
            logger.success(f"{outcome.package}: {outcome.path or 'installed'}")
        elif not outcome.failed:
            logger.warning(f"{outcome.package}: cancelled")
        else:
            logger.error(f"{outcome.package}: {outcome.status.value} ({outcome.stage}): {outcome.message}")

    if any(outcome.failed for outcome in outcomes):
        sys.exit(1)
