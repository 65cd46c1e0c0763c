import os
import shlex
from .cli_logger import logger
from .errors import BuildError, ConfigureError, LocateError, WorkspaceError
from .utils import run_shell_command
from .utils.build_system_resolver import get_resolver


def _run_step(step):
    """Run one BuildStep and return its exit code."""
    logger.step_info(f"$ {shlex.join(step.command)}", indent=2)
    _, _, returncode = run_shell_command(list(step.command), cwd=step.cwd)
    return returncode


def _fail(stage, returncode):
    if stage == "configure":
        return ConfigureError(returncode=returncode)
    return BuildError(stage, returncode=returncode)


def run_build(plan):
    """
    Runs the build recipe for plan.kind inside plan.source_dir.

    Steps run in order; the first failing step ends the build. A step with a
    fallback gets exactly one retry using the fallback command. When the
    step marks its fallback as non-fatal, a failed retry is logged and the
    next step runs anyway (Meson setup, so ninja reports the failure).

    Raises:
        WorkspaceError: an output directory could not be created.
        ConfigureError: ./configure failed (usually missing dependencies).
        BuildError: any other step failed; ``stage`` names it.
    """
    resolver = get_resolver(plan.kind)
    logger.info(f"~> Building {plan.package_name} with {resolver.label}")
    if plan.extra_flags:
        logger.info(f"  - Flags: {' '.join(plan.extra_flags)}")

    for subdir in resolver.output_dirs:
        path = os.path.join(plan.source_dir, subdir)
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise WorkspaceError(f"Failed to create build directory {path}: {e}") from e

    for step in resolver.get_build_steps(plan):
        returncode = _run_step(step)
        if returncode != 0 and step.fallback is not None:
            logger.warning(f"{step.stage} exited with code {returncode}, retrying with: {shlex.join(step.fallback.command)}")
            fatal = step.fallback_fatal
            step = step.fallback
            returncode = _run_step(step)
            if returncode != 0 and not fatal:
                logger.warning(f"{step.stage} exited with code {returncode}, continuing")
                continue
        if returncode != 0:
            logger.error(f"Build step '{step.stage}' failed with exit code {returncode}")
            raise _fail(step.stage, returncode)

    logger.success(f"Build of {plan.package_name} finished")


def locate_binary(plan):
    """
    Finds the executable produced by run_build.

    Raises:
        LocateError: nothing named after the package exists where the build
            system puts its output.
    """
    path = get_resolver(plan.kind).find_binary(plan)
    if path is None:
        raise LocateError(f"Failed to find built binary '{plan.package_name}' in {plan.source_dir}")
    logger.info(f"  - Found binary {path}")
    return path
