import os
import shutil
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
from .cli_logger import logger
from .errors import (
    AuroraError,
    BuildError,
    DetectionError,
    FetchError,
    InstallError,
    LocateError,
    ManifestParseError,
    UserCancelled,
    WorkspaceError,
)
from .builder import run_build, locate_binary
from .downloader import fetch_source, package_name_from_source, clone_repository, clone_url_for
from .utils import run_shell_command, prepare_workspace, purge_build_dir, build_dir_for
from .utils.build_system_resolver import detect, get_resolver

ARCH_RELEASE_FILE = "/etc/arch-release"


@dataclass(frozen=True)
class PackageRequest:
    name: str
    caller_flags: Tuple[str, ...] = ()
    auto_confirm: bool = False


class InstallStatus(Enum):
    INSTALLED = "installed"
    CANCELLED = "cancelled"
    INVALID_MANIFEST = "invalid-manifest"
    NO_BUILD_SYSTEM_FOUND = "no-build-system-found"
    WORKSPACE_FAILED = "workspace-failed"
    CLONE_FAILED = "clone-failed"
    BUILD_FAILED = "build-failed"
    BINARY_NOT_FOUND = "binary-not-found"
    COPY_FAILED = "copy-failed"


# Most specific classes first.
ERROR_STATUS = (
    (UserCancelled, InstallStatus.CANCELLED),
    (ManifestParseError, InstallStatus.INVALID_MANIFEST),
    (DetectionError, InstallStatus.NO_BUILD_SYSTEM_FOUND),
    (WorkspaceError, InstallStatus.WORKSPACE_FAILED),
    (FetchError, InstallStatus.CLONE_FAILED),
    (BuildError, InstallStatus.BUILD_FAILED),
    (LocateError, InstallStatus.BINARY_NOT_FOUND),
    (InstallError, InstallStatus.COPY_FAILED),
)


@dataclass
class InstallOutcome:
    package: str
    status: InstallStatus
    path: Optional[str] = None
    stage: Optional[str] = None
    message: str = ""
    elapsed: float = 0.0

    @property
    def ok(self):
        return self.status is InstallStatus.INSTALLED

    @property
    def failed(self):
        return self.status not in (InstallStatus.INSTALLED, InstallStatus.CANCELLED)

    @classmethod
    def from_error(cls, package, error, elapsed=0.0):
        for error_class, status in ERROR_STATUS:
            if isinstance(error, error_class):
                break
        else:
            raise TypeError(f"No install status for {type(error).__name__}")
        return cls(package, status, stage=error.stage, message=error.message, elapsed=elapsed)


def install_binary(binary_path, bin_dir):
    """
    Copies a built executable into bin_dir, keeping its file name.

    An existing file of the same name is replaced.

    Raises:
        InstallError: on any I/O failure.
    """
    dest_path = os.path.join(bin_dir, os.path.basename(binary_path))
    try:
        os.makedirs(bin_dir, exist_ok=True)
        shutil.copy2(binary_path, dest_path)
    except OSError as e:
        raise InstallError(f"Failed to copy {binary_path} to {dest_path}: {e}") from e
    logger.info(f"  - Installed {dest_path}")
    return dest_path


def should_use_makepkg(settings):
    mode = settings.get("makepkg", "auto")
    if mode == "always":
        return True
    if mode == "never":
        return False
    return os.path.exists(ARCH_RELEASE_FILE)


def _checkout(request, settings):
    """Wipe and re-fetch the package's workspace directory. Returns (name, build_dir)."""
    package_name = package_name_from_source(request.name)
    prepare_workspace(settings["workspace_dir"])
    build_dir = build_dir_for(settings["workspace_dir"], package_name)
    purge_build_dir(build_dir)
    return package_name, build_dir


def _ask(confirm, request, package_name, build_file_path):
    if request.auto_confirm or confirm is None or build_file_path is None:
        return
    if not os.path.isfile(build_file_path):
        return
    if not confirm(package_name, build_file_path):
        raise UserCancelled("Build cancelled by user")


def install_with_build_system(request, settings, confirm=None):
    """Fetch, detect, build, locate and install one package. Returns the installed path."""
    package_name, build_dir = _checkout(request, settings)
    fetch_source(request.name, build_dir, settings)

    logger.info("~> Searching for build file")
    plan = detect(build_dir, package_name=package_name, caller_flags=request.caller_flags)
    logger.info(f"~> Build system: {get_resolver(plan.kind).label}")
    if plan.build_file:
        logger.info(f"~> Build file: {plan.build_file}")

    _ask(confirm, request, package_name, plan.build_file_path)

    run_build(plan)

    logger.info("~> Installing...")
    binary_path = locate_binary(plan)
    return install_binary(binary_path, settings["bin_dir"])


def install_with_makepkg(request, settings, confirm=None):
    """Hand an AUR package to makepkg, which builds and installs it itself."""
    package_name, build_dir = _checkout(request, settings)
    clone_repository(clone_url_for(request.name, settings["git_host"]), build_dir, depth=settings["clone_depth"])

    _ask(confirm, request, package_name, os.path.join(build_dir, "PKGBUILD"))

    command = ["makepkg", "-si"]
    if request.auto_confirm:
        command.append("--noconfirm")
    command.extend(request.caller_flags)

    logger.info(f"~> Building and installing {package_name} with makepkg")
    # makepkg is interactive; its output stays on the terminal
    _, _, returncode = run_shell_command(command, cwd=build_dir, quiet=False)
    if returncode != 0:
        raise BuildError("makepkg", returncode=returncode)
    return None


def install_package(request, settings, confirm=None):
    """
    Runs the whole pipeline for one package and reports how it ended.

    Errors never escape: each AuroraError becomes an InstallOutcome so a
    batch can go on with the next package.
    """
    start = time.monotonic()
    logger.info(f"~> Installing {request.name}")
    try:
        if should_use_makepkg(settings):
            path = install_with_makepkg(request, settings, confirm)
        else:
            path = install_with_build_system(request, settings, confirm)
    except UserCancelled as e:
        logger.warning(e.message)
        return InstallOutcome.from_error(request.name, e, time.monotonic() - start)
    except AuroraError as e:
        logger.error(e.message)
        return InstallOutcome.from_error(request.name, e, time.monotonic() - start)

    elapsed = time.monotonic() - start
    logger.success(f"~> INSTALL FINISHED in {elapsed:.0f}s")
    if path:
        logger.info(f"Installed to {settings['bin_dir']}. Make sure this directory is in your PATH.")
    return InstallOutcome(request.name, InstallStatus.INSTALLED, path=path, elapsed=elapsed)


def install_packages(package_requests, settings, confirm=None):
    """Install each request in turn; one failure does not stop the rest."""
    return [install_package(request, settings, confirm) for request in package_requests]
