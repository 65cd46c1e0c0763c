"""Errors raised by the install pipeline.

Every error belongs to a single package attempt. The pipeline in
``aurora.installer`` turns them into an ``InstallOutcome`` and moves on to
the next package of a batch.
"""


class AuroraError(Exception):
    """Base class for all pipeline errors."""

    stage = None

    def __init__(self, message, stage=None):
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage


class WorkspaceError(AuroraError):
    stage = "workspace"


class FetchError(AuroraError):
    stage = "fetch"


class ManifestParseError(AuroraError):
    stage = "manifest"

    def __init__(self, path, reason):
        super().__init__(f"Invalid build manifest {path}: {reason}")
        self.path = path
        self.reason = reason


class DetectionError(AuroraError):
    stage = "detect"


class UserCancelled(AuroraError):
    stage = "confirm"


class BuildError(AuroraError):
    """A build step exited non-zero. ``stage`` names the failing step."""

    def __init__(self, stage, returncode=None, message=None):
        if message is None:
            message = f"Build step '{stage}' failed"
            if returncode is not None:
                message += f" with exit code {returncode}"
        super().__init__(message, stage=stage)
        self.returncode = returncode


class ConfigureError(BuildError):
    def __init__(self, returncode=None, message=None):
        super().__init__("configure", returncode=returncode, message=message)


class LocateError(AuroraError):
    stage = "locate"


class InstallError(AuroraError):
    stage = "install"
