"""Build system detection.

``detect`` inspects a fetched source tree and returns a ``BuildPlan`` for
exactly one build system, or raises. An ``aurora.json`` manifest at the
root may pin the build system and contribute flags; otherwise marker files
are tested in ``DETECTION_ORDER`` and the first hit wins, so a Cargo crate
that vendors a Makefile is built with make.
"""

import json
import os
from ...cli_logger import logger
from ...errors import DetectionError, ManifestParseError
from .base_resolver import BaseResolver, BuildPlan, BuildStep, BuildSystemKind, find_file_recursive
from .cargo import CargoResolver, get_cargo_binary_name
from .cmake import CMakeResolver
from .make import MAKEFILE_NAMES, AutotoolsResolver, MakeResolver
from .meson import MesonResolver, NinjaResolver
from .nimble import NimbleResolver
from .stack import StackResolver

MANIFEST_FILE = "aurora.json"

RESOLVERS = {
    resolver.kind: resolver
    for resolver in (
        MakeResolver(),
        AutotoolsResolver(),
        CargoResolver(),
        CMakeResolver(),
        MesonResolver(),
        NinjaResolver(),
        NimbleResolver(),
        StackResolver(),
    )
}

# Tie-break when a tree carries markers for several systems.
DETECTION_ORDER = [
    (RESOLVERS[BuildSystemKind.MAKE].find_marker, BuildSystemKind.MAKE),
    (RESOLVERS[BuildSystemKind.AUTOTOOLS].find_marker, BuildSystemKind.AUTOTOOLS),
    (RESOLVERS[BuildSystemKind.CARGO].find_marker, BuildSystemKind.CARGO),
    (RESOLVERS[BuildSystemKind.CMAKE].find_marker, BuildSystemKind.CMAKE),
    (RESOLVERS[BuildSystemKind.MESON].find_marker, BuildSystemKind.MESON),
    (RESOLVERS[BuildSystemKind.NINJA].find_marker, BuildSystemKind.NINJA),
    (RESOLVERS[BuildSystemKind.NIMBLE].find_marker, BuildSystemKind.NIMBLE),
    (RESOLVERS[BuildSystemKind.STACK].find_marker, BuildSystemKind.STACK),
]


def get_resolver(kind) -> BaseResolver:
    return RESOLVERS[kind]


def read_manifest(source_dir):
    """
    Parses aurora.json at the root of source_dir.

    Returns None when there is no manifest, otherwise a tuple
    (build_system, flags) where build_system is the raw string or None.
    Raises ManifestParseError for anything malformed.
    """
    path = os.path.join(source_dir, MANIFEST_FILE)
    if not os.path.isfile(path):
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (IOError, UnicodeDecodeError) as e:
        raise ManifestParseError(path, f"cannot read file: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestParseError(path, f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ManifestParseError(path, "top level must be a JSON object")

    build_system = data.get("build_system")
    if build_system is not None and not isinstance(build_system, str):
        raise ManifestParseError(path, "'build_system' must be a string")

    flags = data.get("flags", [])
    if flags is None:
        flags = []
    if not isinstance(flags, list):
        raise ManifestParseError(path, "'flags' must be an array of strings")
    for flag in flags:
        if not isinstance(flag, str):
            raise ManifestParseError(path, f"'flags' must contain only strings, got {flag!r}")

    return build_system, flags


def scan_markers(source_dir):
    """Return (kind, marker file name) for the first matching marker, or None."""
    for predicate, kind in DETECTION_ORDER:
        marker = predicate(source_dir)
        if marker:
            return kind, marker
    return None


def detect(source_dir, package_name=None, caller_flags=()):
    """
    Classifies source_dir into exactly one build system.

    Args:
        source_dir (str): Root of the fetched source tree.
        package_name (str, optional): Name of the executable to look for
            after the build. Defaults to the directory name.
        caller_flags (sequence): Flags supplied by the user, appended after
            any flags from aurora.json.

    Returns:
        BuildPlan

    Raises:
        ManifestParseError: aurora.json exists but is malformed.
        DetectionError: no supported build system was found.
    """
    source_dir = os.path.abspath(source_dir)
    if package_name is None:
        package_name = os.path.basename(source_dir)

    manifest = read_manifest(source_dir)
    manifest_flags = []
    if manifest is not None:
        build_system, manifest_flags = manifest
        logger.info(f"  - Found {MANIFEST_FILE}")
        kind = BuildSystemKind.from_name(build_system) if build_system else None
        if kind is not None:
            return BuildPlan(
                kind=kind,
                extra_flags=tuple(manifest_flags) + tuple(caller_flags),
                source_dir=source_dir,
                package_name=package_name,
            )
        if build_system:
            logger.warning(f"Unknown build_system '{build_system}' in {MANIFEST_FILE}, detecting from marker files.")

    found = scan_markers(source_dir)
    if found is None:
        raise DetectionError(f"No build system found in {source_dir}")

    kind, marker = found
    return BuildPlan(
        kind=kind,
        extra_flags=tuple(manifest_flags) + tuple(caller_flags),
        source_dir=source_dir,
        package_name=package_name,
        build_file=marker,
    )


__all__ = [
    "BaseResolver",
    "BuildPlan",
    "BuildStep",
    "BuildSystemKind",
    "DETECTION_ORDER",
    "MAKEFILE_NAMES",
    "MANIFEST_FILE",
    "RESOLVERS",
    "detect",
    "find_file_recursive",
    "get_cargo_binary_name",
    "get_resolver",
    "read_manifest",
    "scan_markers",
]
