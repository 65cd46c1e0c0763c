import os
import toml
from ...cli_logger import logger
from .base_resolver import BaseResolver, BuildStep, BuildSystemKind, _existing_file


def get_cargo_binary_name(source_dir):
    """
    Reads Cargo.toml and returns the name of the binary it produces.

    The first [[bin]] target with a name wins, then [package].name. Returns
    None when the manifest is missing, unreadable or names neither.
    """
    cargo_toml = os.path.join(source_dir, "Cargo.toml")
    try:
        with open(cargo_toml, "r") as f:
            manifest = toml.load(f)
    except (IOError, toml.TomlDecodeError) as e:
        logger.warning(f"Could not read {cargo_toml}: {e}")
        return None

    bins = manifest.get("bin")
    if isinstance(bins, list):
        for entry in bins:
            if isinstance(entry, dict) and isinstance(entry.get("name"), str):
                return entry["name"]

    package = manifest.get("package")
    if isinstance(package, dict) and isinstance(package.get("name"), str):
        return package["name"]

    return None


class CargoResolver(BaseResolver):
    kind = BuildSystemKind.CARGO
    label = "Cargo"
    marker_files = ("Cargo.toml",)

    def get_build_steps(self, plan):
        command = ("cargo", "build", "--release") + plan.extra_flags + (
            "--manifest-path", os.path.join(plan.source_dir, "Cargo.toml"),
            "--target-dir", os.path.join(plan.source_dir, "target"),
        )
        return [BuildStep("cargo-build", command, plan.source_dir)]

    def find_binary(self, plan):
        binary_name = get_cargo_binary_name(plan.source_dir) or plan.package_name
        for profile in ("release", "debug"):
            path = _existing_file(os.path.join(plan.source_dir, "target", profile, binary_name))
            if path:
                return path
        return None
