import toml
import os
from .cli_logger import logger

CONFIG_FILE = "aurora.toml"
CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".aurora")

DEFAULT_SETTINGS = {
    "workspace_dir": "/tmp/aurora",
    "bin_dir": "~/.local/bin",
    "git_host": "aur.archlinux.org",
    "clone_depth": 1,
    # auto: hand AUR packages to makepkg when running on Arch Linux
    "makepkg": "auto",
}

MAKEPKG_MODES = ("auto", "always", "never")


def load_config(path=CONFIG_DIR):
    config_path = os.path.join(path, CONFIG_FILE)
    if os.path.exists(config_path):
        try:
            with open(config_path, "r") as f:
                return toml.load(f)
        except toml.TomlDecodeError as e:
            logger.error(f"Error decoding TOML file at {config_path}: {e}")
            logger.info("Please check the file's format for syntax errors.")
        except IOError as e:
            logger.error(f"Error reading configuration file at {config_path}: {e}")
            logger.info("Please check file permissions.")
    return {}

def save_config(config, path=CONFIG_DIR):
    config_path = os.path.join(path, CONFIG_FILE)
    logger.info(f"Saving configuration to {config_path}")
    try:
        os.makedirs(path, exist_ok=True)
        with open(config_path, "w") as f:
            toml.dump(config, f)
        return True
    except IOError as e:
        logger.error(f"Error saving configuration to {config_path}: {e}")
        logger.info("Please check file permissions and ensure the directory is writable.")
        return False

def load_settings(path=CONFIG_DIR):
    """Return the effective settings: defaults overlaid with aurora.toml."""
    settings = dict(DEFAULT_SETTINGS)
    settings.update(load_config(path))

    for key in ("workspace_dir", "bin_dir"):
        settings[key] = os.path.expanduser(str(settings[key]))

    try:
        settings["clone_depth"] = int(settings["clone_depth"])
    except (TypeError, ValueError):
        logger.warning(f"Invalid clone_depth '{settings['clone_depth']}', using {DEFAULT_SETTINGS['clone_depth']}.")
        settings["clone_depth"] = DEFAULT_SETTINGS["clone_depth"]

    if settings["makepkg"] not in MAKEPKG_MODES:
        logger.warning(f"Invalid makepkg mode '{settings['makepkg']}', expected one of {', '.join(MAKEPKG_MODES)}. Using 'auto'.")
        settings["makepkg"] = "auto"

    return settings
