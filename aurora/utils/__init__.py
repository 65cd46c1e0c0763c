from .command_executor import run_shell_command
from .file_manager import (
    download_and_extract,
    extract,
    prepare_workspace,
    purge_build_dir,
    build_dir_for,
)
