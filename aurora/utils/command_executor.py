import subprocess
import shlex
from ..cli_logger import logger

def run_shell_command(command, cwd=None, env=None, capture_output=False, quiet=True):
    """
    Executes an external command and waits for it to exit.

    Args:
        command (list): The command to execute as a list of strings.
        cwd (str, optional): The working directory for the command. The
            current process directory is never changed.
        env (dict, optional): A dictionary of environment variables.
        capture_output (bool): If True, stdout and stderr are captured and
            returned as text.
        quiet (bool): When not capturing, discard stdout. stderr always
            goes to the terminal untouched.

    Returns:
        A tuple (stdout, stderr, return_code). stdout and stderr are empty
        strings unless capture_output is True. A command that cannot be
        started returns -1.
    """
    logger.debug(f"Running: {shlex.join(command)}" + (f" (in {cwd})" if cwd else ""))
    try:
        if capture_output:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                env=env,
                check=False,
                cwd=cwd
            )
            return result.stdout, result.stderr, result.returncode

        result = subprocess.run(
            command,
            stdout=subprocess.DEVNULL if quiet else None,
            env=env,
            check=False,
            cwd=cwd
        )
        return "", "", result.returncode

    except FileNotFoundError as e:
        logger.error(f"Command not found: {e.filename or command[0]}")
        return "", str(e), -1
    except PermissionError as e:
        logger.error(f"Permission denied running {command[0]}: {e}")
        return "", str(e), -1
