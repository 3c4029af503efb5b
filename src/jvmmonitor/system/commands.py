"""
Command execution utilities.

This module provides the subprocess helper used by command-based counter
sources and the dependency check for the JDK's ``jcmd`` tool.
"""

import logging
import shutil
import subprocess
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


def run_command(command: List[str], timeout: Optional[float] = None) -> Tuple[int, str, str]:
    """Execute a command and capture its output with robust error handling.

    Args:
        command: The command and its arguments.
        timeout: Seconds to wait for the command before giving up.

    Returns:
        Tuple of (return_code, stdout_string, stderr_string).
        return_code is -1 when the command could not be run or timed out.

    Note:
        Uses UTF-8 encoding with error replacement for robust text handling.
    """
    logger.debug(f"Executing command: {command}")
    try:
        process = subprocess.run(
            command,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
        return process.returncode, process.stdout, process.stderr
    except FileNotFoundError as e:
        logger.error(f"Command not found: {command[0]}: {type(e).__name__}: {e}")
        return -1, "", f"Error: Command not found '{command[0]}'"
    except subprocess.TimeoutExpired:
        logger.warning(f"Command timed out after {timeout}s: {command}")
        return -1, "", f"Error: Command timed out after {timeout}s"
    except OSError as e:
        logger.error(f"Unexpected error while running command {command}: {type(e).__name__}: {e}")
        return -1, "", f"An unexpected error occurred: {e}"


def check_jcmd_installed(jcmd_path: str = "jcmd") -> bool:
    """Check if the ``jcmd`` tool is available.

    Returns:
        True if ``jcmd_path`` resolves to an executable, False otherwise.

    Note:
        jcmd ships with the JDK (not the JRE) and is required by the jcmd
        counter source.
    """
    return shutil.which(jcmd_path) is not None
