"""
System interaction utilities.

- Command execution for command-based counter sources
- Discovery of local Java processes
"""

from .commands import check_jcmd_installed, run_command
from .processes import JavaProcess, find_java_process, list_java_processes

__all__ = [
    "check_jcmd_installed",
    "run_command",
    "JavaProcess",
    "find_java_process",
    "list_java_processes",
]
