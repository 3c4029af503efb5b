"""
Local Java process discovery.

This module lists the Java processes running on this host so the CLI can
show candidates and check a configured pid before attaching.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import psutil

logger = logging.getLogger(__name__)

JAVA_EXECUTABLES = ("java", "java.exe", "javaw", "javaw.exe")


@dataclass(frozen=True)
class JavaProcess:
    """Descriptor of a local Java process."""

    pid: int
    # Main class or jar, as the JDK tools display it.
    display_name: str
    # True if the current user may inspect the process.
    attachable: bool


def _display_name(cmdline: List[str]) -> str:
    """Return the main class or ``-jar`` argument of a java command line."""
    args = cmdline[1:]
    skip_next = False
    for i, arg in enumerate(args):
        if skip_next:
            skip_next = False
            continue
        if arg in ("-cp", "-classpath", "--class-path", "-p", "--module-path"):
            skip_next = True
            continue
        if arg == "-jar" and i + 1 < len(args):
            return args[i + 1]
        if arg in ("-m", "--module") and i + 1 < len(args):
            return args[i + 1]
        if arg.startswith("-"):
            continue
        return arg
    return ""


def _is_java(name: str, cmdline: List[str]) -> bool:
    if name in JAVA_EXECUTABLES:
        return True
    return bool(cmdline) and Path(cmdline[0]).name in JAVA_EXECUTABLES


def _is_attachable(proc: psutil.Process) -> bool:
    try:
        uids = proc.uids()
    except (psutil.AccessDenied, psutil.NoSuchProcess, AttributeError):
        return False
    if not hasattr(os, "geteuid"):
        return True
    euid = os.geteuid()
    return euid == 0 or uids.effective == euid


def list_java_processes() -> List[JavaProcess]:
    """List the Java processes running on this host.

    Processes that vanish or deny access while being inspected are skipped.
    """
    found: List[JavaProcess] = []
    for proc in psutil.process_iter(["pid", "name", "cmdline"]):
        try:
            proc_info = proc.as_dict(attrs=["pid", "name", "cmdline"])
            cmdline = proc_info["cmdline"] or []
            if not _is_java(proc_info["name"] or "", cmdline):
                continue
            found.append(JavaProcess(
                pid=proc_info["pid"],
                display_name=_display_name(cmdline),
                attachable=_is_attachable(proc),
            ))
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    logger.debug(f"Found {len(found)} local Java processes")
    return found


def find_java_process(pid: int) -> Optional[JavaProcess]:
    """Return the Java process with the given pid, or None."""
    for descriptor in list_java_processes():
        if descriptor.pid == pid:
            return descriptor
    return None
