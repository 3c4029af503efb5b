"""
Command-line interface for the jvmmonitor package.

This module provides the main CLI entry point for the monitoring agent.
"""

from .main import main, main_cli

__all__ = [
    "main",
    "main_cli",
]
