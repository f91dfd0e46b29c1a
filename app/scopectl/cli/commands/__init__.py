"""CLI commands for scopectl.

This package contains all subcommand implementations.
"""

from scopectl.cli.commands import check, config, devices, restore, scan

__all__ = ["check", "config", "devices", "restore", "scan"]
