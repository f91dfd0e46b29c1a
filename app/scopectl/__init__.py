"""scopectl - symlink scope and device boundary guards for backup and restore."""

__version__ = "0.1.0"
