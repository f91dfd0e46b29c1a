"""Core infrastructure: XDG paths, settings and logging setup."""
