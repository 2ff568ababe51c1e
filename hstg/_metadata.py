"""Project version, read by the runtime and by the packaging configuration."""

__version__ = "1.0.0"
