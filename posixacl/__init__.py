"""POSIX.1e access control lists in memory: entries, validation, text, mode and xattr formats."""

__version__ = "2.3.2"