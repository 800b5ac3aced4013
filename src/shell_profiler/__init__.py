"""Manage shell aliases and functions, synced to a remote profile."""

__version__ = "0.3.0"
