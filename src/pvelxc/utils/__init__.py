"""Shared helpers for command execution, logging and templating."""
