"""CLI command modules for cloudauth."""
