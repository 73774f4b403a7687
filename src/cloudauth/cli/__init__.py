"""CLI framework for cloudauth."""
from __future__ import annotations

from cloudauth.cli.app import ExitCode
from cloudauth.cli.app import app
from cloudauth.cli.app import run_app

__all__ = ["app", "run_app", "ExitCode"]
