"""CLI package for dropctl.

This package contains the Typer application for the ``dr`` command.
"""

from dropctl.cli.main import app

__all__ = ["app"]
