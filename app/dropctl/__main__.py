"""Allow ``python -m dropctl``."""

from dropctl.cli.main import app

app()
