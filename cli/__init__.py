"""Command line client for the sensor group logs service.

The Typer application lives in ``cli.app``; it is not re-exported here so
that tests can patch attributes on the ``cli.app`` module path.
"""

__all__: list[str] = []
