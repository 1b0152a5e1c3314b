"""Run only the tests impacted by code changes, as computed by Parasoft Selenic."""

__version__ = "0.1.0"
