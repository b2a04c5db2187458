"""
CLI layer for pagelog.

Entry point::

    pagelog --help
"""

from pagelog.cli.app import app

__all__ = ["app"]
