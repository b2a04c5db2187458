"""pagelog HTTP host — FastAPI app that records its own request cycles.

Usage::

    from pagelog.api import create_app

    app = create_app()
"""

from pagelog.api.app import create_app, create_server

__all__ = ["create_app", "create_server"]
