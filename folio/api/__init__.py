"""Folio HTTP API layer.

This package provides the Falcon ASGI application exposing the content
registry over HTTP.

Usage
-----
Create and run the application::

    from folio.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # with registry endpoints
"""

from folio.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
