"""Flask transport for the analyzer.

Run locally with::

    flask --app paygrid.api:create_app run --port 3000
"""

from .app import create_app

__all__ = ["create_app"]
