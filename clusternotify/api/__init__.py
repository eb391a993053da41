"""clusternotify HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application that receives Pub/Sub push requests.

Usage
-----
Create and run the application::

    from clusternotify.api import create_app

    app = create_app()              # probes only
    app = create_app(dependencies)  # probes plus the push endpoint

Public API
----------
create_app
    Application factory that configures the Falcon ASGI app with health
    endpoints and, when a pipeline is provided, the push endpoint.
"""

from clusternotify.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
