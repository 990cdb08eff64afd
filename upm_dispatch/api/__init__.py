"""HTTP surface of the dispatcher.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application: health probes plus the GitHub webhook receiver.

Usage
-----
Create and run the application::

    from upm_dispatch.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # webhook receiver mounted

"""

from upm_dispatch.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
