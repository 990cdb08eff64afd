"""upm-dispatch: route package manifest pushes to the publish workflow.

GitHub push webhooks are authenticated, filtered for ``package.json``
changes, checked against the Repository Registry and, when the repository
is active, forwarded as a ``repository_dispatch`` event.
"""

__version__ = "0.1.0"
