"""Liveness and readiness probe resources.

Usage
-----
Import health resources for route registration::

    from upm_dispatch.api.health.resources import HealthResource, ReadyResource
"""
