"""API routers for CellarBook."""

from cellarbook.routers import catalog, wines

__all__ = ["catalog", "wines"]
