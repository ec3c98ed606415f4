"""HTTP API for family networks, citations and cache status."""

from kalvian_roots.api.app import create_app

__all__ = ["create_app"]
