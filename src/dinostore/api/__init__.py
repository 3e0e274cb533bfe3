"""HTTP layer translating REST calls into repository operations."""

from dinostore.api.app import create_app

__all__ = ["create_app"]
