"""Router exports for the Shrine API."""
from . import health, shrine

__all__ = ["health", "shrine"]
