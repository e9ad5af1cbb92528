"""Router exports for FastAPI composition."""

from . import health, rpc

__all__ = ["health", "rpc"]
