"""Core application modules."""

from .security import JWTManager, Principal

__all__ = ["JWTManager", "Principal"]
