"""HTTP API for stepping bfvm programs instruction by instruction."""

from .app import create_app
from .session import SessionStore

__all__ = ["create_app", "SessionStore"]
