"""FastAPI application exposing project session endpoints."""

from .app import create_app
from .settings import SessionApiSettings

__all__ = ["create_app", "SessionApiSettings"]
