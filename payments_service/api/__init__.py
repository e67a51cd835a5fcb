"""FastAPI application and routes."""
from .main import create_app, main

__all__ = ["create_app", "main"]
