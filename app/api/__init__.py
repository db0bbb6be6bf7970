# app/api/__init__.py
from .app_factory import create_app

__all__ = ["create_app"]
