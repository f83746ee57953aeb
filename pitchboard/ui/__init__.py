"""
User interface package for the pitch board.

This package contains the Flask JSON API over the substitution engine.
"""
from .web_app import create_app, run_web_app, WebAppState

__all__ = ["create_app", "run_web_app", "WebAppState"]
