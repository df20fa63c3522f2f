"""
Web UI Module - FastAPI-based web interface
===========================================

This module provides a web interface for the pattern matcher:
- Question page and ask endpoint
- Pattern listing, creation and reload
- Sample questions and category statistics
"""

from .app import create_app, run_app
from .routes import router

__all__ = [
    "create_app",
    "run_app",
    "router",
]
