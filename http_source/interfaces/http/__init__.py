"""
HTTP Interface

FastAPI application exposing the ingress endpoint.
"""

from .rest import create_app, main

__all__ = ["create_app", "main"]
