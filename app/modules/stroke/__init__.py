# app/modules/stroke/__init__.py
"""Dual silhouette stroke."""
from . import process
from .config import settings

__all__ = ["process", "settings"]
