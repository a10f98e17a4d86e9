# app/modules/mask/__init__.py
"""Mask resampling, edge refinement and alpha compositing."""
from . import process
from .config import settings

__all__ = ["process", "settings"]
