# app/modules/scaler/__init__.py
"""Print-size scaling."""
from . import process
from .config import settings

__all__ = ["process", "settings"]
