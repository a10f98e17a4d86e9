# app/modules/remover/u2net/__init__.py
"""U2-Net salient object segmentation."""
from . import process

__all__ = ["process"]
