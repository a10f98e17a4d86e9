"""Business logic and service layer."""
from .pipeline import BackgroundRemovalPipeline

__all__ = ["BackgroundRemovalPipeline"]
