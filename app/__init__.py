"""Silhouette cutout service."""
