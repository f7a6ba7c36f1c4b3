"""Vendor administration side-channels, outside the generation path."""

from .ollama import OllamaAdmin, PullableModel, PullResult

__all__ = ["OllamaAdmin", "PullableModel", "PullResult"]
