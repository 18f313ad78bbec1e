"""Model registry: cached metadata for resource model classes."""

from .model_registry import ModelInfoRegistry

__all__ = ["ModelInfoRegistry"]
