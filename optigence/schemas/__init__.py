"""Shared pydantic building blocks for API schemas."""

from optigence.schemas.base import CamelModel, FrozenCamelModel

__all__ = ["CamelModel", "FrozenCamelModel"]
