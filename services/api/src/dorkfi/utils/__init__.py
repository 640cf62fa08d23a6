"""Utility modules."""

from services.api.src.dorkfi.utils.timestamps import truncate_to_hour

__all__ = ["truncate_to_hour"]
