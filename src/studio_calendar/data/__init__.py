"""Data access layer."""

from __future__ import annotations

from .cache.range_cache import RangeEventCache
from .supabase import SupabaseGateway, SupabaseNotInitializedError, SupabaseSessionMissingError

__all__ = [
    "RangeEventCache",
    "SupabaseGateway",
    "SupabaseNotInitializedError",
    "SupabaseSessionMissingError",
]
