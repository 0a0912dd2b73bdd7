from .range_cache import RangeEventCache, Snapshot, sort_events

__all__ = ["RangeEventCache", "Snapshot", "sort_events"]
