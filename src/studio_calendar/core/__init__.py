"""Pure scheduling rules: time-range normalization and overlap detection."""

from .conflicts import find_conflicts, has_overlap
from .time_range import (
    TimeRange,
    clamp_end,
    default_range,
    format_boundary,
    normalize,
    parse_boundary_input,
    start_of_day,
    toggle_all_day,
    with_end_input,
    with_start_input,
)

__all__ = [
    "TimeRange",
    "clamp_end",
    "default_range",
    "find_conflicts",
    "format_boundary",
    "has_overlap",
    "normalize",
    "parse_boundary_input",
    "start_of_day",
    "toggle_all_day",
    "with_end_input",
    "with_start_input",
]
