"""Studio Calendar: a booking calendar for studio teams backed by Supabase."""

from __future__ import annotations

__all__ = ["main"]


def main() -> int:
    from .cli import main as cli_main

    return cli_main(["gui"])
