from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from platformdirs import user_log_dir

APP_NAME = "studio-calendar"


def _log_dir() -> Path:
    configured = os.getenv("STUDIO_CALENDAR_LOG_DIR")
    if configured:
        return Path(configured)
    return Path(user_log_dir(APP_NAME, appauthor=False))


def configure_logging(*, level: Optional[str] = None) -> Path:
    """Send records to the console and to a dated file; returns the file path."""

    name = (level or os.getenv("STUDIO_CALENDAR_LOG_LEVEL", "INFO")).upper()
    resolved_level = getattr(logging, name, logging.INFO)
    log_dir = _log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"studio-calendar-{datetime.now(timezone.utc):%Y%m%d}.log"

    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler(), logging.FileHandler(log_path, encoding="utf-8")],
        force=True,
    )
    # supabase's http stack is chatty at INFO
    logging.getLogger("httpx").setLevel(max(resolved_level, logging.WARNING))
    return log_path
