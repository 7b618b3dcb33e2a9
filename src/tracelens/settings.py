"""Runtime settings resolved from the environment.

Import as: import tracelens.settings
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeSettings:
    sync_hz: float = 10.0       # local state → worker sync rate
    handle_rows: int = 2        # details drag handle height, in terminal rows
    details_rows: int = 14      # default expanded details height, handle included


def _env_number(name: str, default, cast, minimum):
    raw = str(os.environ.get(name, "") or "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("ignoring %s=%r: not a valid %s", name, raw, cast.__name__)
        return default
    return max(minimum, value)


def load() -> RuntimeSettings:
    """Resolve settings from TRACELENS_* environment variables."""
    defaults = RuntimeSettings()
    handle_rows = _env_number("TRACELENS_HANDLE_ROWS", defaults.handle_rows, int, 1)
    details_rows = _env_number("TRACELENS_DETAILS_ROWS", defaults.details_rows, int, 1)
    return RuntimeSettings(
        sync_hz=_env_number("TRACELENS_SYNC_HZ", defaults.sync_hz, float, 0.1),
        handle_rows=handle_rows,
        # The default height always leaves room for the handle.
        details_rows=max(details_rows, handle_rows + 1),
    )
