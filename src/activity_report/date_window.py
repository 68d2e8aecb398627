"""Resolution of the contribution window from explicit dates or a day count."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from .models import DateWindow

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 30

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse ``YYYY-MM-DD`` as midnight UTC, returning ``None`` when malformed."""
    if not value or not _DATE_PATTERN.match(value):
        return None

    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return None

    return parsed.replace(tzinfo=timezone.utc)


def resolve_date_window(
    from_date: Optional[str],
    to_date: Optional[str],
    days: int = DEFAULT_DAYS,
    now: Optional[datetime] = None,
) -> DateWindow:
    """Resolve the contribution window for a report run.

    Explicit dates win when both are well-formed ``YYYY-MM-DD`` calendar dates.
    Otherwise the window is the trailing ``days`` days ending at ``now``.
    Malformed explicit dates are not an error: they are logged and the day-count
    window is used instead.

    Args:
        from_date: Optional inclusive start date as ``YYYY-MM-DD``.
        to_date: Optional end date as ``YYYY-MM-DD``.
        days: Length of the trailing window used without explicit dates.
        now: Reference time for the trailing window; defaults to the current UTC time.

    Returns:
        The resolved ``DateWindow``.
    """
    start = _parse_date(from_date)
    end = _parse_date(to_date)

    if start is not None and end is not None:
        label = f"{from_date} to {to_date}"
        return DateWindow(
            start=start,
            end=end,
            file_label=f"{from_date}-to-{to_date}",
            log_label=label,
            column_label=label,
        )

    if from_date or to_date:
        logger.warning(
            "Ignoring explicit date range %r to %r; expected two YYYY-MM-DD dates. "
            "Falling back to the last %d days.",
            from_date,
            to_date,
            days,
        )

    end = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return DateWindow(
        start=end - timedelta(days=days),
        end=end,
        file_label=f"{days}-days",
        log_label=f"{days} days",
        column_label=f"<{days} days",
    )
