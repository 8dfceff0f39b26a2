"""Clock helpers shared by the registry and its hosts."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def unix_seconds(now: dt.datetime | None = None) -> int:
    """Return whole seconds since the epoch for ``now`` (default: current time).

    Registry timestamps are integer seconds, so sub-second precision is
    truncated rather than rounded.
    """
    moment = utcnow() if now is None else now
    return int(moment.timestamp())
