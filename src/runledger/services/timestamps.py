"""Timestamp defaulting shared by the upsert-style operations."""

from typing import Optional


def resolve_timestamp(supplied: str, now: str, preserved: Optional[str] = None) -> str:
    """Pick the timestamp to store.

    An empty ``supplied`` value means the caller did not provide one. In that
    case the ``preserved`` value of an existing row is kept when given,
    otherwise the transaction timestamp ``now`` is used.
    """
    if supplied:
        return supplied
    if preserved is not None:
        return preserved
    return now
