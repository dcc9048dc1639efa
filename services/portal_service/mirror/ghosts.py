"""Ghost detection between a device mirror and the activities table."""

from typing import Iterable

from pydantic import BaseModel


class GhostReport(BaseModel):
    local_only: list[str]
    db_only: list[str]
    local_count: int
    db_count: int


def find_ghosts(local_ids: Iterable[str], db_ids: Iterable[str]) -> GhostReport:
    """
    Compare activity ids known to a mirror with those in the database.

    ``local_only`` are ghosts (deleted or never saved server side);
    ``db_only`` are rows the device has not seen yet. Both are exact set
    differences, sorted.
    """
    local = {str(i) for i in local_ids}
    db = {str(i) for i in db_ids}
    return GhostReport(
        local_only=sorted(local - db),
        db_only=sorted(db - local),
        local_count=len(local),
        db_count=len(db),
    )
