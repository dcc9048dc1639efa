"""Hard delete of an activity and everything that hangs off it.

Dependents are removed table by table, each in its own savepoint, before the
activity row itself. A dependent table (or column) that a deployment does
not have is skipped, so the delete works on partial schemas and can be
repeated. Nothing already deleted is restored when a later step fails.
"""

import re
from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal_service.mirror import MirrorStore, purge_activity
from services.portal_service.storage import StorageService

logger = get_logger(__name__)

# (table, where clause); :aid is the activity id
DEPENDENT_DELETES: list[tuple[str, str]] = [
    ("enrollments", "activity_id = :aid"),
    ("sessions", "activity_id = :aid"),
    ("calendar_entries", "activity_id = :aid"),
    ("messages", "activity_id = :aid"),
    ("activity_files", "activity_id = :aid"),
    (
        "activity_guest_children",
        "guest_id IN (SELECT id FROM activity_guests WHERE activity_id = :aid)",
    ),
    ("activity_guests", "activity_id = :aid"),
    ("activity_volunteers", "activity_id = :aid"),
    ("activity_tasks", "activity_id = :aid"),
    ("member_activity_history", "activity_id = :aid"),
]

IGNORABLE_ERRORS = [
    re.compile(r"relation .* does not exist", re.IGNORECASE),
    re.compile(r"column .* does not exist", re.IGNORECASE),
    re.compile(r"does not exist", re.IGNORECASE),
    re.compile(r"could not find the table .* in the schema cache", re.IGNORECASE),
    re.compile(r"no such table", re.IGNORECASE),
    re.compile(r"no such column", re.IGNORECASE),
]


class CascadeDeleteError(Exception):
    """A dependent or the activity row could not be deleted."""

    def __init__(self, step: str, message: str):
        self.step = step
        self.message = message
        super().__init__(f"{step}: {message}")


def is_ignorable(message: str) -> bool:
    return any(p.search(message or "") for p in IGNORABLE_ERRORS)


async def safe_delete(db: AsyncSession, table: str, where: str, params: dict) -> int:
    """
    Delete matching rows from ``table``; missing tables or columns count as
    zero rows deleted. Any other database error is raised as
    ``CascadeDeleteError``.
    """
    try:
        async with db.begin_nested():
            result = await db.execute(text(f"DELETE FROM {table} WHERE {where}"), params)
    except DBAPIError as exc:
        message = str(exc.orig) if exc.orig is not None else str(exc)
        if is_ignorable(message):
            logger.info(
                "Skipping missing table in cascade delete",
                extra={"extra_fields": {"table": table, "error": message}},
            )
            return 0
        raise CascadeDeleteError(table, message) from exc
    return result.rowcount or 0


async def hard_delete_activity(
    db: AsyncSession,
    activity_id: str,
    storage: Optional[StorageService] = None,
    mirror: Optional[MirrorStore] = None,
) -> dict:
    """
    Permanently delete an activity with its dependents, uploaded files and
    mirrored copies. Returns row counts per table. Deleting an unknown id
    succeeds.
    """
    params = {"aid": activity_id}
    deleted: dict[str, int] = {}

    for table, where in DEPENDENT_DELETES:
        deleted[table] = await safe_delete(db, table, where, params)
        # committed per step: a later failure leaves earlier deletes in place
        await db.commit()

    files_removed = 0
    if storage is not None:
        bucket = get_settings().ACTIVITY_FILES_BUCKET
        try:
            files_removed = await storage.remove_prefix(bucket, activity_id)
        except Exception as exc:
            logger.warning(
                "Could not remove activity files from storage",
                extra={"extra_fields": {"activity_id": activity_id, "error": str(exc)}},
            )

    try:
        result = await db.execute(text("DELETE FROM activities WHERE id = :aid"), params)
    except DBAPIError as exc:
        message = str(exc.orig) if exc.orig is not None else str(exc)
        raise CascadeDeleteError("activities", message) from exc
    deleted["activities"] = result.rowcount or 0

    await db.commit()

    if mirror is not None:
        purge_activity(mirror, activity_id)

    logger.info(
        "Hard deleted activity",
        extra={
            "extra_fields": {
                "activity_id": activity_id,
                "files_removed": files_removed,
                **deleted,
            }
        },
    )
    return {"deleted": deleted, "files_removed": files_removed}
