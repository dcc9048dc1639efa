"""Removal of one activity from every mirrored collection."""

from typing import Any

from libs.common.logging import get_logger

from services.portal_service.mirror.merge import entity_id
from services.portal_service.mirror.store import MirrorStore

logger = get_logger(__name__)


def _same(value: Any, activity_id: str) -> bool:
    return str(value if value is not None else "") == activity_id


def _remove_from_list(store: MirrorStore, key: str, field: str, activity_id: str) -> int:
    items = store.read_list(key)
    kept = [
        x
        for x in items
        if not (
            isinstance(x, dict)
            and _same(entity_id(x) if field == "id" else x.get(field), activity_id)
        )
    ]
    removed = len(items) - len(kept)
    if removed:
        store.write_json(key, kept)
    return removed


def _remove_from_object(store: MirrorStore, key: str, activity_id: str) -> int:
    obj = store.read_dict(key)
    if activity_id not in obj:
        return 0
    del obj[activity_id]
    store.write_json(key, obj)
    return 1


def _remove_permissions(store: MirrorStore, activity_id: str) -> int:
    key = store.keys.permissions
    raw = store.read_json(key)
    if not raw:
        return 0

    if isinstance(raw, list):
        kept = [
            r for r in raw if not (isinstance(r, dict) and _same(r.get("activityId"), activity_id))
        ]
        removed = len(raw) - len(kept)
        if removed:
            store.write_json(key, kept)
        return removed

    if not isinstance(raw, dict):
        return 0

    removed = 0
    per_offer = raw.get("perOffer")
    if isinstance(per_offer, dict) and activity_id in per_offer:
        del per_offer[activity_id]
        removed += 1

    by_user = raw.get("byUser")
    if isinstance(by_user, dict):
        for grants in by_user.values():
            if isinstance(grants, dict) and activity_id in grants:
                del grants[activity_id]
                removed += 1

    entries = raw.get("entries")
    if isinstance(entries, list):
        kept = [
            r
            for r in entries
            if not (isinstance(r, dict) and _same(r.get("activityId"), activity_id))
        ]
        removed += len(entries) - len(kept)
        raw["entries"] = kept

    if removed:
        store.write_json(key, raw)
    return removed


def purge_activity(store: MirrorStore, activity_id: str) -> dict[str, int]:
    """
    Drop an activity from the mirror: both activity lists, its cover, its
    session list, its calendar entries and every permission grant for it.

    Returns the number of removed items per collection. All writes are
    best-effort.
    """
    aid = str(activity_id)
    keys = store.keys
    removed = {
        "activities": sum(_remove_from_list(store, k, "id", aid) for k in keys.activity_keys),
        "covers": _remove_from_object(store, keys.covers, aid),
        "sessions": _remove_from_object(store, keys.sessions, aid),
        "calendar": sum(
            _remove_from_list(store, k, "activity_id", aid) for k in keys.calendar_keys
        ),
        "permissions": _remove_permissions(store, aid),
    }
    logger.info(
        "Purged activity from mirror",
        extra={"extra_fields": {"activity_id": aid, **removed}},
    )
    return removed
