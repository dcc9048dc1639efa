"""Merge and deduplication of mirrored activities, sessions and calendar items."""

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional
from zoneinfo import ZoneInfo

from libs.common.config import get_settings

from services.portal_service.mirror.store import MirrorStore


def entity_id(obj: Any) -> Optional[str]:
    """First non-empty of ``id``, ``uuid`` or ``_id``, as a string."""
    if not isinstance(obj, Mapping):
        return None
    for field in ("id", "uuid", "_id"):
        value = obj.get(field)
        if value is not None and str(value) != "":
            return str(value)
    return None


def _dedupe(*lists: Iterable[Any]) -> list[dict]:
    # earlier lists win
    seen: set[str] = set()
    result: list[dict] = []
    for items in lists:
        for item in items:
            aid = entity_id(item)
            if aid is None or aid in seen:
                continue
            seen.add(aid)
            result.append({**item, "id": aid})
    return result


def read_activities(store: MirrorStore) -> list[dict]:
    return _dedupe(
        store.read_list(store.keys.activities),
        store.read_list(store.keys.activities_legacy),
    )


def local_activity_ids(store: MirrorStore) -> set[str]:
    return {a["id"] for a in read_activities(store)}


def _write_activities(store: MirrorStore, activities: list[dict]) -> bool:
    results = [store.write_json(key, activities) for key in store.keys.activity_keys]
    return all(results)


def mirror_saved_activity(store: MirrorStore, row: Mapping[str, Any]) -> list[dict]:
    """Put a freshly saved DB row at the head of both activity lists."""
    saved_id = entity_id(row)
    current = store.read_list(store.keys.activities)
    rest = [a for a in current if saved_id is None or entity_id(a) != saved_id]
    merged = [dict(row), *rest]
    _write_activities(store, merged)
    return merged


def merge_activities(store: MirrorStore, db_rows: Iterable[Mapping[str, Any]]) -> list[dict]:
    """
    Overlay database rows onto the mirrored activity list.

    Matching entries are updated field by field from the database; rows only
    the database knows are appended; entries only the mirror knows are kept.
    Those are ghosts and are cleaned separately, never by a sync.
    """
    local = read_activities(store)
    by_id = {a["id"]: a for a in local}
    order = [a["id"] for a in local]

    for row in db_rows:
        rid = entity_id(row)
        if rid is None:
            continue
        if rid in by_id:
            by_id[rid] = {**by_id[rid], **dict(row), "id": rid}
        else:
            by_id[rid] = {**dict(row), "id": rid}
            order.append(rid)

    merged = [by_id[i] for i in order]
    _write_activities(store, merged)
    return merged


def _normalize_start(value: Any) -> tuple[str, str]:
    if isinstance(value, datetime):
        moment = value
    else:
        moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    local = moment.astimezone(ZoneInfo(get_settings().TIMEZONE))
    start = utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return start, local.replace(tzinfo=None).isoformat(timespec="seconds")


def _as_text(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else value


def _related(item: Mapping[str, Any]) -> Optional[str]:
    return item.get("relatedId") or item.get("id")


def add_calendar_item(store: MirrorStore, item: Mapping[str, Any]) -> dict:
    """
    Append a calendar item to both calendar keys.

    ``date`` (or ``start``) is normalized to a UTC ``start`` plus a
    ``start_local`` in the organization's timezone. A key that already holds
    an item with the same title, start and related id is left untouched.
    """
    new_item = {k: v for k, v in item.items() if k != "date"}
    when = item.get("date", item.get("start"))
    if when is not None:
        try:
            new_item["start"], new_item["start_local"] = _normalize_start(when)
        except (ValueError, OverflowError):
            # unparseable or out-of-range dates are stored as given
            new_item["start"] = str(when)

    for key in store.keys.calendar_keys:
        existing = store.read_list(key)
        duplicate = any(
            isinstance(e, Mapping)
            and e.get("title") == new_item.get("title")
            and e.get("start") == new_item.get("start")
            and _related(e) == _related(new_item)
            for e in existing
        )
        if not duplicate:
            existing.append(new_item)
            store.write_json(key, existing)
    return new_item


def mirror_session(
    store: MirrorStore, session: Mapping[str, Any], activity_name: str = ""
) -> None:
    """Record a session under its activity and project it onto the calendar."""
    activity_id = str(session.get("activity_id") or "")
    sessions = store.read_dict(store.keys.sessions)
    bucket = sessions.get(activity_id)
    if not isinstance(bucket, list):
        bucket = []
    sid = entity_id(session)
    bucket = [dict(session), *(s for s in bucket if entity_id(s) != sid)]
    sessions[activity_id] = bucket
    store.write_json(store.keys.sessions, sessions)

    title = session.get("title") or ""
    label = f"{activity_name}: {title}" if activity_name else title
    for member_id in session.get("target_member_ids") or []:
        add_calendar_item(
            store,
            {
                "id": f"{sid}:{member_id}",
                "title": label,
                "date": session.get("start"),
                "end": _as_text(session.get("end")),
                "type": "session",
                "source": "session",
                "session_id": sid,
                "activity_id": activity_id,
                "member_id": member_id,
            },
        )
