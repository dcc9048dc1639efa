"""Mirrored permission records (flat list shape).

Each row is ``{"userKey": ..., "modules": {...}, "programs": {...}}`` where
``userKey`` is the auth user id or an email address.
"""

from typing import Any, Mapping, Optional

from services.portal_service.mirror.store import MirrorStore


def _rows(store: MirrorStore) -> list[dict]:
    return [r for r in store.read_list(store.keys.permissions) if isinstance(r, dict)]


def permissions_for(store: MirrorStore, user_key: Optional[str]) -> Optional[dict]:
    if not user_key:
        return None
    for row in _rows(store):
        if row.get("userKey") == user_key:
            return row
    return None


def upsert_permissions(store: MirrorStore, row: Mapping[str, Any]) -> list[dict]:
    rows = _rows(store)
    for index, existing in enumerate(rows):
        if existing.get("userKey") == row.get("userKey"):
            rows[index] = dict(row)
            break
    else:
        rows.insert(0, dict(row))
    store.write_json(store.keys.permissions, rows)
    return rows


def remove_user_permissions(store: MirrorStore, user_key: str) -> list[dict]:
    rows = [r for r in _rows(store) if r.get("userKey") != user_key]
    store.write_json(store.keys.permissions, rows)
    return rows
