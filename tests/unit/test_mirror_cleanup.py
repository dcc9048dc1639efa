"""Unit tests for purging an activity from a mirror, ghosts and permission rows."""

import json

from services.portal_service.mirror import (
    MirrorKeys,
    MirrorStore,
    find_ghosts,
    permissions_for,
    purge_activity,
    remove_user_permissions,
    upsert_permissions,
)

KEYS = MirrorKeys("follies")


def _populated_store(permissions) -> MirrorStore:
    data = {
        KEYS.activities: json.dumps([{"id": "a1"}, {"id": "a2"}]),
        KEYS.activities_legacy: json.dumps([{"uuid": "a1"}]),
        KEYS.covers: json.dumps({"a1": "cover-1.png", "a2": "cover-2.png"}),
        KEYS.sessions: json.dumps({"a1": [{"id": "s1"}], "a2": []}),
        KEYS.calendar: json.dumps(
            [{"id": "c1", "activity_id": "a1"}, {"id": "c2", "activity_id": "a2"}]
        ),
        KEYS.calendar_legacy: json.dumps([{"id": "c1", "activity_id": "a1"}]),
        KEYS.permissions: json.dumps(permissions),
    }
    return MirrorStore(data, KEYS)


def _read(store: MirrorStore, key: str):
    return json.loads(store.data[key])


# ---------------------------------------------------------------------------
# purge_activity
# ---------------------------------------------------------------------------


def test_purge_removes_activity_everywhere_keyed_permissions():
    permissions = {
        "perOffer": {"a1": {"leader": "edit"}, "a2": {"leader": "view"}},
        "byUser": {"u1": {"a1": "edit"}, "u2": {"a2": "view"}},
        "entries": [{"activityId": "a1"}, {"activityId": "a2"}],
    }
    store = _populated_store(permissions)

    removed = purge_activity(store, "a1")

    assert removed == {
        "activities": 2,
        "covers": 1,
        "sessions": 1,
        "calendar": 2,
        "permissions": 3,
    }
    assert _read(store, KEYS.activities) == [{"id": "a2"}]
    assert _read(store, KEYS.activities_legacy) == []
    assert _read(store, KEYS.covers) == {"a2": "cover-2.png"}
    assert _read(store, KEYS.sessions) == {"a2": []}
    assert _read(store, KEYS.calendar) == [{"id": "c2", "activity_id": "a2"}]
    assert _read(store, KEYS.calendar_legacy) == []
    assert _read(store, KEYS.permissions) == {
        "perOffer": {"a2": {"leader": "view"}},
        "byUser": {"u1": {}, "u2": {"a2": "view"}},
        "entries": [{"activityId": "a2"}],
    }


def test_purge_flat_permission_list():
    store = _populated_store(
        [{"userKey": "u1", "activityId": "a1"}, {"userKey": "u1", "modules": {"stats": "view"}}]
    )
    removed = purge_activity(store, "a1")

    assert removed["permissions"] == 1
    assert _read(store, KEYS.permissions) == [{"userKey": "u1", "modules": {"stats": "view"}}]


def test_purge_leaves_untouched_values_alone():
    store = _populated_store([{"userKey": "u1", "modules": {}}])
    before = store.snapshot()

    removed = purge_activity(store, "unknown")

    assert set(removed.values()) == {0}
    assert store.snapshot() == before


def test_purge_on_empty_mirror_is_a_no_op():
    store = MirrorStore({}, KEYS)
    assert set(purge_activity(store, "a1").values()) == {0}
    assert store.data == {}


# ---------------------------------------------------------------------------
# find_ghosts
# ---------------------------------------------------------------------------


def test_ghosts_are_exact_set_differences():
    report = find_ghosts(["b", "a", "b", "g"], ["b", "c"])
    assert report.local_only == ["a", "g"]
    assert report.db_only == ["c"]
    assert report.local_count == 3
    assert report.db_count == 2


def test_no_ghosts_when_in_sync():
    report = find_ghosts({"x"}, ["x"])
    assert report.local_only == [] and report.db_only == []


# ---------------------------------------------------------------------------
# Permission rows
# ---------------------------------------------------------------------------


def test_upsert_inserts_new_rows_first_and_replaces_existing():
    store = MirrorStore({}, KEYS)
    upsert_permissions(store, {"userKey": "u1", "modules": {"members": "view"}})
    upsert_permissions(store, {"userKey": "u2", "modules": {}})
    upsert_permissions(store, {"userKey": "u1", "modules": {"members": "edit"}})

    rows = _read(store, KEYS.permissions)
    assert [r["userKey"] for r in rows] == ["u2", "u1"]
    assert permissions_for(store, "u1")["modules"] == {"members": "edit"}
    assert permissions_for(store, None) is None


def test_remove_user_permissions():
    store = MirrorStore({}, KEYS)
    upsert_permissions(store, {"userKey": "u1"})
    upsert_permissions(store, {"userKey": "u2"})

    rows = remove_user_permissions(store, "u1")

    assert [r["userKey"] for r in rows] == ["u2"]
    assert permissions_for(store, "u1") is None
