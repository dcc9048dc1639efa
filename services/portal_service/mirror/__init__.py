"""Reconciliation of browser-side mirrors with the database."""

from services.portal_service.mirror.cleanup import purge_activity
from services.portal_service.mirror.ghosts import GhostReport, find_ghosts
from services.portal_service.mirror.keys import MirrorKeys, default_keys
from services.portal_service.mirror.merge import (
    add_calendar_item,
    entity_id,
    local_activity_ids,
    merge_activities,
    mirror_saved_activity,
    mirror_session,
    read_activities,
)
from services.portal_service.mirror.perms import (
    permissions_for,
    remove_user_permissions,
    upsert_permissions,
)
from services.portal_service.mirror.store import MirrorStore

__all__ = [
    "GhostReport",
    "MirrorKeys",
    "MirrorStore",
    "add_calendar_item",
    "default_keys",
    "entity_id",
    "find_ghosts",
    "local_activity_ids",
    "merge_activities",
    "mirror_saved_activity",
    "mirror_session",
    "permissions_for",
    "purge_activity",
    "read_activities",
    "remove_user_permissions",
    "upsert_permissions",
]
