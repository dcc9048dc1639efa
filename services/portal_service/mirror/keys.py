"""Key names of the browser-side mirror.

Every key carries a configurable prefix (``follies`` by default). The
``.v1`` keys are current; the unversioned ones are read for compatibility
and kept in sync on write.
"""

from libs.common.config import get_settings


class MirrorKeys:
    def __init__(self, prefix: str = "follies"):
        self.prefix = prefix

    def _key(self, name: str) -> str:
        return f"{self.prefix}.{name}"

    @property
    def activities(self) -> str:
        return self._key("activities.v1")

    @property
    def activities_legacy(self) -> str:
        return self._key("activities")

    @property
    def covers(self) -> str:
        return self._key("activityCovers.v1")

    @property
    def sessions(self) -> str:
        return self._key("activitySessions.v1")

    @property
    def calendar(self) -> str:
        return self._key("calendar.v1")

    @property
    def calendar_legacy(self) -> str:
        return self._key("calendar")

    @property
    def permissions(self) -> str:
        return self._key("perms.v1")

    @property
    def activity_keys(self) -> tuple[str, str]:
        return (self.activities, self.activities_legacy)

    @property
    def calendar_keys(self) -> tuple[str, str]:
        return (self.calendar, self.calendar_legacy)


def default_keys() -> MirrorKeys:
    return MirrorKeys(get_settings().MIRROR_KEY_PREFIX)
