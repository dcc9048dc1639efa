import json
from typing import Any, MutableMapping, Optional

from libs.common.logging import get_logger

from services.portal_service.mirror.keys import MirrorKeys, default_keys

logger = get_logger(__name__)


class MirrorStore:
    """
    JSON view over a string key/value mapping (a device's local storage).

    Reads fall back to a default on missing or malformed values. Writes are
    best-effort: a value that cannot be encoded, or a backend that refuses
    the write, is logged and reported as ``False``, never raised.
    """

    def __init__(
        self,
        data: Optional[MutableMapping[str, str]] = None,
        keys: Optional[MirrorKeys] = None,
    ):
        self.data = data if data is not None else {}
        self.keys = keys or default_keys()

    def read_json(self, key: str, default: Any = None) -> Any:
        raw = self.data.get(key)
        if raw is None or raw == "":
            return default
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            return default

    def read_list(self, key: str) -> list:
        value = self.read_json(key, [])
        return value if isinstance(value, list) else []

    def read_dict(self, key: str) -> dict:
        value = self.read_json(key, {})
        return value if isinstance(value, dict) else {}

    def write_json(self, key: str, value: Any) -> bool:
        try:
            self.data[key] = json.dumps(value)
        except Exception as exc:
            logger.warning(
                "Mirror write failed",
                extra={"extra_fields": {"key": key, "error": str(exc)}},
            )
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            self.data.pop(key, None)
        except Exception as exc:
            logger.warning(
                "Mirror remove failed",
                extra={"extra_fields": {"key": key, "error": str(exc)}},
            )
            return False
        return True

    def snapshot(self) -> dict[str, str]:
        return dict(self.data)
