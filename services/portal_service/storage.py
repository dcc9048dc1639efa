"""Object storage for activity attachments and profile photos.

Two backends share one interface: Supabase Storage buckets (deployments)
and a directory tree on local disk (development and tests). The Supabase
client is synchronous, so its calls run in a worker thread.
"""

import asyncio
import json
import re
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import Any, Optional, Tuple

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from PIL import Image

logger = get_logger(__name__)

MANIFEST_NAME = "manifest.json"
MAX_NAME_LENGTH = 180
AVATAR_SIZE = (512, 512)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_file_name(name: str) -> str:
    """Restrict an upload name to ``[A-Za-z0-9._-]`` and 180 characters."""
    cleaned = _UNSAFE_CHARS.sub("_", name or "").strip("_")
    return (cleaned or "file")[:MAX_NAME_LENGTH]


def manifest_path(activity_id: str) -> str:
    return f"{activity_id}/{MANIFEST_NAME}"


def guess_category(mime: Optional[str]) -> str:
    mime = (mime or "").lower()
    if mime.startswith("image/"):
        return "image"
    if mime.startswith("audio/"):
        return "audio"
    if mime.startswith("text/") or mime in ("application/pdf", "application/json"):
        return "text"
    return "other"


class StorageService:
    """Bucket storage with a ``supabase`` or ``local`` backend."""

    def __init__(
        self,
        backend: str = "supabase",
        client: Any = None,
        base_dir: Optional[str] = None,
    ):
        self.backend = backend
        if backend == "supabase":
            if client is None:
                from libs.common.supabase import get_supabase_admin_client

                client = get_supabase_admin_client()
            self.client = client
        elif backend == "local":
            self.base_dir = Path(base_dir or get_settings().LOCAL_STORAGE_DIR)
        else:
            raise ValueError(f"Unknown storage backend: {backend}")

    # ------------------------------------------------------------------
    # Local helpers
    # ------------------------------------------------------------------

    def _local_path(self, bucket: str, path: str) -> Path:
        root = (self.base_dir / bucket).resolve()
        target = (root / path).resolve()
        if root != target and root not in target.parents:
            raise ValueError(f"Path escapes bucket: {path}")
        return target

    # ------------------------------------------------------------------
    # Bucket operations
    # ------------------------------------------------------------------

    async def ensure_bucket(self, bucket: str, public: bool = False) -> None:
        if self.backend == "local":
            (self.base_dir / bucket).mkdir(parents=True, exist_ok=True)
            return

        buckets = await asyncio.to_thread(self.client.storage.list_buckets)
        names = {getattr(b, "name", None) or getattr(b, "id", None) for b in buckets}
        if bucket not in names:
            await asyncio.to_thread(
                self.client.storage.create_bucket, bucket, options={"public": public}
            )
            logger.info(
                "Created storage bucket",
                extra={"extra_fields": {"bucket": bucket, "public": public}},
            )

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> str:
        if self.backend == "local":
            target = self._local_path(bucket, path)
            if target.exists() and not upsert:
                raise FileExistsError(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            return path

        await asyncio.to_thread(
            self.client.storage.from_(bucket).upload,
            path=path,
            file=data,
            file_options={"content-type": content_type, "upsert": str(upsert).lower()},
        )
        return path

    async def download(self, bucket: str, path: str) -> bytes:
        if self.backend == "local":
            target = self._local_path(bucket, path)
            if not target.is_file():
                raise FileNotFoundError(path)
            return target.read_bytes()
        return await asyncio.to_thread(self.client.storage.from_(bucket).download, path)

    async def remove(self, bucket: str, paths: list[str]) -> None:
        if not paths:
            return
        if self.backend == "local":
            for path in paths:
                self._local_path(bucket, path).unlink(missing_ok=True)
            return
        await asyncio.to_thread(self.client.storage.from_(bucket).remove, paths)

    async def list_paths(self, bucket: str, prefix: str) -> list[str]:
        """Paths of the objects directly under ``prefix``."""
        prefix = prefix.strip("/")
        if self.backend == "local":
            folder = self._local_path(bucket, prefix)
            if not folder.is_dir():
                return []
            return sorted(f"{prefix}/{p.name}" for p in folder.iterdir() if p.is_file())

        entries = await asyncio.to_thread(self.client.storage.from_(bucket).list, prefix)
        return [f"{prefix}/{e['name']}" for e in entries or [] if e.get("name")]

    async def remove_prefix(self, bucket: str, prefix: str) -> int:
        # never empty the bucket root
        if not prefix.strip("/"):
            return 0
        paths = await self.list_paths(bucket, prefix)
        await self.remove(bucket, paths)
        return len(paths)

    async def signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        if self.backend == "local":
            self._local_path(bucket, path)
            expires = int(utc_now().timestamp()) + expires_in
            return f"/storage/{bucket}/{path}?expires={expires}"

        result = await asyncio.to_thread(
            self.client.storage.from_(bucket).create_signed_url, path, expires_in
        )
        url = result.get("signedURL") or result.get("signedUrl")
        if not url:
            raise RuntimeError(f"No signed URL returned for {path}")
        return url

    async def public_url(self, bucket: str, path: str) -> str:
        if self.backend == "local":
            return f"/storage/{bucket}/{path}"
        return await asyncio.to_thread(self.client.storage.from_(bucket).get_public_url, path)

    # ------------------------------------------------------------------
    # Activity file manifest
    # ------------------------------------------------------------------

    async def read_manifest(self, activity_id: str) -> list[dict]:
        """Manifest items for an activity; missing or malformed means empty."""
        bucket = get_settings().ACTIVITY_FILES_BUCKET
        try:
            raw = await self.download(bucket, manifest_path(activity_id))
        except Exception as exc:
            logger.debug(
                "No readable manifest",
                extra={"extra_fields": {"activity_id": activity_id, "error": str(exc)}},
            )
            return []
        try:
            items = json.loads(raw)
        except (TypeError, ValueError):
            return []
        return [i for i in items if isinstance(i, dict)] if isinstance(items, list) else []

    async def write_manifest(self, activity_id: str, items: list[dict]) -> None:
        await self.upload(
            get_settings().ACTIVITY_FILES_BUCKET,
            manifest_path(activity_id),
            json.dumps(items).encode("utf-8"),
            content_type="application/json",
            upsert=True,
        )

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def create_thumbnail(
        self, image_data: bytes, size: Tuple[int, int] = AVATAR_SIZE
    ) -> bytes:
        """Downscale an image to fit ``size`` and re-encode it as JPEG."""
        try:
            img = Image.open(BytesIO(image_data))
            img.thumbnail(size, Image.Resampling.LANCZOS)
            if img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            buffer = BytesIO()
            img.save(buffer, format="JPEG", quality=88)
            return buffer.getvalue()
        except (OSError, ValueError) as exc:
            logger.warning(
                "Thumbnail creation failed, storing original",
                extra={"extra_fields": {"error": str(exc)}},
            )
            return image_data


@lru_cache
def get_storage_service() -> StorageService:
    settings = get_settings()
    return StorageService(settings.STORAGE_BACKEND, base_dir=settings.LOCAL_STORAGE_DIR)


def get_file_storage() -> StorageService:
    """FastAPI dependency; overridden in tests."""
    return get_storage_service()
