from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated user from a Supabase access token.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(..., alias="sub")
    email: Optional[str] = None
    role: str = "authenticated"
    app_metadata: dict[str, Any] = Field(default_factory=dict)
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def roles(self) -> list[str]:
        """Portal roles from app_metadata (``roles`` list or single ``role``)."""
        raw = self.app_metadata.get("roles")
        if raw is None:
            raw = self.app_metadata.get("role")
        if isinstance(raw, str):
            raw = [raw]
        return [str(r).lower() for r in (raw or [])]

    @property
    def is_admin(self) -> bool:
        return self.role == "service_role" or "admin" in self.roles

    @property
    def display_name(self) -> str:
        meta = self.user_metadata
        name = meta.get("full_name") or meta.get("name")
        if not name:
            name = " ".join(
                part for part in (meta.get("first_name"), meta.get("last_name")) if part
            )
        return str(name or "").strip()
