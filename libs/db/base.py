import uuid

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base shared by every portal model."""

    pass


def new_id() -> str:
    """Default primary key: opaque UUID text."""
    return str(uuid.uuid4())
