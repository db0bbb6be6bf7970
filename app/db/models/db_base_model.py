# app/db/models/db_base_model.py
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import DateTime
from datetime import datetime, timezone
from uuid import uuid4, uuid5, UUID


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class DbBaseModel(DeclarativeBase):
    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    @staticmethod
    def generate_uuid() -> str:
        return str(uuid4())

    @staticmethod
    def generate_stable_uuid(namespace: UUID, key: str) -> str:
        """Same namespace and key always give the same id."""
        return str(uuid5(namespace, key))


__all__ = ["DbBaseModel", "utc_now"]
