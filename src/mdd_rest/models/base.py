"""Declarative base and persistable model mixins."""

import uuid

from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all resource models."""

    pass


def _new_uuid() -> str:
    return str(uuid.uuid4())


class SystemUuidModel:
    """Mixin for persistent models with a system generated UUID primary key.

    The key is assigned on insert, so ``is_new`` stays true until the
    instance has been flushed.

    Example:
        ```python
        @scrud_resource(path_fragment="books")
        class Book(SystemUuidModel, Base):
            __tablename__ = "book"
            title: Mapped[str] = mapped_column(String(200))
        ```
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)

    @property
    def is_new(self) -> bool:
        """Whether the instance has not been persisted yet."""
        return self.id is None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"
