"""Base repository: generic get/create/delete and field updates for ORM models."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import PersistenceException, ValidationException
from app.infrastructure.persistence.database import Base


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, create, apply_changes and delete.

    Subclasses map ORM rows to application DTOs. Status columns are never
    written here; see SubjectStatusRepository.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record. Unique/foreign-key violations become ValidationException."""
        try:
            async with self.db.begin_nested():
                self.db.add(obj)
                await self.db.flush()
        except IntegrityError as e:
            raise ValidationException(
                f"{self.model.__name__} violates a uniqueness or reference constraint",
                constraint=str(getattr(e.orig, "args", [""])[0])[:200] or None,
            ) from e
        await self.db.refresh(obj)
        return obj

    async def apply_changes(self, obj: ModelType, changes: dict[str, Any]) -> ModelType:
        """Set attributes on a loaded record, flush and refresh it."""
        for key, value in changes.items():
            if not hasattr(obj, key):
                raise PersistenceException(
                    f"{self.model.__name__} has no attribute {key!r}", operation="update"
                )
            setattr(obj, key, value)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()
