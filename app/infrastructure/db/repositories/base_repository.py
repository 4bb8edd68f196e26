"""
Base Repository for VocabWorld

Async repository over a request-scoped session. Concrete repositories
add their own queries on top of these helpers.
"""

from typing import Generic, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from app.infrastructure.exceptions import DuplicateError


ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Shared persistence helpers for one table.

    Args:
        model: The SQLModel table class
        session: Async database session owned by the request
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self._model = model
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def save(self, obj: ModelType) -> ModelType:
        """Flush pending changes on ``obj`` and reload server defaults."""
        self._session.add(obj)
        await self._session.flush()
        await self._session.refresh(obj)
        return obj

    async def create(self, data: SQLModel) -> ModelType:
        """
        Insert a row built from a create schema.

        Raises:
            DuplicateError: If a unique constraint rejects the row
        """
        try:
            return await self.save(self._model.model_validate(data))
        except IntegrityError as e:
            raise DuplicateError(
                f"{self._model.__tablename__} row already exists",
                operation="insert",
                table=self._model.__tablename__,
                original_error=e,
            )

    async def count(self) -> int:
        """Total number of rows in the table."""
        stmt = select(func.count()).select_from(self._model)
        result = await self._session.execute(stmt)
        return result.scalar_one()
