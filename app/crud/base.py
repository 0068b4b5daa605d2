from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select # For SQLAlchemy 2.0 style selects

from app.db.base_class import Base # Your SQLAlchemy declarative base

ModelType = TypeVar("ModelType", bound=Base)


def conflict_free_insert(db: AsyncSession, model: Type[ModelType]):
    """
    INSERT statement that silently skips rows violating a unique constraint
    or unique index (``ON CONFLICT DO NOTHING``).

    Only PostgreSQL and SQLite are supported.
    """
    dialect_name = db.get_bind().dialect.name
    if dialect_name == "postgresql":
        return postgresql.insert(model).on_conflict_do_nothing()
    if dialect_name == "sqlite":
        return sqlite.insert(model).on_conflict_do_nothing()
    raise NotImplementedError(f"Conditional insert is not supported on dialect '{dialect_name}'")


class CRUDBase(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        """
        CRUD object with default methods to read rows.

        **Parameters**

        * `model`: A SQLAlchemy model class
        """
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        statement = select(self.model).filter(self.model.id == id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: int = 100
    ) -> List[ModelType]:
        statement = select(self.model).offset(skip).limit(limit)
        result = await db.execute(statement)
        return result.scalars().all()

    async def insert_if_absent(self, db: AsyncSession, *, values: dict) -> Optional[int]:
        """
        Insert a row unless a unique constraint already holds one.

        Returns the new id, or None when the row already existed. Does not commit.
        """
        statement = conflict_free_insert(db, self.model).values(**values).returning(self.model.id)
        result = await db.execute(statement)
        return result.scalar_one_or_none()
