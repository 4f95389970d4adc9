"""
Repository base: dialect-aware upsert and bulk existence check
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_insert(session: AsyncSession, model):
    """
    INSERT construct supporting ON CONFLICT for the session's database.

    PostgreSQL in production; SQLite when the bound engine is SQLite.
    """
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)


class BaseRepository:
    """Repository bound to one AsyncSession; callers own the transaction"""

    model = None

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _upsert(
        self,
        values: Dict[str, Any],
        index_elements: Sequence[str],
        update_columns: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Single INSERT ... ON CONFLICT DO UPDATE statement.

        update_columns defaults to every incoming column outside the
        conflict key; updated_at is always refreshed.
        """
        stmt = dialect_insert(self.session, self.model).values(**values)

        if update_columns is None:
            update_columns = [c for c in values if c not in index_elements]

        set_ = {column: stmt.excluded[column] for column in update_columns}
        set_["updated_at"] = func.now()

        stmt = stmt.on_conflict_do_update(index_elements=list(index_elements), set_=set_)
        await self.session.execute(stmt)

    async def find_existing_ids(self, ids: Iterable[str]) -> Set[str]:
        """Subset of ids already stored, in one query"""
        wanted: List[str] = list({i for i in ids if i})
        if not wanted:
            return set()

        result = await self.session.execute(
            select(self.model.id).where(self.model.id.in_(wanted))
        )
        return set(result.scalars().all())
