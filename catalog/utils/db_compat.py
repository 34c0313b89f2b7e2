"""
Database compatibility helpers for SQLite and PostgreSQL.
"""
from typing import Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_name(db: AsyncSession) -> str:
    return db.get_bind().dialect.name


def upsert(
    db: AsyncSession,
    model,
    rows: list[dict],
    index_elements: list[str],
    update_columns: list[str],
    extra_set: Optional[dict] = None,
):
    """INSERT ... ON CONFLICT (index_elements) DO UPDATE for the session's backend."""
    if dialect_name(db) == "postgresql":
        stmt = pg_insert(model).values(rows)
    else:
        stmt = sqlite_insert(model).values(rows)
    set_ = {column: getattr(stmt.excluded, column) for column in update_columns}
    set_.update(extra_set or {})
    return stmt.on_conflict_do_update(index_elements=index_elements, set_=set_)


def contains(column, text: str):
    """Case-insensitive substring filter (ILIKE on PostgreSQL, lower() LIKE on SQLite)."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")
