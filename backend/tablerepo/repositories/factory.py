"""
Repository factory bound to the shared engine.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from tablerepo.core.database import get_engine
from tablerepo.repositories.table import RecordFactory, TableRepository


def get_table_repository(
    table_name: str,
    *,
    engine: Optional[AsyncEngine] = None,
    id_column: str = "id",
    record_factory: Optional[RecordFactory] = None,
) -> TableRepository:
    """
    Build a repository for table_name.

    Args:
        table_name: Table the repository is bound to
        engine: Engine to use (defaults to the process-wide shared engine)
        id_column: Primary key column name
        record_factory: Row-to-record converter (default: dict)

    Example:
        >>> users = get_table_repository("users", record_factory=User.model_validate)
        >>> ann = await users.get_by_id("u1")
    """
    return TableRepository(
        table_name,
        engine or get_engine(),
        id_column=id_column,
        record_factory=record_factory,
    )
