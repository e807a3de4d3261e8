"""
Generic table repository.

Binds one table name to routine CRUD statements built with SQLAlchemy
Core. Statements run either on a short-lived connection of the injected
engine (committed on success) or inside a transaction the caller already
holds. Engine errors propagate untouched.
"""

import dataclasses
from typing import Any, Callable, Generic, Mapping, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import column, insert, literal_column, select, table, update
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql import ColumnElement, Executable, Select
from sqlalchemy.sql.expression import TableClause

from tablerepo.core.logging_config import get_logger, log_with_context
from tablerepo.repositories.interfaces import IBaseQuery, T, Transaction


logger = get_logger(__name__)

RecordFactory = Callable[[Mapping[str, Any]], T]


def _column_list(names: Optional[Sequence[str]]) -> list[ColumnElement]:
    """Turn column names into select/returning expressions ("*" or None means all)."""
    if not names:
        return [literal_column("*")]
    return [literal_column("*") if name == "*" else column(name) for name in names]


def to_values(value: Any) -> dict[str, Any]:
    """
    Convert a write payload into a column/value dict.

    Accepts mappings, pydantic models and dataclass instances. Pydantic
    models only contribute fields that were explicitly set, so a partial
    model updates only those columns.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_unset=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return dict(value)


class TableRepository(IBaseQuery[T], Generic[T]):
    """
    Repository for one database table.

    Provides async CRUD operations over a single table without any
    ORM mapping. Rows are returned as dicts unless a record_factory is
    supplied (a pydantic model's model_validate works well).

    Every operation takes an optional trx keyword. When given, the
    statement runs on that connection or session and the caller owns
    commit and rollback. When omitted, the statement runs in its own
    engine.begin() block.

    Attributes:
        table_name: Name of the bound table (read-only)
        id_column: Column used by the id-based operations
    """

    def __init__(
        self,
        table_name: str,
        engine: AsyncEngine,
        id_column: str = "id",
        record_factory: Optional[RecordFactory] = None,
    ):
        """
        Initialize repository.

        Args:
            table_name: Table every statement targets
            engine: Shared async engine used when no transaction is passed
            id_column: Primary key column name
            record_factory: Converts a row mapping into a record (default: dict)
        """
        self._table_name = table_name
        self._engine = engine
        self.id_column = id_column
        self._record_factory = record_factory or dict

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def table(self) -> TableClause:
        """Lightweight table clause for hand-written refinements."""
        return table(self._table_name)

    def _writable_table(self, values: Mapping[str, Any]) -> TableClause:
        # INSERT/UPDATE need the written columns declared on the clause
        return table(self._table_name, *(column(key) for key in values))

    async def _execute(
        self,
        operation: str,
        statement: Executable,
        trx: Optional[Transaction],
    ) -> list[T]:
        log_with_context(
            logger,
            "debug",
            f"Executing {operation} on {self._table_name}",
            table=self._table_name,
            operation=operation,
        )

        if trx is not None:
            result = await trx.execute(statement)
            rows = result.mappings().all()
        else:
            async with self._engine.begin() as conn:
                result = await conn.execute(statement)
                rows = result.mappings().all()

        log_with_context(
            logger,
            "debug",
            f"Executed {operation} on {self._table_name}",
            table=self._table_name,
            operation=operation,
            row_count=len(rows),
        )
        return [self._record_factory(dict(row)) for row in rows]

    def find(self, columns: Optional[Sequence[str]] = None) -> Select:
        """
        Build a lazy query over all rows.

        Nothing is executed. Refine the returned Select and run it
        with fetch().

        Example:
            >>> query = repo.find(["id", "name"]).order_by(column("name")).limit(10)
            >>> users = await repo.fetch(query)
        """
        return select(*_column_list(columns)).select_from(self.table)

    async def fetch(self, query: Select, trx: Optional[Transaction] = None) -> list[T]:
        """Execute a query built from find() and return its records."""
        return await self._execute("fetch", query, trx)

    async def get_by_id(
        self,
        id: Any,
        columns: Optional[Sequence[str]] = None,
        trx: Optional[Transaction] = None,
    ) -> Optional[T]:
        """
        Retrieve a record by primary key.

        Args:
            id: Primary key value
            columns: Columns to select (default: all)
            trx: Optional open transaction

        Returns:
            The first matching record, or None

        Example:
            >>> user = await repo.get_by_id("u1")
            >>> print(user["name"] if user else "Not found")
            "Ann"
        """
        stmt = (
            self.find(columns)
            .where(column(self.id_column) == id)
            .limit(1)
        )
        records = await self._execute("get_by_id", stmt, trx)
        return records[0] if records else None

    async def find_by_criteria(
        self,
        criteria: Mapping[str, Any],
        columns: Optional[Sequence[str]] = None,
        trx: Optional[Transaction] = None,
    ) -> list[T]:
        """
        Retrieve records matching every given column value.

        Args:
            criteria: Column/value pairs combined with AND (empty matches all rows)
            columns: Columns to select (default: all)
            trx: Optional open transaction

        Returns:
            List of matching records
        """
        stmt = self.find(columns).where(
            *(column(key) == value for key, value in to_values(criteria).items())
        )
        return await self._execute("find_by_criteria", stmt, trx)

    async def update_by_id(
        self,
        id: Any,
        value: Any,
        returning: Optional[Sequence[str]] = None,
        trx: Optional[Transaction] = None,
    ) -> list[T]:
        """
        Update the row with the given primary key.

        Returns:
            Updated records after the write (empty when no row matched)

        Raises:
            ValueError: If id is None or an empty string
            SQLAlchemyError: From the engine when value is an empty payload,
                since no SET clause can be built (OperationalError on SQLite)
        """
        return await self._update("update_by_id", self.id_column, id, value, returning, trx)

    async def update_by_column(
        self,
        column_name: Optional[str],
        id: Any,
        value: Any,
        returning: Optional[Sequence[str]] = None,
        trx: Optional[Transaction] = None,
    ) -> list[T]:
        """
        Update every row where column_name equals id.

        Args:
            column_name: Column to match on (None means id_column)
            id: Value to match
            value: New column values
            returning: Columns to return (default: all)
            trx: Optional open transaction

        Returns:
            Updated records after the write

        Raises:
            ValueError: If id is None or an empty string
            SQLAlchemyError: From the engine when value is an empty payload
        """
        return await self._update(
            "update_by_column", column_name or self.id_column, id, value, returning, trx
        )

    async def _update(
        self,
        operation: str,
        column_name: str,
        id: Any,
        value: Any,
        returning: Optional[Sequence[str]],
        trx: Optional[Transaction],
    ) -> list[T]:
        # A missing match value must never widen the predicate
        if id is None or id == "":
            raise ValueError(
                f"{operation} on '{self._table_name}' requires a non-empty "
                f"value for column '{column_name}'"
            )

        values = to_values(value)
        stmt = (
            update(self._writable_table(values))
            .where(column(column_name) == id)
            .values(values)
            .returning(*_column_list(returning))
        )
        return await self._execute(operation, stmt, trx)

    async def insert(
        self,
        value: Any,
        returning: Optional[Sequence[str]] = None,
        trx: Optional[Transaction] = None,
    ) -> Optional[T]:
        """
        Insert one row.

        Args:
            value: Column values for the new row
            returning: Columns to return (default: all)
            trx: Optional open transaction

        Returns:
            The inserted record including database defaults

        Example:
            >>> user = await repo.insert({"id": "u1", "name": "Ann"})
            >>> print(user)
            {"id": "u1", "name": "Ann", "active": 1}
        """
        records = await self._insert(value, returning, trx)
        return records[0] if records else None

    async def _insert(
        self,
        value: Any,
        returning: Optional[Sequence[str]],
        trx: Optional[Transaction],
    ) -> list[T]:
        values = to_values(value)
        stmt = (
            insert(self._writable_table(values))
            .values(values)
            .returning(*_column_list(returning))
        )
        return await self._execute("insert", stmt, trx)

    async def insert_with_transaction(
        self,
        trx: Transaction,
        value: Any,
        returning: Optional[Sequence[str]] = None,
    ) -> list[T]:
        return await self._insert(value, returning, trx)

    async def update_by_id_with_transaction(
        self,
        trx: Transaction,
        id: Any,
        value: Any,
        returning: Optional[Sequence[str]] = None,
    ) -> list[T]:
        return await self.update_by_id(id, value, returning, trx=trx)

    async def get_by_id_with_transaction(
        self,
        trx: Transaction,
        id: Any,
        columns: Optional[Sequence[str]] = None,
    ) -> Optional[T]:
        return await self.get_by_id(id, columns, trx=trx)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(table_name={self._table_name!r})"
