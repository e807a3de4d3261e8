"""
Table repository interface.

Defines the id-based contract that services depend on when they
only need single-row access to a table.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, Sequence, TypeVar, Union

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession


T = TypeVar("T")

# Anything a caller can hand in as an open transaction
Transaction = Union[AsyncConnection, AsyncSession]


class IBaseQuery(ABC, Generic[T]):
    """
    Abstract interface for id-based table access.

    Every method either runs standalone or inside the caller's
    transaction. Implementations never begin, commit, roll back or
    close a transaction they were handed.
    """

    @abstractmethod
    async def get_by_id(
        self,
        id: Any,
        columns: Optional[Sequence[str]] = None,
        trx: Optional[Transaction] = None,
    ) -> Optional[T]:
        """
        Fetch the first row whose id matches.

        Returns:
            The record, or None when no row matches
        """

    @abstractmethod
    async def update_by_id(
        self,
        id: Any,
        value: Any,
        returning: Optional[Sequence[str]] = None,
        trx: Optional[Transaction] = None,
    ) -> list[T]:
        """
        Update rows whose id matches.

        Returns:
            Updated records as reported by the RETURNING clause
            (empty when nothing matched)

        Raises:
            ValueError: If id is None or an empty string
        """

    @abstractmethod
    async def insert(
        self,
        value: Any,
        returning: Optional[Sequence[str]] = None,
        trx: Optional[Transaction] = None,
    ) -> Optional[T]:
        """Insert one row and return it as stored."""

    @abstractmethod
    async def insert_with_transaction(
        self,
        trx: Transaction,
        value: Any,
        returning: Optional[Sequence[str]] = None,
    ) -> list[T]:
        """Insert inside the caller's transaction and return the returning set."""

    @abstractmethod
    async def update_by_id_with_transaction(
        self,
        trx: Transaction,
        id: Any,
        value: Any,
        returning: Optional[Sequence[str]] = None,
    ) -> list[T]:
        """Transactional form of update_by_id."""

    @abstractmethod
    async def get_by_id_with_transaction(
        self,
        trx: Transaction,
        id: Any,
        columns: Optional[Sequence[str]] = None,
    ) -> Optional[T]:
        """Transactional form of get_by_id."""
