"""
Repository layer for data access.

Provides a generic table-scoped repository so services never write
raw statements for routine single-table operations.
"""

from tablerepo.repositories.factory import get_table_repository
from tablerepo.repositories.interfaces import IBaseQuery, Transaction
from tablerepo.repositories.table import TableRepository, to_values

__all__ = [
    "IBaseQuery",
    "TableRepository",
    "Transaction",
    "get_table_repository",
    "to_values",
]
