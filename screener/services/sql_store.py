# screener/services/sql_store.py

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..db.base import Base
from .. import models  # noqa: F401  (registers tables on Base.metadata)
from .store import ResourceStore, Row, StoreError


class SqlAlchemyResourceStore(ResourceStore):
    """
    Store backed by a direct database connection.

    Outside ``transaction()`` every call commits on its own. Inside it, all
    calls share one session, committed when the block exits cleanly and
    rolled back when it raises.
    """

    transactional = True

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._session: Optional[Session] = None

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise StoreError(f"unknown table {name}") from None

    @staticmethod
    def _where(table: Table, filters: Dict[str, Any]):
        return [table.c[column] == value for column, value in filters.items()]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._session is not None:
            # Already inside a transaction; join it.
            yield
            return

        session = self._session_factory()
        self._session = session
        try:
            yield
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f"transaction failed: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            self._session = None
            session.close()

    @contextmanager
    def _scope(self) -> Iterator[Session]:
        if self._session is not None:
            yield self._session
            return

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def select(self, table: str, filters: Dict[str, Any], columns: str = "*") -> List[Row]:
        tbl = self._table(table)
        if columns.strip() == "*":
            selected = [tbl]
        else:
            selected = [tbl.c[name.strip()] for name in columns.split(",")]
        try:
            with self._scope() as session:
                result = session.execute(select(*selected).where(*self._where(tbl, filters)))
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"select on {table} failed: {e}") from e

    def insert(self, table: str, record: Row) -> Row:
        tbl = self._table(table)
        try:
            with self._scope() as session:
                result = session.execute(insert(tbl).values(**record))
                row = dict(record)
                for column, value in zip(tbl.primary_key.columns, result.inserted_primary_key):
                    row.setdefault(column.name, value)
                return row
        except SQLAlchemyError as e:
            raise StoreError(f"insert into {table} failed: {e}") from e

    def update(self, table: str, filters: Dict[str, Any], values: Row) -> int:
        if not filters:
            raise StoreError(f"refusing unfiltered update on {table}")
        tbl = self._table(table)
        try:
            with self._scope() as session:
                result = session.execute(update(tbl).where(*self._where(tbl, filters)).values(**values))
                return result.rowcount
        except SQLAlchemyError as e:
            raise StoreError(f"update of {table} failed: {e}") from e

    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        if not filters:
            raise StoreError(f"refusing unfiltered delete on {table}")
        tbl = self._table(table)
        try:
            with self._scope() as session:
                result = session.execute(delete(tbl).where(*self._where(tbl, filters)))
                return result.rowcount
        except SQLAlchemyError as e:
            raise StoreError(f"delete from {table} failed: {e}") from e
