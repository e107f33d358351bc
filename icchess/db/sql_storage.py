"""Implementation of LocalStorage using SQLAlchemy"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from icchess.core.exceptions import StorageError
from icchess.db.schema import DBStorageItem


class SQLLocalStorage:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_item(self, key: str) -> Any | None:
        item = self._fetch_item(key)
        if item:
            return item.value
        return None

    def set_item(self, key: str, value: Any) -> None:
        item = self._fetch_item(key)
        if item:
            item.value = value
        else:
            self.db.add(DBStorageItem(key=key, value=value))
        self._commit(key)

    def remove_item(self, key: str) -> None:
        item = self._fetch_item(key)
        if not item:
            return
        self.db.delete(item)
        self._commit(key)

    def _fetch_item(self, key: str) -> DBStorageItem | None:
        query = select(DBStorageItem).where(DBStorageItem.key == key)
        try:
            return self.db.scalar(query)
        except (SQLAlchemyError, ValueError) as e:
            raise StorageError(f"Could not read local storage key {key!r}: {e}") from e

    def _commit(self, key: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Could not write local storage key {key!r}: {e}") from e
