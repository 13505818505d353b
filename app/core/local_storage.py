# app/core/local_storage.py
from datetime import datetime, timezone

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.models.local_storage import LocalStorageEntry


class LocalStorageError(Exception):
    """The device storage could not be read or written."""


class StorageQuotaExceeded(LocalStorageError):
    """Raised when a write would push the key-space past its byte quota."""

    def __init__(self, key: str, needed: int, quota: int):
        super().__init__(
            f"Storing {needed} bytes under '{key}' exceeds the {quota} byte quota"
        )
        self.key = key
        self.needed = needed
        self.quota = quota


# Errors callers recover from locally; OSError covers file-backed stores
STORAGE_ERRORS = (LocalStorageError, OSError)


class LocalStorage:
    """
    Device storage interface: string keys to string values.

    Same contract as a browser's localStorage: synchronous, last writer
    wins. Failures surface as LocalStorageError; `set_item` raises its
    StorageQuotaExceeded subclass when the quota is reached.
    """

    def get_item(self, key: str) -> str | None:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class DatabaseLocalStorage(LocalStorage):
    """
    LocalStorage persisted in the `local_storage` SQLite table.

    The quota applies to the sum of all stored values (UTF-8 bytes),
    counting the new value instead of the one it replaces. Database
    errors are re-raised as LocalStorageError.
    """

    def __init__(self, engine: Engine, quota_bytes: int):
        self.engine = engine
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> str | None:
        try:
            with Session(self.engine) as session:
                entry = session.get(LocalStorageEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as exc:
            raise LocalStorageError(f"Could not read '{key}': {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        size = len(value.encode("utf-8"))
        try:
            with Session(self.engine) as session:
                stmt = select(LocalStorageEntry.value).where(LocalStorageEntry.key != key)
                others = sum(len(v.encode("utf-8")) for v in session.exec(stmt))
                if others + size > self.quota_bytes:
                    raise StorageQuotaExceeded(key, others + size, self.quota_bytes)

                entry = session.get(LocalStorageEntry, key)
                if entry is None:
                    entry = LocalStorageEntry(key=key, value=value)
                else:
                    entry.value = value
                    entry.updated_at = datetime.now(timezone.utc)
                session.add(entry)
                session.commit()
        except SQLAlchemyError as exc:
            raise LocalStorageError(f"Could not write '{key}': {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            with Session(self.engine) as session:
                entry = session.get(LocalStorageEntry, key)
                if entry is not None:
                    session.delete(entry)
                    session.commit()
        except SQLAlchemyError as exc:
            raise LocalStorageError(f"Could not remove '{key}': {exc}") from exc

    def clear(self) -> None:
        try:
            with Session(self.engine) as session:
                for entry in session.exec(select(LocalStorageEntry)).all():
                    session.delete(entry)
                session.commit()
        except SQLAlchemyError as exc:
            raise LocalStorageError(f"Could not clear local storage: {exc}") from exc
