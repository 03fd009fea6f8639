# storefront/repositories/storage_repo.py
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.models.storage import StorageEntry


class StorageRepository:
    """
    Data access layer for StorageEntry.

    - Pure DB operations on (namespace, key) rows.
    - No JSON handling, no error containment (LocalStorage owns that).
    - Writes are last-write-wins, also when two writers create the
      same row at once.
    """

    def get(self, session: Session, namespace: str, key: str) -> StorageEntry | None:
        return session.get(StorageEntry, (namespace, key))

    def upsert(
        self,
        session: Session,
        namespace: str,
        key: str,
        value: str,
    ) -> StorageEntry:
        entry = self.get(session, namespace, key)
        if entry is None:
            try:
                return self._commit(
                    session, StorageEntry(namespace=namespace, key=key, value=value)
                )
            except IntegrityError:
                # Another writer inserted the row first: overwrite it.
                session.rollback()
                entry = self.get(session, namespace, key)
                if entry is None:
                    raise

        entry.value = value
        entry.updated_at = datetime.now(timezone.utc)
        return self._commit(session, entry)

    def delete(self, session: Session, namespace: str, key: str) -> bool:
        entry = self.get(session, namespace, key)
        if entry is None:
            return False
        session.delete(entry)
        session.commit()
        return True

    def _commit(self, session: Session, entry: StorageEntry) -> StorageEntry:
        session.add(entry)
        session.commit()
        session.refresh(entry)
        return entry
