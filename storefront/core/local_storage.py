# storefront/core/local_storage.py
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError
from sqlmodel import Session

from storefront.repositories.storage_repo import StorageRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageQuotaExceeded(Exception):
    """Raised internally when an encoded value does not fit the namespace quota."""


class EnvelopeMismatch(ValueError):
    """Raised internally when a stored envelope does not match the expected schema."""


@dataclass(frozen=True)
class StorageSchema(Generic[T]):
    """
    Binds a storage key to the shape of the value stored under it.

    Every key is owned by exactly one component. The value is written
    as a tagged envelope:

        {"schema": "<key>", "version": <n>, "data": <payload>}

    and decoded back through `adapter`. Bumping `version` makes older
    payloads decode to the default instead of a half-valid object.
    """

    key: str
    adapter: TypeAdapter
    default_factory: Callable[[], T]
    version: int = 1

    def encode(self, value: T) -> str:
        envelope = {
            "schema": self.key,
            "version": self.version,
            "data": self.adapter.dump_python(value, mode="json"),
        }
        return json.dumps(envelope, separators=(",", ":"))

    def decode(self, raw: str) -> T:
        envelope = json.loads(raw)
        if not isinstance(envelope, dict):
            raise EnvelopeMismatch("stored value is not an envelope")
        if envelope.get("schema") != self.key:
            raise EnvelopeMismatch(f"schema tag {envelope.get('schema')!r}")
        if envelope.get("version") != self.version:
            raise EnvelopeMismatch(f"version {envelope.get('version')!r}")
        return self.adapter.validate_python(envelope.get("data"))


@dataclass
class LocalStorage:
    """
    Key-value storage for one client namespace.

    Contract:
      - load() never raises: missing key, corrupt JSON, schema mismatch
        or DB errors all yield the schema default (logged).
      - save() never raises: quota or DB errors are logged, the session
        is rolled back, and the previously stored value stays intact.

    This is the only component allowed to read or write StorageEntry rows.
    """

    session: Session
    namespace: str
    repo: StorageRepository = field(default_factory=StorageRepository)
    quota_bytes: int = 5 * 1024 * 1024

    def load(self, schema: StorageSchema[T]) -> T:
        try:
            entry = self.repo.get(self.session, self.namespace, schema.key)
        except Exception as e:
            logger.error(f"Failed to read {schema.key} for {self.namespace}: {e}")
            return schema.default_factory()

        if entry is None:
            logger.debug(f"No stored value for {schema.key} in {self.namespace}")
            return schema.default_factory()

        try:
            return schema.decode(entry.value)
        except (ValueError, ValidationError) as e:
            logger.warning(
                f"Discarding unreadable {schema.key} for {self.namespace}: {e}"
            )
            return schema.default_factory()

    def save(self, schema: StorageSchema[T], value: T) -> None:
        try:
            raw = schema.encode(value)
            self._check_quota(schema.key, raw)
            self.repo.upsert(self.session, self.namespace, schema.key, raw)
        except Exception as e:
            self.session.rollback()
            logger.error(f"Failed to save {schema.key} for {self.namespace}: {e}")

    def remove(self, schema: StorageSchema[Any]) -> None:
        self._remove_key(schema.key)

    def migrate(
        self,
        legacy_key: str,
        schema: StorageSchema[T],
        parse: Callable[[str], T] | None = None,
    ) -> None:
        """
        Move a bare JSON value from `legacy_key` into `schema.key`.

        `parse` turns the legacy text into the current value; it defaults
        to the schema's own adapter. The legacy value is adopted only when
        the canonical key is empty; either way the legacy key is removed
        afterwards.
        """
        parse = parse or schema.adapter.validate_json
        try:
            legacy = self.repo.get(self.session, self.namespace, legacy_key)
            current = self.repo.get(self.session, self.namespace, schema.key)
        except Exception as e:
            logger.error(f"Failed to read legacy key {legacy_key}: {e}")
            return
        if legacy is None:
            return

        if current is None:
            try:
                value = parse(legacy.value)
            except ValueError as e:
                logger.warning(f"Dropping invalid legacy {legacy_key}: {e}")
            else:
                self.save(schema, value)
                logger.info(f"Migrated {legacy_key} -> {schema.key} for {self.namespace}")

        self._remove_key(legacy_key)

    # ---- internal helpers ----

    def _check_quota(self, key: str, raw: str) -> None:
        size = len(raw.encode("utf-8"))
        if size > self.quota_bytes:
            raise StorageQuotaExceeded(
                f"{key} needs {size} bytes, quota is {self.quota_bytes}"
            )

    def _remove_key(self, key: str) -> None:
        try:
            self.repo.delete(self.session, self.namespace, key)
        except Exception as e:
            self.session.rollback()
            logger.error(f"Failed to remove {key} for {self.namespace}: {e}")
