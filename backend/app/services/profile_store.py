"""Per-user wearable profile persistence.

``upsert`` is a shallow field-level merge: keys present in the update
overwrite the stored value, everything else is left alone. The insert,
the row lock and the merge run in one transaction while holding a
per-user lock, so two events for the same user can't interleave.
"""
import logging
import threading
from contextlib import contextmanager

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import EVENT_FIELDS, LINK_FIELDS, METRIC_FIELDS, UNPARSED_PREFIX
from app.core.errors import StorageError
from app.models.wearable_profile import WearableProfile

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = frozenset(EVENT_FIELDS + METRIC_FIELDS + LINK_FIELDS)


class KeyedLock:
    """One lock per key, alive only while some thread holds or waits on it."""

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, holders + waiters]
        self._locks: dict[str, list] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


# Shared by every store in the process; the DB row lock covers other processes
_user_locks = KeyedLock()


def apply_update(row: WearableProfile, fields: dict) -> None:
    """Merge `fields` into `row` in place."""
    for key, value in fields.items():
        if key == "user_id":
            continue
        if key.startswith(UNPARSED_PREFIX):
            category = key[len(UNPARSED_PREFIX):]
            # Reassign so SQLAlchemy sees the JSON column change
            unparsed = dict(row.unparsed or {})
            unparsed[category] = value
            row.unparsed = unparsed
        elif key in WRITABLE_FIELDS:
            setattr(row, key, value)
        else:
            raise ValueError(f"Unknown profile field: {key}")


def _insert_if_absent(db: Session, user_id: str):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(WearableProfile)
    elif dialect == "sqlite":
        stmt = sqlite.insert(WearableProfile)
    else:
        raise StorageError(f"Unsupported database dialect: {dialect}")
    return stmt.values(user_id=user_id).on_conflict_do_nothing(
        index_elements=[WearableProfile.user_id]
    )


class ProfileStore:
    """Key-value view of the wearables table: get(user_id) / upsert(user_id, fields)."""

    def __init__(self, db: Session, locks: KeyedLock | None = None):
        self.db = db
        self.locks = locks if locks is not None else _user_locks

    def get(self, user_id: str) -> dict | None:
        row = self.db.get(WearableProfile, user_id)
        return row.to_dict() if row is not None else None

    def upsert(self, user_id: str, fields: dict) -> dict:
        if fields.get("user_id", user_id) != user_id:
            raise ValueError("user_id in fields does not match the key")
        # Validate names before touching the DB
        unknown = [
            k for k in fields
            if k != "user_id" and k not in WRITABLE_FIELDS and not k.startswith(UNPARSED_PREFIX)
        ]
        if unknown:
            raise ValueError(f"Unknown profile field: {unknown[0]}")

        with self.locks.hold(user_id):
            try:
                self.db.execute(_insert_if_absent(self.db, user_id))
                row = (
                    self.db.query(WearableProfile)
                    .filter(WearableProfile.user_id == user_id)
                    .populate_existing()
                    .with_for_update()
                    .one()
                )
                apply_update(row, fields)
                self.db.commit()
                return row.to_dict()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.exception("Failed to upsert wearable profile for %s", user_id)
                raise StorageError("Failed to store data") from e
