import threading
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import StorageError
from app.services.event_normalizer import normalize_event, validate_event
from app.services.profile_store import KeyedLock, ProfileStore


def new_user_id():
    return f"user-{uuid.uuid4()}"


def ingest(store, user_id, event_type, data, now=None):
    event = validate_event({"event_type": event_type, "user_id": user_id, "data": data})
    return store.upsert(user_id, normalize_event(event, now=now))


def test_get_missing_profile_is_none(db):
    assert ProfileStore(db).get(new_user_id()) is None


def test_first_event_creates_row(db):
    store = ProfileStore(db)
    uid = new_user_id()
    profile = ingest(store, uid, "daily.data.steps.created", {"data": [{"value": 8000}]})
    assert profile["user_id"] == uid
    assert profile["steps"] == 8000
    assert profile["last_event"] == "daily.data.steps.created"
    assert store.get(uid)["steps"] == 8000


def test_other_category_leaves_fields_untouched(db):
    store = ProfileStore(db)
    uid = new_user_id()
    ingest(store, uid, "daily.data.steps.created", {"data": [{"value": 8000}]})
    ingest(store, uid, "daily.data.glucose.created", {"data": [{"value": 5.4}]})
    profile = store.get(uid)
    assert profile["steps"] == 8000
    assert profile["glucose"] == 5.4
    assert profile["heart_rate"] is None
    assert profile["last_event"] == "daily.data.glucose.created"


def test_blood_pressure_keeps_stored_value_for_null_reading(db):
    store = ProfileStore(db)
    uid = new_user_id()
    ingest(store, uid, "daily.data.blood_pressure.created", {"data": [{"systolic": 120, "diastolic": 80}]})
    ingest(store, uid, "daily.data.blood_pressure.created", {"data": [{"systolic": None, "diastolic": 75}]})
    profile = store.get(uid)
    assert profile["blood_pressure_systolic"] == 120
    assert profile["blood_pressure_diastolic"] == 75


def test_sleep_event(db):
    store = ProfileStore(db)
    uid = new_user_id()
    profile = ingest(store, uid, "daily.data.sleep.created", {"total": 27000, "hr_average": 58})
    assert profile["sleep_hours"] == 7.5
    assert profile["heart_rate"] == 58


def test_unparsed_payloads_accumulate_per_category(db):
    store = ProfileStore(db)
    uid = new_user_id()
    ingest(store, uid, "provider.xyz.custom", {"foo": 1})
    ingest(store, uid, "provider.xyz.ecg", {"samples": [1, 2]})
    ingest(store, uid, "provider.xyz.custom", {"foo": 2})
    profile = store.get(uid)
    assert profile["unparsed_custom"] == {"foo": 2}
    assert profile["unparsed_ecg"] == {"samples": [1, 2]}


def test_unknown_category_sets_no_metric(db):
    store = ProfileStore(db)
    uid = new_user_id()
    profile = ingest(store, uid, "provider.xyz.custom", {"foo": 1})
    assert profile["unparsed_custom"] == {"foo": 1}
    for field in ("steps", "heart_rate", "sleep_hours", "calories", "glucose"):
        assert profile[field] is None


def test_replaying_event_is_idempotent(db):
    store = ProfileStore(db)
    uid = new_user_id()
    first = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)
    second = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)
    data = {"data": [{"systolic": 118, "diastolic": 76}]}
    once = ingest(store, uid, "daily.data.blood_pressure.created", data, now=first)
    twice = ingest(store, uid, "daily.data.blood_pressure.created", data, now=second)
    skip = {"last_updated", "updated_at"}
    assert {k: v for k, v in once.items() if k not in skip} == {
        k: v for k, v in twice.items() if k not in skip
    }


def test_unknown_field_rejected(db):
    with pytest.raises(ValueError):
        ProfileStore(db).upsert(new_user_id(), {"favourite_colour": "blue"})


def test_mismatched_user_id_rejected(db):
    with pytest.raises(ValueError):
        ProfileStore(db).upsert("a", {"user_id": "b", "steps": 1})


def test_db_failure_raises_storage_error(db, monkeypatch):
    store = ProfileStore(db)
    uid = new_user_id()

    def boom():
        raise OperationalError("COMMIT", {}, Exception("disk full"))

    monkeypatch.setattr(db, "commit", boom)
    with pytest.raises(StorageError):
        store.upsert(uid, {"steps": 100})
    monkeypatch.undo()
    assert store.get(uid) is None


@pytest.fixture
def file_sessions(tmp_path):
    """Session factory on a file-backed SQLite DB so threads get their own connections."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker

    from app.db import Base
    from app.models.user import User  # noqa: F401
    from app.models.wearable_profile import WearableProfile  # noqa: F401

    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'profiles.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def test_concurrent_blood_pressure_events_keep_both_readings(file_sessions):
    uid = new_user_id()
    locks = KeyedLock()
    barrier = threading.Barrier(2)
    errors = []

    def send(reading):
        db = file_sessions()
        try:
            barrier.wait()
            ingest(ProfileStore(db, locks=locks), uid, "daily.data.blood_pressure.created", {"data": [reading]})
        except Exception as e:
            errors.append(e)
        finally:
            db.close()

    threads = [
        threading.Thread(target=send, args=({"systolic": 120, "diastolic": None},)),
        threading.Thread(target=send, args=({"systolic": None, "diastolic": 75},)),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert errors == []
    db = file_sessions()
    try:
        profile = ProfileStore(db).get(uid)
    finally:
        db.close()
    assert profile["blood_pressure_systolic"] == 120
    assert profile["blood_pressure_diastolic"] == 75
    assert len(locks) == 0


def test_concurrent_events_across_categories(file_sessions):
    uid = new_user_id()
    locks = KeyedLock()
    events = [
        ("daily.data.steps.created", {"data": [{"value": 9000}]}),
        ("daily.data.glucose.created", {"data": [{"value": 5.1}]}),
        ("daily.data.sleep.created", {"total": 27000}),
        ("daily.data.calories.created", {"data": [{"value": 410}]}),
        ("provider.xyz.custom", {"foo": 1}),
    ]
    barrier = threading.Barrier(len(events))
    errors = []

    def send(event_type, data):
        db = file_sessions()
        try:
            barrier.wait()
            ingest(ProfileStore(db, locks=locks), uid, event_type, data)
        except Exception as e:
            errors.append(e)
        finally:
            db.close()

    threads = [threading.Thread(target=send, args=ev) for ev in events]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert errors == []
    db = file_sessions()
    try:
        profile = ProfileStore(db).get(uid)
    finally:
        db.close()
    assert profile["steps"] == 9000
    assert profile["glucose"] == 5.1
    assert profile["sleep_hours"] == 7.5
    assert profile["calories"] == 410
    assert profile["unparsed_custom"] == {"foo": 1}


def test_keyed_lock_serializes_same_key():
    locks = KeyedLock()
    entered = threading.Event()
    order = []

    def second():
        with locks.hold("u1"):
            order.append("second")
            entered.set()

    with locks.hold("u1"):
        t = threading.Thread(target=second)
        t.start()
        # The second holder must wait for us
        assert not entered.wait(timeout=0.2)
        order.append("first")
    t.join(timeout=5)
    assert order == ["first", "second"]


def test_keyed_lock_other_keys_do_not_block():
    locks = KeyedLock()
    entered = threading.Event()

    def other():
        with locks.hold("u2"):
            entered.set()

    with locks.hold("u1"):
        t = threading.Thread(target=other)
        t.start()
        assert entered.wait(timeout=5)
    t.join(timeout=5)


def test_keyed_lock_evicts_released_keys():
    locks = KeyedLock()
    for i in range(100):
        with locks.hold(f"user-{i}"):
            assert len(locks) == 1
    assert len(locks) == 0

    with pytest.raises(RuntimeError):
        with locks.hold("user-x"):
            raise RuntimeError("boom")
    assert len(locks) == 0
