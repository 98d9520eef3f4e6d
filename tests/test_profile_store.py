import json
import logging
from datetime import timedelta
from itertools import count

import pytest
from cryptography.fernet import Fernet

from querygate.api.db.models import PersistedRecord
from querygate.api.services.persisted_state import PersistedRecordRepository, utcnow
from querygate.core.security import RecordCipher
from querygate.api.services.profile_store import (
    ACTIVE_PROFILE_RECORD,
    PROFILES_RECORD,
    ProfileStore,
)


@pytest.fixture
def id_factory():
    counter = count(1700000000000)
    return lambda: str(next(counter))


@pytest.fixture
def store(repository, id_factory) -> ProfileStore:
    profile_store = ProfileStore(repository, id_factory=id_factory)
    profile_store.load()
    return profile_store


class TestProfileStore:
    def test_starts_empty(self, store):
        assert store.profiles == []
        assert store.active_profile_id is None
        assert store.active_profile is None
        assert store.has_profiles is False

    def test_first_profile_becomes_active(self, store):
        profile = store.add_profile(name="Production", database_url="postgres://db/app")

        assert len(store.profiles) == 1
        assert store.active_profile_id == profile.id
        assert store.active_profile == profile
        assert store.has_profiles is True

    def test_second_profile_leaves_active_unchanged(self, store):
        first = store.add_profile(name="Production", database_url="postgres://db/app")
        second = store.add_profile(name="Analytics", database_url="mongodb://localhost/stats")

        assert [p.id for p in store.profiles] == [first.id, second.id]
        assert store.active_profile_id == first.id

    def test_type_inferred_from_scheme(self, store):
        postgres = store.add_profile(name="pg", database_url="postgres://db/app")
        mysql = store.add_profile(name="my", database_url="mysql://db/app")
        mongo = store.add_profile(name="mongo", database_url="mongodb+srv://cluster/app")
        other = store.add_profile(name="lite", database_url="sqlite:///app.db")
        explicit = store.add_profile(name="forced", database_url="sqlite:///app.db", type="postgresql")

        assert [postgres.type, mysql.type, mongo.type, other.type, explicit.type] == [
            "postgresql", "mysql", "mongodb", "other", "postgresql"
        ]

    def test_colliding_ids_are_made_unique(self, repository):
        store = ProfileStore(repository, id_factory=lambda: "1000")

        first = store.add_profile(name="a", database_url="postgres://db/a")
        second = store.add_profile(name="b", database_url="postgres://db/b")
        third = store.add_profile(name="c", database_url="postgres://db/c")

        assert [first.id, second.id, third.id] == ["1000", "1001", "1002"]

    def test_update_changes_only_supplied_fields(self, store):
        profile = store.add_profile(
            name="Production",
            database_url="postgres://db/app",
            last_tested="2025-01-01T00:00:00+00:00",
            is_connected=True,
        )

        updated = store.update_profile(profile.id, name="X")

        assert updated.name == "X"
        assert updated.id == profile.id
        assert updated.database_url == profile.database_url
        assert updated.type == profile.type
        assert updated.last_tested == profile.last_tested
        assert updated.is_connected == profile.is_connected
        assert store.profiles == [updated]

    def test_update_ignores_none_but_keeps_false(self, store):
        profile = store.add_profile(name="Production", database_url="postgres://db/app", is_connected=True)

        updated = store.update_profile(profile.id, name=None, is_connected=False)

        assert updated.name == "Production"
        assert updated.is_connected is False

    def test_update_unknown_id_is_a_no_op(self, store):
        profile = store.add_profile(name="Production", database_url="postgres://db/app")

        assert store.update_profile("missing", name="X") is None
        assert store.profiles == [profile]

    def test_update_rejects_unknown_fields(self, store):
        profile = store.add_profile(name="Production", database_url="postgres://db/app")

        with pytest.raises(TypeError):
            store.update_profile(profile.id, id="hijack")

    def test_deleting_active_profile_activates_first_remaining(self, store):
        first = store.add_profile(name="a", database_url="postgres://db/a")
        second = store.add_profile(name="b", database_url="postgres://db/b")

        assert store.delete_profile(first.id) is True

        assert store.active_profile_id == second.id

    def test_deleting_last_profile_clears_active(self, store):
        only = store.add_profile(name="a", database_url="postgres://db/a")

        store.delete_profile(only.id)

        assert store.active_profile_id is None
        assert store.has_profiles is False

    def test_deleting_inactive_profile_keeps_active(self, store):
        first = store.add_profile(name="a", database_url="postgres://db/a")
        second = store.add_profile(name="b", database_url="postgres://db/b")

        store.delete_profile(second.id)

        assert store.active_profile_id == first.id

    def test_deleting_unknown_profile(self, store):
        first = store.add_profile(name="a", database_url="postgres://db/a")

        assert store.delete_profile("missing") is False
        assert store.profiles == [first]

    def test_set_active_profile(self, store):
        store.add_profile(name="a", database_url="postgres://db/a")
        second = store.add_profile(name="b", database_url="postgres://db/b")

        assert store.set_active_profile(second.id) is True
        assert store.active_profile == second

    def test_set_unknown_active_profile_keeps_current(self, store):
        first = store.add_profile(name="a", database_url="postgres://db/a")

        assert store.set_active_profile("missing") is False
        assert store.active_profile_id == first.id

    def test_returned_profiles_are_copies(self, store):
        profile = store.add_profile(name="a", database_url="postgres://db/a")

        profile.name = "mutated"
        store.profiles[0].name = "mutated again"

        assert store.get_profile(profile.id).name == "a"


class TestProfilePersistence:
    def test_round_trip_reproduces_collection_and_active_id(self, repository, id_factory):
        store = ProfileStore(repository, id_factory=id_factory)
        store.load()
        store.add_profile(name="a", database_url="postgres://u:p@db/a", last_tested="2025-11-07T10:00:00+00:00")
        store.add_profile(name="b", database_url="mongodb://localhost/b", is_connected=False)
        third = store.add_profile(name="c", database_url="mysql://db/c")
        store.set_active_profile(third.id)

        reloaded = ProfileStore(repository)
        reloaded.load()

        assert reloaded.profiles == store.profiles
        assert reloaded.active_profile_id == third.id

    def test_every_mutation_is_written_through(self, repository, store):
        profile = store.add_profile(name="a", database_url="postgres://db/a")
        store.update_profile(profile.id, name="renamed")

        persisted = json.loads(repository.get(PROFILES_RECORD))
        assert persisted == [{
            "id": profile.id,
            "name": "renamed",
            "databaseUrl": "postgres://db/a",
            "type": "postgresql",
            "lastTested": None,
            "isConnected": None,
        }]
        assert json.loads(repository.get(ACTIVE_PROFILE_RECORD)) == profile.id

        store.delete_profile(profile.id)

        assert json.loads(repository.get(PROFILES_RECORD)) == []
        assert json.loads(repository.get(ACTIVE_PROFILE_RECORD)) is None

    def test_expired_records_are_ignored(self, session_factory):
        expired = PersistedRecordRepository(session_factory, max_age=timedelta(seconds=-1))
        store = ProfileStore(expired)
        store.add_profile(name="a", database_url="postgres://db/a")

        reloaded = ProfileStore(PersistedRecordRepository(session_factory))
        reloaded.load()

        assert reloaded.profiles == []
        assert reloaded.active_profile_id is None

    def test_dangling_active_id_is_dropped_on_load(self, repository):
        repository.put(PROFILES_RECORD, json.dumps([
            {"id": "1", "name": "a", "databaseUrl": "postgres://db/a", "type": "postgresql"}
        ]))
        repository.put(ACTIVE_PROFILE_RECORD, json.dumps("ghost"))

        store = ProfileStore(repository)
        store.load()

        assert [p.id for p in store.profiles] == ["1"]
        assert store.active_profile_id is None


class TestEncryptedPersistence:
    def test_round_trip_with_encryption(self, session_factory):
        cipher = RecordCipher(Fernet.generate_key().decode())
        store = ProfileStore(PersistedRecordRepository(session_factory, cipher=cipher))
        store.add_profile(name="a", database_url="postgres://admin:s3cret@db/a")

        reloaded = ProfileStore(PersistedRecordRepository(session_factory, cipher=cipher))
        reloaded.load()

        assert reloaded.profiles == store.profiles

    def test_credentials_not_stored_in_plain_text(self, session_factory):
        cipher = RecordCipher(Fernet.generate_key().decode())
        store = ProfileStore(PersistedRecordRepository(session_factory, cipher=cipher))
        store.add_profile(name="a", database_url="postgres://admin:s3cret@db/a")

        raw = PersistedRecordRepository(session_factory).get(PROFILES_RECORD)

        assert "s3cret" not in raw

    def test_wrong_key_fails_loudly(self, session_factory):
        writer = RecordCipher(Fernet.generate_key().decode())
        ProfileStore(PersistedRecordRepository(session_factory, cipher=writer)).add_profile(
            name="a", database_url="postgres://db/a"
        )

        other = RecordCipher(Fernet.generate_key().decode())
        store = ProfileStore(PersistedRecordRepository(session_factory, cipher=other))

        with pytest.raises(RuntimeError, match="cannot be decrypted"):
            store.load()


def fail_writes(monkeypatch, repository):
    def refuse(values):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(repository, "put_many", refuse)


class TestFailedWrites:
    def test_failed_add_leaves_memory_and_storage_unchanged(self, monkeypatch, repository, store):
        first = store.add_profile(name="a", database_url="postgres://db/a")
        fail_writes(monkeypatch, repository)

        with pytest.raises(RuntimeError, match="database is locked"):
            store.add_profile(name="b", database_url="postgres://db/b")

        monkeypatch.undo()
        reloaded = ProfileStore(repository)
        reloaded.load()
        assert [p.name for p in store.profiles] == ["a"]
        assert reloaded.profiles == store.profiles == [first]

    def test_failed_update_keeps_previous_values(self, monkeypatch, repository, store):
        profile = store.add_profile(name="a", database_url="postgres://db/a")
        fail_writes(monkeypatch, repository)

        with pytest.raises(RuntimeError):
            store.update_profile(profile.id, name="renamed")

        assert store.get_profile(profile.id).name == "a"

    def test_failed_delete_keeps_profile_and_selection(self, monkeypatch, repository, store):
        profile = store.add_profile(name="a", database_url="postgres://db/a")
        fail_writes(monkeypatch, repository)

        with pytest.raises(RuntimeError):
            store.delete_profile(profile.id)

        assert store.profiles == [profile]
        assert store.active_profile_id == profile.id

    def test_failed_selection_keeps_active_profile(self, monkeypatch, repository, store):
        first = store.add_profile(name="a", database_url="postgres://db/a")
        second = store.add_profile(name="b", database_url="postgres://db/b")
        fail_writes(monkeypatch, repository)

        with pytest.raises(RuntimeError):
            store.set_active_profile(second.id)

        assert store.active_profile_id == first.id


class RefusingCipher:
    """Cipher stand-in that cannot encrypt one particular value."""

    def encrypt(self, value):
        if value == "unencryptable":
            raise ValueError("cannot encrypt")
        return value

    def decrypt(self, token):
        return token


class TestPersistedRecordRepository:
    def test_put_many_writes_all_records_or_none(self, session_factory):
        repository = PersistedRecordRepository(session_factory, cipher=RefusingCipher())
        repository.put("first", "old")

        with pytest.raises(ValueError):
            repository.put_many({"first": "new", "second": "unencryptable"})

        assert repository.get("first") == "old"
        assert repository.get("second") is None

    def test_expiry_is_pushed_out_on_write(self, session_factory):
        repository = PersistedRecordRepository(session_factory, max_age=timedelta(days=30))
        before = utcnow()

        repository.put("record", "value")

        db = session_factory()
        try:
            record = db.query(PersistedRecord).filter(PersistedRecord.name == "record").one()
            assert before + timedelta(days=30) <= record.expires_at <= utcnow() + timedelta(days=30)
        finally:
            db.close()


class TestClearedSelection:
    def test_cleared_active_profile_loads_without_warning(self, repository, store, caplog):
        only = store.add_profile(name="a", database_url="postgres://db/a")
        store.delete_profile(only.id)

        reloaded = ProfileStore(repository)
        with caplog.at_level(logging.WARNING):
            reloaded.load()

        assert json.loads(repository.get(ACTIVE_PROFILE_RECORD)) is None
        assert reloaded.active_profile_id is None
        assert "Ignoring persisted active profile" not in caplog.text
