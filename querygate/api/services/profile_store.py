"""Store of database connection profiles and the active selection."""
import json
import logging
import threading
import time
from typing import Callable, List, Optional

from querygate.api.models.profile import DatabaseProfile, ProfileType
from querygate.api.services.persisted_state import PersistedRecordRepository
from querygate.engine.database_connection_schema import DatabaseType, classify_database_url


logger = logging.getLogger(__name__)

PROFILES_RECORD = "db-profiles"
ACTIVE_PROFILE_RECORD = "active-db-profile"

UPDATABLE_FIELDS = ("name", "database_url", "type", "last_tested", "is_connected")


def infer_profile_type(database_url: str) -> str:
    """Profile type for a connection string; unrecognised schemes become 'other'."""
    db_type = classify_database_url(database_url)
    if db_type == DatabaseType.UNKNOWN:
        return ProfileType.OTHER.value
    return ProfileType(db_type.value).value


def timestamp_id() -> str:
    return str(int(time.time() * 1000))


class ProfileStore:
    """
    Holds connection profiles in memory and mirrors them to durable records.

    ``load()`` reads the records once; after that memory is the source of
    truth and every mutation is written through with ``persist()`` before
    the mutator returns.

    Invariants:
    - profile ids are unique
    - the active id is None or the id of a stored profile
    """

    def __init__(
        self,
        repository: PersistedRecordRepository,
        id_factory: Callable[[], str] = timestamp_id
    ):
        self.repository = repository
        self.id_factory = id_factory
        self._profiles: List[DatabaseProfile] = []
        self._active_profile_id: Optional[str] = None
        self._lock = threading.Lock()

    # State

    @property
    def profiles(self) -> List[DatabaseProfile]:
        with self._lock:
            return [profile.model_copy() for profile in self._profiles]

    @property
    def active_profile_id(self) -> Optional[str]:
        return self._active_profile_id

    @property
    def active_profile(self) -> Optional[DatabaseProfile]:
        with self._lock:
            profile = self._find(self._active_profile_id)
            return profile.model_copy() if profile else None

    @property
    def has_profiles(self) -> bool:
        return len(self._profiles) > 0

    def get_profile(self, profile_id: str) -> Optional[DatabaseProfile]:
        with self._lock:
            profile = self._find(profile_id)
            return profile.model_copy() if profile else None

    # Persistence

    def load(self) -> None:
        """Rehydrate profiles and the active id from the durable records."""
        profiles_json = self.repository.get(PROFILES_RECORD)
        active_json = self.repository.get(ACTIVE_PROFILE_RECORD)

        with self._lock:
            if profiles_json:
                self._profiles = [
                    DatabaseProfile.model_validate(item) for item in json.loads(profiles_json)
                ]
            active_id = json.loads(active_json) if active_json else None
            if active_id is not None:
                if self._find(active_id) is not None:
                    self._active_profile_id = active_id
                else:
                    logger.warning(f"Ignoring persisted active profile '{active_id}': no such profile")

        logger.info(f"Loaded {len(self._profiles)} connection profiles")

    def persist(self) -> None:
        """Write the current collection and active id to durable storage."""
        self._write(self._profiles, self._active_profile_id)

    def _write(self, profiles: List[DatabaseProfile], active_profile_id: Optional[str]) -> None:
        profiles_json = json.dumps([
            profile.model_dump(mode="json", by_alias=True) for profile in profiles
        ])
        self.repository.put_many({
            PROFILES_RECORD: profiles_json,
            ACTIVE_PROFILE_RECORD: json.dumps(active_profile_id),
        })

    # Actions
    #
    # Mutators install new state only after it has been written.

    def add_profile(
        self,
        name: str,
        database_url: str,
        type: Optional[str] = None,
        last_tested: Optional[str] = None,
        is_connected: Optional[bool] = None
    ) -> DatabaseProfile:
        """Append a new profile; the first profile in the store becomes active."""
        with self._lock:
            profile = DatabaseProfile(
                id=self._new_id(),
                name=name,
                database_url=database_url,
                type=type or infer_profile_type(database_url),
                last_tested=last_tested,
                is_connected=is_connected,
            )
            profiles = self._profiles + [profile]
            active_profile_id = profile.id if len(profiles) == 1 else self._active_profile_id

            self._commit(profiles, active_profile_id)
            logger.info(f"Added connection profile {profile.id} ({profile.type})")
            return profile.model_copy()

    def update_profile(self, profile_id: str, **updates) -> Optional[DatabaseProfile]:
        """
        Replace the supplied fields of a profile.

        Fields that are omitted or None keep their current value. Unknown ids
        are ignored and None is returned.
        """
        unknown = set(updates) - set(UPDATABLE_FIELDS)
        if unknown:
            raise TypeError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

        with self._lock:
            for index, current in enumerate(self._profiles):
                if current.id != profile_id:
                    continue

                changes = {key: value for key, value in updates.items() if value is not None}
                updated = DatabaseProfile.model_validate(current.model_copy(update=changes).model_dump())
                profiles = list(self._profiles)
                profiles[index] = updated

                self._commit(profiles, self._active_profile_id)
                return updated.model_copy()

        logger.debug(f"Update ignored, no profile with id {profile_id}")
        return None

    def delete_profile(self, profile_id: str) -> bool:
        """Remove a profile, moving the active selection to the first remaining one."""
        with self._lock:
            remaining = [profile for profile in self._profiles if profile.id != profile_id]
            if len(remaining) == len(self._profiles):
                return False

            active_profile_id = self._active_profile_id
            if active_profile_id == profile_id:
                active_profile_id = remaining[0].id if remaining else None

            self._commit(remaining, active_profile_id)
            logger.info(f"Deleted connection profile {profile_id}")
            return True

    def set_active_profile(self, profile_id: str) -> bool:
        """Select a profile; unknown ids leave the selection unchanged."""
        with self._lock:
            if self._find(profile_id) is None:
                return False
            self._commit(self._profiles, profile_id)
            return True

    def _commit(self, profiles: List[DatabaseProfile], active_profile_id: Optional[str]) -> None:
        self._write(profiles, active_profile_id)
        self._profiles = profiles
        self._active_profile_id = active_profile_id

    def _find(self, profile_id: Optional[str]) -> Optional[DatabaseProfile]:
        if profile_id is None:
            return None
        for profile in self._profiles:
            if profile.id == profile_id:
                return profile
        return None

    def _new_id(self) -> str:
        new_id = self.id_factory()
        existing = {profile.id for profile in self._profiles}
        while new_id in existing:
            new_id = str(int(new_id) + 1)
        return new_id
